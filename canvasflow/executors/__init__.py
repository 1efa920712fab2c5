# canvasflow/executors/__init__.py
from typing import Optional

from ..providers import PlaceholderProvider, ProviderClient
from .base import (
    Executor,
    ExecutorInputs,
    ExecutorOutputs,
    ExecutorRegistry,
    FunctionExecutor,
    PassThroughExecutor,
)
from .generative import (
    ExtractFrameExecutor,
    ImageGenExecutor,
    LLMExecutor,
    VideoGenExecutor,
)
from .inputs import InputExecutor, OutputExecutor, VariableExecutor

INPUT_TYPES = ("inputText", "inputImage", "inputVideo", "inputAudio", "systemPrompt", "audioGen")


def default_registry(provider: Optional[ProviderClient] = None) -> ExecutorRegistry:
    """Registry with every built-in node type wired up.

    "comment" is deliberately absent: it falls through to the pass-through default.
    """
    provider = provider or PlaceholderProvider()
    registry = ExecutorRegistry()

    input_executor = InputExecutor()
    for node_type in INPUT_TYPES:
        registry.register(node_type, input_executor)

    image_gen = ImageGenExecutor(provider)
    registry.register("llm", LLMExecutor(provider))
    registry.register("imageGen", image_gen)
    registry.register("upscaler", image_gen)
    registry.register("videoGen", VideoGenExecutor(provider))
    registry.register("extractFrame", ExtractFrameExecutor())

    registry.register("output", OutputExecutor())
    registry.register("variable", VariableExecutor())
    return registry


__all__ = [
    "Executor",
    "ExecutorInputs",
    "ExecutorOutputs",
    "ExecutorRegistry",
    "FunctionExecutor",
    "PassThroughExecutor",
    "InputExecutor",
    "OutputExecutor",
    "VariableExecutor",
    "LLMExecutor",
    "ImageGenExecutor",
    "VideoGenExecutor",
    "ExtractFrameExecutor",
    "default_registry",
]
