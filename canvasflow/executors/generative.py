# canvasflow/executors/generative.py
from typing import Any, Dict, Optional

from ..errors import ProviderError
from ..providers import GenerationRequest, GenerationResponse, ProviderClient
from .base import Executor, ExecutorInputs, ExecutorOutputs


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def build_request(inputs: ExecutorInputs, meta: Dict[str, Any]) -> GenerationRequest:
    """Map the conventional input ports onto a provider request.

    The in_text port wins over meta["prompt"]; an in_image holding a data URI is
    sent as base64, anything else as a URL.
    """
    prompt = _text(inputs.get("in_text")) or _text(meta.get("prompt"))
    image = inputs.get("in_image")
    image_url: Optional[str] = None
    image_base64: Optional[str] = None
    if isinstance(image, str) and image:
        if image.startswith("data:"):
            image_base64 = image
        else:
            image_url = image
    return GenerationRequest(
        prompt=prompt,
        system_prompt=_text(inputs.get("in_system")) or None,
        image_url=image_url,
        image_base64=image_base64,
        model=meta.get("model"),
    )


def _check(response: GenerationResponse, what: str) -> GenerationResponse:
    if not response.success:
        raise ProviderError(response.error or f"{what} failed")
    return response


class LLMExecutor(Executor):
    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        response = _check(await self.provider.generate_text(build_request(inputs, meta)), "Text generation")
        return {"out_text": response.text or ""}


class ImageGenExecutor(Executor):
    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        response = _check(await self.provider.generate_image(build_request(inputs, meta)), "Image generation")
        if not response.image_url:
            raise ProviderError("Image generation returned no image")
        return {"out_image": response.image_url}


class VideoGenExecutor(Executor):
    def __init__(self, provider: ProviderClient):
        self.provider = provider

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        response = _check(await self.provider.generate_video(build_request(inputs, meta)), "Video generation")
        if not response.video_url:
            raise ProviderError("Video generation returned no video")
        return {"out_video": response.video_url}


class ExtractFrameExecutor(Executor):
    """Produces a still for meta["timestamp"] of the incoming video.

    There is no frame-extraction provider route; the frame is a placeholder
    image keyed by the timestamp.
    """

    async def execute(self, inputs: ExecutorInputs, meta: Dict[str, Any]) -> ExecutorOutputs:
        timestamp = meta.get("timestamp", 0)
        try:
            timestamp = float(timestamp)
        except (TypeError, ValueError):
            raise ValueError(f"invalid frame timestamp: {timestamp!r}") from None
        if timestamp < 0:
            raise ValueError("frame timestamp must not be negative")
        return {"out_image": f"https://picsum.photos/seed/frame-{timestamp:g}/400/300"}
