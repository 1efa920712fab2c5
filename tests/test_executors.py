"""Tests for the executor registry and built-in executors."""

import pytest

from canvasflow.errors import ProviderError
from canvasflow.executors import (
    ExecutorRegistry,
    ExtractFrameExecutor,
    FunctionExecutor,
    ImageGenExecutor,
    InputExecutor,
    LLMExecutor,
    OutputExecutor,
    PassThroughExecutor,
    VariableExecutor,
    VideoGenExecutor,
    default_registry,
)
from canvasflow.executors.generative import build_request
from canvasflow.providers import GenerationResponse, PlaceholderProvider, SAMPLE_VIDEO_URL


class FailingProvider:
    async def generate_text(self, request):
        return GenerationResponse(success=False, error="quota exceeded")

    async def generate_image(self, request):
        return GenerationResponse(success=True)

    async def generate_video(self, request):
        return GenerationResponse(success=False)


class TestRegistry:
    def test_unknown_type_falls_back_to_default(self):
        reg = ExecutorRegistry()

        assert isinstance(reg.get("comment"), PassThroughExecutor)
        assert "comment" not in reg

    def test_custom_default(self):
        default = OutputExecutor()
        assert ExecutorRegistry(default=default).get("anything") is default

    def test_callables_are_wrapped(self):
        reg = ExecutorRegistry()
        wrapped = reg.register("fn", lambda inputs, meta: {})

        assert isinstance(wrapped, FunctionExecutor)
        assert reg.get("fn") is wrapped

    def test_rejects_non_callables(self):
        with pytest.raises(TypeError):
            ExecutorRegistry().register("x", 42)

    def test_decorator_returns_function(self):
        reg = ExecutorRegistry()

        @reg.executor("double")
        def double(inputs, meta):
            return {"out": inputs["in"] * 2}

        assert double({"in": 2}, {}) == {"out": 4}
        assert reg.types() == ["double"]

    def test_default_registry_types(self):
        reg = default_registry()

        for node_type in ("inputText", "systemPrompt", "llm", "imageGen", "upscaler", "videoGen",
                          "extractFrame", "output", "variable", "audioGen"):
            assert node_type in reg
        assert "comment" not in reg
        assert reg.get("upscaler") is reg.get("imageGen")
        assert isinstance(reg.get("inputImage"), InputExecutor)


class TestFunctionExecutor:
    @pytest.mark.asyncio
    async def test_sync_and_async(self):
        async def coro(inputs, meta):
            return {"out": meta["x"]}

        assert await FunctionExecutor(lambda i, m: {"out": 1}).execute({}, {}) == {"out": 1}
        assert await FunctionExecutor(coro).execute({}, {"x": 2}) == {"out": 2}

    @pytest.mark.asyncio
    async def test_none_means_no_outputs(self):
        assert await FunctionExecutor(lambda i, m: None).execute({}, {}) == {}


class TestUtilityExecutors:
    @pytest.mark.asyncio
    async def test_input_returns_nothing(self):
        assert await InputExecutor().execute({"x": 1}, {}) == {}

    @pytest.mark.asyncio
    async def test_variable_prefers_meta_value(self):
        ex = VariableExecutor()

        assert await ex.execute({"in_value": "in"}, {"value": "meta"}) == {"out_value": "meta"}
        assert await ex.execute({"in_value": "in"}, {}) == {"out_value": "in"}
        assert await ex.execute({}, {}) == {"out_value": ""}
        assert await ex.execute({}, {"value": 0}) == {"out_value": 0}

    @pytest.mark.asyncio
    async def test_output_echoes_inputs(self):
        assert await OutputExecutor().execute({"in_text": "t"}, {}) == {"in_text": "t"}


class TestGenerativeExecutors:
    def test_build_request_mapping(self):
        req = build_request(
            {"in_text": "a fox", "in_system": "be brief", "in_image": "https://img/x.png"},
            {"model": "gemini-2.5-flash", "prompt": "ignored"},
        )

        assert req.prompt == "a fox"
        assert req.system_prompt == "be brief"
        assert req.image_url == "https://img/x.png"
        assert req.image_base64 is None
        assert req.model == "gemini-2.5-flash"

    def test_build_request_data_uri_and_meta_prompt(self):
        req = build_request({"in_image": "data:image/png;base64,AAAA"}, {"prompt": "from meta"})

        assert req.prompt == "from meta"
        assert req.image_base64 == "data:image/png;base64,AAAA"
        assert req.image_url is None
        assert req.system_prompt is None

    @pytest.mark.asyncio
    async def test_llm_placeholder(self):
        ex = LLMExecutor(PlaceholderProvider())

        assert await ex.execute({"in_text": "hi"}, {}) == {"out_text": "[Processed] hi"}
        assert await ex.execute({"in_text": "hi", "in_system": "sys"}, {}) == {"out_text": "[Enhanced] hi"}

    @pytest.mark.asyncio
    async def test_image_placeholder_seeded_by_prompt(self):
        out = await ImageGenExecutor(PlaceholderProvider()).execute({"in_text": "red fox"}, {})

        assert out == {"out_image": "https://picsum.photos/seed/red%20fox/400/300"}

    @pytest.mark.asyncio
    async def test_image_placeholder_default_seed(self):
        out = await ImageGenExecutor(PlaceholderProvider()).execute({}, {})

        assert out["out_image"].endswith("/seed/default/400/300")

    @pytest.mark.asyncio
    async def test_video_placeholder(self):
        assert await VideoGenExecutor(PlaceholderProvider()).execute({}, {}) == {"out_video": SAMPLE_VIDEO_URL}

    @pytest.mark.asyncio
    async def test_provider_failure_raises(self):
        with pytest.raises(ProviderError, match="quota exceeded"):
            await LLMExecutor(FailingProvider()).execute({"in_text": "x"}, {})

    @pytest.mark.asyncio
    async def test_missing_media_raises(self):
        with pytest.raises(ProviderError, match="no image"):
            await ImageGenExecutor(FailingProvider()).execute({}, {})
        with pytest.raises(ProviderError, match="Video generation failed"):
            await VideoGenExecutor(FailingProvider()).execute({}, {})

    @pytest.mark.asyncio
    async def test_extract_frame(self):
        ex = ExtractFrameExecutor()

        assert await ex.execute({}, {"timestamp": 2.5}) == {"out_image": "https://picsum.photos/seed/frame-2.5/400/300"}
        assert await ex.execute({}, {}) == {"out_image": "https://picsum.photos/seed/frame-0/400/300"}
        with pytest.raises(ValueError):
            await ex.execute({}, {"timestamp": "soon"})
        with pytest.raises(ValueError):
            await ex.execute({}, {"timestamp": -1})
