# canvasflow/providers.py
"""Request/response contract between generative executors and AI providers.

Two clients implement it: PlaceholderProvider answers locally with deterministic
placeholders (used when no provider is configured), HTTPProviderClient forwards
to the provider proxy endpoints over HTTP.
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ProviderError

logger = logging.getLogger(__name__)

SAMPLE_VIDEO_URL = "https://sample-videos.com/video321/mp4/720/big_buck_bunny_720p_1mb.mp4"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    image_base64: Optional[str] = Field(default=None, alias="imageBase64")
    model: Optional[str] = None


class GenerationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool
    text: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    error: Optional[str] = None
    mock: bool = False


class ProviderClient(Protocol):
    async def generate_text(self, request: GenerationRequest) -> GenerationResponse: ...

    async def generate_image(self, request: GenerationRequest) -> GenerationResponse: ...

    async def generate_video(self, request: GenerationRequest) -> GenerationResponse: ...


class PlaceholderProvider:
    def __init__(self, latency: float = 0.0):
        self.latency = latency

    async def _wait(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def generate_text(self, request: GenerationRequest) -> GenerationResponse:
        await self._wait()
        tag = "[Enhanced]" if request.system_prompt else "[Processed]"
        return GenerationResponse(success=True, text=f"{tag} {request.prompt}", mock=True)

    async def generate_image(self, request: GenerationRequest) -> GenerationResponse:
        await self._wait()
        seed = quote(request.prompt[:30] or "default", safe="")
        return GenerationResponse(success=True, image_url=f"https://picsum.photos/seed/{seed}/400/300", mock=True)

    async def generate_video(self, request: GenerationRequest) -> GenerationResponse:
        await self._wait()
        return GenerationResponse(success=True, video_url=SAMPLE_VIDEO_URL, mock=True)


class HTTPProviderClient:
    """Posts GenerationRequests to the provider proxy routes.

    The caller owns the client; use it as an async context manager or call
    aclose() when done.
    """

    ROUTES = {
        "text": "/api/ai/llm",
        "image": "/api/ai/image-gen",
        "video": "/api/ai/video-gen",
    }

    def __init__(self, base_url: str, timeout: float = 60.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "HTTPProviderClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, kind: str, request: GenerationRequest) -> GenerationResponse:
        route = self.ROUTES[kind]
        payload = request.model_dump(by_alias=True, exclude_none=True)
        try:
            response = await self._client.post(route, json=payload)
        except httpx.RequestError as e:
            raise ProviderError(f"Network error calling {route}: {e}") from e

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            raise ProviderError(f"{route} returned non-JSON response ({response.status_code})") from e

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            logger.warning("provider route %s failed with %s: %s", route, response.status_code, message)
            return GenerationResponse(success=False, error=message or f"HTTP {response.status_code}")

        try:
            return GenerationResponse.model_validate(data)
        except ValidationError as e:
            raise ProviderError(f"{route} returned an unexpected payload: {e}") from e

    async def generate_text(self, request: GenerationRequest) -> GenerationResponse:
        return await self._post("text", request)

    async def generate_image(self, request: GenerationRequest) -> GenerationResponse:
        return await self._post("image", request)

    async def generate_video(self, request: GenerationRequest) -> GenerationResponse:
        return await self._post("video", request)
