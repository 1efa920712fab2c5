# canvasflow/config.py
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import UpstreamFailurePolicy


class Settings(BaseSettings):
    """Application settings, read from CANVASFLOW_* environment variables or .env"""

    model_config = SettingsConfigDict(env_prefix="CANVASFLOW_", env_file=".env", extra="ignore")

    APP_NAME: str = "Canvasflow Workflow Engine"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # scheduler
    CONCURRENCY_LIMIT: int = Field(default=3, ge=1)
    UPSTREAM_FAILURE: UpstreamFailurePolicy = UpstreamFailurePolicy.RUN_ANYWAY

    # request bounds for /run-workflow
    MAX_NODES: int = Field(default=100, ge=1)
    MAX_EDGES: int = Field(default=500, ge=0)

    # generative providers; no base url means placeholder outputs
    PROVIDER_BASE_URL: Optional[str] = None
    PROVIDER_TIMEOUT: float = 60.0
    PROVIDER_LATENCY: float = 0.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
