# canvasflow/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .documents import WorkflowDocument
from .engine import WorkflowEngine
from .executors import default_registry
from .models import Edge, ExecutionResult, Node
from .providers import HTTPProviderClient, PlaceholderProvider

logger = logging.getLogger(__name__)


class RunWorkflowPayload(WorkflowDocument):
    # a saved canvas document, with nodes and edges both present
    nodes: List[Node]
    edges: List[Edge]


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app(settings: Optional[Settings] = None, engine: Optional[WorkflowEngine] = None) -> FastAPI:
    """Build the HTTP app. The engine (and its provider) live on app.state."""
    settings = settings or get_settings()
    logging.getLogger("canvasflow").setLevel(settings.LOG_LEVEL.upper())

    provider = None
    if engine is None:
        if settings.PROVIDER_BASE_URL:
            provider = HTTPProviderClient(settings.PROVIDER_BASE_URL, timeout=settings.PROVIDER_TIMEOUT)
        else:
            provider = PlaceholderProvider(latency=settings.PROVIDER_LATENCY)
        engine = WorkflowEngine(
            registry=default_registry(provider),
            concurrency_limit=settings.CONCURRENCY_LIMIT,
            upstream_failure=settings.UPSTREAM_FAILURE,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if isinstance(provider, HTTPProviderClient):
            await provider.aclose()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _failure(400, f"Validation failed: {exc.errors()}")

    @app.post("/run-workflow", response_model=ExecutionResult, response_model_exclude_none=True)
    async def run_workflow(payload: RunWorkflowPayload, request: Request):
        cfg: Settings = request.app.state.settings
        if len(payload.nodes) > cfg.MAX_NODES:
            return _failure(400, f"Validation failed: too many nodes ({len(payload.nodes)} > {cfg.MAX_NODES})")
        if len(payload.edges) > cfg.MAX_EDGES:
            return _failure(400, f"Validation failed: too many edges ({len(payload.edges)} > {cfg.MAX_EDGES})")
        try:
            result = await request.app.state.engine.execute(payload.nodes, payload.edges, payload.variables)
        except Exception as e:
            logger.exception("workflow execution error")
            return _failure(500, str(e) or "Unknown error occurred")
        # canvas-origin nodes serialize back nested under "data"
        return JSONResponse(content=result.model_dump(mode="json", by_alias=True, exclude_none=True))

    @app.get("/health")
    async def health(request: Request):
        checks = {
            "api": True,
            "executors": bool(request.app.state.engine.registry.types()),
        }
        if all(checks.values()):
            status = "healthy"
        elif any(checks.values()):
            status = "degraded"
        else:
            status = "unhealthy"
        body = {
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.APP_VERSION,
            "checks": checks,
        }
        return JSONResponse(status_code=503 if status == "unhealthy" else 200, content=body)

    # node types with a registered executor; anything else passes through
    @app.get("/executors")
    async def list_executors(request: Request):
        return {"executors": request.app.state.engine.registry.types()}

    return app


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("canvasflow.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=True)
