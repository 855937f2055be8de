"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from ..core.config import env_file_candidates, get_settings, resolved_env_file
from ..core.logging_config import configure_logging, get_logger
from ..mcp.server import refresh_tools_schema
from .api.chat import router as chat_router
from .api.chat import ws_router as chat_ws_router
from .api.health import router as health_router

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan handler."""

    settings = get_settings()
    logger.info(
        "relay_startup",
        env=settings.app_env,
        log_level=settings.log_level,
        agent_host=settings.agent_host,
        agent_port=settings.agent_port,
        transcript_scope=settings.transcript_scope,
    )
    logger.info(
        "ollama_target",
        hint="make sure Ollama is running",
        ollama_url=str(settings.ollama_url),
        model=settings.ollama_model,
    )
    logger.info(
        "environment_loaded",
        log_file=settings.log_file or "stdout-only",
        env_file=resolved_env_file() or "not-found",
        env_candidates=list(env_file_candidates()),
    )
    await refresh_tools_schema()
    logger.info("mcp_tools_schema_ready")
    yield
    logger.info("relay_shutdown")


app = FastAPI(
    title="Chat Relay",
    version="0.1.0",
    description="WebSocket chat relay to a local Ollama model with gated tool calling.",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_incoming_requests(request: Request, call_next):
    logger.info(
        "http_request_received",
        method=request.method,
        path=request.url.path,
        client=str(request.client[0]) if request.client else "unknown",
    )
    response = await call_next(request)
    logger.info(
        "http_request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
    )
    return response

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(chat_ws_router)


@app.get("/")
async def index() -> dict[str, str]:
    return {"service": "chatrelay", "status": "ok", "websocket": "/ws"}
