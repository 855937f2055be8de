"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from ...core.config import get_settings
from ...mcp.server import get_tools_schema
from ..services.conversation_manager import conversation_manager

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check() -> dict[str, Any]:
    settings = get_settings()
    tools = await get_tools_schema()
    return {
        "status": "ok",
        "model": settings.ollama_model,
        "tools": [tool["function"]["name"] for tool in tools],
        "transcript_scope": conversation_manager.scope,
        "transcripts": conversation_manager.session_count(),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
