"""HTTP and WebSocket routers."""

from .chat import router as chat_router
from .chat import ws_router as chat_ws_router
from .health import router as health_router

__all__ = ["chat_router", "chat_ws_router", "health_router"]
