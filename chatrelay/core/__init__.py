"""Core infrastructure utilities."""

from .config import AgentSettings, get_settings
from .exceptions import AgentError, ExternalServiceError, ModelResponseError
from .logging_config import configure_logging, get_logger

__all__ = [
    "AgentError",
    "AgentSettings",
    "ExternalServiceError",
    "ModelResponseError",
    "configure_logging",
    "get_logger",
    "get_settings",
]
