"""Service layer exports."""

from .chat_orchestrator import MAX_TOOL_ROUNDS, ChatOrchestrator, chat_orchestrator
from .conversation_manager import ConversationManager, Transcript, conversation_manager
from .ollama_client import OllamaClient, ollama_client
from .tool_gate import KeywordToolGate, ToolGate, needs_tools

__all__ = [
    "MAX_TOOL_ROUNDS",
    "ChatOrchestrator",
    "chat_orchestrator",
    "ConversationManager",
    "conversation_manager",
    "Transcript",
    "OllamaClient",
    "ollama_client",
    "KeywordToolGate",
    "ToolGate",
    "needs_tools",
]
