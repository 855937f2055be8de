"""Conversation loop: transcript updates, tool gating and the two-pass tool protocol."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, Protocol

from ...core.config import get_settings
from ...core.logging_config import get_logger
from ...mcp.server import call_tool, get_tools_schema
from ..schemas.chat import ChatMessage, ToolCallRequest
from .conversation_manager import Transcript
from .ollama_client import ollama_client
from .tool_gate import KeywordToolGate, ToolGate

logger = get_logger(__name__)

# A tool round is one dispatch-and-resubmit cycle. Tool calls requested by the
# follow-up response are not serviced.
MAX_TOOL_ROUNDS = 1


class ChatModel(Protocol):
    async def chat(
        self,
        messages: Iterable[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
    ) -> ChatMessage: ...


ToolRunner = Callable[[str, Any], Awaitable[str]]
SchemaLoader = Callable[[], Awaitable[list[dict[str, Any]]]]


class ChatOrchestrator:
    """Run one user turn against a transcript and return the answer text."""

    def __init__(
        self,
        client: ChatModel | None = None,
        gate: ToolGate | None = None,
        *,
        system_prompt: str | None = None,
        tool_runner: ToolRunner | None = None,
        schema_loader: SchemaLoader | None = None,
    ) -> None:
        self._client = client or ollama_client
        self._gate = gate or KeywordToolGate()
        self._system_prompt = system_prompt or get_settings().system_prompt
        self._call_tool = tool_runner or call_tool
        self._get_tools_schema = schema_loader or get_tools_schema

    async def handle(self, transcript: Transcript, user_text: str) -> str:
        """Append the user turn, consult the model (and tools) and return the reply.

        Raises ``ExternalServiceError`` when a model call fails. A failure on the
        first call leaves only the user message behind; a failure on the
        follow-up call keeps the assistant tool-call message and tool results.
        """

        async with transcript.lock:
            if transcript.is_empty():
                transcript.append(ChatMessage(role="system", content=self._system_prompt))

            transcript.append(ChatMessage(role="user", content=user_text))

            use_tools = self._gate.requires_tools(user_text)
            logger.info(
                "chat_turn_started",
                transcript_length=len(transcript),
                needs_tools=use_tools,
            )

            tools = await self._get_tools_schema() if use_tools else None
            reply = await self._client.chat(transcript.snapshot(), tools=tools)

            rounds = 0
            while reply.tool_calls and rounds < MAX_TOOL_ROUNDS:
                rounds += 1
                transcript.append(
                    ChatMessage(role="assistant", content=reply.content, tool_calls=reply.tool_calls)
                )
                await self._dispatch_tool_calls(transcript, reply.tool_calls)
                reply = await self._client.chat(
                    transcript.snapshot(), tools=await self._get_tools_schema()
                )

            if reply.tool_calls:
                logger.warning(
                    "tool_round_limit_reached",
                    ignored_calls=[call.function.name for call in reply.tool_calls],
                    max_rounds=MAX_TOOL_ROUNDS,
                )

            transcript.append(ChatMessage(role="assistant", content=reply.content))
            logger.info(
                "chat_turn_completed",
                tool_rounds=rounds,
                transcript_length=len(transcript),
                reply_chars=len(reply.content),
            )
            return reply.content

    async def _dispatch_tool_calls(
        self, transcript: Transcript, tool_calls: list[ToolCallRequest]
    ) -> None:
        logger.debug("processing_tool_calls", count=len(tool_calls))
        for tool_call in tool_calls:
            name = tool_call.function.name
            result = await self._call_tool(name, tool_call.function.arguments)
            logger.info("tool_call_executed", tool=name, result_summary=result[:200])
            transcript.append(
                ChatMessage(
                    role="tool",
                    content=result,
                    tool_name=name,
                    tool_call_id=tool_call.id or None,
                )
            )


chat_orchestrator = ChatOrchestrator()
