"""Ollama chat client backed by the OpenAI SDK.

Ollama serves an OpenAI-compatible API under ``/v1``, including tool calling
and streaming, so the regular ``AsyncOpenAI`` client is enough to talk to it.
"""

from __future__ import annotations

from typing import Any, Iterable

from openai import APIError as OpenAIError
from openai import AsyncOpenAI, RateLimitError
from pydantic import ValidationError

from ...core.config import AgentSettings, get_settings
from ...core.exceptions import ExternalServiceError, ModelResponseError, RateLimitExceeded
from ...core.logging_config import get_logger
from ..schemas.chat import ChatMessage, ToolCallRequest

logger = get_logger(__name__)


class OllamaClient:
    """Thin wrapper around the OpenAI-compatible Ollama chat API."""

    def __init__(self, settings: AgentSettings | None = None) -> None:
        settings = settings or get_settings()
        base_url = str(settings.ollama_url).rstrip("/")
        if not base_url.endswith("/v1"):
            base_url = f"{base_url}/v1"
        self.model = settings.ollama_model
        self.stream = settings.ollama_stream
        logger.info(
            "ollama_client_init",
            base_url=base_url,
            model=self.model,
            stream=self.stream,
            timeout_seconds=settings.ollama_timeout_seconds,
        )
        self._client = AsyncOpenAI(
            api_key=settings.ollama_api_key.get_secret_value(),
            base_url=base_url,
            timeout=settings.ollama_timeout_seconds,
            max_retries=0,
        )

    async def chat(
        self,
        messages: Iterable[ChatMessage],
        *,
        tools: list[dict[str, Any]] | None = None,
    ) -> ChatMessage:
        """Send the transcript and return the fully drained assistant message."""

        payload_messages = [message.to_payload() for message in messages]
        request: dict[str, Any] = {
            "model": self.model,
            "messages": payload_messages,
            "stream": self.stream,
        }
        if tools:
            request["tools"] = tools

        logger.info(
            "ollama_chat_request",
            model=self.model,
            message_count=len(payload_messages),
            tool_count=len(tools or []),
            stream=self.stream,
        )

        try:
            if self.stream:
                raw = await self._collect_stream(request)
            else:
                response = await self._client.chat.completions.create(**request)
                if not response.choices:
                    raise ModelResponseError("Ollama returned no choices")
                raw = response.choices[0].message.model_dump()
            message = _to_assistant_message(raw)
        except RateLimitError as exc:  # pragma: no cover - network path
            logger.error("ollama_rate_limited", message=str(exc))
            raise RateLimitExceeded(f"Ollama rate limit: {exc}") from exc
        except OpenAIError as exc:
            logger.error(
                "ollama_sdk_error",
                error_type=type(exc).__name__,
                message=str(exc),
            )
            raise ExternalServiceError(f"Failed to call Ollama API: {exc}") from exc
        except ValidationError as exc:
            logger.error("ollama_malformed_response", errors=exc.error_count())
            raise ModelResponseError(f"Malformed Ollama response: {exc}") from exc

        logger.info(
            "ollama_chat_response",
            content_chars=len(message.content),
            tool_calls=len(message.tool_calls or []),
        )
        return message

    async def _collect_stream(self, request: dict[str, Any]) -> dict[str, Any]:
        content: list[str] = []
        calls: dict[int, dict[str, Any]] = {}

        stream = await self._client.chat.completions.create(**request)
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta.content:
                content.append(delta.content)
                logger.debug("ollama_stream_chunk", content=delta.content)
            for fragment in delta.tool_calls or []:
                call = calls.setdefault(
                    fragment.index,
                    {"id": "", "type": "function", "function": {"name": "", "arguments": ""}},
                )
                if fragment.id:
                    call["id"] = fragment.id
                if fragment.function is not None:
                    if fragment.function.name:
                        call["function"]["name"] += fragment.function.name
                    if fragment.function.arguments:
                        call["function"]["arguments"] += fragment.function.arguments

        return {
            "content": "".join(content),
            "tool_calls": [calls[index] for index in sorted(calls)] or None,
        }


def _to_assistant_message(raw: dict[str, Any]) -> ChatMessage:
    tool_calls = [ToolCallRequest.model_validate(call) for call in raw.get("tool_calls") or []]
    for index, call in enumerate(tool_calls):
        if not call.id:
            call.id = f"call_{index}"
    return ChatMessage(
        role="assistant",
        content=(raw.get("content") or "").strip(),
        tool_calls=tool_calls or None,
    )


ollama_client = OllamaClient()
