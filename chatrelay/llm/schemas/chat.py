"""Pydantic schemas for transcript messages and chat wire envelopes."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


RoleLiteral = Literal["system", "user", "assistant", "tool"]


class ToolCallFunction(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _decode_arguments(cls, value: Any) -> Any:
        # OpenAI-compatible endpoints send arguments as a JSON-encoded string.
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError(f"tool arguments are not valid JSON: {exc}") from exc
        return value


class ToolCallRequest(BaseModel):
    id: str = ""
    type: Literal["function"] = "function"
    function: ToolCallFunction

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {
                "name": self.function.name,
                "arguments": json.dumps(self.function.arguments, ensure_ascii=False),
            },
        }


class ChatMessage(BaseModel):
    role: RoleLiteral
    content: str = ""
    tool_calls: list[ToolCallRequest] | None = Field(
        default=None, description="Assistant-emitted tool calls"
    )
    tool_name: str | None = Field(None, description="Tool that produced a tool message")
    tool_call_id: str | None = Field(None, description="Tool call identifier for tool messages")

    def to_payload(self) -> dict[str, Any]:
        """Render the message in OpenAI chat-completions form."""

        payload: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [call.to_payload() for call in self.tool_calls]
        if self.role == "tool":
            if self.tool_call_id:
                payload["tool_call_id"] = self.tool_call_id
            if self.tool_name:
                payload["name"] = self.tool_name
        return payload


class ChatEnvelope(BaseModel):
    """Message exchanged with web clients over the duplex connection."""

    type: str = "client"
    content: str
    time: str = ""

    @classmethod
    def from_server(cls, content: str) -> "ChatEnvelope":
        return cls(type="server", content=content, time=datetime.now().strftime("%H:%M:%S"))


class ChatRequest(BaseModel):
    session_id: str = Field("default", min_length=1)
    message: str


class ChatResponse(BaseModel):
    session_id: str
    reply: str
    created_at: datetime
