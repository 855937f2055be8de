"""In-memory conversation transcripts."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Literal

from ...core.config import get_settings
from ...core.logging_config import get_logger
from ..schemas.chat import ChatMessage

logger = get_logger(__name__)

TranscriptScope = Literal["shared", "connection"]

SHARED_SESSION_ID = "shared"


@dataclass(slots=True)
class Transcript:
    """Append-only message history; hold ``lock`` for the whole of a turn."""

    messages: list[ChatMessage] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def append(self, message: ChatMessage) -> None:
        self.messages.append(message)

    def snapshot(self) -> list[ChatMessage]:
        return list(self.messages)

    def is_empty(self) -> bool:
        return not self.messages

    def __len__(self) -> int:
        return len(self.messages)


class ConversationManager:
    """Hand out transcripts by session id according to the configured scope.

    ``shared`` keeps one transcript for every client, so every client sees the
    whole conversation and turns are serialised by that transcript's lock.
    ``connection`` gives each session its own transcript, dropped on release.
    """

    def __init__(self, scope: TranscriptScope = "shared") -> None:
        self.scope = scope
        self._sessions: dict[str, Transcript] = {}

    def get_transcript(self, session_id: str) -> Transcript:
        key = SHARED_SESSION_ID if self.scope == "shared" else session_id
        transcript = self._sessions.get(key)
        if transcript is None:
            transcript = self._sessions[key] = Transcript()
            logger.debug("transcript_created", session_id=key, scope=self.scope)
        return transcript

    def release(self, session_id: str) -> None:
        if self.scope == "shared":
            return
        if self._sessions.pop(session_id, None) is not None:
            logger.debug("transcript_released", session_id=session_id)

    def has_transcript(self, session_id: str) -> bool:
        key = SHARED_SESSION_ID if self.scope == "shared" else session_id
        return key in self._sessions

    def session_count(self) -> int:
        return len(self._sessions)


conversation_manager = ConversationManager(scope=get_settings().transcript_scope)
