"""Chat endpoints: the WebSocket relay and its HTTP counterpart."""

import json
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ...core.exceptions import AgentError
from ...core.logging_config import get_logger
from ..schemas.chat import ChatEnvelope, ChatRequest, ChatResponse
from ..services.chat_orchestrator import chat_orchestrator
from ..services.conversation_manager import conversation_manager

router = APIRouter(prefix="/chat", tags=["chat"])
ws_router = APIRouter(tags=["chat"])
logger = get_logger(__name__)

APOLOGY_MESSAGE = (
    "Sorry, I'm having trouble connecting to the AI service. Please try again later."
)


@ws_router.websocket("/ws")
async def chat_socket(websocket: WebSocket) -> None:
    await websocket.accept()
    session_id = uuid.uuid4().hex
    log = logger.bind(session_id=session_id)
    log.info("web_client_connected", scope=conversation_manager.scope)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text")
            if raw is None:
                log.warning("chat_frame_not_text", size=len(frame.get("bytes") or b""))
                continue

            try:
                inbound = ChatEnvelope.model_validate(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as exc:
                log.warning("chat_envelope_invalid", error=str(exc))
                continue

            log.debug("chat_message_received", type=inbound.type, content=inbound.content)

            transcript = conversation_manager.get_transcript(session_id)
            try:
                reply = await chat_orchestrator.handle(transcript, inbound.content)
            except AgentError as exc:
                log.error("chat_turn_failed", error=str(exc))
                reply = APOLOGY_MESSAGE

            await websocket.send_json(ChatEnvelope.from_server(reply).model_dump())
    except WebSocketDisconnect:
        log.info("web_client_disconnected")
    finally:
        conversation_manager.release(session_id)


@router.post("/", response_model=ChatResponse)
async def create_chat_completion(request: ChatRequest) -> ChatResponse:
    logger.info("chat_request_received", session_id=request.session_id)
    transcript = conversation_manager.get_transcript(request.session_id)

    try:
        reply = await chat_orchestrator.handle(transcript, request.message)
    except AgentError as exc:
        logger.exception("chat_completion_failed", session_id=request.session_id)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    logger.info(
        "chat_request_completed",
        session_id=request.session_id,
        transcript_length=len(transcript),
    )
    return ChatResponse(
        session_id=request.session_id,
        reply=reply,
        created_at=datetime.now(tz=timezone.utc),
    )


@router.delete("/{session_id}")
async def release_chat_session(session_id: str) -> dict[str, object]:
    """Drop an HTTP session's transcript; a no-op when every client shares one."""

    had_transcript = conversation_manager.has_transcript(session_id)
    conversation_manager.release(session_id)
    released = had_transcript and not conversation_manager.has_transcript(session_id)
    logger.info("chat_session_released", session_id=session_id, released=released)
    return {"session_id": session_id, "released": released}
