from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from mocks.genai_api.app.services import ServiceContainer, get_services
from shared.common.errors import ApiError, error_envelope
from shared.common.models import Content, GenerateContentRequest, Part
from shared.common.serialization import json_loads
from shared.state.live_sessions import LiveSession


LIVE_MODEL = "gemini-2.0-flash"
SAMPLE_TRANSCRIPTIONS = (
    "Hello, how are you today?",
    "Can you help me with a question?",
    "What's the weather like?",
    "Tell me about artificial intelligence.",
    "How do you work?",
    "That's interesting, tell me more.",
    "I understand, thank you.",
    "Can you explain that differently?",
    "What do you think about that?",
    "That makes sense.",
)
LIVE_CONFIG = {
    "supportedModalities": ["TEXT", "AUDIO"],
    "voices": ["en-US-Journey-D", "en-US-Journey-F", "en-US-Journey-O", "en-GB-Journey-D", "en-AU-Journey-D"],
    "maxSessionDuration": 1800,
    "maxConcurrentSessions": 100,
    "audioFormats": ["audio/wav", "audio/pcm", "audio/opus"],
}

router = APIRouter(tags=["live"])


def welcome_text(session: LiveSession) -> str:
    if "AUDIO" in session.modalities:
        return "Hello! I'm ready for real-time conversation. I can respond with both text and audio."
    return "Hello! I'm ready for real-time conversation. I can respond with text."


def _live_model(session: LiveSession) -> str:
    model = str(session.config.get("model") or LIVE_MODEL)
    return model.rsplit("/", 1)[-1]


async def _reply(services: ServiceContainer, session: LiveSession) -> list[dict[str, Any]]:
    model = _live_model(session)
    request = GenerateContentRequest(contents=session.recent_turns())
    response = await services.vertex.generate_content(request, model, services.vertex_catalog.find(model))
    parts = response["candidates"][0]["content"]["parts"]
    session.remember([Content.model_validate({"role": "model", "parts": parts})])
    return parts


async def handle_live_message(
    services: ServiceContainer,
    session: LiveSession,
    message: dict[str, Any],
) -> list[dict[str, Any]]:
    services.live_sessions.touch(session)
    if "setup" in message or "setupComplete" in message:
        session.config = dict(message.get("setup") or message.get("setupComplete") or {})
        return [
            {"setupComplete": {}},
            {"serverContent": {"modelTurn": {"parts": [{"text": welcome_text(session)}]}, "turnComplete": True}},
        ]
    if "clientContent" in message:
        client_content = message["clientContent"] or {}
        turns = [Content.model_validate(turn) for turn in client_content.get("turns") or []]
        session.remember(turns)
        if not client_content.get("turnComplete", True):
            return []
        parts = await _reply(services, session)
        return [{"serverContent": {"modelTurn": {"parts": parts}, "turnComplete": True}}]
    if "realtimeInput" in message:
        chunks = (message["realtimeInput"] or {}).get("mediaChunks") or []
        replies = []
        for chunk in chunks:
            if not isinstance(chunk, dict) or not str(chunk.get("mimeType", "")).startswith("audio/"):
                continue
            transcription = services.rng.choice(SAMPLE_TRANSCRIPTIONS)
            session.remember([Content(role="user", parts=[Part(text=transcription)])])
            parts = await _reply(services, session)
            replies.append(
                {
                    "serverContent": {
                        "inputTranscription": {"text": transcription},
                        "modelTurn": {"parts": parts},
                        "turnComplete": True,
                    }
                }
            )
        return replies
    return [error_envelope(400, "Unsupported message. Expected setup, clientContent or realtimeInput.")]


@router.websocket("/v1/live")
@router.websocket("/live")
async def live_session(websocket: WebSocket) -> None:
    services: ServiceContainer = websocket.app.state.services
    await websocket.accept()
    session = services.live_sessions.open()
    services.logger.info("Live session %s opened", session.id)
    await websocket.send_json(
        {"setupRequired": True, "supportedModalities": LIVE_CONFIG["supportedModalities"], "sessionId": session.id}
    )
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json_loads(raw)
            except ValueError:
                await websocket.send_json(error_envelope(400, "Invalid JSON message."))
                continue
            if not isinstance(message, dict):
                await websocket.send_json(error_envelope(400, "Live messages must be JSON objects."))
                continue
            try:
                replies = await handle_live_message(services, session, message)
            except ApiError as exc:
                replies = [exc.to_envelope()]
            except ValidationError as exc:
                replies = [error_envelope(400, f"Invalid live message: {exc.errors()[0]['msg']}")]
            for reply in replies:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        services.logger.info("Live session %s closed by client", session.id)
    finally:
        services.live_sessions.close(session.id)


@router.get("/live/health")
@router.get("/v1/live/health")
async def live_health(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    return {"status": "healthy", "service": "live-api", **services.live_sessions.stats()}


@router.get("/live/config")
@router.get("/v1/live/config")
async def live_config() -> dict[str, Any]:
    return dict(LIVE_CONFIG)
