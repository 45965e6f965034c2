"""REST API for Ascent.

Endpoints:
  POST   /sessions                  - Start an interview for a topic
  POST   /sessions/{session_id}/turns - Send a message, get the reply turn
  GET    /sessions/{session_id}     - Topic, state and full history
  DELETE /sessions/{session_id}     - Discard a session
  GET    /activity                  - Push status for the configured user
  GET    /activity/{username}       - Push status for any user
  GET    /activity/{username}/events - Recent events log
  GET    /health                    - Health check
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ascent.activity.feed import ActivityFeed
from ascent.config import Settings
from ascent.errors import (
    ConstructionError,
    EmptyMessageError,
    ExchangeError,
    SessionAlreadyStartedError,
    SessionBusyError,
)
from ascent.interview.gemini import GeminiClient
from ascent.interview.schemas import Topic, Turn
from ascent.interview.session import InterviewSession

logger = logging.getLogger(__name__)


def _turn_json(turn: Turn) -> dict[str, Any]:
    return turn.model_dump(mode="json")


def create_app(
    gemini: GeminiClient,
    feed: ActivityFeed,
    settings: Settings,
    lifespan: Any | None = None,
) -> Starlette:
    """Create the Starlette ASGI app with all routes."""

    # Live sessions, oldest first
    sessions: OrderedDict[UUID, InterviewSession] = OrderedDict()

    def _register(session: InterviewSession) -> None:
        while sessions and len(sessions) >= settings.max_sessions:
            evicted_id, _ = sessions.popitem(last=False)
            logger.info("Evicted interview session %s", evicted_id)
        sessions[session.id] = session

    def _lookup(request: Request) -> InterviewSession | None:
        try:
            session_id = UUID(request.path_params["session_id"])
        except ValueError:
            return None
        session = sessions.get(session_id)
        if session is not None:
            sessions.move_to_end(session_id)
        return session

    async def start_session(request: Request) -> JSONResponse:
        """POST /sessions - Create a session and fetch the opening question."""
        try:
            body = await request.json()
        except Exception:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        try:
            topic = Topic.model_validate(body)
        except ValidationError as e:
            return JSONResponse({"error": f"Invalid topic: {e.errors()[0]['msg']}"}, status_code=400)

        session = InterviewSession(topic, gemini, opening_template=settings.opening_message)
        _register(session)
        try:
            turn = await session.start()
        except (SessionBusyError, SessionAlreadyStartedError) as e:
            return JSONResponse({"error": str(e)}, status_code=409)

        logger.info("Started interview session %s for %r", session.id, topic.title)
        return JSONResponse(
            {
                "session_id": str(session.id),
                "state": session.state.value,
                "turn": _turn_json(turn),
            },
            status_code=201,
        )

    async def send_turn(request: Request) -> JSONResponse:
        """POST /sessions/{session_id}/turns - Send a message."""
        session = _lookup(request)
        if session is None:
            return JSONResponse({"error": "Session not found"}, status_code=404)

        try:
            body = await request.json()
        except Exception:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(message, str):
            return JSONResponse({"error": "Missing required field: message"}, status_code=400)

        try:
            turn = await session.send_turn(message)
        except EmptyMessageError as e:
            return JSONResponse({"error": str(e)}, status_code=400)
        except SessionBusyError as e:
            return JSONResponse({"error": str(e)}, status_code=409)

        return JSONResponse({"turn": _turn_json(turn), "state": session.state.value})

    async def get_session(request: Request) -> JSONResponse:
        """GET /sessions/{session_id} - Transcript and state."""
        session = _lookup(request)
        if session is None:
            return JSONResponse({"error": "Session not found"}, status_code=404)

        return JSONResponse(
            {
                "session_id": str(session.id),
                "topic": session.topic.model_dump(),
                "state": session.state.value,
                "history": [_turn_json(turn) for turn in session.history],
            }
        )

    async def end_session(request: Request) -> JSONResponse:
        """DELETE /sessions/{session_id} - Discard a session and its history."""
        session = _lookup(request)
        if session is None:
            return JSONResponse({"error": "Session not found"}, status_code=404)

        sessions.pop(session.id, None)
        return JSONResponse({"status": "ended", "session_id": str(session.id)})

    async def activity(request: Request) -> JSONResponse:
        """GET /activity[/{username}] - Most recent push and status."""
        username = request.path_params.get("username") or settings.github_username
        if not username:
            return JSONResponse({"error": "No username given and none configured"}, status_code=400)

        summary = await feed.summarize(username)
        return JSONResponse(summary.model_dump(mode="json"))

    async def activity_log(request: Request) -> JSONResponse:
        """GET /activity/{username}/events - Recent events, newest first."""
        username = request.path_params["username"]
        try:
            entries = await feed.log(username)
        except ConstructionError as e:
            return JSONResponse({"error": e.description}, status_code=400)
        except ExchangeError as e:
            logger.warning("Activity log fetch failed for %s: %s", username, e.description)
            return JSONResponse({"error": e.description}, status_code=502)

        return JSONResponse(
            {
                "username": username,
                "events": [entry.model_dump(mode="json") for entry in entries],
            }
        )

    async def health(request: Request) -> JSONResponse:
        """GET /health - Health check."""
        return JSONResponse({"status": "healthy", "sessions": len(sessions)})

    routes = [
        Route("/sessions", start_session, methods=["POST"]),
        Route("/sessions/{session_id}/turns", send_turn, methods=["POST"]),
        Route("/sessions/{session_id}", get_session, methods=["GET"]),
        Route("/sessions/{session_id}", end_session, methods=["DELETE"]),
        Route("/activity", activity),
        Route("/activity/{username}", activity),
        Route("/activity/{username}/events", activity_log),
        Route("/health", health),
    ]

    kwargs: dict[str, Any] = {"routes": routes}
    if lifespan is not None:
        kwargs["lifespan"] = lifespan
    return Starlette(**kwargs)
