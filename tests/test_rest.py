"""Integration tests for REST API endpoints.

Uses httpx AsyncClient with ASGITransport for the app, and the shared
FakeEndpoint for the upstream Gemini and GitHub calls.
"""

import asyncio
import uuid
from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ascent.activity.feed import ActivityFeed
from ascent.api.rest import create_app
from ascent.interview.gemini import GeminiClient
from ascent.transport import TransportClient
from tests.conftest import GEMINI_URL, GITHUB_URL, gemini_reply

TOPIC = {
    "title": "Parking Lot System",
    "requirements": "Floors and spots.",
    "strategy": "Strategy pattern.",
    "twist": "Add EV charging",
}


def _mock_settings(**overrides) -> MagicMock:
    """MagicMock Settings to avoid pydantic-settings env handling."""
    defaults = {
        "opening_message": "I'm ready to discuss my design for {title}.",
        "max_sessions": 100,
        "github_username": "octocat",
    }
    defaults.update(overrides)
    mock = MagicMock()
    for key, value in defaults.items():
        setattr(mock, key, value)
    return mock


@pytest.fixture
def settings():
    return _mock_settings()


@pytest.fixture
def app(gemini, transport, settings):
    feed = ActivityFeed(transport, token="t", api_url=GITHUB_URL)
    return create_app(gemini, feed, settings)


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client using httpx ASGITransport."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _start(client, endpoint) -> str:
    endpoint.reply(200, gemini_reply("Tell me about your spot allocation."))
    resp = await client.post("/sessions", json=TOPIC)
    assert resp.status_code == 201
    return resp.json()["session_id"]


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


async def test_start_session(client, endpoint):
    endpoint.reply(200, gemini_reply("Tell me about your spot allocation."))

    resp = await client.post("/sessions", json=TOPIC)

    assert resp.status_code == 201
    data = resp.json()
    uuid.UUID(data["session_id"])
    assert data["state"] == "idle"
    assert data["turn"]["role"] == "assistant"
    assert data["turn"]["content"] == "Tell me about your spot allocation."


async def test_start_session_invalid_json(client):
    resp = await client.post("/sessions", content=b"{nope", headers={"content-type": "application/json"})
    assert resp.status_code == 400


async def test_start_session_requires_title(client, endpoint):
    resp = await client.post("/sessions", json={"requirements": "x"})

    assert resp.status_code == 400
    assert endpoint.requests == []


async def test_send_turn(client, endpoint):
    session_id = await _start(client, endpoint)
    endpoint.reply(200, gemini_reply("Why that pattern?"))

    resp = await client.post(f"/sessions/{session_id}/turns", json={"message": "Strategy per size."})

    assert resp.status_code == 200
    data = resp.json()
    assert data["turn"]["content"] == "Why that pattern?"
    assert data["state"] == "idle"


async def test_send_turn_failure_is_still_200_with_error_turn(client, endpoint):
    session_id = await _start(client, endpoint)
    endpoint.reply(503, content=b"down")

    resp = await client.post(f"/sessions/{session_id}/turns", json={"message": "hi"})

    assert resp.status_code == 200
    assert resp.json()["turn"]["content"] == "Error: HTTP 503"


async def test_send_turn_blank_message(client, endpoint):
    session_id = await _start(client, endpoint)

    resp = await client.post(f"/sessions/{session_id}/turns", json={"message": "   "})

    assert resp.status_code == 400
    assert len(endpoint.requests) == 1


async def test_send_turn_missing_message(client, endpoint):
    session_id = await _start(client, endpoint)

    resp = await client.post(f"/sessions/{session_id}/turns", json={})

    assert resp.status_code == 400


class HeldEndpoint:
    """Answers the opening request at once and holds later ones until release()."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.requests) > 1:
            await self._gate.wait()
        return httpx.Response(200, json=gemini_reply("Answer."))


async def test_send_turn_while_awaiting_response_is_409():
    handler = HeldEndpoint()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        upstream = TransportClient(http)
        app = create_app(
            GeminiClient(upstream, api_key="k", base_url=GEMINI_URL),
            ActivityFeed(upstream, token="t", api_url=GITHUB_URL),
            _mock_settings(),
        )
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            session_id = (await c.post("/sessions", json=TOPIC)).json()["session_id"]
            first = asyncio.create_task(c.post(f"/sessions/{session_id}/turns", json={"message": "first"}))
            while len(handler.requests) < 2:
                await asyncio.sleep(0)

            busy = await c.post(f"/sessions/{session_id}/turns", json={"message": "second"})
            state = (await c.get(f"/sessions/{session_id}")).json()["state"]

            handler.release()
            done = await first

    assert busy.status_code == 409
    assert "error" in busy.json()
    assert state == "awaiting_response"
    assert done.status_code == 200
    assert done.json()["turn"]["content"] == "Answer."
    assert len(handler.requests) == 2


@pytest.mark.parametrize("session_id", [str(uuid.uuid4()), "not-a-uuid"])
async def test_unknown_session_is_404(client, session_id):
    assert (await client.post(f"/sessions/{session_id}/turns", json={"message": "x"})).status_code == 404
    assert (await client.get(f"/sessions/{session_id}")).status_code == 404
    assert (await client.delete(f"/sessions/{session_id}")).status_code == 404


async def test_get_session_history(client, endpoint):
    session_id = await _start(client, endpoint)
    endpoint.reply(200, gemini_reply("Go on."))
    await client.post(f"/sessions/{session_id}/turns", json={"message": "First answer"})

    resp = await client.get(f"/sessions/{session_id}")

    assert resp.status_code == 200
    data = resp.json()
    assert data["topic"]["title"] == "Parking Lot System"
    assert data["state"] == "idle"
    assert [t["role"] for t in data["history"]] == ["user", "assistant", "user", "assistant"]
    assert data["history"][2]["content"] == "First answer"


async def test_end_session(client, endpoint):
    session_id = await _start(client, endpoint)

    resp = await client.delete(f"/sessions/{session_id}")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ended"
    assert (await client.get(f"/sessions/{session_id}")).status_code == 404


async def test_oldest_session_evicted_at_capacity(gemini, transport, endpoint):
    app = create_app(gemini, ActivityFeed(transport, token="t", api_url=GITHUB_URL), _mock_settings(max_sessions=2))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        first = await _start(c, endpoint)
        second = await _start(c, endpoint)
        third = await _start(c, endpoint)

        assert (await c.get(f"/sessions/{first}")).status_code == 404
        assert (await c.get(f"/sessions/{second}")).status_code == 200
        assert (await c.get(f"/sessions/{third}")).status_code == 200


# ---------------------------------------------------------------------------
# Activity + health
# ---------------------------------------------------------------------------


async def test_activity_for_user(client, endpoint):
    endpoint.reply(200, [{"type": "PushEvent", "repo": {"name": "r"}, "created_at": "2024-01-01T00:00:00Z"}])

    resp = await client.get("/activity/someone")

    assert resp.status_code == 200
    data = resp.json()
    assert data["username"] == "someone"
    assert data["status"] == "inactive"
    assert data["last_push"].startswith("2024-01-01T00:00:00")
    assert endpoint.requests[0].url.path == "/users/someone/events"


async def test_activity_summary_includes_event_log(client, endpoint):
    endpoint.reply(200, [{"type": "WatchEvent", "repo": {"name": "octo/stars"}, "created_at": "2024-01-02T00:00:00Z"}])

    resp = await client.get("/activity/someone")

    events = resp.json()["events"]
    assert len(events) == 1
    assert events[0]["type"] == "WatchEvent"
    assert events[0]["repository_name"] == "octo/stars"
    assert events[0]["timestamp"].startswith("2024-01-02T00:00:00")


async def test_activity_uses_configured_username(client, endpoint):
    endpoint.reply(200, [])

    resp = await client.get("/activity")

    assert resp.json()["status"] == "no_activity"
    assert endpoint.requests[0].url.path == "/users/octocat/events"


async def test_activity_without_username(gemini, transport):
    app = create_app(gemini, ActivityFeed(transport, token="t"), _mock_settings(github_username=""))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.get("/activity")
    assert resp.status_code == 400


async def test_activity_offline(client, endpoint):
    endpoint.reply(502, content=b"bad gateway")

    resp = await client.get("/activity/octocat")

    assert resp.status_code == 200
    assert resp.json()["status"] == "offline"
    assert resp.json()["error"] == "HTTP 502"


async def test_activity_events_log(client, endpoint):
    endpoint.reply(
        200,
        [
            {"type": "PushEvent", "repo": {"name": "octo/repo"}, "created_at": "2024-01-02T00:00:00Z"},
            {"type": "IssuesEvent", "repo": {"name": "octo/other"}, "created_at": "2024-01-01T00:00:00Z"},
        ],
    )

    resp = await client.get("/activity/octocat/events")

    assert resp.status_code == 200
    data = resp.json()
    assert data["username"] == "octocat"
    assert [(e["type"], e["repository_name"]) for e in data["events"]] == [
        ("PushEvent", "octo/repo"),
        ("IssuesEvent", "octo/other"),
    ]
    assert data["events"][0]["timestamp"].startswith("2024-01-02T00:00:00")
    assert endpoint.requests[0].url.path == "/users/octocat/events"


async def test_activity_events_invalid_username(client, endpoint):
    resp = await client.get("/activity/octo--cat/events")

    assert resp.status_code == 400
    assert endpoint.requests == []


async def test_activity_events_upstream_failure(client, endpoint):
    endpoint.reply(503, content=b"")

    resp = await client.get("/activity/octocat/events")

    assert resp.status_code == 502
    assert resp.json()["error"] == "HTTP 503"


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
