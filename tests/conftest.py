"""Shared fixtures: a scripted fake HTTP endpoint behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

from ascent.interview.gemini import GeminiClient
from ascent.interview.schemas import Topic
from ascent.transport import TransportClient

GEMINI_URL = "https://gemini.test/v1beta/models/test-model:generateContent"
GITHUB_URL = "https://github.test"


def gemini_reply(text: str) -> dict[str, Any]:
    """Build a generateContent success payload."""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class FakeEndpoint:
    """Replays queued responses and records every request it receives.

    Queue entries are (status, httpx.Response kwargs) pairs, or exceptions
    to raise. When the queue runs dry the last entry is reused.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queue: list[tuple[int, dict[str, Any]] | Exception] = []
        self._last: tuple[int, dict[str, Any]] | Exception | None = None

    def reply(self, status_code: int = 200, json_data: Any = None, **kwargs: Any) -> None:
        if json_data is not None:
            kwargs["json"] = json_data
        self._queue.append((status_code, kwargs))

    def fail(self, exc: Exception) -> None:
        self._queue.append(exc)

    def payload(self, index: int = -1) -> dict[str, Any]:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._queue:
            self._last = self._queue.pop(0)
        item = self._last
        if item is None:
            raise AssertionError(f"No response queued for {request.method} {request.url}")
        if isinstance(item, Exception):
            raise item
        status_code, kwargs = item
        return httpx.Response(status_code, **kwargs)


@pytest.fixture
def endpoint() -> FakeEndpoint:
    return FakeEndpoint()


@pytest_asyncio.fixture
async def transport(endpoint):
    """TransportClient whose httpx client talks to the fake endpoint."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as http:
        yield TransportClient(http)


@pytest.fixture
def gemini(transport) -> GeminiClient:
    return GeminiClient(transport, api_key="test-gemini-key", base_url=GEMINI_URL)


@pytest.fixture
def topic() -> Topic:
    return Topic(
        title="Parking Lot System",
        requirements="Multiple floors, spot sizes, ticketing and payment.",
        strategy="Strategy pattern for spot allocation; singleton lot manager.",
        twist="Add EV charging",
    )
