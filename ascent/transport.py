"""JSON-over-HTTPS transport shared by the model and activity clients.

One httpx.AsyncClient is reused for every call. Each execute() issues
exactly one request -- no retries -- and returns the body validated against
a pydantic schema, or raises one of the ExchangeError subclasses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ascent.errors import (
    ConstructionError,
    DecodeError,
    EmptyResultError,
    ServiceError,
    TransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceErrorBody(BaseModel):
    """Structured error object some services embed in the response."""

    message: str | None = None
    status: str | None = None


class ServiceEnvelope(BaseModel):
    """Response schemas that may carry a service-reported error.

    When the decoded body has ``error`` set, the transport raises
    ServiceError regardless of the HTTP status.
    """

    error: ServiceErrorBody | None = None


@dataclass
class TransportResponse(Generic[T]):
    """Decoded response plus the HTTP status it arrived with."""

    status_code: int
    body: T

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def raise_for_status(self) -> None:
        if not self.is_success:
            raise TransportError(self.status_code)


@lru_cache(maxsize=32)
def _adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def _validate_url(url: str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConstructionError() from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConstructionError()
    return parsed


class TransportClient:
    """Stateless request executor over a shared httpx.AsyncClient."""

    def __init__(
        self,
        http: httpx.AsyncClient | None = None,
        *,
        timeout: float = 60.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        if self._owns_http:
            logger.info("httpx client initialized (timeout: %.0fs)", timeout)

    async def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_http:
            await self._http.aclose()

    async def execute(
        self,
        method: str,
        url: str,
        schema: Any,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        payload: Any = None,
    ) -> TransportResponse:
        """Send one request and decode the body against ``schema``.

        Raises:
            ConstructionError: url is not an absolute http(s) URL.
            TransportError: network failure, or a non-2xx status whose
                body does not decode.
            ServiceError: the body carries a structured error payload.
            EmptyResultError: a 2xx response with an empty body.
            DecodeError: a 2xx body does not match ``schema``.
        """
        target = _validate_url(url)

        try:
            response = await self._http.request(
                method,
                target,
                params=params,
                headers=headers,
                json=payload,
            )
        except httpx.HTTPError as e:
            raise TransportError(description=f"HTTP error: {e}") from e

        if not response.content.strip():
            if not response.is_success:
                raise TransportError(response.status_code)
            raise EmptyResultError()

        try:
            body = _adapter(schema).validate_python(response.json())
        except (ValueError, ValidationError) as e:
            if not response.is_success:
                raise TransportError(response.status_code) from e
            raise DecodeError() from e

        if isinstance(body, ServiceEnvelope) and body.error is not None:
            raise ServiceError(body.error.message, status=body.error.status)

        return TransportResponse(status_code=response.status_code, body=body)
