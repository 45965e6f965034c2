"""Error taxonomy for Ascent.

Call-level failures (ExchangeError subclasses) are raised by the transport
and the API clients. The interview session turns them into visible
assistant turns; everything else sees them as exceptions.
"""

from __future__ import annotations


class AscentError(Exception):
    """Base class for all Ascent errors."""


class ConfigurationError(AscentError):
    """A required setting (endpoint or credential) is missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required configuration: {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Exchange failures
# ---------------------------------------------------------------------------


class ExchangeError(AscentError):
    """A single request/response exchange failed."""

    default_description = "Request failed"

    def __init__(self, description: str | None = None) -> None:
        self.description = description or self.default_description
        super().__init__(self.description)


class ConstructionError(ExchangeError):
    """The request target could not be formed."""

    default_description = "Invalid API URL"


class TransportError(ExchangeError):
    """The call failed at the network or HTTP status level."""

    def __init__(self, status_code: int | None = None, description: str | None = None) -> None:
        self.status_code = status_code
        if description is None:
            description = f"HTTP {status_code}" if status_code is not None else "Invalid response from server"
        super().__init__(description)


class ServiceError(ExchangeError):
    """The remote service returned a structured error payload."""

    def __init__(self, message: str | None, status: str | None = None) -> None:
        self.status = status
        super().__init__(message or "Unknown API error")


class DecodeError(ExchangeError):
    """The response body did not match the expected schema."""

    default_description = "Failed to decode response"


class EmptyResultError(ExchangeError):
    """The call succeeded but carried no usable content."""

    default_description = "No content in response"


# ---------------------------------------------------------------------------
# Session rejections
# ---------------------------------------------------------------------------


class SessionError(AscentError):
    """An interview session refused an operation without side effects."""


class EmptyMessageError(SessionError):
    def __init__(self) -> None:
        super().__init__("Message is empty")


class SessionBusyError(SessionError):
    def __init__(self) -> None:
        super().__init__("A response is already pending for this session")


class SessionAlreadyStartedError(SessionError):
    def __init__(self) -> None:
        super().__init__("Session has already started")
