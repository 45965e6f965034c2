"""Pydantic models for GitHub user activity."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field

PUSH_EVENT = "PushEvent"


class Repository(BaseModel):
    name: str


class ActivityEvent(BaseModel):
    """One entry of /users/{username}/events. Read-only."""

    model_config = ConfigDict(frozen=True)

    type: str
    repo: Repository
    created_at: str | None = None
    id: str | None = None

    @property
    def repository_name(self) -> str:
        return self.repo.name

    @property
    def timestamp(self) -> datetime | None:
        """Parsed created_at (UTC assumed when no offset); None if unparseable."""
        if not self.created_at:
            return None
        try:
            parsed = isoparse(self.created_at)
        except (ValueError, OverflowError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed


class ActivityStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    NO_ACTIVITY = "no_activity"
    OFFLINE = "offline"


class ActivityLogEntry(BaseModel):
    """One row of the activity log: what happened, where and when."""

    type: str
    repository_name: str
    timestamp: datetime | None = None

    @classmethod
    def from_event(cls, event: ActivityEvent) -> ActivityLogEntry:
        return cls(type=event.type, repository_name=event.repository_name, timestamp=event.timestamp)


class ActivitySummary(BaseModel):
    """Dashboard view of a user's recent pushes, with the event log."""

    username: str
    status: ActivityStatus
    last_push: datetime | None = None
    event_count: int = 0
    events: list[ActivityLogEntry] = Field(default_factory=list)
    error: str | None = None
