"""Activity feed aggregator over the GitHub events API.

fetch_recent() pulls a user's public events in one call; the reductions
(most_recent_matching, summarize) are pure apart from that fetch.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from datetime import datetime

from ascent.activity.schemas import (
    PUSH_EVENT,
    ActivityEvent,
    ActivityLogEntry,
    ActivityStatus,
    ActivitySummary,
)
from ascent.errors import ConfigurationError, ConstructionError, ExchangeError
from ascent.transport import TransportClient

logger = logging.getLogger(__name__)

# GitHub logins: alphanumerics and single hyphens, no leading/trailing hyphen
_USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")

EventPredicate = Callable[[ActivityEvent], bool]


def is_push(event: ActivityEvent) -> bool:
    return event.type == PUSH_EVENT


def most_recent_matching(
    events: Iterable[ActivityEvent],
    predicate: EventPredicate,
) -> datetime | None:
    """Latest timestamp among events matching predicate.

    Events without a parseable timestamp are skipped. Returns None when
    nothing matches.
    """
    timestamps = [
        ts for ts in (event.timestamp for event in events if predicate(event)) if ts is not None
    ]
    return max(timestamps, default=None)


class ActivityFeed:
    """Fetches and reduces a user's recent GitHub activity."""

    def __init__(
        self,
        transport: TransportClient,
        *,
        token: str,
        api_url: str = "https://api.github.com",
        api_version: str = "2022-11-28",
    ) -> None:
        if not token:
            raise ConfigurationError(["GITHUB_TOKEN"])
        self._transport = transport
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._api_version = api_version

    def events_url(self, username: str) -> str:
        if not _USERNAME_RE.match(username):
            raise ConstructionError(f"Invalid GitHub username: {username!r}")
        return f"{self._api_url}/users/{username}/events"

    async def fetch_recent(self, username: str) -> list[ActivityEvent]:
        """Recent events for username, newest first as GitHub returns them.

        One malformed event fails the whole call with DecodeError.
        """
        response = await self._transport.execute(
            "GET",
            self.events_url(username),
            list[ActivityEvent],
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {self._token}",
                "X-GitHub-Api-Version": self._api_version,
            },
        )
        response.raise_for_status()
        return response.body

    async def log(self, username: str) -> list[ActivityLogEntry]:
        """Recent events as log rows (type, repository, time), newest first."""
        return [ActivityLogEntry.from_event(event) for event in await self.fetch_recent(username)]

    async def summarize(self, username: str, now: datetime | None = None) -> ActivitySummary:
        """Push status for the dashboard. Fetch failures report offline."""
        try:
            events = await self.fetch_recent(username)
        except ExchangeError as e:
            logger.warning("Activity fetch failed for %s: %s", username, e.description)
            return ActivitySummary(
                username=username,
                status=ActivityStatus.OFFLINE,
                error=e.description,
            )

        last_push = most_recent_matching(events, is_push)
        if last_push is None:
            status = ActivityStatus.NO_ACTIVITY
        else:
            today = (now or datetime.now().astimezone()).astimezone().date()
            status = (
                ActivityStatus.ACTIVE
                if last_push.astimezone().date() == today
                else ActivityStatus.INACTIVE
            )

        return ActivitySummary(
            username=username,
            status=status,
            last_push=last_push,
            event_count=len(events),
            events=[ActivityLogEntry.from_event(event) for event in events],
        )
