"""Activity module -- recent source-control activity for the dashboard.

Public API:
    ActivityFeed          - Fetch + summarize a user's events
    most_recent_matching  - Latest timestamp among matching events
    is_push               - Predicate for push events
"""

from ascent.activity.feed import ActivityFeed, is_push, most_recent_matching
from ascent.activity.schemas import (
    PUSH_EVENT,
    ActivityEvent,
    ActivityLogEntry,
    ActivityStatus,
    ActivitySummary,
    Repository,
)

__all__ = [
    "ActivityEvent",
    "ActivityFeed",
    "ActivityLogEntry",
    "ActivityStatus",
    "ActivitySummary",
    "PUSH_EVENT",
    "Repository",
    "is_push",
    "most_recent_matching",
]
