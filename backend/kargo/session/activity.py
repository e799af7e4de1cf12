"""Bounded per-room activity log."""

from collections import deque
from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

ACTIVITY_CAPACITY = 200
ACTIVITY_FEED_SIZE = 50


class ActivityEntry(BaseModel):
    """One human-readable event. `player` is None for room-level events."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    player: str | None = None
    description: str


class ActivityLog:
    """Append-only log that keeps the newest `capacity` entries.

    Oldest entries are evicted first once the cap is reached.
    """

    def __init__(self, capacity: int = ACTIVITY_CAPACITY) -> None:
        self._entries: deque[ActivityEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, description: str, player: str | None = None) -> ActivityEntry:
        entry = ActivityEntry(player=player, description=description)
        self._entries.append(entry)
        return entry

    def recent(self, limit: int = ACTIVITY_FEED_SIZE) -> list[ActivityEntry]:
        """Return up to `limit` newest entries, oldest first."""
        if limit <= 0:
            return []
        return list(self._entries)[-limit:]
