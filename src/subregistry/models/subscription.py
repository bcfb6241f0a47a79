"""
Subscription model.

A subscription is a named, owned registration of interest in events that
match a table filter. It carries:
- The filter condition
- An absolute expiry hint (epoch milliseconds)
- The retention window for events delivered to it
- The owning principal, when known
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from subregistry.filters import Condition


@dataclass(frozen=True)
class Subscription:
    """
    A persisted subscription record.

    ``expires_at`` is informational. The store's row TTL decides when the
    record actually disappears.
    """

    name: str
    table_filter: Condition
    expires_at: int
    event_ttl: timedelta
    # Optional until every registration path supplies an owner.
    owner_id: str | None = None

    @property
    def expires_at_datetime(self) -> datetime:
        """Expiry hint as an aware UTC datetime."""
        return datetime.fromtimestamp(self.expires_at / 1000, tz=timezone.utc)

    def is_expired(self, now_ms: int) -> bool:
        """Whether the expiry hint has passed at ``now_ms``."""
        return now_ms >= self.expires_at
