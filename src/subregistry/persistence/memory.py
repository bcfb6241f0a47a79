"""
In-memory subscription store.

Useful for testing and development. Emulates the wide-column store's
per-write TTL: every record carries a deadline and is dropped once the
clock passes it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from datetime import timedelta

from subregistry import ttls
from subregistry.filters import Condition
from subregistry.models.subscription import Subscription
from subregistry.persistence.store import Clock, SubscriptionStore, system_clock


class InMemorySubscriptionStore(SubscriptionStore):
    """
    In-memory implementation of SubscriptionStore.

    Thread-safe storage for testing and single-process use.
    """

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        # name -> (subscription, row deadline in epoch ms)
        self._rows: dict[str, tuple[Subscription, int]] = {}
        self._lock = threading.Lock()

    def insert(
        self,
        owner_id: str | None,
        name: str,
        table_filter: Condition,
        subscription_ttl: timedelta,
        event_ttl: timedelta,
    ) -> None:
        """Create or replace a subscription."""
        now = self._clock()
        subscription = Subscription(
            name=name,
            table_filter=table_filter,
            expires_at=now + subscription_ttl // timedelta(milliseconds=1),
            event_ttl=ttls.clamp(event_ttl),
            owner_id=owner_id,
        )
        deadline = now + ttls.clamp_seconds(subscription_ttl) * 1000
        with self._lock:
            self._rows[name] = (subscription, deadline)

    def delete(self, name: str) -> None:
        """Delete a subscription."""
        with self._lock:
            self._rows.pop(name, None)

    def get(self, name: str) -> Subscription | None:
        """Look up a subscription by name."""
        now = self._clock()
        with self._lock:
            row = self._rows.get(name)
            if row is None:
                return None
            if row[1] <= now:
                del self._rows[name]
                return None
            return row[0]

    def list_all(self) -> Iterator[Subscription]:
        """Iterate over live subscriptions in name order."""
        for subscription in self._snapshot():
            yield subscription

    def list_all_names(self) -> Iterator[str]:
        """Iterate over live subscription names in name order."""
        for subscription in self._snapshot():
            yield subscription.name

    def _snapshot(self) -> list[Subscription]:
        now = self._clock()
        with self._lock:
            expired = [name for name, (_, deadline) in self._rows.items() if deadline <= now]
            for name in expired:
                del self._rows[name]
            return [self._rows[name][0] for name in sorted(self._rows)]
