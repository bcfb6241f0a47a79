"""
SubscriptionStore interface.

This module defines the abstract interface for subscription persistence.
All storage backends must implement this interface.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from subregistry.filters import Condition
    from subregistry.models.subscription import Subscription

# Every subscription row lives under this partition key.
PARTITION_KEY = "subscriptions"

DEFAULT_TABLE = "subscription"

# Page sizes for enumeration; names-only scans skip the payload column.
SUBSCRIPTION_FETCH_SIZE = 200
NAME_FETCH_SIZE = 5000

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class SubscriptionStore(ABC):
    """Abstract interface for subscription persistence."""

    @abstractmethod
    def insert(
        self,
        owner_id: str | None,
        name: str,
        table_filter: Condition,
        subscription_ttl: timedelta,
        event_ttl: timedelta,
    ) -> None:
        """
        Create or replace a subscription.

        Both durations are clamped to [1 second, 365 days]. The clamped
        subscription TTL is applied to the stored record itself, so the
        record disappears once it elapses. Replacing a record resets its TTL.

        Args:
            owner_id: Owning principal, or None for unowned subscriptions
            name: Subscription name
            table_filter: Filter condition for matching events
            subscription_ttl: How long the subscription should live
            event_ttl: How long events delivered to it are retained
        """
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """
        Delete a subscription. Deleting a missing subscription is a no-op.

        Args:
            name: Subscription name
        """
        pass

    @abstractmethod
    def get(self, name: str) -> Subscription | None:
        """
        Look up a subscription by name.

        Args:
            name: Subscription name

        Returns:
            The subscription, or None if it does not exist or has expired
        """
        pass

    @abstractmethod
    def list_all(self) -> Iterator[Subscription]:
        """
        Lazily iterate over every subscription.

        Each call starts a fresh scan. Records are fetched in pages and
        decoded as the iterator is consumed.

        Returns:
            Iterator of subscriptions in name order
        """
        pass

    @abstractmethod
    def list_all_names(self) -> Iterator[str]:
        """
        Lazily iterate over every subscription name.

        Cheaper than ``list_all`` since payloads are not read.

        Returns:
            Iterator of subscription names in name order
        """
        pass

    def close(self) -> None:
        """Release resources held by the store."""
        pass

    def __enter__(self) -> SubscriptionStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
