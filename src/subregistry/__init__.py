"""
subregistry - durable subscription registry for publish/subscribe dispatch.

Stores named, owned, time-limited subscriptions in a single partition of a
Cassandra-compatible table:
- Expiration delegated to the store's per-write TTL
- Column names discovered from live table metadata
- LOCAL_QUORUM reads and writes
- Lazy, paged enumeration of subscriptions and names
"""

__version__ = "0.1.0"

from subregistry.errors import (
    CorruptRecordError,
    FilterParseError,
    MissingFieldError,
    SchemaResolutionError,
)
from subregistry.filters import Condition, parse_condition
from subregistry.models.subscription import Subscription
from subregistry.persistence import (
    CassandraConfig,
    CassandraSubscriptionStore,
    InMemorySubscriptionStore,
    SubscriptionStore,
    create_store,
)

__all__ = [
    "CassandraConfig",
    "CassandraSubscriptionStore",
    "Condition",
    "CorruptRecordError",
    "FilterParseError",
    "InMemorySubscriptionStore",
    "MissingFieldError",
    "SchemaResolutionError",
    "Subscription",
    "SubscriptionStore",
    "create_store",
    "parse_condition",
]
