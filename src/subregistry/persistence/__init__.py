"""Persistence layer for subscriptions."""

from subregistry.persistence.cassandra import CassandraSubscriptionStore
from subregistry.persistence.config import CassandraConfig
from subregistry.persistence.factory import create_store, detect_backend
from subregistry.persistence.memory import InMemorySubscriptionStore
from subregistry.persistence.store import SubscriptionStore

__all__ = [
    # Abstract interface
    "SubscriptionStore",
    # Implementations
    "CassandraSubscriptionStore",
    "InMemorySubscriptionStore",
    # Configuration and factory
    "CassandraConfig",
    "create_store",
    "detect_backend",
]
