"""Cassandra backend for the subscription store."""

from subregistry.persistence.cassandra.codec import decode_subscription, encode_subscription
from subregistry.persistence.cassandra.schema import ColumnNames, SchemaResolver
from subregistry.persistence.cassandra.store import CassandraSubscriptionStore

__all__ = [
    "CassandraSubscriptionStore",
    "ColumnNames",
    "SchemaResolver",
    "decode_subscription",
    "encode_subscription",
]
