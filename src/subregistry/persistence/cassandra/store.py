"""
Cassandra subscription store.

All subscriptions are stored as rows of a single partition, clustered by
subscription name, with the record encoded as JSON in one payload column.
Expiration is the store's job: every insert carries ``USING TTL`` and the
row vanishes once it elapses.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from cassandra import ConsistencyLevel
from cassandra.metadata import protect_name
from cassandra.query import SimpleStatement

from subregistry import ttls
from subregistry.errors import CorruptRecordError
from subregistry.filters import Condition, FilterParser, parse_condition
from subregistry.logging import store_logger
from subregistry.models.subscription import Subscription
from subregistry.persistence.cassandra.codec import decode_subscription, encode_subscription
from subregistry.persistence.cassandra.schema import ColumnNames, SchemaResolver
from subregistry.persistence.store import (
    DEFAULT_TABLE,
    NAME_FETCH_SIZE,
    PARTITION_KEY,
    SUBSCRIPTION_FETCH_SIZE,
    Clock,
    SubscriptionStore,
    system_clock,
)

if TYPE_CHECKING:
    from cassandra.cluster import Session

    from subregistry.persistence.config import CassandraConfig

CONSISTENCY = ConsistencyLevel.LOCAL_QUORUM


class CassandraSubscriptionStore(SubscriptionStore):
    """
    Cassandra implementation of SubscriptionStore.

    Column names are read from table metadata on first use, so tables
    provisioned by older tooling with generic column names work unchanged.
    Reads and writes use LOCAL_QUORUM. Driver errors propagate unchanged.
    """

    def __init__(
        self,
        session: Session,
        keyspace: str | None = None,
        table: str = DEFAULT_TABLE,
        clock: Clock = system_clock,
        filter_parser: FilterParser = parse_condition,
        config: CassandraConfig | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            session: Connected driver session
            keyspace: Keyspace holding the table (defaults to the session's keyspace)
            table: Subscription table name
            clock: Source of the current time in epoch milliseconds
            filter_parser: Parser for stored filter strings
            config: Config the session was opened from, when the store owns it
        """
        keyspace = keyspace or session.keyspace
        if not keyspace:
            raise ValueError("A keyspace is required when the session has none")
        self._session = session
        self._keyspace = keyspace
        self._table = table
        self._clock = clock
        self._filter_parser = filter_parser
        self._config = config
        self._resolver = SchemaResolver(session, keyspace, table)
        self._qualified_table = f"{protect_name(keyspace)}.{protect_name(table)}"
        self._logger = store_logger(keyspace, table)

    @classmethod
    def from_config(cls, config: CassandraConfig, **kwargs: Any) -> CassandraSubscriptionStore:
        """Create a store on the shared session for ``config``."""
        from subregistry.persistence.connection import get_session_manager

        session = get_session_manager().get_session(config)
        return cls(session, keyspace=config.keyspace, table=config.table, config=config, **kwargs)

    def close(self) -> None:
        """Release the shared session if this store opened it."""
        if self._config is not None:
            from subregistry.persistence.connection import get_session_manager

            get_session_manager().close_session(self._config)
            self._config = None

    @property
    def resolver(self) -> SchemaResolver:
        return self._resolver

    def columns(self) -> ColumnNames:
        """Quoted column identifiers for the subscription table."""
        return self._resolver.resolve().quoted()

    def insert(
        self,
        owner_id: str | None,
        name: str,
        table_filter: Condition,
        subscription_ttl: timedelta,
        event_ttl: timedelta,
    ) -> None:
        """Create or replace a subscription."""
        subscription = Subscription(
            name=name,
            table_filter=table_filter,
            expires_at=self._clock() + subscription_ttl // timedelta(milliseconds=1),
            event_ttl=ttls.clamp(event_ttl),
            owner_id=owner_id,
        )
        self._insert(subscription, ttls.clamp_seconds(subscription_ttl))

    def _insert(self, subscription: Subscription, ttl: int) -> None:
        cols = self.columns()
        statement = SimpleStatement(
            f"INSERT INTO {self._qualified_table} "
            f"({cols.partition_key}, {cols.subscription_key}, {cols.payload}) "
            "VALUES (%s, %s, %s) USING TTL %s",
            consistency_level=CONSISTENCY,
        )
        self._session.execute(
            statement,
            (PARTITION_KEY, subscription.name, encode_subscription(subscription), ttl),
        )
        self._logger.debug("subscription_inserted", subscription=subscription.name, ttl=ttl)

    def delete(self, name: str) -> None:
        """Delete a subscription."""
        cols = self.columns()
        statement = SimpleStatement(
            f"DELETE FROM {self._qualified_table} "
            f"WHERE {cols.partition_key} = %s AND {cols.subscription_key} = %s",
            consistency_level=CONSISTENCY,
        )
        self._session.execute(statement, (PARTITION_KEY, name))
        self._logger.debug("subscription_deleted", subscription=name)

    def get(self, name: str) -> Subscription | None:
        """Look up a subscription by name."""
        cols = self.columns()
        statement = SimpleStatement(
            f"SELECT {cols.subscription_key}, {cols.payload} FROM {self._qualified_table} "
            f"WHERE {cols.partition_key} = %s AND {cols.subscription_key} = %s",
            consistency_level=CONSISTENCY,
        )
        row = self._session.execute(statement, (PARTITION_KEY, name)).one()
        if row is None:
            return None
        return self._row_to_subscription(row)

    def list_all(self) -> Iterator[Subscription]:
        """Lazily iterate over every subscription, 200 rows per page."""
        cols = self.columns()
        statement = SimpleStatement(
            f"SELECT {cols.subscription_key}, {cols.payload} FROM {self._qualified_table} "
            f"WHERE {cols.partition_key} = %s",
            consistency_level=CONSISTENCY,
            fetch_size=SUBSCRIPTION_FETCH_SIZE,
        )
        for row in self._session.execute(statement, (PARTITION_KEY,)):
            yield self._row_to_subscription(row)

    def list_all_names(self) -> Iterator[str]:
        """Lazily iterate over every subscription name, 5000 rows per page."""
        cols = self.columns()
        statement = SimpleStatement(
            f"SELECT {cols.subscription_key} FROM {self._qualified_table} "
            f"WHERE {cols.partition_key} = %s",
            consistency_level=CONSISTENCY,
            fetch_size=NAME_FETCH_SIZE,
        )
        for row in self._session.execute(statement, (PARTITION_KEY,)):
            yield row[0]

    def _row_to_subscription(self, row: Any) -> Subscription:
        name = row[0]
        try:
            return decode_subscription(name, row[1], self._filter_parser)
        except CorruptRecordError as e:
            self._logger.warning("corrupt_subscription_record", subscription=name, error=str(e))
            raise
