"""
Column name resolution for the subscription table.

Subscription tables were created by several generations of tooling
(Thrift-era column families and later CQL DDL), so the CQL names of the
partition key, clustering key and payload column differ between clusters
("key"/"column1"/"value" versus explicit names). Rather than assuming a
naming scheme, the resolver reads live table metadata once and picks the
columns by position.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

from cassandra.metadata import protect_name

from subregistry.errors import SchemaResolutionError
from subregistry.logging import get_logger

if TYPE_CHECKING:
    from cassandra.cluster import Session
    from cassandra.metadata import TableMetadata

logger = get_logger(__name__)

# Ordinal of the payload column in the table's column list
# (partition key, clustering key, payload).
PAYLOAD_COLUMN_INDEX = 2


class ColumnNames(NamedTuple):
    """CQL identifiers of the three subscription table roles."""

    partition_key: str
    subscription_key: str
    payload: str

    def quoted(self) -> ColumnNames:
        """Identifiers quoted for use in CQL statements."""
        return ColumnNames(*(protect_name(name) for name in self))


class SchemaResolver:
    """
    Resolves and caches the subscription table's column names.

    Thread-safe without locking: concurrent first callers may each read
    metadata, but they all compute the same value and publish it with a
    single assignment, so no caller sees a partial result. The resolved
    names are never invalidated.
    """

    def __init__(self, session: Session, keyspace: str, table: str) -> None:
        self._session = session
        self.keyspace = keyspace
        self.table = table
        self._columns: ColumnNames | None = None

    def resolve(self) -> ColumnNames:
        """
        Return the table's column names, reading metadata on first use.

        Returns:
            The partition key, subscription key and payload column names

        Raises:
            SchemaResolutionError: If the table is missing or has the wrong shape
        """
        columns = self._columns
        if columns is None:
            columns = self._read_columns()
            self._columns = columns
        return columns

    @property
    def is_resolved(self) -> bool:
        return self._columns is not None

    def _read_columns(self) -> ColumnNames:
        table = self._table_metadata()
        if table is None:
            # Metadata may predate the table; refresh once before giving up.
            self._session.cluster.refresh_table_metadata(self.keyspace, self.table)
            table = self._table_metadata()
        if table is None:
            raise self._failure(f"Table {self.keyspace}.{self.table} does not exist")

        primary_key = list(table.primary_key)
        columns = list(table.columns.values())
        if len(primary_key) < 2:
            raise self._failure(
                f"Table {self.keyspace}.{self.table} has {len(primary_key)} primary key "
                "column(s), expected a partition key and a clustering key"
            )
        if len(columns) <= PAYLOAD_COLUMN_INDEX:
            raise self._failure(
                f"Table {self.keyspace}.{self.table} has {len(columns)} column(s), "
                "expected a payload column"
            )

        resolved = ColumnNames(
            partition_key=primary_key[0].name,
            subscription_key=primary_key[1].name,
            payload=columns[PAYLOAD_COLUMN_INDEX].name,
        )
        logger.info(
            "schema_resolved",
            keyspace=self.keyspace,
            table=self.table,
            partition_key=resolved.partition_key,
            subscription_key=resolved.subscription_key,
            payload=resolved.payload,
        )
        return resolved

    def _table_metadata(self) -> TableMetadata | None:
        keyspaces: dict[str, Any] = self._session.cluster.metadata.keyspaces
        keyspace = keyspaces.get(self.keyspace)
        if keyspace is None:
            return None
        table: TableMetadata | None = keyspace.tables.get(self.table)
        return table

    def _failure(self, message: str) -> SchemaResolutionError:
        logger.error("schema_resolution_failed", keyspace=self.keyspace, table=self.table, reason=message)
        return SchemaResolutionError(message, keyspace=self.keyspace, table=self.table)
