"""Shared pytest fixtures for parameterized backend testing."""

from __future__ import annotations

import re
from collections.abc import Generator
from dataclasses import dataclass
from datetime import timedelta
from types import SimpleNamespace
from typing import Any

import pytest
from cassandra import InvalidRequest

from subregistry.persistence.cassandra.store import CassandraSubscriptionStore
from subregistry.persistence.config import reset_cassandra_config
from subregistry.persistence.connection import SessionManager, SingletonMeta
from subregistry.persistence.memory import InMemorySubscriptionStore
from subregistry.persistence.store import SubscriptionStore

LEGACY_COLUMNS = ("key", "column1", "value")
CQL_COLUMNS = ("rowkey", "subscription", "value")


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset the session manager and config singletons between tests."""
    yield
    SingletonMeta.reset(SessionManager)
    reset_cassandra_config()


# =============================================================================
# Fake Clock
# =============================================================================


class FakeClock:
    """Settable millisecond clock shared by a store and its fake backend."""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, delta: timedelta) -> None:
        self.now_ms += delta // timedelta(milliseconds=1)


# =============================================================================
# Fake Cassandra Driver
# =============================================================================


def make_table(columns: tuple[str, ...] = CQL_COLUMNS, primary_key_size: int = 2) -> Any:
    """Build an object shaped like the driver's TableMetadata."""
    column_meta = [SimpleNamespace(name=name) for name in columns]
    return SimpleNamespace(
        primary_key=column_meta[:primary_key_size],
        columns={column.name: column for column in column_meta},
    )


@dataclass
class ExecutedStatement:
    query: str
    parameters: tuple[Any, ...]
    consistency_level: Any
    fetch_size: Any


class FakeResultSet:
    def __init__(self, rows: list[tuple[Any, ...]]) -> None:
        self._rows = rows

    def one(self) -> tuple[Any, ...] | None:
        return self._rows[0] if self._rows else None

    def __iter__(self) -> Any:
        return iter(self._rows)


class FakeCluster:
    """Cluster stand-in exposing schema metadata."""

    def __init__(self, keyspace: str, table: str, table_meta: Any | None) -> None:
        tables = {table: table_meta} if table_meta is not None else {}
        self.metadata = SimpleNamespace(keyspaces={keyspace: SimpleNamespace(tables=tables)})
        self.refresh_calls: list[tuple[str, str]] = []
        # Table that appears in metadata only after a refresh
        self.pending_table: tuple[str, str, Any] | None = None

    def refresh_table_metadata(self, keyspace: str, table: str) -> None:
        self.refresh_calls.append((keyspace, table))
        if self.pending_table is not None and self.pending_table[:2] == (keyspace, table):
            self.metadata.keyspaces[keyspace].tables[table] = self.pending_table[2]
            self.pending_table = None


class FakeCassandraSession:
    """
    Session stand-in that executes the store's CQL against one in-memory table.

    Honours ``USING TTL`` against the shared clock and rejects statements
    that reference column names the table does not have.
    """

    def __init__(
        self,
        clock: FakeClock,
        keyspace: str = "databus",
        table: str = "subscription",
        columns: tuple[str, ...] = CQL_COLUMNS,
        table_meta: Any | None = None,
    ) -> None:
        self.keyspace = keyspace
        self.columns = columns
        self.cluster = FakeCluster(keyspace, table, table_meta or make_table(columns))
        self._clock = clock
        # (partition key, subscription name) -> (payload, deadline ms)
        self.rows: dict[tuple[str, str], tuple[str, int]] = {}
        self.executed: list[ExecutedStatement] = []
        self.failure: Exception | None = None
        self.shutdown_called = False

    def execute(self, statement: Any, parameters: tuple[Any, ...] = ()) -> FakeResultSet:
        query = statement.query_string
        self.executed.append(
            ExecutedStatement(
                query=query,
                parameters=tuple(parameters),
                consistency_level=statement.consistency_level,
                fetch_size=statement.fetch_size,
            )
        )
        if self.failure is not None:
            raise self.failure

        verb = query.split(None, 1)[0].upper()
        self._check_columns(query, with_payload=verb == "INSERT")
        now = self._clock()

        if verb == "INSERT":
            partition, name, payload, ttl = parameters
            self.rows[(partition, name)] = (payload, now + ttl * 1000)
            return FakeResultSet([])

        if verb == "DELETE":
            self.rows.pop((parameters[0], parameters[1]), None)
            return FakeResultSet([])

        match = re.match(r"SELECT (.+?) FROM", query)
        assert match is not None, query
        selected = [column.strip() for column in match.group(1).split(",")]
        partition = parameters[0]
        if len(parameters) > 1:
            names = [parameters[1]]
        else:
            names = sorted(name for (key, name) in self.rows if key == partition)

        rows: list[tuple[Any, ...]] = []
        for name in names:
            entry = self.rows.get((partition, name))
            if entry is None or entry[1] <= now:
                continue
            rows.append((name, entry[0]) if len(selected) == 2 else (name,))
        return FakeResultSet(rows)

    def put_raw(self, name: str, payload: str, ttl: int = 3600, partition: str = "subscriptions") -> None:
        """Write a row directly, bypassing the store's codec."""
        self.rows[(partition, name)] = (payload, self._clock() + ttl * 1000)

    def shutdown(self) -> None:
        self.shutdown_called = True

    def _check_columns(self, query: str, with_payload: bool) -> None:
        required = list(self.columns[:2])
        if with_payload:
            required.append(self.columns[2])
        for column in required:
            if not re.search(rf'(?<![\w"]){column}(?![\w"])|"{column}"', query):
                raise InvalidRequest(f"Undefined column name in: {query}")


# =============================================================================
# Parameterized Backend Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cassandra_session(clock: FakeClock) -> FakeCassandraSession:
    return FakeCassandraSession(clock)


@pytest.fixture(params=["memory", "cassandra"])
def backend(request: pytest.FixtureRequest) -> str:
    """Parameterized backend - runs tests on the memory and Cassandra stores."""
    return str(request.param)


@pytest.fixture
def store(
    backend: str,
    clock: FakeClock,
    cassandra_session: FakeCassandraSession,
) -> SubscriptionStore:
    """Create a store for the current backend."""
    if backend == "memory":
        return InMemorySubscriptionStore(clock=clock)
    return CassandraSubscriptionStore(cassandra_session, clock=clock)  # type: ignore[arg-type]
