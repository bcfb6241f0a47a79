"""Tests for SchemaResolver column discovery."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

import pytest

from subregistry.error_codes import ErrorCode
from subregistry.errors import SchemaResolutionError
from subregistry.persistence.cassandra.schema import ColumnNames, SchemaResolver
from tests.conftest import CQL_COLUMNS, LEGACY_COLUMNS, FakeCassandraSession, FakeClock, make_table


def _resolver(session: FakeCassandraSession, table: str = "subscription") -> SchemaResolver:
    return SchemaResolver(session, "databus", table)  # type: ignore[arg-type]


class TestResolve:
    """Column discovery by structural position."""

    def test_resolves_cql_names(self, cassandra_session: FakeCassandraSession) -> None:
        columns = _resolver(cassandra_session).resolve()

        assert columns == ColumnNames("rowkey", "subscription", "value")

    def test_resolves_legacy_names(self, clock: FakeClock) -> None:
        session = FakeCassandraSession(clock, columns=LEGACY_COLUMNS)

        assert _resolver(session).resolve() == ColumnNames("key", "column1", "value")

    def test_payload_is_third_column(self, clock: FakeClock) -> None:
        """Extra columns after the payload are ignored."""
        session = FakeCassandraSession(clock, table_meta=make_table(("pk", "ck", "data", "zzz_extra")))

        assert _resolver(session).resolve() == ColumnNames("pk", "ck", "data")

    def test_result_is_cached(self, cassandra_session: FakeCassandraSession) -> None:
        resolver = _resolver(cassandra_session)
        assert resolver.is_resolved is False

        first = resolver.resolve()
        cassandra_session.cluster.metadata.keyspaces.clear()

        assert resolver.is_resolved is True
        assert resolver.resolve() is first

    def test_quoted_protects_case_sensitive_names(self) -> None:
        columns = ColumnNames("Key", "column1", "value")

        quoted = columns.quoted()

        assert quoted.partition_key == '"Key"'
        assert quoted.subscription_key == "column1"


class TestResolutionFailures:
    """Malformed or missing tables are fatal."""

    def test_missing_table(self, cassandra_session: FakeCassandraSession) -> None:
        resolver = _resolver(cassandra_session, table="other")

        with pytest.raises(SchemaResolutionError) as exc_info:
            resolver.resolve()

        assert exc_info.value.table == "other"
        assert exc_info.value.keyspace == "databus"
        assert exc_info.value.error_code == ErrorCode.SCHEMA_MISMATCH
        assert resolver.is_resolved is False

    def test_missing_keyspace(self, cassandra_session: FakeCassandraSession) -> None:
        cassandra_session.cluster.metadata.keyspaces.clear()

        with pytest.raises(SchemaResolutionError):
            _resolver(cassandra_session).resolve()

    def test_refreshes_metadata_before_failing(self, cassandra_session: FakeCassandraSession) -> None:
        """A table created after the metadata snapshot is found after refresh."""
        cluster = cassandra_session.cluster
        cluster.pending_table = ("databus", "late", make_table(LEGACY_COLUMNS))

        columns = _resolver(cassandra_session, table="late").resolve()

        assert columns == ColumnNames(*LEGACY_COLUMNS)
        assert cluster.refresh_calls == [("databus", "late")]

    def test_no_refresh_when_table_present(self, cassandra_session: FakeCassandraSession) -> None:
        _resolver(cassandra_session).resolve()

        assert cassandra_session.cluster.refresh_calls == []

    def test_too_few_primary_key_columns(self, clock: FakeClock) -> None:
        session = FakeCassandraSession(clock, table_meta=make_table(CQL_COLUMNS, primary_key_size=1))

        with pytest.raises(SchemaResolutionError, match="primary key"):
            _resolver(session).resolve()

    def test_too_few_columns(self, clock: FakeClock) -> None:
        session = FakeCassandraSession(clock, table_meta=make_table(("pk", "ck")))

        with pytest.raises(SchemaResolutionError, match="payload"):
            _resolver(session).resolve()


class TestConcurrentResolution:
    """Concurrent first use converges on one complete result."""

    def test_concurrent_callers_agree(self, cassandra_session: FakeCassandraSession) -> None:
        resolver = _resolver(cassandra_session)
        barrier = threading.Barrier(8)

        def resolve() -> ColumnNames:
            barrier.wait()
            return resolver.resolve()

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: resolve(), range(8)))

        assert all(result == ColumnNames(*CQL_COLUMNS) for result in results)

    def test_callers_never_see_partial_names(self, clock: FakeClock) -> None:
        """Slow metadata reads still publish all three names together."""
        session = FakeCassandraSession(clock)
        keyspace = session.cluster.metadata.keyspaces["databus"]
        real_tables = keyspace.tables
        reads = threading.Event()

        class SlowTables(dict):  # type: ignore[type-arg]
            def get(self, key, default=None):  # type: ignore[no-untyped-def]
                reads.wait(timeout=1)
                return real_tables.get(key, default)

        session.cluster.metadata.keyspaces["databus"] = SimpleNamespace(tables=SlowTables())
        resolver = _resolver(session)
        observed: list[object] = []

        def watch() -> None:
            for _ in range(1000):
                observed.append(resolver._columns)

        watcher = threading.Thread(target=watch)
        with ThreadPoolExecutor(max_workers=4) as executor:
            futures = [executor.submit(resolver.resolve) for _ in range(4)]
            watcher.start()
            reads.set()
            results = [future.result() for future in futures]
        watcher.join()

        assert all(result == ColumnNames(*CQL_COLUMNS) for result in results)
        assert all(value is None or value == ColumnNames(*CQL_COLUMNS) for value in observed)
