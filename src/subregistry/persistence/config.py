"""Cassandra connection configuration.

Environment Variables:
    SUBREGISTRY_CASSANDRA_HOSTS: Comma-separated contact points
    SUBREGISTRY_CASSANDRA_PORT: Native protocol port
    SUBREGISTRY_CASSANDRA_KEYSPACE: Keyspace holding the subscription table
    SUBREGISTRY_CASSANDRA_TABLE: Subscription table name
    SUBREGISTRY_CASSANDRA_LOCAL_DC: Local datacenter for LOCAL_QUORUM routing
    SUBREGISTRY_CASSANDRA_USERNAME: Username for password authentication
    SUBREGISTRY_CASSANDRA_PASSWORD: Password for password authentication
    SUBREGISTRY_CASSANDRA_CONNECT_TIMEOUT: Connect timeout in seconds
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from subregistry.errors import ConfigurationError
from subregistry.persistence.store import DEFAULT_TABLE


@dataclass(frozen=True)
class CassandraConfig:
    """Configuration for the Cassandra-backed subscription store.

    Attributes:
        hosts: Contact points used to discover the cluster
        port: Native protocol port
        keyspace: Keyspace holding the subscription table
        table: Subscription table name
        local_dc: Local datacenter; enables DC-aware routing when set
        username: Username for PlainTextAuthProvider
        password: Password for PlainTextAuthProvider
        connect_timeout: Seconds to wait for the initial connection
    """

    hosts: tuple[str, ...] = ("127.0.0.1",)
    port: int = 9042
    keyspace: str = "databus"
    table: str = DEFAULT_TABLE
    local_dc: str | None = None
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    connect_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> CassandraConfig:
        """Load configuration from environment variables.

        Returns:
            CassandraConfig with values from environment or defaults

        Raises:
            ConfigurationError: If a numeric variable is not a number
        """
        hosts = os.getenv("SUBREGISTRY_CASSANDRA_HOSTS", "127.0.0.1")
        config = cls(
            hosts=tuple(host.strip() for host in hosts.split(",") if host.strip()),
            port=_parse_int_env("SUBREGISTRY_CASSANDRA_PORT", 9042),
            keyspace=os.getenv("SUBREGISTRY_CASSANDRA_KEYSPACE", "databus"),
            table=os.getenv("SUBREGISTRY_CASSANDRA_TABLE", DEFAULT_TABLE),
            local_dc=os.getenv("SUBREGISTRY_CASSANDRA_LOCAL_DC") or None,
            username=os.getenv("SUBREGISTRY_CASSANDRA_USERNAME") or None,
            password=os.getenv("SUBREGISTRY_CASSANDRA_PASSWORD") or None,
            connect_timeout=_parse_float_env("SUBREGISTRY_CASSANDRA_CONNECT_TIMEOUT", 10.0),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check the configuration for values that can never connect.

        Raises:
            ConfigurationError: If a setting is invalid
        """
        if not self.hosts:
            raise ConfigurationError("At least one Cassandra host is required")
        if self.port <= 0:
            raise ConfigurationError(f"Invalid Cassandra port: {self.port}")
        if not self.keyspace:
            raise ConfigurationError("Cassandra keyspace is required")
        if not self.table:
            raise ConfigurationError("Subscription table name is required")
        if self.connect_timeout <= 0:
            raise ConfigurationError(f"Invalid connect timeout: {self.connect_timeout}")
        if (self.username is None) != (self.password is None):
            raise ConfigurationError("Cassandra username and password must be set together")

    @property
    def cluster_key(self) -> tuple[tuple[str, ...], int, str | None, str | None]:
        """Key identifying connections that can share one Cluster."""
        return (self.hosts, self.port, self.local_dc, self.username)


def _parse_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", cause=e) from e


def _parse_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}", cause=e) from e


# Process-wide default
_default_cassandra_config: CassandraConfig | None = None


def get_cassandra_config() -> CassandraConfig:
    """Get the default CassandraConfig, loading from environment on first call."""
    global _default_cassandra_config
    if _default_cassandra_config is None:
        _default_cassandra_config = CassandraConfig.from_env()
    return _default_cassandra_config


def reset_cassandra_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _default_cassandra_config
    _default_cassandra_config = None
