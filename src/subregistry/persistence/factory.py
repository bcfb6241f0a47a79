"""
Factory functions for creating subscription stores.

Selects the in-memory or Cassandra backend based on a store URL.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlsplit

from subregistry.errors import ConfigurationError

if TYPE_CHECKING:
    from subregistry.persistence.config import CassandraConfig
    from subregistry.persistence.store import SubscriptionStore


def detect_backend(url: str) -> str:
    """
    Detect the backend type from a store URL.

    Args:
        url: Store URL

    Returns:
        "memory" or "cassandra"

    Examples:
        >>> detect_backend("memory://")
        'memory'
        >>> detect_backend("cassandra://cass1,cass2:9042/databus")
        'cassandra'
    """
    scheme = url.split("://", 1)[0].lower() if "://" in url else ""
    if scheme == "memory":
        return "memory"
    if scheme == "cassandra":
        return "cassandra"
    raise ConfigurationError(f"Unsupported subscription store URL: {url!r}")


def config_from_url(url: str, base: CassandraConfig | None = None) -> CassandraConfig:
    """
    Build a CassandraConfig from a ``cassandra://`` URL.

    Format: ``cassandra://[user:password@]host1,host2[:port]/keyspace[?table=...&local_dc=...]``.
    Anything the URL leaves out comes from ``base`` (or the defaults).

    Args:
        url: Cassandra store URL
        base: Configuration providing values the URL omits

    Returns:
        The merged configuration
    """
    from subregistry.persistence.config import CassandraConfig

    config = base or CassandraConfig()
    parts = urlsplit(url)
    netloc = parts.netloc
    changes: dict[str, Any] = {}

    if "@" in netloc:
        credentials, netloc = netloc.rsplit("@", 1)
        username, _, password = credentials.partition(":")
        changes["username"] = username or None
        changes["password"] = password or None

    if netloc:
        hosts, port = _split_hosts(netloc, url)
        changes["hosts"] = hosts
        if port is not None:
            changes["port"] = port

    keyspace = parts.path.strip("/")
    if keyspace:
        changes["keyspace"] = keyspace

    query = parse_qs(parts.query)
    if "table" in query:
        changes["table"] = query["table"][-1]
    if "local_dc" in query:
        changes["local_dc"] = query["local_dc"][-1]

    merged = replace(config, **changes)
    merged.validate()
    return merged


def _split_hosts(netloc: str, url: str) -> tuple[tuple[str, ...], int | None]:
    port: int | None = None
    hosts = []
    for entry in netloc.split(","):
        host, sep, port_text = entry.rpartition(":")
        if not sep:
            host = entry
        else:
            try:
                port = int(port_text)
            except ValueError as e:
                raise ConfigurationError(f"Invalid port in store URL: {url!r}", cause=e) from e
        if host:
            hosts.append(host)
    return tuple(hosts), port


def create_store(
    url: str | None = None,
    config: CassandraConfig | None = None,
    **kwargs: Any,
) -> SubscriptionStore:
    """
    Create a subscription store.

    With no URL, connects to Cassandra using ``config`` or, failing that,
    the environment (see ``CassandraConfig.from_env``).

    Args:
        url: Optional store URL (``memory://`` or ``cassandra://...``)
        config: Optional Cassandra configuration
        **kwargs: Passed to the store constructor (clock, filter_parser)

    Returns:
        SubscriptionStore: in-memory or Cassandra store instance

    Examples:
        # In-memory (for testing)
        store = create_store("memory://")

        # Cassandra, explicit
        store = create_store("cassandra://cass1,cass2:9042/databus?local_dc=us-east")

        # Cassandra, from SUBREGISTRY_CASSANDRA_* environment variables
        store = create_store()
    """
    if url is not None and detect_backend(url) == "memory":
        from subregistry.persistence.memory import InMemorySubscriptionStore

        return InMemorySubscriptionStore(**kwargs)

    from subregistry.persistence.cassandra.store import CassandraSubscriptionStore
    from subregistry.persistence.config import get_cassandra_config

    if url is not None:
        config = config_from_url(url, config)
    elif config is None:
        config = get_cassandra_config()
    return CassandraSubscriptionStore.from_config(config, **kwargs)
