"""
Singleton manager for Cassandra cluster connections.

Cluster objects are expensive: each holds a control connection, host
pools and metadata. The manager shares one Cluster per contact-point set
and one Session per keyspace across every store instance in the process.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from cassandra import ConsistencyLevel
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import EXEC_PROFILE_DEFAULT, Cluster, ExecutionProfile
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy

from subregistry.logging import get_logger

if TYPE_CHECKING:
    from cassandra.cluster import Session

    from subregistry.persistence.config import CassandraConfig

logger = get_logger(__name__)


class SingletonMeta(type):
    """
    Thread-safe metaclass for singleton pattern.

    Ensures only one instance of a class exists, even when accessed
    from multiple threads simultaneously.
    """

    _instances: dict[type, Any] = {}
    _lock: threading.Lock = threading.Lock()

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            with cls._lock:
                # Double-check locking pattern
                if cls not in cls._instances:
                    instance = super().__call__(*args, **kwargs)
                    cls._instances[cls] = instance
        return cls._instances[cls]

    @classmethod
    def reset(mcs, cls: type) -> None:
        """Reset singleton instance (for testing)."""
        with mcs._lock:
            if cls in mcs._instances:
                instance = mcs._instances.pop(cls)
                if hasattr(instance, "close_all"):
                    instance.close_all()


class SessionManager(metaclass=SingletonMeta):
    """
    Singleton manager for Cassandra clusters and sessions.

    Sessions are reference counted: every ``get_session`` call must be
    paired with one ``close_session`` call, and the session is shut down
    when the last holder releases it.

    Usage:
        manager = SessionManager()
        session = manager.get_session(CassandraConfig.from_env())
    """

    def __init__(self) -> None:
        self._clusters: dict[tuple[Any, ...], Cluster] = {}
        self._sessions: dict[tuple[Any, ...], Session] = {}
        self._holders: dict[tuple[Any, ...], int] = {}
        self._lock = threading.Lock()

    def get_session(self, config: CassandraConfig) -> Session:
        """
        Acquire a session bound to the configured keyspace.

        Args:
            config: Connection configuration

        Returns:
            Shared Session for this cluster and keyspace
        """
        key = (config.cluster_key, config.keyspace)
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                cluster = self._clusters.get(config.cluster_key)
                if cluster is None:
                    cluster = self._create_cluster(config)
                    self._clusters[config.cluster_key] = cluster
                session = cluster.connect(config.keyspace)
                self._sessions[key] = session
                logger.info(
                    "cassandra_session_opened",
                    hosts=list(config.hosts),
                    port=config.port,
                    keyspace=config.keyspace,
                )
            self._holders[key] = self._holders.get(key, 0) + 1
            return session

    def _create_cluster(self, config: CassandraConfig) -> Cluster:
        profile = ExecutionProfile(
            load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy(local_dc=config.local_dc)),
            consistency_level=ConsistencyLevel.LOCAL_QUORUM,
        )
        auth_provider = None
        if config.username is not None:
            auth_provider = PlainTextAuthProvider(username=config.username, password=config.password)
        return Cluster(
            contact_points=list(config.hosts),
            port=config.port,
            execution_profiles={EXEC_PROFILE_DEFAULT: profile},
            auth_provider=auth_provider,
            connect_timeout=config.connect_timeout,
        )

    def close_session(self, config: CassandraConfig) -> None:
        """Release a session; shut it down once no holders remain, and its cluster once no sessions use it."""
        key = (config.cluster_key, config.keyspace)
        with self._lock:
            holders = self._holders.get(key, 0) - 1
            if holders > 0:
                self._holders[key] = holders
                return
            self._holders.pop(key, None)
            session = self._sessions.pop(key, None)
            if session is not None:
                session.shutdown()
            if not any(k[0] == config.cluster_key for k in self._sessions):
                cluster = self._clusters.pop(config.cluster_key, None)
                if cluster is not None:
                    cluster.shutdown()

    def close_all(self) -> None:
        """Shut down all sessions and clusters (for shutdown/testing)."""
        with self._lock:
            for session in self._sessions.values():
                session.shutdown()
            self._sessions.clear()
            self._holders.clear()
            for cluster in self._clusters.values():
                cluster.shutdown()
            self._clusters.clear()


def get_session_manager() -> SessionManager:
    """Get the singleton SessionManager instance."""
    return SessionManager()
