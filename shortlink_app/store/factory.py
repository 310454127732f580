"""
Factory for creating table store instances.
Simple, clean factory with singleton caching.
"""

from enum import Enum
from .strategies import TableStore, SQLTableStore, RedisTableStore, InMemoryTableStore
from shortlink_app.config import settings


class TableStoreBackend(Enum):
    """Available table store backends"""
    SQL = "sql"
    REDIS = "redis"
    MEMORY = "memory"


class TableStoreFactory:
    """
    Simple factory for creating table store instances.

    Uses Singleton Pattern - creates instance once, reuses it.
    Gets configuration from settings (not passed as parameters).
    """

    _instance: TableStore = None  # Single cached instance

    @classmethod
    def create(cls, backend: TableStoreBackend) -> TableStore:
        """
        Create or return cached table store instance.

        Args:
            backend: Type of store backend (from enum)

        Returns:
            Singleton table store instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == TableStoreBackend.SQL:
            cls._instance = SQLTableStore(key=settings.table_storage_key)
            print("✅ SQL table store initialized")

        elif backend == TableStoreBackend.REDIS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )

                # Test connection immediately
                redis_client.ping()

                cls._instance = RedisTableStore(
                    redis_client,
                    key=settings.table_storage_key,
                    lock_timeout=settings.store_lock_timeout
                )
                print("✅ Redis table store initialized")

            except redis.RedisError as e:
                print(f"⚠️  Redis connection failed: {e}")
                print("⚠️  Falling back to in-memory table store")
                cls._instance = InMemoryTableStore()
                print("✅ In-memory table store initialized (fallback)")

        elif backend == TableStoreBackend.MEMORY:
            cls._instance = InMemoryTableStore()
            print("✅ In-memory table store initialized")

        else:
            raise ValueError(f"Unknown table store backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
