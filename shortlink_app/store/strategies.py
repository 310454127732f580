"""
Table store strategies using Strategy Pattern.

Allows switching between different places to keep the link table:
- SQL (SQLite by default): one key-value row, the server-side local storage
- Redis: one key, shared by several processes
- In-memory: tests and throwaway demos
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError
from redis.exceptions import LockError, RedisError
from sqlalchemy.exc import SQLAlchemyError

from shortlink_app.database.connection import Base, SessionLocal
from shortlink_app.models.link import Table, TableAdapter
from shortlink_app.models.storage_item import StorageItem
from shortlink_app.services.exceptions import StoreError


class TableStore(ABC):
    """
    Abstract base class for link table stores.

    Subclasses only know how to read and write one serialized blob.
    Parsing, serialization and the read-modify-write transaction live here
    so every backend behaves the same:

    - load() never returns a partially parsed table
    - save() writes the whole table in one backend operation
    - transaction() holds the store's lock from load to save

    Pattern: Strategy Pattern
    """

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def _read_blob(self) -> Optional[str]:
        """Return the stored blob, or None if nothing was stored yet"""
        pass

    @abstractmethod
    def _write_blob(self, blob: str) -> None:
        """Replace the stored blob atomically"""
        pass

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Mutual-exclusion boundary around a read-modify-write"""
        with self._lock:
            yield

    def load(self) -> Table:
        """
        Read the full link table.

        Raises:
            StoreError: If the blob cannot be read or parsed
        """
        blob = self._read_blob()
        if not blob:
            return {}

        try:
            return TableAdapter.validate_json(blob)
        except ValidationError as e:
            raise StoreError(f"Stored link table is corrupt: {e}") from e

    def save(self, table: Table) -> None:
        """
        Serialize and write the full link table.

        Serialization happens before anything is written, so a failure
        leaves the previously stored table untouched.

        Raises:
            StoreError: If the table cannot be serialized or written
        """
        try:
            blob = TableAdapter.dump_json(table, by_alias=True).decode("utf-8")
        except PydanticSerializationError as e:
            raise StoreError(f"Could not serialize link table: {e}") from e

        self._write_blob(blob)

    @contextmanager
    def transaction(self) -> Iterator[Table]:
        """
        Read the table, let the caller mutate it, write it back.

        Nothing is written when the body raises.
        """
        with self._exclusive():
            table = self.load()
            yield table
            self.save(table)


class SQLTableStore(TableStore):
    """
    SQLAlchemy implementation (SQLite by default).

    The table is stored as one StorageItem row. Writes happen inside a
    database transaction, so a crash mid-write rolls back to the previous
    blob instead of leaving a truncated one.

    Note: The in-process lock serializes writers of ONE process only.
    Separate processes sharing the same database file are not coordinated.
    """

    def __init__(self, key: str = "urlMappings", session_factory=SessionLocal, create_tables: bool = True):
        """
        Initialize SQL table store.

        Args:
            key: Storage key the serialized table lives under
            session_factory: Factory for creating database sessions
            create_tables: Create the key-value table if it doesn't exist
        """
        super().__init__()
        self.key = key
        self.session_factory = session_factory

        if create_tables:
            db = self.session_factory()
            try:
                Base.metadata.create_all(bind=db.get_bind())
            finally:
                db.close()

    def _read_blob(self) -> Optional[str]:
        db = self.session_factory()
        try:
            item = db.get(StorageItem, self.key)
            return item.value if item else None
        except SQLAlchemyError as e:
            raise StoreError(f"Database read failed: {e}") from e
        finally:
            db.close()

    def _write_blob(self, blob: str) -> None:
        db = self.session_factory()
        try:
            item = db.get(StorageItem, self.key)
            if item is None:
                db.add(StorageItem(key=self.key, value=blob))
            else:
                item.value = blob
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"Database write failed: {e}") from e
        finally:
            db.close()


class RedisTableStore(TableStore):
    """
    Redis implementation.

    SET replaces the whole value atomically. Transactions additionally take
    a redis lock, so several processes sharing the same redis serialize
    their read-modify-write cycles.
    """

    def __init__(self, redis_client, key: str = "urlMappings", lock_timeout: int = 10):
        """
        Initialize Redis table store.

        Args:
            redis_client: Redis client instance (redis.Redis)
            key: Redis key the serialized table lives under
            lock_timeout: Seconds after which a held lock expires
        """
        super().__init__()
        self.redis = redis_client
        self.key = key
        self.lock_timeout = lock_timeout

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            try:
                lock = self.redis.lock(
                    f"{self.key}:lock",
                    timeout=self.lock_timeout,
                    blocking_timeout=self.lock_timeout
                )
                acquired = lock.acquire()
            except RedisError as e:
                raise StoreError(f"Redis lock failed: {e}") from e
            if not acquired:
                raise StoreError(f"Timed out waiting for lock on '{self.key}'")

            try:
                yield
            finally:
                try:
                    lock.release()
                except LockError:
                    # Lock expired while held; the write already happened or failed
                    print(f"⚠️  Redis lock on '{self.key}' expired before release")

    def _read_blob(self) -> Optional[str]:
        try:
            value = self.redis.get(self.key)
        except RedisError as e:
            raise StoreError(f"Redis get failed: {e}") from e
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def _write_blob(self, blob: str) -> None:
        try:
            self.redis.set(self.key, blob)
        except RedisError as e:
            raise StoreError(f"Redis set failed: {e}") from e


class InMemoryTableStore(TableStore):
    """
    In-memory implementation.

    Keeps the serialized blob (not live objects), so load() always hands
    out a fresh copy exactly like the persistent backends do.

    Used in development/testing environments.
    """

    def __init__(self):
        super().__init__()
        self._blob: Optional[str] = None

    def _read_blob(self) -> Optional[str]:
        return self._blob

    def _write_blob(self, blob: str) -> None:
        self._blob = blob
