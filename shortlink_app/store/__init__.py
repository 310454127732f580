"""
Table store module for the link table.

This module implements the Strategy Pattern for pluggable persistence.
Every backend keeps the full shortcode -> record mapping as ONE serialized
blob and rewrites it as a unit on each mutation.
"""

from .strategies import TableStore, SQLTableStore, RedisTableStore, InMemoryTableStore
from .factory import TableStoreFactory, TableStoreBackend

__all__ = [
    "TableStore",
    "SQLTableStore",
    "RedisTableStore",
    "InMemoryTableStore",
    "TableStoreFactory",
    "TableStoreBackend",
]
