"""
Data models for the short link service.

Note: The link table itself is not a relational schema. The whole
shortcode -> record mapping is serialized as one JSON blob and kept under a
single key of the key-value StorageItem table (or of a redis key).
"""

from .link import ClickEvent, ShortLinkRecord, Table, TableAdapter
from .storage_item import StorageItem

__all__ = ["ClickEvent", "ShortLinkRecord", "Table", "TableAdapter", "StorageItem"]
