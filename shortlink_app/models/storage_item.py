from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from shortlink_app.database.connection import Base


class StorageItem(Base):
    """
    Key-value row, the server-side stand-in for browser local storage.

    The link table is stored as ONE row (key = settings.table_storage_key)
    whose value is the full serialized mapping. Every mutation rewrites
    the whole value inside a single database transaction.
    """
    __tablename__ = "local_storage"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
