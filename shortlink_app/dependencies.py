"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the table store and the remote
logger that are injected into the link service and routes.

Tests replace get_table_store / get_remote_logger (or get_link_service
directly) through app.dependency_overrides. get_redirect_service builds on
get_link_service, so overriding the latter covers the redirect page too.
"""

import copy
from functools import lru_cache

from fastapi import BackgroundTasks, Depends

from shortlink_app.config import settings
from shortlink_app.remote_log.factory import LogSinkFactory, LogSinkBackend
from shortlink_app.remote_log.logger import RemoteLogger
from shortlink_app.services.link_service import LinkService
from shortlink_app.store.factory import TableStoreFactory, TableStoreBackend
from shortlink_app.store.strategies import TableStore


@lru_cache()
def get_table_store() -> TableStore:
    """
    Get table store instance (singleton).

    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = TableStoreBackend(settings.table_store_backend)
    return TableStoreFactory.create(backend)


@lru_cache()
def get_remote_logger() -> RemoteLogger:
    """Get remote logger wrapping the configured log sink (singleton)"""
    backend = LogSinkBackend(settings.log_sink_backend)
    return RemoteLogger(LogSinkFactory.create(backend))


def get_link_service(
    store: TableStore = Depends(get_table_store),
    remote_logger: RemoteLogger = Depends(get_remote_logger)
) -> LinkService:
    """Get LinkService with all dependencies injected"""
    return LinkService(store=store, remote_logger=remote_logger)


def get_redirect_service(
    background_tasks: BackgroundTasks,
    link_service: LinkService = Depends(get_link_service)
) -> LinkService:
    """LinkService whose log events are sent after the redirect page is returned"""
    service = copy.copy(link_service)
    service.defer = background_tasks.add_task
    return service
