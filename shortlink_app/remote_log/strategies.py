"""
Log sink strategies using Strategy Pattern.
Allows switching between sending events to the remote log API, printing
them locally, or dropping them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .models import LogEntry

logger = logging.getLogger(__name__)


class LogSink(ABC):
    """
    Abstract base class for log sinks.

    send() reports failure by returning False. Implementations must not
    let transport errors escape: logging never affects the operation that
    produced the event.
    """

    @abstractmethod
    async def send(self, entry: LogEntry) -> bool:
        """
        Deliver one log event.

        Args:
            entry: Validated log event

        Returns:
            True if the sink accepted it, False otherwise
        """
        pass


class HttpLogSink(LogSink):
    """
    Remote log API implementation.

    POSTs {stack, level, package, message} as JSON with a bearer token.
    Non-2xx responses and network errors are reported on the local logger
    and swallowed.
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str],
        timeout: float = 5.0,
        dev_mode: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP log sink.

        Args:
            api_url: Log API endpoint
            token: Bearer token; events are not sent without one
            timeout: Request timeout in seconds
            dev_mode: Log payloads and returned log IDs at debug level
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.api_url = api_url
        self.token = token
        self.timeout = timeout
        self.dev_mode = dev_mode
        self.transport = transport

    async def send(self, entry: LogEntry) -> bool:
        if not self.token:
            logger.error("Authentication token for the log API is not configured")
            return False

        payload = entry.model_dump()
        if self.dev_mode:
            logger.debug("Sending log: %s", payload)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.token}"},
                )
        except httpx.HTTPError as e:
            logger.error("Log error: %s", e)
            return False

        if not response.is_success:
            logger.error("Log submission failed: %s - %s", response.status_code, response.text)
            logger.error("Request payload was: %s", payload)
            return False

        if self.dev_mode:
            try:
                log_id = response.json().get("logID", "no-id")
            except ValueError:
                log_id = "no-id"
            logger.debug("Log sent successfully: %s (logID=%s)", payload, log_id)

        return True


class ConsoleLogSink(LogSink):
    """
    Local implementation - writes events to the Python logger only.

    Used in development when no log API is reachable.
    """

    LEVELS = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "error": logging.ERROR,
        "fatal": logging.CRITICAL,
    }

    async def send(self, entry: LogEntry) -> bool:
        logger.log(
            self.LEVELS[entry.level],
            "[%s/%s] %s", entry.stack, entry.package, entry.message
        )
        return True


class NullLogSink(LogSink):
    """
    Null Object Pattern - sink that accepts events and drops them.

    Used for disabling remote logging. Keeps no state.
    """

    async def send(self, entry: LogEntry) -> bool:
        return True
