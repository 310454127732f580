import logging

from pydantic import ValidationError

from .models import LogEntry
from .strategies import LogSink

logger = logging.getLogger(__name__)


class RemoteLogger:
    """
    Front door for structured remote logging.

    log() validates the event locally and hands it to the sink. Invalid
    events are reported on the local logger and dropped; nothing raised by
    validation or by the sink ever reaches the caller.
    """

    def __init__(self, sink: LogSink):
        self.sink = sink

    async def log(self, stack: str, level: str, package: str, message: str) -> bool:
        """
        Send one event.

        Returns:
            True if the sink accepted the event, False if it was rejected
            locally or could not be delivered
        """
        try:
            entry = LogEntry(stack=stack, level=level, package=package, message=message)
        except ValidationError as e:
            for error in e.errors():
                logger.error("Rejected log event: %s", error["msg"])
            return False

        try:
            return await self.sink.send(entry)
        except Exception as e:
            # Sinks should not raise; logging must never break the caller
            logger.error("Log sink %s failed: %s", type(self.sink).__name__, e)
            return False
