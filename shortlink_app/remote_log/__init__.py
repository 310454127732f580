"""
Remote log module.
Implements Strategy Pattern for the sink structured log events are sent to.
"""

from .models import LogEntry
from .strategies import LogSink, HttpLogSink, ConsoleLogSink, NullLogSink
from .factory import LogSinkFactory, LogSinkBackend
from .logger import RemoteLogger

__all__ = [
    "LogEntry",
    "LogSink",
    "HttpLogSink",
    "ConsoleLogSink",
    "NullLogSink",
    "LogSinkFactory",
    "LogSinkBackend",
    "RemoteLogger",
]
