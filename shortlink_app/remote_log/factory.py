"""
Factory for creating log sink instances.
Simple, clean factory with singleton caching.
"""

from enum import Enum
from .strategies import LogSink, HttpLogSink, ConsoleLogSink, NullLogSink
from shortlink_app.config import settings


class LogSinkBackend(Enum):
    """Available log sink backends"""
    HTTP = "http"
    CONSOLE = "console"
    NULL = "null"


class LogSinkFactory:
    """
    Simple factory for creating log sink instances.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: LogSink = None  # Single cached instance

    @classmethod
    def create(cls, backend: LogSinkBackend) -> LogSink:
        """
        Create or return cached log sink instance.

        Args:
            backend: Type of sink backend (from enum)

        Returns:
            Singleton log sink instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == LogSinkBackend.HTTP:
            cls._instance = HttpLogSink(
                api_url=settings.log_api_url,
                token=settings.log_auth_token,
                timeout=settings.log_timeout,
                dev_mode=settings.log_dev_mode
            )
            print(f"✅ HTTP log sink initialized ({settings.log_api_url})")
            if not settings.log_auth_token:
                print("⚠️  LOG_AUTH_TOKEN is not set - remote log events will not be sent")

        elif backend == LogSinkBackend.CONSOLE:
            cls._instance = ConsoleLogSink()
            print("✅ Console log sink initialized")

        elif backend == LogSinkBackend.NULL:
            cls._instance = NullLogSink()
            print("✅ Null log sink initialized")

        else:
            raise ValueError(f"Unknown log sink backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
