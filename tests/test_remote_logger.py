"""
Tests for the remote log client.
"""
import asyncio
import json
import logging

import httpx
import pytest

from shortlink_app.remote_log.factory import LogSinkBackend, LogSinkFactory
from shortlink_app.remote_log.logger import RemoteLogger
from shortlink_app.remote_log.models import LogEntry
from shortlink_app.remote_log.strategies import (
    ConsoleLogSink,
    HttpLogSink,
    LogSink,
    NullLogSink,
)

LOG_URL = "http://logs.test/evaluation-service/logs"


def http_sink(handler, token="secret-token"):
    return HttpLogSink(api_url=LOG_URL, token=token, transport=httpx.MockTransport(handler))


class TestLogEntry:

    def test_values_are_lowercased(self):
        entry = LogEntry(stack="Backend", level="INFO", package="Service", message="hi")

        assert (entry.stack, entry.level, entry.package) == ("backend", "info", "service")

    @pytest.mark.parametrize("stack,package", [
        ("frontend", "component"),
        ("frontend", "utils"),
        ("backend", "cron_job"),
        ("backend", "middleware"),
    ])
    def test_allowed_packages(self, stack, package):
        assert LogEntry(stack=stack, level="debug", package=package, message="x").package == package

    @pytest.mark.parametrize("stack,level,package", [
        ("mobile", "info", "utils"),
        ("backend", "warning", "service"),
        ("backend", "info", "component"),
        ("frontend", "info", "db"),
        ("frontend", "info", "redirect"),
    ])
    def test_rejected_values(self, stack, level, package):
        with pytest.raises(ValueError):
            LogEntry(stack=stack, level=level, package=package, message="x")


class TestRemoteLogger:

    def test_valid_event_reaches_sink(self, log_sink):
        sent = asyncio.run(RemoteLogger(log_sink).log("backend", "warn", "handler", "careful"))

        assert sent is True
        assert log_sink.entries[0].model_dump() == {
            "stack": "backend", "level": "warn", "package": "handler", "message": "careful"
        }

    def test_invalid_event_is_not_sent(self, log_sink, caplog):
        with caplog.at_level(logging.ERROR):
            sent = asyncio.run(RemoteLogger(log_sink).log("frontend", "warning", "redirect", "nope"))

        assert sent is False
        assert log_sink.entries == []
        assert "Rejected log event" in caplog.text

    def test_failing_sink_never_raises(self):
        class Exploding(LogSink):
            async def send(self, entry):
                raise RuntimeError("sink down")

        sent = asyncio.run(RemoteLogger(Exploding()).log("backend", "info", "service", "x"))

        assert sent is False


class TestHttpLogSink:

    def test_posts_payload_with_bearer_token(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"logID": "abc"})

        entry = LogEntry(stack="backend", level="info", package="service", message="hello")
        sent = asyncio.run(http_sink(handler).send(entry))

        assert sent is True
        [request] = requests
        assert str(request.url) == LOG_URL
        assert request.headers["authorization"] == "Bearer secret-token"
        assert json.loads(request.content) == {
            "stack": "backend", "level": "info", "package": "service", "message": "hello"
        }

    def test_non_2xx_is_swallowed(self, caplog):
        entry = LogEntry(stack="backend", level="info", package="service", message="hello")

        with caplog.at_level(logging.ERROR):
            sent = asyncio.run(http_sink(lambda request: httpx.Response(503, text="busy")).send(entry))

        assert sent is False
        assert "503" in caplog.text

    def test_network_error_is_swallowed(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        entry = LogEntry(stack="backend", level="info", package="service", message="hello")

        assert asyncio.run(http_sink(handler).send(entry)) is False

    def test_missing_token_sends_nothing(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200)

        entry = LogEntry(stack="backend", level="info", package="service", message="hello")

        assert asyncio.run(http_sink(handler, token=None).send(entry)) is False
        assert requests == []


class TestConsoleLogSink:

    def test_maps_levels(self, caplog):
        entry = LogEntry(stack="backend", level="fatal", package="db", message="gone")

        with caplog.at_level(logging.DEBUG):
            asyncio.run(ConsoleLogSink().send(entry))

        assert caplog.records[-1].levelno == logging.CRITICAL
        assert "[backend/db] gone" in caplog.text


class TestNullLogSink:

    def test_accepts_and_keeps_nothing(self):
        sink = NullLogSink()
        entry = LogEntry(stack="backend", level="info", package="service", message="hello")

        for _ in range(3):
            assert asyncio.run(sink.send(entry)) is True

        assert vars(sink) == {}


class TestLogSinkFactory:

    def setup_method(self):
        LogSinkFactory.clear_instance()

    def teardown_method(self):
        LogSinkFactory.clear_instance()

    def test_null_backend(self):
        sink = LogSinkFactory.create(LogSinkBackend.NULL)

        assert isinstance(sink, NullLogSink)
        assert LogSinkFactory.create(LogSinkBackend.NULL) is sink
