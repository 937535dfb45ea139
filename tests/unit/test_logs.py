"""Tests for logger helpers and the log storage handler."""

import asyncio
import logging
import sys
from typing import Any

import pytest

from tenantpulse.adapters.logging import LogStorageHandler, install_log_capture
from tenantpulse.adapters.storage.in_memory import InMemoryLogStorage
from tenantpulse.core.logs import get_logger, log_exception

pytestmark = pytest.mark.tier(0)


def _run_async(coro: Any) -> Any:
    """Run a coroutine in a new event loop (for sync test helpers)."""
    return asyncio.run(coro)


async def _collect_entries(storage: InMemoryLogStorage) -> list[Any]:
    """Collect all entries from storage."""
    return [e async for e in storage.read()]


def _record(**overrides: Any) -> logging.LogRecord:
    values: dict[str, Any] = {
        "name": "tenantpulse.test",
        "level": logging.INFO,
        "pathname": "",
        "lineno": 0,
        "msg": "test message",
        "args": (),
        "exc_info": None,
    }
    values.update(overrides)
    return logging.LogRecord(**values)


class TestGetLogger:
    """Tests for get_logger()."""

    @pytest.mark.core
    def test_package_module_names_are_kept(self) -> None:
        assert get_logger("tenantpulse.core.buckets").name == "tenantpulse.core.buckets"
        assert get_logger("tenantpulse").name == "tenantpulse"

    @pytest.mark.core
    def test_foreign_names_are_nested(self) -> None:
        assert get_logger("myapp").name == "tenantpulse.myapp"
        assert get_logger("tenantpulsex").name == "tenantpulse.tenantpulsex"


class TestLogException:
    """Tests for log_exception()."""

    @pytest.mark.core
    def test_logs_error_with_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("tenantpulse.test")
        with caplog.at_level(logging.ERROR, logger="tenantpulse"):
            try:
                raise ValueError("bad value")
            except ValueError:
                log_exception("Report failed", logger)

        (record,) = caplog.records
        assert record.levelname == "ERROR"
        assert record.getMessage() == "Report failed"
        assert record.exc_info is not None
        assert record.exc_info[0] is ValueError


@pytest.mark.core
class TestLogStorageHandler:
    """Tests for LogStorageHandler adapter."""

    def test_handler_is_logging_handler(self) -> None:
        """Handler extends logging.Handler."""
        assert isinstance(LogStorageHandler(InMemoryLogStorage()), logging.Handler)

    def test_emit_writes_log_entry(self) -> None:
        """Handler.emit() writes LogEntry to storage."""
        storage = InMemoryLogStorage()
        LogStorageHandler(storage).emit(_record())

        entries = _run_async(_collect_entries(storage))
        assert len(entries) == 1
        assert entries[0].message == "test message"
        assert entries[0].level == "INFO"

    def test_extracts_logrecord_attributes(self) -> None:
        """Handler extracts module, funcName, lineno from LogRecord."""
        storage = InMemoryLogStorage()
        LogStorageHandler(storage).emit(
            _record(
                name="tenantpulse.core.buckets",
                level=logging.WARNING,
                lineno=42,
                func="persist",
            )
        )

        entries = _run_async(_collect_entries(storage))
        assert entries[0].attributes["module"] == "tenantpulse.core.buckets"
        assert entries[0].attributes["funcName"] == "persist"
        assert entries[0].attributes["lineno"] == 42

    def test_include_attrs_limits_fields(self) -> None:
        storage = InMemoryLogStorage()
        LogStorageHandler(storage, include_attrs=["lineno"]).emit(_record(lineno=7))

        entries = _run_async(_collect_entries(storage))
        assert entries[0].attributes == {"lineno": 7}

    def test_includes_extra_attributes(self) -> None:
        """Extra fields passed to the logging call become attributes."""
        storage = InMemoryLogStorage()
        record = _record()
        record.tenant_id = "org_1"
        record.samples = 10
        LogStorageHandler(storage).emit(record)

        entries = _run_async(_collect_entries(storage))
        assert entries[0].attributes["tenant_id"] == "org_1"
        assert entries[0].attributes["samples"] == 10

    def test_exception_info_is_captured(self) -> None:
        storage = InMemoryLogStorage()
        try:
            raise ConnectionError("store unavailable")
        except ConnectionError:
            record = _record(level=logging.WARNING, exc_info=sys.exc_info())
        LogStorageHandler(storage).emit(record)

        entries = _run_async(_collect_entries(storage))
        attrs = entries[0].attributes
        assert attrs["exc_type"] == "ConnectionError"
        assert attrs["exc_message"] == "store unavailable"
        assert "Traceback" in str(attrs["exc_traceback"])

    def test_storage_failure_does_not_raise(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A failing write goes to handleError instead of the caller."""

        class BrokenStorage:
            async def write(self, entry: Any) -> None:
                raise RuntimeError("disk full")

            def write_sync(self, entry: Any) -> None:
                raise RuntimeError("disk full")

        handler = LogStorageHandler(BrokenStorage())
        handled: list[logging.LogRecord] = []
        monkeypatch.setattr(handler, "handleError", handled.append)

        handler.emit(_record())

        assert len(handled) == 1


@pytest.mark.core
class TestInstallLogCapture:
    """Tests for install_log_capture()."""

    def test_package_warnings_are_captured(self) -> None:
        storage = InMemoryLogStorage()
        handler = install_log_capture(storage)
        try:
            get_logger("tenantpulse.core.series").warning("Store slow for %s", "org_1")
            get_logger("tenantpulse.core.series").debug("not captured")
        finally:
            logging.getLogger("tenantpulse").removeHandler(handler)

        entries = _run_async(_collect_entries(storage))
        assert [e.message for e in entries] == ["Store slow for org_1"]
        assert entries[0].level == "WARNING"
