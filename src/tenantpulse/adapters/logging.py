"""Python logging handler adapter for tenantpulse.

Bridges the standard library ``logging`` records emitted by the core (probe
failures, swallowed persistence errors, read fallbacks) into a
``LogStoragePort`` so an embedding dashboard can surface them.
"""

import logging
import traceback

from tenantpulse.core.logs import get_logger
from tenantpulse.core.models import LogEntry
from tenantpulse.core.ports import LogStoragePort

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

_DEFAULT_INCLUDE_ATTRS = ["module", "funcName", "lineno"]


class LogStorageHandler(logging.Handler):
    """Logging handler that writes log records to a LogStoragePort.

    Example:
        ```python
        from tenantpulse.adapters.logging import install_log_capture
        from tenantpulse.adapters.storage import InMemoryLogStorage

        storage = InMemoryLogStorage()
        install_log_capture(storage)
        ```
    """

    def __init__(
        self,
        storage: LogStoragePort,
        include_attrs: list[str] | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize the handler with a log storage backend.

        Args:
            storage: Storage adapter implementing LogStoragePort.
            include_attrs: LogRecord attributes to include. Defaults to
                ["module", "funcName", "lineno"].
            level: Minimum level handled.
        """
        super().__init__(level)
        self._storage = storage
        self._include_attrs = include_attrs or _DEFAULT_INCLUDE_ATTRS

    def _to_entry(self, record: logging.LogRecord) -> LogEntry:
        attr_mapping: dict[str, str | int | float | bool] = {
            "module": record.name,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
            "pathname": record.pathname,
        }
        attributes: dict[str, str | int | float | bool] = {
            key: attr_mapping[key] for key in self._include_attrs if key in attr_mapping
        }

        # Extra fields passed via logging(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                attributes[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                attributes["exc_type"] = exc_type.__name__
            if exc_value is not None:
                attributes["exc_message"] = str(exc_value)
            if exc_tb is not None:
                attributes["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        return LogEntry(
            timestamp=record.created,
            level=record.levelname,
            message=record.getMessage(),
            attributes=attributes,
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the storage backend.

        Uses the synchronous write so it is safe inside a running event loop.
        """
        try:
            self._storage.write_sync(self._to_entry(record))
        except Exception:
            self.handleError(record)


def install_log_capture(
    storage: LogStoragePort, level: int = logging.INFO
) -> LogStorageHandler:
    """Attach a LogStorageHandler to the ``tenantpulse`` logger.

    Returns:
        The installed handler, so callers can remove it again.
    """
    handler = LogStorageHandler(storage, level=level)
    logger = get_logger("tenantpulse")
    logger.addHandler(handler)
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    return handler
