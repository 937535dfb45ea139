"""Logger helpers shared by the core and the adapters."""

import logging

_ROOT_LOGGER_NAME = "tenantpulse"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``tenantpulse`` hierarchy.

    Module names already inside the package are used as-is; anything else
    is nested under ``tenantpulse.`` so one handler on the package logger
    sees every record.
    """
    if name == _ROOT_LOGGER_NAME or name.startswith(_ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def log_exception(message: str, logger: logging.Logger | None = None) -> None:
    """Log ``message`` at ERROR with the active exception's traceback.

    Must be called from inside an ``except`` block.
    """
    (logger or get_logger(_ROOT_LOGGER_NAME)).exception(message)
