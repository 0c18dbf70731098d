"""
Leveled key/value logging on top of the standard ``logging`` module.

    logger = get_logger(__name__)
    logger.info("run command", cmd="python3 -m pip --version")

renders as ``run command cmd='python3 -m pip --version'`` and attaches the
fields to the record as ``record.fields`` for handlers that want them raw.
"""
import logging
import sys
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def format_fields(fields: Dict[str, Any]) -> str:
    if not fields:
        return ""
    return " " + " ".join(f"{key}={value!r}" for key, value in fields.items())


class StructuredLogger:
    """Thin wrapper accepting ``(message, **fields)`` at every level."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, fields: Dict[str, Any]):
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            "%s%s",
            message,
            format_fields(fields),
            extra={"fields": dict(fields)},
            stacklevel=3,
        )

    def debug(self, message: str, **fields: Any):
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any):
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any):
        self._log(logging.WARNING, message, fields)

    warn = warning

    def error(self, message: str, **fields: Any):
        self._log(logging.ERROR, message, fields)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name))


def configure_logging(verbose: bool = False, stream=None):
    """Install a single stderr handler on the package logger (idempotent)."""
    root = logging.getLogger("venvkeeper")
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(root.handlers):
        if getattr(handler, "_venvkeeper", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._venvkeeper = True
    root.addHandler(handler)
    return root
