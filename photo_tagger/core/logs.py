# photo_tagger/core/logs.py
"""
Logging setup for CLI runs.

Modules log through `logging.getLogger(__name__)`; only the entry point calls
`configure_logging()`. Console output goes to stderr, and an optional rotating
file log keeps the last few runs for troubleshooting.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER_NAME = "photo_tagger"

_SECRET_ENV_KEYS = ("OPENAI_API_KEY",)


class _RedactingFilter(logging.Filter):
    """Replace known secret values in log messages with [REDACTED]."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        redacted = redact(msg)
        if redacted != msg:
            record.msg = redacted
            record.args = None
        return True


def redact(text: str) -> str:
    for key in _SECRET_ENV_KEYS:
        val = os.getenv(key)
        if val:
            text = text.replace(val, "[REDACTED]")
    return text


def configure_logging(*, log_file: str | Path | None = None, debug: bool = False) -> logging.Logger:
    """
    Install handlers on the package logger (idempotent).

    - stderr: INFO (DEBUG with `debug=True`)
    - log_file: rotating, 1 MB x 3 backups, always DEBUG
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers when called twice (tests, REPL)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug else logging.INFO)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    console.addFilter(_RedactingFilter())
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                datefmt="(%Y-%m-%d %H:%M:%S)",
            )
        )
        handler.addFilter(_RedactingFilter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger
