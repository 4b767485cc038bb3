"""Logging setup for the ``svcbus`` logger namespace.

Library code only calls ``logging.getLogger(__name__)``; applications (and
the perf script) call :func:`configure_logging` once to attach a handler.
"""
from __future__ import annotations

import json
import logging
import sys
from typing import TextIO

from svcbus.config import LoggingConfig, get_config

ROOT_LOGGER = "svcbus"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record (ts, level, logger, msg, exc)."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonLineFormatter()
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    cfg: LoggingConfig | None = None, stream: TextIO | None = None
) -> logging.Logger:
    cfg = cfg or get_config().logging
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(_LEVELS[cfg.level])
    # Replace our own handler on reconfigure; leave foreign handlers alone.
    for h in list(log.handlers):
        if getattr(h, "_svcbus_handler", False):
            log.removeHandler(h)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_build_formatter(cfg.format))
    handler._svcbus_handler = True  # type: ignore[attr-defined]
    log.addHandler(handler)
    return log


__all__ = ["configure_logging", "JsonLineFormatter", "ROOT_LOGGER"]
