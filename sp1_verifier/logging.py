"""
sp1_verifier.logging
--------------------

Logging setup for the verifier:
- JSON or concise text formats
- Safe JSON serialization (bytes → hex, Paths → str)
- stdlib only; modules log through `logging.getLogger(__name__)`

Usage
-----
    from sp1_verifier import logging as slog

    slog.configure(level="INFO")      # once at process start
    log = slog.get_logger(__name__)
    log.info("verified", extra={"version": "v5.0.0-dev"})

Only the `sp1_verifier` logger tree is configured; the host application's
root logger is left alone.
"""

from __future__ import annotations

import datetime as _dt
import json as _json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER = "sp1_verifier"

_RESERVED = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    )
)


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return "0x" + bytes(v).hex()
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, (list, tuple)):
        return [_coerce_value(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _coerce_value(x) for k, x in v.items()}
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RESERVED
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return _json.dumps(payload, separators=(",", ":"), sort_keys=True)


class TextFormatter(logging.Formatter):
    """
    Human-friendly one-liner:
      2026-01-05T12:34:56.789+00:00 | INFO  | sp1_verifier.dispatcher | code=INVALID_PROOF | proof rejected
    """

    def format(self, record: logging.LogRecord) -> str:
        line = f"{_utcnow_iso()} | {record.levelname:<5} | {record.name}"
        extras = _extras(record)
        if extras:
            line += " | " + " ".join(f"{k}={v}" for k, v in extras.items())
        line += f" | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def configure(
    *,
    level: str | int = "INFO",
    json: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the `sp1_verifier` logger with a single console handler.

    Calling it again replaces the previous handler, so it is safe to call
    from both a CLI entrypoint and tests.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(_coerce_level(level))
    for h in list(logger.handlers):
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(_coerce_level(level))
    handler.setFormatter(JSONFormatter() if json else TextFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or ROOT_LOGGER)


__all__ = ["ROOT_LOGGER", "JSONFormatter", "TextFormatter", "configure", "get_logger"]
