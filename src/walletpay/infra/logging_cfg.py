"""
Logging setup for walletpay.

Components log one JSON object per event (``{"event": ..., **fields}``) on
the ``walletpay`` logger. This module wires that logger to:

- a Rich console handler for people watching a terminal
- an optional JSON-lines file, written from a background listener so the
  event loop never blocks on disk
"""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import queue
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rich.logging import RichHandler


def _event_fields(message: str) -> Optional[Dict[str, Any]]:
    if not message.startswith("{"):
        return None
    try:
        fields = json.loads(message)
    except ValueError:
        return None
    return fields if isinstance(fields, dict) and "event" in fields else None


class JsonFormatter(logging.Formatter):
    """
    One JSON line per record.

    Structured walletpay events are flattened into the line; any other
    message goes under "msg".
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        line: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
        }
        fields = _event_fields(message)
        if fields is None:
            line["msg"] = message
        else:
            line.update(fields)
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, separators=(",", ":"), default=str)


class AsyncQueueHandler(logging.handlers.QueueHandler):
    """
    Hands records to a bounded queue drained by a QueueListener thread.

    A full queue drops the record and counts it instead of blocking the
    caller.
    """

    def __init__(self, target_handler: logging.Handler, max_queue_size: int = 10000) -> None:
        super().__init__(queue.Queue(maxsize=max_queue_size))
        self._target = target_handler
        self._dropped = 0
        self._closed = False
        self._listener = logging.handlers.QueueListener(
            self.queue, target_handler, respect_handler_level=True
        )
        self._listener.start()
        atexit.register(self.close)

    @property
    def dropped(self) -> int:
        return self._dropped

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self._dropped += 1

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # stop() drains whatever is still queued before returning
        self._listener.stop()
        if self._dropped:
            sys.stderr.write(f"[walletpay] {self._dropped} log records dropped (queue full)\n")
        self._target.close()
        super().close()


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def build_logger(
    name: str = "walletpay",
    level: int | str = logging.INFO,
    file_path: Optional[str] = None,
    async_file: bool = True,
) -> logging.Logger:
    """
    Configure and return the walletpay logger.

    Calling it again only updates levels; handlers are attached once.

    Args:
        name: Logger name
        level: Minimum level, as a number or a level name
        file_path: JSON-lines log file, or None for console only
        async_file: Write the file from a background listener
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.addHandler(_console_handler(level))

    if file_path:
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JsonFormatter())
        if async_file:
            queued = AsyncQueueHandler(file_handler)
            queued.setLevel(level)
            logger.addHandler(queued)
        else:
            logger.addHandler(file_handler)

    # Console and file are the only sinks; keep records off the root logger
    logger.propagate = False
    return logger


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    """
    Emit a structured walletpay event.

    Usage:
        log_event(log, "wallet_configured", method_id="walletpay")
    """
    logger.log(level, json.dumps({"event": event, **fields}, default=str))
