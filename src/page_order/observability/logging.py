"""
Per-run JSON-lines logging for page-order.

Library modules log through ``logging.getLogger(__name__)`` under the
``page_order`` logger and never install handlers. The CLI calls
``setup_logging`` once per run. Records are handed to a background listener
through a queue and written to ``<log_dir>/<run_id>/page_order.jsonl``, one
JSON object per line:

    {"command": "solve", "fields": {"middle_page": 47}, "level": "DEBUG",
     "logger": "page_order.solver", "message": "reordered update",
     "part": "2", "run_id": "run-...", "timestamp": "...Z", "update_index": "3"}

``correlation_scope`` binds ``command``, ``part`` and ``update_index`` (or any
other key) for every record emitted inside it, including from nested calls.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import queue
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

_ROOT_LOGGER: Final[str] = "page_order"
_LOG_FILENAME: Final[str] = "page_order.jsonl"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    {*vars(logging.makeLogRecord({})), "message", "asctime", "correlation"}
)

_correlation: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar(
    "page_order_correlation", default={}
)
_active: LoggingHandle | None = None


class LoggingHandle:
    """Sinks and listener thread owned by one ``setup_logging`` call."""

    def __init__(
        self,
        *,
        log_path: Path,
        logger: logging.Logger,
        queue_handler: logging.Handler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
    ) -> None:
        self.log_path = log_path
        self.logger = logger
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self.closed = False

    def close(self) -> None:
        """Drain queued records into the sinks and release them."""
        if self.closed:
            return
        self.logger.removeHandler(self._queue_handler)
        self._listener.stop()
        for sink in self._sinks:
            sink.close()
        self.closed = True


class _CorrelatingQueueHandler(logging.handlers.QueueHandler):
    # Correlation must be read on the emitting thread, before the hand-off.
    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record.correlation = dict(_correlation.get())
        prepared: logging.LogRecord = super().prepare(record)
        return prepared


class _JsonLinesFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        event: dict[str, object] = {
            "timestamp": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }
        event.update(getattr(record, "correlation", {}))

        fields = {
            key: _to_json(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if fields:
            event["fields"] = fields
        return json.dumps(event, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def setup_logging(
    observability: Mapping[str, object],
    *,
    run_id: str,
    log_dir: Path | str | None = None,
    logger_name: str = _ROOT_LOGGER,
) -> LoggingHandle:
    """
    Start logging for one run from an ``[observability]`` config section.

    Any handle left active by an earlier call is closed first. ``log_dir``
    overrides ``observability["log_dir"]``.
    """
    global _active
    shutdown_logging()

    if not run_id.strip():
        raise ValueError("run_id must not be empty")
    level = logging.getLevelName(str(observability.get("log_level", "WARNING")).upper())
    if not isinstance(level, int):
        raise ValueError(f"unsupported logging level {observability.get('log_level')!r}")

    base_dir = Path(log_dir if log_dir is not None else str(observability.get("log_dir", "logs")))
    log_path = base_dir / run_id / _LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = _JsonLinesFormatter(run_id)
    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if observability.get("log_to_stderr"):
        sinks.append(logging.StreamHandler(sys.stderr))
    for sink in sinks:
        sink.setFormatter(formatter)

    records: queue.Queue[object] = queue.Queue()
    queue_handler = _CorrelatingQueueHandler(records)
    listener = logging.handlers.QueueListener(records, *sinks)

    logger = logging.getLogger(logger_name)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(queue_handler)
    listener.start()

    handle = LoggingHandle(
        log_path=log_path,
        logger=logger,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
    )
    _active = handle
    return handle


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Close ``handle``, or the active handle when none is given."""
    global _active
    target = handle if handle is not None else _active
    if target is None:
        return
    target.close()
    if target is _active:
        _active = None


@contextmanager
def correlation_scope(**fields: str | int | None) -> Iterator[None]:
    """Bind correlation fields for records logged in this context; ``None`` unbinds."""
    bound = dict(_correlation.get())
    for key, value in fields.items():
        if value is None:
            bound.pop(key, None)
        else:
            bound[key] = str(value)
    token = _correlation.set(bound)
    try:
        yield
    finally:
        _correlation.reset(token)


def _to_json(value: object) -> object:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _to_json(item) for key, item in value.items()}
    return str(value)


__all__ = [
    "LoggingHandle",
    "correlation_scope",
    "setup_logging",
    "shutdown_logging",
]
