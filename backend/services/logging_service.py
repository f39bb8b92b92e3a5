"""
Logging setup shared by the API server and the engine modules.

Engine modules only ever call logging.getLogger(__name__); handlers are
attached to the root logger here, once, by init_logging(). Records land in
a rotating parcelwise.log and in an in-memory ring served by /api/logs.
"""
import logging
import os
from collections import deque
from logging.handlers import RotatingFileHandler
from typing import Any, Deque, Dict, List, Optional

LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.path.join(LOG_DIR, "parcelwise.log")
RING_BUFFER_SIZE = int(os.getenv("RING_BUFFER_SIZE", "2000"))
RING_BUFFER_MIN_LEVEL = os.getenv("RING_BUFFER_MIN_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level(name: str, default: int = logging.INFO) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else default


def record_to_entry(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "ts": record.created,
        "level": record.levelname,
        "name": record.name,
        "message": record.getMessage(),
        "lineno": record.lineno,
    }


class RingBufferHandler(logging.Handler):
    """Keeps the newest `maxlen` records as plain dicts for the logs endpoint."""

    def __init__(self, maxlen: int = RING_BUFFER_SIZE):
        super().__init__()
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append(record_to_entry(record))
        except Exception:
            self.handleError(record)

    def get_recent(self, limit: int = 500, min_level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Newest `limit` entries, oldest first; `min_level` filters by severity."""
        entries = list(self.buffer)
        if min_level:
            threshold = _level(min_level, logging.NOTSET)
            entries = [e for e in entries if _level(e["level"], logging.NOTSET) >= threshold]
        return entries[-limit:] if limit > 0 else entries

    def clear(self) -> None:
        self.buffer.clear()


_ring_handler: Optional[RingBufferHandler] = None
_file_handler: Optional[RotatingFileHandler] = None


def get_ring_handler() -> RingBufferHandler:
    global _ring_handler
    if _ring_handler is None:
        _ring_handler = RingBufferHandler()
        _ring_handler.setLevel(_level(RING_BUFFER_MIN_LEVEL))
    return _ring_handler


def init_logging() -> None:
    """Attach the file and ring handlers to the root logger; later calls are no-ops."""
    global _file_handler
    if _file_handler is not None:
        return
    os.makedirs(LOG_DIR, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    if root.level in (logging.NOTSET, logging.WARNING):
        root.setLevel(_level(LOG_LEVEL))

    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    ring = get_ring_handler()
    ring.setFormatter(formatter)
    root.addHandler(ring)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _file_handler = file_handler


def shutdown_logging() -> None:
    """Detach and close the handlers added by init_logging()."""
    global _file_handler
    root = logging.getLogger()
    if _file_handler is not None:
        root.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
    if _ring_handler is not None:
        root.removeHandler(_ring_handler)
