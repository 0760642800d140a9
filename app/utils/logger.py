import logging
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from app.core.config import settings


# ── columns ───────────────────────────────────────────────────────────────────
# (title, width) in the order they appear on each line
_COLUMNS: List[Tuple[str, int]] = [
    ("#", 6),
    ("Date", 12),
    ("Time", 10),
    ("Level", 8),
    ("User ID", 8),
    ("User Email", 30),
    ("Module/Function", 28),
    ("Event", 48),
]
_SEP = " | "
_TOTAL_WIDTH = sum(width for _, width in _COLUMNS) + len(_SEP) * (len(_COLUMNS) - 1)
_EVENT_WIDTH = _COLUMNS[-1][1]
_INDENT = " " * (_COLUMNS[0][1] + len(_SEP))


def _row(values) -> str:
    return _SEP.join(f"{str(value):<{width}}" for value, (_, width) in zip(values, _COLUMNS))


class StructuredFileHandler(logging.FileHandler):
    """Custom file handler that writes logs with structured, human-readable
    columns to the configured log file.

    Column layout:
        Serial | Date | Time | Level | User ID | User Email | Module/Function | Event

    Pass ``extra={"user_id": ..., "user_email": ...}`` on the logger call to
    fill the user columns.
    """

    def __init__(self, log_file_path: str):
        super().__init__(log_file_path, mode="a", encoding="utf-8")
        self.log_counter = self._next_serial_number()
        self._ensure_header_exists()

    def _next_serial_number(self) -> int:
        if not os.path.exists(self.baseFilename):
            return 1
        with open(self.baseFilename, "r", encoding="utf-8") as f:
            for line in reversed(f.readlines()):
                first = line.split(_SEP)[0].strip()
                if first.isdigit():
                    return int(first) + 1
        return 1

    def _ensure_header_exists(self):
        if os.path.exists(self.baseFilename) and os.path.getsize(self.baseFilename) > 0:
            return
        with open(self.baseFilename, "w", encoding="utf-8") as f:
            f.write("=" * _TOTAL_WIDTH + "\n")
            f.write(f"{'EDULEARN AUTH — OPERATION LOG':^{_TOTAL_WIDTH}}\n")
            f.write("=" * _TOTAL_WIDTH + "\n")
            f.write(_row(title for title, _ in _COLUMNS) + "\n")
            f.write("-" * _TOTAL_WIDTH + "\n")

    def emit(self, record: logging.LogRecord):
        try:
            dt = datetime.fromtimestamp(record.created)
            message = record.getMessage()
            preview = message if len(message) <= _EVENT_WIDTH else message[:_EVENT_WIDTH - 3] + "..."

            line = _row([
                self.log_counter,
                dt.strftime("%Y-%m-%d"),
                dt.strftime("%H:%M:%S"),
                record.levelname,
                getattr(record, "user_id", "-") or "-",
                getattr(record, "user_email", "-") or "-",
                f"{record.module}.{record.funcName}",
                preview,
            ])

            with open(self.baseFilename, "a", encoding="utf-8") as f:
                f.write(line + "\n")
                if record.levelno >= logging.WARNING and len(message) > _EVENT_WIDTH:
                    f.write(f"{_INDENT}Details: {message}\n")
                if record.exc_info:
                    tb = "".join(traceback.format_exception(*record.exc_info))
                    f.write(f"{_INDENT}Exception: {tb}\n")
                if record.levelno >= logging.ERROR:
                    f.write("-" * _TOTAL_WIDTH + "\n")

            self.log_counter += 1
        except Exception:
            self.handleError(record)


# ── setup ─────────────────────────────────────────────────────────────────────



def setup_file_logging(log_level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """Configure structured file + console logging.

    File handler records WARNING and above (to reduce noise).
    Console handler uses *log_level* (INFO by default when called from main).
    """
    log_file_path = Path(log_file or settings.LOG_FILE)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = StructuredFileHandler(str(log_file_path))
    file_handler.setLevel(logging.WARNING)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    file_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )

    logging.basicConfig(level=log_level, handlers=[file_handler, console_handler], force=True)

    logger = logging.getLogger(__name__)
    logger.warning("EduLearn Auth SESSION STARTED at %s", datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"))
    return logger


# ── helpers for callers ───────────────────────────────────────────────────────

def log_auth_event(
    event: str,
    outcome: str = "OK",
    detail: Optional[str] = None,
    user_id: Optional[int] = None,
    user_email: Optional[str] = None,
    level: int = logging.WARNING,
):
    """Log a credential lifecycle event with user context (id + email).

    Written at WARNING by default so the event reaches the structured file;
    pass ``level=logging.INFO`` for console-only chatter.
    """
    _log = logging.getLogger("auth_events")
    extra = {"user_id": user_id or "-", "user_email": user_email or "-"}

    if detail:
        _log.log(level, "AUTH %s %s — %s", event, outcome, detail, extra=extra)
    else:
        _log.log(level, "AUTH %s %s", event, outcome, extra=extra)
