import logging
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


# ── column widths ─────────────────────────────────────────────────────────────
_W_SERIAL  = 6
_W_DATE    = 12
_W_TIME    = 10
_W_LEVEL   = 8
_W_UID     = 8
_W_EMAIL   = 30
_W_MODULE  = 30
_W_EVENT   = 44
_SEP       = " | "
_TOTAL_WIDTH = (
    _W_SERIAL + _W_DATE + _W_TIME + _W_LEVEL
    + _W_UID + _W_EMAIL + _W_MODULE + _W_EVENT
    + len(_SEP) * 7
)
_INDENT = " " * (_W_SERIAL + len(_SEP))

ACCOUNT_LOGGER_NAME = "examprep.account"


class StructuredFileHandler(logging.FileHandler):
    """Writes log records as fixed-width columns to logs.txt.

    Column layout:
        Serial | Date | Time | Level | User ID | User Email | Module/Function | Event

    User columns come from ``extra={"user_id": ..., "user_email": ...}`` and
    fall back to "-". Warnings and errors get the untruncated message (and
    traceback, if any) on the following lines.
    """

    def __init__(self, log_file_path: str):
        super().__init__(log_file_path, mode="a", encoding="utf-8")
        self.log_counter = self._next_serial()
        self._write_header_if_empty()

    # ── helpers ───────────────────────────────────────────────────────────────

    def _is_empty(self) -> bool:
        return not os.path.exists(self.baseFilename) or os.path.getsize(self.baseFilename) == 0

    def _next_serial(self) -> int:
        if self._is_empty():
            return 1
        try:
            with open(self.baseFilename, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except OSError:
            return 1
        for line in reversed(lines):
            first = line.split(_SEP, 1)[0].strip()
            if first.isdigit():
                return int(first) + 1
        return 1

    def _write_header_if_empty(self):
        if not self._is_empty():
            return
        columns = (
            f"{'#':<{_W_SERIAL}}"
            f"{_SEP}{'Date':<{_W_DATE}}"
            f"{_SEP}{'Time':<{_W_TIME}}"
            f"{_SEP}{'Level':<{_W_LEVEL}}"
            f"{_SEP}{'User ID':<{_W_UID}}"
            f"{_SEP}{'User Email':<{_W_EMAIL}}"
            f"{_SEP}{'Module/Function':<{_W_MODULE}}"
            f"{_SEP}{'Event':<{_W_EVENT}}"
        )
        with open(self.baseFilename, "w", encoding="utf-8") as f:
            f.write("=" * _TOTAL_WIDTH + "\n")
            f.write(f"{'EXAM PREP API - ACCOUNT & SECURITY LOG':^{_TOTAL_WIDTH}}\n")
            f.write("=" * _TOTAL_WIDTH + "\n")
            f.write(columns + "\n")
            f.write("-" * _TOTAL_WIDTH + "\n")

    @staticmethod
    def _truncate(value: str, width: int) -> str:
        return value if len(value) <= width else value[:width - 3] + "..."

    def _format_line(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        uid = str(getattr(record, "user_id", "-") or "-")
        email = str(getattr(record, "user_email", "-") or "-")
        module_func = f"{record.module}.{record.funcName}" if record.funcName else record.module

        return (
            f"{self.log_counter:<{_W_SERIAL}}"
            f"{_SEP}{dt.strftime('%Y-%m-%d'):<{_W_DATE}}"
            f"{_SEP}{dt.strftime('%H:%M:%S'):<{_W_TIME}}"
            f"{_SEP}{record.levelname:<{_W_LEVEL}}"
            f"{_SEP}{self._truncate(uid, _W_UID):<{_W_UID}}"
            f"{_SEP}{self._truncate(email, _W_EMAIL):<{_W_EMAIL}}"
            f"{_SEP}{self._truncate(module_func, _W_MODULE):<{_W_MODULE}}"
            f"{_SEP}{self._truncate(record.getMessage(), _W_EVENT):<{_W_EVENT}}"
        )

    # ── emit ──────────────────────────────────────────────────────────────────

    def emit(self, record: logging.LogRecord):
        try:
            line = self._format_line(record)
            with open(self.baseFilename, "a", encoding="utf-8") as f:
                f.write(line + "\n")

                if record.levelno >= logging.WARNING:
                    full_msg = record.getMessage()
                    if len(full_msg) > _W_EVENT:
                        f.write(f"{_INDENT}Details: {full_msg}\n")
                    if record.exc_info:
                        tb = "".join(traceback.format_exception(*record.exc_info))
                        f.write(f"{_INDENT}Exception: {tb}\n")

                if record.levelno >= logging.ERROR:
                    f.write("-" * _TOTAL_WIDTH + "\n")

            self.log_counter += 1
        except Exception:
            self.handleError(record)


# ── setup ─────────────────────────────────────────────────────────────────────

def setup_file_logging(
    log_level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """Configure structured file + console logging.

    The file handler records WARNING and above; account events are logged at
    WARNING so every registration, login and lifecycle change lands in the file.
    The console handler uses *log_level*.
    """
    directory = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
    directory.mkdir(parents=True, exist_ok=True)

    file_handler = StructuredFileHandler(str(directory / "logs.txt"))
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(logging.Formatter("%(message)s"))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    logging.basicConfig(level=log_level, handlers=[file_handler, console_handler], force=True)

    logger = logging.getLogger(__name__)
    logger.warning(
        "Exam Prep API session started at %s",
        datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
    )
    return logger


# ── helpers for callers ───────────────────────────────────────────────────────

def log_account_event(
    event: str,
    user_id: Optional[int] = None,
    user_email: Optional[str] = None,
    level: int = logging.WARNING,
    **details,
):
    """Record a security-relevant account event with user context.

    ``details`` are appended as ``key=value`` pairs, e.g.
    ``log_account_event("LOGIN", user.id, user.email, ip="1.2.3.4")``.
    """
    _log = logging.getLogger(ACCOUNT_LOGGER_NAME)
    extra = {"user_id": user_id or "-", "user_email": user_email or "-"}

    if details:
        suffix = " ".join(f"{k}={v}" for k, v in details.items())
        _log.log(level, "%s (%s)", event, suffix, extra=extra)
    else:
        _log.log(level, "%s", event, extra=extra)
