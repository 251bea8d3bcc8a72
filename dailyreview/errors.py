"""
Crash reports for the daily-review CLI.

Unexpected exceptions are appended, with their traceback, to
daily-review-errors.log in the state directory, next to the operations
log. The terminal only gets a one-line message and the log location.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import get_state_dir, get_vault_path

ERROR_LOG_FILENAME = "daily-review-errors.log"
_SEPARATOR = "-" * 60


def error_log_path(vault: Optional[Path] = None, state_dir: Optional[Path] = None) -> Path:
    """Where crash reports go: the state directory the failing command would use."""
    return get_state_dir(get_vault_path(vault), state_dir) / ERROR_LOG_FILENAME


def format_report(exc: BaseException, context: str = "") -> str:
    """One report entry: separator, UTC timestamp and context, then the traceback."""
    header = datetime.now(timezone.utc).isoformat()
    if context:
        header = f"{header} {context}"
    body = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return f"{_SEPARATOR}\n{header}\n{body}"


def log_exception(
    exc: BaseException,
    context: str = "",
    vault: Optional[Path] = None,
    state_dir: Optional[Path] = None,
) -> Path:
    """
    Append a crash report and return the log path.

    The file is created owner-only since tracebacks can name notes.
    Failing to write the report is silent; the caller still reports the
    original error.
    """
    log_path = error_log_path(vault, state_dir)
    report = format_report(exc, context)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(report)
    except OSError:
        pass
    return log_path
