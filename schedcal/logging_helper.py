"""
Terminal-first logging for ScheduleCal.

Every message goes to stdout with a bracketed prefix and is appended to a
per-process log file. The log directory defaults to <project>/logs and can be
moved with SCHEDCAL_LOG_DIR. Setting SCHEDCAL_QUIET silences stdout while
still writing the file.
"""

import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

_project_root = Path(__file__).parent.parent
_log_dir = Path(os.environ.get("SCHEDCAL_LOG_DIR", str(_project_root / "logs")))
_log_file_path = _log_dir / f"schedcal_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

_log_file: Optional[TextIO] = None
# Reminder timers log from their own threads
_write_lock = threading.Lock()


def _open_log_file() -> Optional[TextIO]:
    """Open the log file on first use; returns None if the directory is unwritable."""
    global _log_file
    if _log_file is None:
        try:
            _log_dir.mkdir(parents=True, exist_ok=True)
            _log_file = open(_log_file_path, 'a', encoding='utf-8')
        except OSError as err:
            print(f"[WARN] Unable to open log file {_log_file_path}: {err}")
            return None
    return _log_file


def _quiet() -> bool:
    return os.environ.get("SCHEDCAL_QUIET", "").lower() in ("1", "true", "yes")


def _log(message: str):
    """Write message to stdout (unless quiet) and to the log file."""
    with _write_lock:
        if not _quiet():
            print(message)
        log_file = _open_log_file()
        if log_file is not None:
            log_file.write(message + '\n')
            log_file.flush()


class Log:
    """Static logger with section headers, levelled lines and key=value records."""

    @staticmethod
    def section(title: str):
        """Print a section header: blank line + '===== TITLE ====='"""
        _log("")
        _log(f"===== {title} =====")

    @staticmethod
    def info(message: str):
        _log(f"[INFO] {message}")

    @staticmethod
    def warn(message: str):
        _log(f"[WARN] {message}")

    @staticmethod
    def error(message: str):
        _log(f"[ERROR] {message}")

    @staticmethod
    def kv(pairs: dict):
        """
        Print key-value pairs: '[KV] key=value | key2=value2'

        Args:
            pairs: Dictionary of key-value pairs to print
        """
        kv_string = " | ".join([f"{k}={v}" for k, v in pairs.items()])
        _log(f"[KV] {kv_string}")

    @staticmethod
    def get_log_path() -> str:
        """Get the path to the current log file."""
        return str(_log_file_path)
