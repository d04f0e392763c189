"""Logging initialization utilities using loguru."""

from __future__ import annotations

import os
from pathlib import Path
import subprocess

from loguru import logger

APP_DIR_NAME = "PhotoCurator"


def get_app_data_directory() -> str:
    """Per-user data directory (`%LOCALAPPDATA%` on Windows, XDG data dir elsewhere)."""
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("XDG_DATA_HOME")
    if not base:
        base = str(Path.home() / ".local" / "share")
    return str(Path(base) / APP_DIR_NAME)


def get_log_directory() -> str:
    """Get the main log directory path."""
    return str(Path(get_app_data_directory()) / "logs")


def get_audit_log_directory() -> str:
    """Get the batch mutation audit log directory path."""
    return str(Path(get_app_data_directory()) / "audit_logs")


def get_cache_path() -> str:
    """Get the local cache store file path."""
    return str(Path(get_app_data_directory()) / "cache.json")


def init_logging(log_dir: str | None = None, level: str = "INFO") -> None:
    """Initialize rotating file logging under the given directory."""
    if log_dir is None:
        log_dir = get_log_directory()
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )


def _find_latest(directory: str, pattern: str) -> Path | None:
    try:
        path = Path(directory)
        if not path.exists():
            return None
        files = list(path.glob(pattern))
        if not files:
            return None
        return max(files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None


def find_latest_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest app_*.log file in the specified directory."""
    return _find_latest(log_dir or get_log_directory(), "app_*.log")


def find_latest_audit_log_file(audit_dir: str | None = None) -> Path | None:
    """Find the latest discard_/delete_ audit CSV."""
    return _find_latest(audit_dir or get_audit_log_directory(), "*_*.csv")


def open_file_in_default_app(file_path: str) -> bool:
    """Open a file in the default application for its type."""
    try:
        if os.name == "nt":  # Windows
            os.startfile(file_path)  # type: ignore[attr-defined]
        else:  # macOS/Linux
            opener = "open" if os.uname().sysname == "Darwin" else "xdg-open"
            subprocess.run([opener, file_path], check=True)
        return True
    except (OSError, subprocess.CalledProcessError):
        return False


def open_latest_log() -> bool:
    """Open the latest log file in the default application."""
    log_file = find_latest_log_file()
    if log_file:
        return open_file_in_default_app(str(log_file))
    return False


def open_latest_audit_log() -> bool:
    """Open the latest audit log file in the default application."""
    audit_file = find_latest_audit_log_file()
    if audit_file:
        return open_file_in_default_app(str(audit_file))
    return False


def open_log_directory() -> bool:
    """Open the log directory in the file explorer."""
    Path(get_log_directory()).mkdir(parents=True, exist_ok=True)
    return open_file_in_default_app(get_log_directory())


def open_audit_log_directory() -> bool:
    """Open the audit log directory in the file explorer."""
    Path(get_audit_log_directory()).mkdir(parents=True, exist_ok=True)
    return open_file_in_default_app(get_audit_log_directory())
