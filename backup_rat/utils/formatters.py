"""Formatting utilities for backup reports."""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Union


def format_file_size(size_bytes: int) -> str:
    """Format file size in human readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Human readable size string.
    """
    if size_bytes < 1024:
        return f"{size_bytes}B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes // 1024}KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes // (1024 * 1024)}MB"
    else:
        return f"{size_bytes // (1024 * 1024 * 1024)}GB"


def format_date(dt: Optional[datetime], short: bool = False) -> str:
    """Format datetime for display.

    Args:
        dt: Datetime to format.
        short: If True, use short format.

    Returns:
        Formatted date string.
    """
    if dt is None:
        return "-"
    if short:
        return dt.strftime('%Y-%m-%d %H:%M')
    else:
        return dt.strftime('%Y-%m-%d %H:%M:%S')


def format_duration(start: Optional[datetime], end: Optional[datetime]) -> str:
    """Format the time between two datetimes, e.g. ``1m 05s``."""
    if start is None or end is None:
        return "-"

    elapsed: timedelta = end - start
    seconds = max(0, int(elapsed.total_seconds()))
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


def format_path_relative(full_path: Union[str, Path], base_path: Union[str, Path]) -> str:
    """Format path relative to base path.

    Args:
        full_path: Full absolute path.
        base_path: Base path to make relative to.

    Returns:
        Relative path string.
    """
    try:
        return Path(full_path).relative_to(base_path).as_posix()
    except ValueError:
        return str(full_path)
