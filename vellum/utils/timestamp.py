"""Timestamp formatting utilities."""

from datetime import datetime


def now() -> str:
    """Current local time, second precision (e.g., "2025-11-13T18:45:40")."""
    return datetime.now().isoformat(timespec="seconds")


def now_exact() -> str:
    """Current local time with microseconds, for event ordering."""
    return datetime.now().isoformat()


def today() -> str:
    """Current local date (e.g., "2025-11-13")."""
    return datetime.now().date().isoformat()


def format_timestamp(iso_timestamp: str, relative: bool = False) -> str:
    """
    Format ISO 8601 timestamp to readable format.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string
        relative: If True, show relative time (e.g., "2h ago")
                 If False, show absolute time (e.g., "2025-11-13 18:45:40")

    Returns:
        Human-readable timestamp, or the input unchanged if it cannot be parsed

    Examples:
        format_timestamp("2025-11-13T18:45:40.572549")
        # "2025-11-13 18:45:40"
    """
    try:
        dt = datetime.fromisoformat(iso_timestamp)
    except (ValueError, TypeError):
        return iso_timestamp

    if relative:
        return _format_relative_time(dt)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _format_relative_time(dt: datetime) -> str:
    """Format datetime as compact relative time ("30s ago", "15m ago", "2h ago", "5d ago")."""
    diff = datetime.now() - dt

    if diff.total_seconds() < 0:
        diff = -diff
        suffix = "from now"
    else:
        suffix = "ago"

    seconds = int(diff.total_seconds())
    minutes = seconds // 60
    hours = minutes // 60

    if seconds < 60:
        return f"{seconds}s {suffix}"
    elif minutes < 60:
        return f"{minutes}m {suffix}"
    elif hours < 24:
        return f"{hours}h {suffix}"
    else:
        return f"{diff.days}d {suffix}"
