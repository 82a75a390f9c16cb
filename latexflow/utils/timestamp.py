"""Timestamp helpers shared by logging and event tracking."""

from datetime import datetime


def now() -> str:
    """Compact timestamp for directory names (e.g., 20251114_123456)."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """ISO 8601 timestamp with microseconds, used for event ordering."""
    return datetime.now().isoformat()


def format_duration(seconds: float) -> str:
    """
    Format an elapsed time in compact form.

    Examples:
        format_duration(0.42)   # "0.42s"
        format_duration(75.0)   # "1m 15s"
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"
