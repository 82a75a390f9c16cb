"""
Pipeline event logging utilities for latexflow (Tier 2 logging).

Appends one JSON object per line to the file named by PIPELINE_EVENTS_FILE so
that build outcomes can be followed across invocations. When the variable is
unset, event logging is disabled and every call is a no-op.

For detailed within-context logging (Tier 1), use latexflow.utils.logger instead.

Usage:
    from latexflow.utils.event_logging import log_build_event

    log_build_event(
        event_type="build_completed",
        document_name="thesis",
        source="rendering",
        engine_passes=3,
    )
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from latexflow.utils.timestamp import now_exact

load_dotenv()
_events_file = os.getenv("PIPELINE_EVENTS_FILE")
PIPELINE_EVENTS_FILE = Path(_events_file) if _events_file else None

BUILD_EVENT_TYPES = {"build_started", "build_completed", "build_failed"}


def log_build_event(event_type: str, document_name: str, source: str, **extra_fields) -> None:
    """
    Log an event to the pipeline event log.

    Args:
        event_type: One of BUILD_EVENT_TYPES
        document_name: Document stem being built
        source: Event source (e.g., "rendering", "cli")
        **extra_fields: Additional event-specific fields (must be JSON serializable)

    Raises:
        ValueError: If event_type is not a known build event
    """
    if event_type not in BUILD_EVENT_TYPES:
        raise ValueError(f"Unknown build event type: {event_type}")

    if PIPELINE_EVENTS_FILE is None:
        return

    PIPELINE_EVENTS_FILE.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "document_name": document_name,
        "source": source,
        **extra_fields,
    }

    with open(PIPELINE_EVENTS_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    n: int = 10, document_name: Optional[str] = None, event_type: Optional[str] = None
) -> List[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        document_name: Filter to only events for this document (optional)
        event_type: Filter to only events of this type (optional)

    Returns:
        List of event dicts (most recent last)
    """
    if PIPELINE_EVENTS_FILE is None or not PIPELINE_EVENTS_FILE.exists():
        return []

    events = []
    with open(PIPELINE_EVENTS_FILE, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if document_name:
        events = [e for e in events if e.get("document_name") == document_name]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
