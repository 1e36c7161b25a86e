"""
Engine event logging utilities for VELLUM (Tier 2 logging).

Provides uniform interfaces for logging engine events (renders, optimizations,
catalog changes) to a JSON Lines event log shared across contexts.

For detailed within-context logging (Tier 1), use vellum.utils.logger instead.
Event logging is disabled unless ENGINE_EVENTS_FILE is set.

Usage:
    from vellum.utils.event_logging import log_engine_event

    log_engine_event(
        event_type="render_completed",
        template_id="professional-classic",
        source="rendering",
        checksum="1x3kq9",
    )
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from vellum.utils.timestamp import now_exact

load_dotenv()
_events_file_env = os.getenv("ENGINE_EVENTS_FILE")
ENGINE_EVENTS_FILE: Optional[Path] = Path(_events_file_env) if _events_file_env else None


def log_engine_event(event_type: str, template_id: str, source: str, **extra_fields) -> None:
    """
    Append an event to the engine event log.

    Events are appended in JSON Lines format (one JSON object per line), which
    keeps the log streamable and easy to filter by event_type, template_id, or source.

    Args:
        event_type: Type of event (e.g., "render_completed", "ats_optimization_completed")
        template_id: Template identifier the event concerns
        source: Event source (e.g., "rendering", "targeting", "templating", "cli")
        **extra_fields: Additional event-specific fields (must be JSON-serializable)
    """
    if ENGINE_EVENTS_FILE is None:
        return

    ENGINE_EVENTS_FILE.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "template_id": template_id,
        "source": source,
        **extra_fields,
    }

    with open(ENGINE_EVENTS_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    n: int = 10, template_id: Optional[str] = None, event_type: Optional[str] = None
) -> List[dict]:
    """
    Get the last n events from the engine log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        template_id: Filter to only events for this template (optional)
        event_type: Filter to only events of this type (optional)

    Returns:
        List of event dicts (most recent last)

    Example:
        # Last 20 failed renders
        events = get_recent_events(20, event_type="render_failed")
    """
    if ENGINE_EVENTS_FILE is None or not ENGINE_EVENTS_FILE.exists():
        return []

    events = []
    with open(ENGINE_EVENTS_FILE, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if template_id:
        events = [e for e in events if e.get("template_id") == template_id]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:]
