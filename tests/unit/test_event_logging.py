"""Unit tests for engine event logging."""

import json

import pytest

from vellum.utils import event_logging
from vellum.utils.event_logging import get_recent_events, log_engine_event


@pytest.mark.unit
def test_disabled_without_events_file(monkeypatch, tmp_path):
    """Test that logging is a no-op when no events file is configured."""
    monkeypatch.setattr(event_logging, "ENGINE_EVENTS_FILE", None)

    log_engine_event("render_completed", "professional-classic", "rendering")

    assert get_recent_events() == []
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_events_are_appended_as_json_lines(monkeypatch, tmp_path):
    """Test the JSON Lines format and extra fields."""
    events_file = tmp_path / "logs" / "events.jsonl"
    monkeypatch.setattr(event_logging, "ENGINE_EVENTS_FILE", events_file)

    log_engine_event("render_completed", "professional-classic", "rendering", checksum="abc")
    log_engine_event("render_failed", "modern-two-column", "rendering", code="RENDER_FAILED")

    lines = events_file.read_text().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event_type"] == "render_completed"
    assert first["checksum"] == "abc"
    assert "timestamp" in first


@pytest.mark.unit
def test_get_recent_events_filters(monkeypatch, tmp_path):
    """Test filtering by template and type, and skipping malformed lines."""
    events_file = tmp_path / "events.jsonl"
    monkeypatch.setattr(event_logging, "ENGINE_EVENTS_FILE", events_file)

    for template_id in ("a", "b", "a"):
        log_engine_event("render_completed", template_id, "rendering")
    log_engine_event("ats_optimization_completed", "a", "targeting")
    with open(events_file, "a") as f:
        f.write("{not json\n")

    assert len(get_recent_events(10)) == 4
    assert len(get_recent_events(10, template_id="a")) == 3
    assert len(get_recent_events(10, template_id="a", event_type="render_completed")) == 2
    assert get_recent_events(1)[0]["event_type"] == "ats_optimization_completed"
