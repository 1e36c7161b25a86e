"""Unit tests for CLI session logging."""

import json

import pytest
from loguru import logger

from vellum import __version__
from vellum.contexts.rendering.logger import _log_info, setup_rendering_logger
from vellum.utils.logger import session_log_dir, setup_logger


@pytest.fixture
def reset_sinks():
    yield
    logger.remove()


@pytest.mark.unit
def test_session_log_dir(tmp_path):
    """Test timestamped session directory naming."""
    path = session_log_dir("render", logs_root=tmp_path)

    assert path.parent == tmp_path
    assert path.name.startswith("render_")
    assert len(path.name) == len("render_20251114_123456")


@pytest.mark.unit
def test_setup_logger_writes_provenance(tmp_path, monkeypatch, reset_sinks):
    """Test the provenance header and configured engine settings."""
    monkeypatch.setenv("VELLUM_CACHE_MAX_SIZE", "25")

    log_file = setup_logger("template", log_dir=tmp_path, extra_provenance={"Phase": "validate"})
    logger.remove()

    content = log_file.read_text()
    assert log_file == tmp_path / "template.log"
    assert f"VELLUM {__version__} [template] session" in content
    assert "VELLUM_CACHE_MAX_SIZE: 25" in content
    assert "Phase: validate" in content


@pytest.mark.unit
def test_context_prefix_and_serialized_sink(tmp_path, reset_sinks):
    """Test that context messages carry their prefix in both sinks."""
    log_file = setup_rendering_logger(tmp_path, output_format="pdf", serialize=True)
    _log_info("Rendered professional-classic")
    logger.remove()

    assert "[render] Rendered professional-classic" in log_file.read_text()
    records = [
        json.loads(line)
        for line in (tmp_path / "render.jsonl").read_text().splitlines()
    ]
    messages = [record["record"]["message"] for record in records]
    assert "Output format: pdf" in messages
    assert messages[-1] == "[render] Rendered professional-classic"
