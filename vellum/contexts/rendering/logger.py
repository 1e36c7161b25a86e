"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from vellum.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(
    log_dir: Optional[Path] = None, output_format: str = "html", serialize: bool = False
) -> Path:
    """
    Setup logger for rendering context.

    Args:
        log_dir: Directory for this rendering session (fresh one if omitted)
        output_format: Render format recorded in the provenance header
        serialize: Also write a JSON Lines copy of the log

    Returns:
        Path to log file

    Example:
        from vellum.contexts.rendering.logger import setup_rendering_logger

        log_file = setup_rendering_logger(output_format="preview")
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Output format": output_format},
        serialize=serialize,
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(template_id: str, render_id: str, output_format: str) -> None:
    """Log start of a render with context."""
    _log_info(f"Rendering {template_id} as {output_format}")
    _log_debug(f"  Render id: {render_id}")


def log_render_result(template_id: str, rendered) -> None:
    """
    Log a successful render.

    Args:
        template_id: Template identifier
        rendered: RenderedTemplate from TemplateRenderer.render()
    """
    meta = rendered.metadata
    _log_success(
        f"{template_id}: {meta.size['total']} bytes in {meta.rendering_time_ms:.1f}ms "
        f"(checksum {meta.checksum})"
    )
    for warning in rendered.warnings[:5]:
        _log_debug(f"  Warning: {warning}")
    if len(rendered.warnings) > 5:
        _log_debug(f"  ... and {len(rendered.warnings) - 5} more warnings")


def log_render_failed(template_id: str, error: Exception, elapsed_ms: float) -> None:
    """Log a failed render."""
    _log_error(f"{template_id}: render failed after {elapsed_ms:.1f}ms")
    _log_error(f"  {type(error).__name__}: {error}")
