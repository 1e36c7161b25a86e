"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from vellum.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[template]"


def setup_templating_logger(log_dir: Optional[Path] = None, phase: str = "bind") -> Path:
    """
    Setup logger for templating context.

    Args:
        log_dir: Directory for this templating session (fresh one if omitted)
        phase: Phase name for provenance ("validate", "bind", "catalog")

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="template",
        log_dir=log_dir,
        extra_provenance={"Phase": phase},
    )


# Wrapper functions with automatic [template] prefix


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [template] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [template] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level templating-specific logging helpers


def log_validation_result(template_id: str, result) -> None:
    """
    Log a template validation report.

    Args:
        template_id: Template identifier
        result: ValidationResult from TemplateValidator.validate()
    """
    if result.is_valid:
        _log_success(
            f"{template_id}: valid (score {result.score}, {len(result.warnings)} warnings)"
        )
    else:
        _log_error(f"{template_id}: invalid (score {result.score}, {len(result.errors)} errors)")
        for issue in result.errors[:5]:
            _log_error(f"  {issue.code} at {issue.field}: {issue.message}")
        if len(result.errors) > 5:
            _log_error(f"  ... and {len(result.errors) - 5} more errors")

    for issue in result.warnings:
        _log_debug(f"  warning {issue.code} at {issue.field}: {issue.message}")


def log_binding_result(template_id: str, result) -> None:
    """
    Log a data binding outcome.

    Args:
        template_id: Template identifier
        result: DataBindingResult from DataBinder.bind_data()
    """
    meta = result.metadata
    summary = (
        f"{template_id}: bound {meta.bound_fields}/{meta.total_fields} fields "
        f"({meta.data_completeness:.1f}% complete, {meta.processing_time_ms:.1f}ms)"
    )
    if result.success:
        _log_info(summary)
    else:
        _log_warning(f"{summary}, {len(result.errors)} errors")
        for error in result.errors[:5]:
            _log_debug(f"  {error.code} at {error.section_id}.{error.field_id}: {error.message}")


def log_cache_stats(stats) -> None:
    """Log a cache statistics snapshot."""
    _log_debug(
        f"cache: size={stats.size}/{stats.max_size} hits={stats.hits} "
        f"misses={stats.misses} hit_rate={stats.hit_rate:.2f}"
    )
