"""
Targeting context logger.

Provides logging interface for targeting context with automatic [target] prefix.
All targeting modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from vellum.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[target]"


def setup_targeting_logger(
    log_dir: Optional[Path] = None, industry: Optional[str] = None
) -> Path:
    """
    Setup logger for targeting context.

    Args:
        log_dir: Directory for this scoring session (fresh one if omitted)
        industry: Industry recorded in the provenance header (optional)

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="target",
        log_dir=log_dir,
        extra_provenance={"Industry": industry or "(unspecified)"},
    )


# Wrapper functions with automatic [target] prefix


def _log_info(message: str) -> None:
    """Log info message with [target] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [target] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [target] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [target] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [target] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level targeting-specific logging helpers


def log_optimization_result(template_id: str, result, elapsed_ms: float) -> None:
    """
    Log an ATS optimization report summary.

    Args:
        template_id: Template identifier
        result: ATSOptimizationResult from ATSOptimizer.optimize_for_ats()
        elapsed_ms: Wall-clock time of the analysis
    """
    breakdown = result.score_breakdown
    _log_success(
        f"{template_id}: ATS score {result.overall_score:.2f} "
        f"(compatibility {result.compatibility.overall_compatibility:.1f}, {elapsed_ms:.1f}ms)"
    )
    _log_debug(
        f"  formatting={breakdown.formatting} keywords={breakdown.keywords} "
        f"structure={breakdown.structure} readability={breakdown.readability} "
        f"completeness={breakdown.completeness} relevance={breakdown.relevance}"
    )
    for warning in result.warnings:
        _log_warning(f"  [{warning.severity}] {warning.message} ({warning.location})")


def log_branch_fallback(branch: str, reason: str) -> None:
    """Log that an analysis branch was replaced with its neutral default."""
    _log_warning(f"Analysis branch '{branch}' fell back to defaults: {reason}")
