"""
Session logging for VELLUM command-line tools.

Each CLI run gets its own directory under LOGS_PATH holding a human-readable
log (DEBUG and up) and, optionally, a serialized JSON copy of every record.
The console shows INFO and up. Library modules never add sinks; they log
through their context's logger.py and inherit whatever the script configured.
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from loguru import logger

from vellum import __version__

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

# Environment knobs echoed into every provenance header when set
ENGINE_SETTINGS = (
    "VELLUM_TEMPLATE_CATALOG_PATH",
    "VELLUM_CACHE_TTL_SECONDS",
    "VELLUM_CACHE_MAX_SIZE",
    "VELLUM_ATS_TIMEOUT_S",
    "VELLUM_ATS_REFERENCE_PATH",
    "VELLUM_HTML_TYPES_PATH",
    "VELLUM_CUSTOMIZATION_PRESETS_PATH",
    "ENGINE_EVENTS_FILE",
)


def session_log_dir(context_name: str, logs_root: Optional[Path] = None) -> Path:
    """Timestamped session directory, e.g. outs/logs/render_20251114_123456."""
    root = logs_root if logs_root is not None else LOGS_PATH
    return root / f"{context_name}_{datetime.now():%Y%m%d_%H%M%S}"


def setup_logger(
    context_name: str,
    log_dir: Optional[Path] = None,
    extra_provenance: Optional[Dict] = None,
    console_level: str = "INFO",
    serialize: bool = False,
) -> Path:
    """
    Route loguru output for one CLI session.

    Replaces any existing sinks with a DEBUG file sink, a colorized console
    sink and, with serialize=True, a JSON Lines sink next to the log file.
    Then writes the provenance header.

    Args:
        context_name: Context identifier ("template", "render", "target")
        log_dir: Session directory; a fresh one under LOGS_PATH if omitted
        extra_provenance: Additional key-value pairs for the provenance header
        console_level: Minimum level echoed to stdout
        serialize: Also write <context>.jsonl with one JSON record per line

    Returns:
        Path to the text log file

    Example:
        from vellum.utils.logger import setup_logger

        log_file = setup_logger(
            context_name="render",
            extra_provenance={"Output format": "html"},
        )
    """
    log_dir = log_dir if log_dir is not None else session_log_dir(context_name)
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in LEVEL_COLORS.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)
    if serialize:
        logger.add(log_dir / f"{context_name}.jsonl", level="DEBUG", serialize=True)

    log_provenance(context_name, extra_provenance)

    return log_file


def log_provenance(context_name: str, extra_context: Optional[Dict] = None) -> None:
    """
    Log the session header: command line, engine version and configured knobs.

    Args:
        context_name: Context the session belongs to
        extra_context: Additional key-value pairs to log
    """
    logger.info("=" * 80)
    logger.info(f"VELLUM {__version__} [{context_name}] session")
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python: {sys.version.split()[0]}")

    for name in ENGINE_SETTINGS:
        value = os.getenv(name)
        if value:
            logger.info(f"{name}: {value}")

    for key, value in (extra_context or {}).items():
        logger.info(f"{key}: {value}")

    logger.info("=" * 80)
