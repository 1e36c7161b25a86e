"""
Shared utilities for VELLUM.

Common functionality used across contexts:
- Logger setup with provenance
- Engine event log (JSON Lines)
- Timestamps
- Text report formatting
"""

from vellum.utils.timestamp import now, now_exact, today

__all__ = ["now", "now_exact", "today"]
