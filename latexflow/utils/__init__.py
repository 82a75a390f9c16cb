"""
Shared utilities for latexflow.

Common functionality used across contexts:
- Logger setup with provenance
- Pipeline event log
- Timestamps
"""

from latexflow.utils.timestamp import format_duration, now, now_exact

__all__ = ["format_duration", "now", "now_exact"]
