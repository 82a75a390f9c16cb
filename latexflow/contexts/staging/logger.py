"""
Staging context logger.

Provides logging interface for the staging context with automatic [stage] prefix.
All staging modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[stage]"


def _log_info(message: str) -> None:
    """Log info message with [stage] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [stage] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [stage] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
