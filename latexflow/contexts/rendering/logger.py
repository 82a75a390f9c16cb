"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from latexflow.utils.logger import setup_logger as _setup_logger
from latexflow.utils.timestamp import format_duration

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, engine: str, console_level: str = "INFO") -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this build session
        engine: Typesetting engine recorded in the provenance header
        console_level: Minimum level shown on the console

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"LaTeX engine": engine},
        console_level=console_level,
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


def log_build_start(document_name: str, source_document: Path, output_dir: Path) -> None:
    """Log start of a build with context."""
    _log_info(f"Starting build: {document_name}")
    _log_debug(f"  Source: {source_document}")
    _log_debug(f"  Output: {output_dir}")


def log_build_result(report, verbose: bool = False) -> None:
    """
    Log a successful build with its warnings.

    Args:
        report: BuildReport from compile_latex()
        verbose: Show more engine warnings (default: False)
    """
    _log_success(
        f"{report.document_name}: {report.engine_passes} engine passes, "
        f"{len(report.warnings)} warnings ({format_duration(report.elapsed_time)})"
    )
    if report.pdf_path:
        pages = f" ({report.page_count} pages)" if report.page_count else ""
        _log_info(f"PDF: {report.pdf_path}{pages}")

    if report.warnings:
        warning_limit = 10 if verbose else 3
        for i, warn in enumerate(report.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(report.warnings) > warning_limit:
            _log_debug(f"  ... and {len(report.warnings) - warning_limit} more warnings")


def log_build_failure(document_name: str, error: Exception, elapsed_time: float) -> None:
    """Log a failed build with the triggering error."""
    _log_error(f"{document_name}: build failed ({format_duration(elapsed_time)})")
    for line in str(error).splitlines():
        _log_error(f"  {line}")
