"""
Staging directory lifecycle.

Each build owns a freshly created, empty directory that is removed again when
the build finishes, whatever the outcome.
"""

import re
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from latexflow.contexts.staging.logger import _log_debug

STAGING_PREFIX = "latexflow"

# Retries when a concurrent build removes the shared staging root
ACQUIRE_ATTEMPTS = 3


def _safe_name(document_name: str) -> str:
    """Reduce a document name to characters safe for a directory prefix."""
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", document_name).strip("._")
    return cleaned or "document"


def acquire(document_name: str, staging_root: Optional[Path] = None) -> Path:
    """
    Create a fresh, empty staging directory for one build.

    Args:
        document_name: Document stem, used only to make the directory recognizable
        staging_root: Parent directory for staging areas (default: system temp dir)

    Returns:
        Path to the new staging directory
    """
    prefix = f"{STAGING_PREFIX}-{_safe_name(document_name)}-"
    if staging_root is None:
        staging_dir = Path(tempfile.mkdtemp(prefix=prefix))
        _log_debug(f"Acquired staging directory: {staging_dir}")
        return staging_dir

    staging_root = Path(staging_root)
    for attempt in range(1, ACQUIRE_ATTEMPTS + 1):
        staging_root.mkdir(parents=True, exist_ok=True)
        try:
            staging_dir = Path(tempfile.mkdtemp(prefix=prefix, dir=staging_root))
            break
        except FileNotFoundError:
            # A concurrent release removed the emptied root before mkdtemp ran
            if attempt == ACQUIRE_ATTEMPTS:
                raise
            _log_debug(f"Staging root vanished, retrying ({attempt}/{ACQUIRE_ATTEMPTS})")
    _log_debug(f"Acquired staging directory: {staging_dir}")
    return staging_dir


def release(staging_dir: Path, staging_root: Optional[Path] = None) -> None:
    """
    Remove a staging directory and everything in it.

    Symlinks inside the staging directory are removed, never followed, so
    mirrored source entries are left intact. When a staging root was configured
    it is removed as well once no other staging directories remain in it.
    """
    shutil.rmtree(staging_dir)
    _log_debug(f"Released staging directory: {staging_dir}")

    if staging_root is not None:
        try:
            Path(staging_root).rmdir()
        except OSError:
            # Still holds other builds' staging areas
            pass


@contextmanager
def staging_area(document_name: str, staging_root: Optional[Path] = None) -> Iterator[Path]:
    """
    Scoped staging directory: acquired on entry, released exactly once on exit.

    Example:
        with staging_area("thesis") as staging_dir:
            ...
    """
    staging_dir = acquire(document_name, staging_root)
    try:
        yield staging_dir
    finally:
        release(staging_dir, staging_root)
