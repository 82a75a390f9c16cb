"""
Auxiliary artifact detection.

The engine signals that a companion tool must run by writing a marker file
next to the document (e.g. thesis.pytxcode, thesis.bcf). Detection is a plain
existence check and must be repeated after every engine pass.
"""

import shutil
from pathlib import Path
from typing import List

from latexflow.contexts.rendering.logger import _log_debug
from latexflow.contexts.rendering.toolchain import Toolchain


def artifact_path(staging_dir: Path, document_name: str, suffix: str) -> Path:
    return staging_dir / f"{document_name}{suffix}"


def artifact_exists(staging_dir: Path, document_name: str, suffix: str) -> bool:
    """Check whether the engine produced <document_name><suffix> in staging."""
    return artifact_path(staging_dir, document_name, suffix).exists()


def clear_stale_build_state(
    staging_dir: Path, document_name: str, toolchain: Toolchain
) -> List[str]:
    """
    Remove output left behind by an earlier build of the same document.

    An in-place build leaves thesis.pdf, thesis.bcf, thesis.pytxcode, ... in the
    source directory, and mirroring links them into staging. Left alone, a stale
    marker would trigger its tool, and the engine would write through the links
    into the source tree. Links are unlinked, never followed; inputs that merely
    share the stem (thesis.bib) are kept.

    Returns:
        Names of the entries removed
    """
    stale_entries = [
        staging_dir / toolchain.code_execution_cache_dir(document_name),
        *(
            artifact_path(staging_dir, document_name, suffix)
            for suffix in toolchain.stale_output_suffixes()
        ),
    ]

    removed = []
    for entry in stale_entries:
        if entry.is_symlink() or entry.is_file():
            entry.unlink()
        elif entry.is_dir():
            shutil.rmtree(entry)
        else:
            continue
        removed.append(entry.name)
        _log_debug(f"Removed stale build output: {entry.name}")

    return removed
