"""
Source tree mirroring.

Populates a staging directory with the top-level entries of a document's source
directory. Entries the build may rewrite (LaTeX documents) are copied so the
source stays untouched; everything else (figures, styles, bibliographies,
subdirectories) is symlinked so large assets are never duplicated.
"""

import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from latexflow.contexts.staging.logger import _log_debug, _log_info

DEFAULT_REWRITABLE_SUFFIXES = (".tex",)

# Worker threads for batched link/copy operations
MAX_WORKERS = 8


@dataclass
class SourcePlan:
    """
    Partition of a source directory into mirrored and materialized entries.

    Attributes:
        source_dir: Directory the entries live in
        mirror: Entry names to symlink into staging
        materialize: Entry names to copy into staging
    """

    source_dir: Path
    mirror: List[str] = field(default_factory=list)
    materialize: List[str] = field(default_factory=list)

    @property
    def entries(self) -> List[str]:
        return sorted(self.mirror + self.materialize)


def is_rewritable(entry_name: str, rewritable_suffixes: Sequence[str]) -> bool:
    """Check whether an entry's suffix marks it as a document the build may rewrite."""
    return Path(entry_name).suffix.lower() in {s.lower() for s in rewritable_suffixes}


def classify_entries(
    source_dir: Path,
    excluded: Iterable[str] = (),
    rewritable_suffixes: Sequence[str] = DEFAULT_REWRITABLE_SUFFIXES,
) -> SourcePlan:
    """
    Partition the top-level entries of a source directory.

    Rewritable documents (by suffix) are materialized; all other entries are
    mirrored. Excluded names appear in neither set. Directories are always
    mirrored, even when their name happens to end in a document suffix.

    Args:
        source_dir: Directory containing the main document
        excluded: Entry names to skip (ignore list plus the output directory's name)
        rewritable_suffixes: Suffixes of entries that must be copied

    Returns:
        SourcePlan with sorted, disjoint mirror and materialize lists
    """
    excluded = set(excluded)
    plan = SourcePlan(source_dir=source_dir)

    for entry in sorted(source_dir.iterdir(), key=lambda p: p.name):
        if entry.name in excluded:
            continue
        if entry.is_file() and is_rewritable(entry.name, rewritable_suffixes):
            plan.materialize.append(entry.name)
        else:
            plan.mirror.append(entry.name)

    return plan


def _run_batch(operation: Callable[[str], None], names: Sequence[str]) -> None:
    """
    Apply an operation to every name concurrently.

    All operations are awaited; the first failure (in submission order) is raised.
    """
    if not names:
        return
    with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(names))) as pool:
        futures = [pool.submit(operation, name) for name in names]
    for future in futures:
        future.result()


def mirror_source_tree(
    source_dir: Path,
    staging_dir: Path,
    excluded: Iterable[str] = (),
    rewritable_suffixes: Sequence[str] = DEFAULT_REWRITABLE_SUFFIXES,
) -> SourcePlan:
    """
    Populate a staging directory from a source directory.

    Pure filesystem operation - assumes staging_dir exists and is empty.
    Link and copy failures propagate as OSError and are not retried.

    Args:
        source_dir: Directory containing the main document
        staging_dir: Freshly acquired staging directory
        excluded: Entry names to skip
        rewritable_suffixes: Suffixes of entries that must be copied

    Returns:
        The SourcePlan that was applied
    """
    source_dir = Path(source_dir).resolve()
    plan = classify_entries(source_dir, excluded, rewritable_suffixes)

    def link(name: str) -> None:
        (staging_dir / name).symlink_to(source_dir / name)

    def copy(name: str) -> None:
        shutil.copy2(source_dir / name, staging_dir / name)

    _run_batch(link, plan.mirror)
    _run_batch(copy, plan.materialize)

    _log_info(
        f"Staged {source_dir.name}/: {len(plan.mirror)} linked, "
        f"{len(plan.materialize)} copied"
    )
    _log_debug(f"  Linked: {', '.join(plan.mirror) or '-'}")
    _log_debug(f"  Copied: {', '.join(plan.materialize) or '-'}")

    return plan
