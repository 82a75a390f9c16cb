"""
Result publication.

Copies build products from the staging directory into the output directory.
Source documents and symlinks (mirrored inputs) are never published.
"""

import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Sequence

from latexflow.contexts.staging.logger import _log_debug, _log_info, _log_warning
from latexflow.contexts.staging.source_mirror import DEFAULT_REWRITABLE_SUFFIXES, MAX_WORKERS


def _remove_entry(path: Path) -> None:
    """Remove a file, symlink, or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _copy_entry(source: Path, destination: Path) -> None:
    if source.is_dir():
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination)


def publishable_entries(
    staging_dir: Path, excluded_suffixes: Sequence[str] = DEFAULT_REWRITABLE_SUFFIXES
) -> List[Path]:
    """List staging entries that are build products (sorted by name)."""
    excluded_suffixes = {s.lower() for s in excluded_suffixes}
    return [
        entry
        for entry in sorted(staging_dir.iterdir(), key=lambda p: p.name)
        if not entry.is_symlink() and entry.suffix.lower() not in excluded_suffixes
    ]


def clear_directory(directory: Path) -> None:
    """Remove every entry inside a directory, keeping the directory itself."""
    for entry in directory.iterdir():
        _remove_entry(entry)


def publish(
    staging_dir: Path,
    output_dir: Path,
    overwrite: bool = True,
    excluded_suffixes: Sequence[str] = DEFAULT_REWRITABLE_SUFFIXES,
) -> List[str]:
    """
    Copy build products from staging into the output directory.

    On the success path (overwrite=True) the output directory is cleared first
    so nothing from a previous build lingers. On the failure path
    (overwrite=False) existing output entries are left untouched and only
    missing entries are added.

    Args:
        staging_dir: Staging directory holding the build products
        output_dir: Destination directory (created if missing)
        overwrite: Replace the output directory's contents
        excluded_suffixes: Suffixes of source documents to leave out

    Returns:
        Names of the entries copied into output_dir
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    if overwrite:
        clear_directory(output_dir)

    entries = [
        entry
        for entry in publishable_entries(staging_dir, excluded_suffixes)
        if overwrite or not (output_dir / entry.name).exists()
    ]

    if entries:
        with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(entries))) as pool:
            futures = [
                pool.submit(_copy_entry, entry, output_dir / entry.name) for entry in entries
            ]
        for future in futures:
            future.result()

    published = [entry.name for entry in entries]
    _log_info(f"Published {len(published)} entries to {output_dir}")
    _log_debug(f"  Entries: {', '.join(published) or '-'}")
    return published


def recover_partial_output(
    staging_dir: Path,
    output_dir: Path,
    excluded_suffixes: Sequence[str] = DEFAULT_REWRITABLE_SUFFIXES,
) -> List[str]:
    """
    Best-effort publication of whatever a failed build left in staging.

    Never overwrites existing output, so the last good build survives. Copy
    failures are logged and swallowed; the caller re-raises the error that
    triggered recovery.

    Returns:
        Names of the entries recovered (empty if recovery itself failed)
    """
    try:
        recovered = publish(staging_dir, output_dir, overwrite=False,
                            excluded_suffixes=excluded_suffixes)
    except OSError as e:
        _log_warning(f"Could not recover partial output to {output_dir}: {e}")
        return []

    if recovered:
        _log_warning(f"Recovered {len(recovered)} partial artifacts for inspection")
    return recovered
