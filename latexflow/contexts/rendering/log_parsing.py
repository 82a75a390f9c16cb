"""
Engine log parsing.

Extracts errors and warnings from the .log file the engine writes next to the
document. Used for diagnostics only; build success is decided by exit status.
"""

import re
from pathlib import Path
from typing import List, Tuple

# "! Error message" (classic TeX error lines)
ERROR_PATTERN = re.compile(r"^! (.+)$", re.MULTILINE)

# "./thesis.tex:12: Undefined control sequence." (-file-line-error format)
FILE_LINE_ERROR_PATTERN = re.compile(r"^(\S+\.tex):(\d+): (.+)$", re.MULTILINE)

WARNING_PATTERNS = [
    re.compile(r"LaTeX Warning: (.+)", re.MULTILINE),
    re.compile(r"Package \w+ Warning: (.+)", re.MULTILINE),
    re.compile(r"Overfull \\hbox \((.+)\)", re.MULTILINE),
    re.compile(r"Underfull \\hbox \((.+)\)", re.MULTILINE),
]


def parse_engine_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse engine log content for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings), each in order of appearance without duplicates
    """
    errors = []
    for match in FILE_LINE_ERROR_PATTERN.finditer(log_content):
        error = f"{match.group(1)}:{match.group(2)}: {match.group(3).strip()}"
        if error not in errors:
            errors.append(error)

    for match in ERROR_PATTERN.finditer(log_content):
        error = match.group(1).strip()
        # Already reported through the file:line form
        if any(existing.endswith(error) for existing in errors):
            continue
        errors.append(error)

    warnings = []
    for pattern in WARNING_PATTERNS:
        for match in pattern.finditer(log_content):
            warning = match.group(1).strip()
            if warning not in warnings:
                warnings.append(warning)

    return errors, warnings


def read_engine_log(staging_dir: Path, document_name: str) -> Tuple[List[str], List[str]]:
    """Parse <document_name>.log in staging; empty lists when no log was written."""
    log_file = staging_dir / f"{document_name}.log"
    if not log_file.exists():
        return [], []
    # LuaTeX writes UTF-8, pdfTeX may emit latin-1 font metadata
    return parse_engine_log(log_file.read_text(encoding="utf-8", errors="replace"))
