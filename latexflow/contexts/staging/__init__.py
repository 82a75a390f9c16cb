"""
Staging Context

Responsibilities:
- Acquires and releases the exclusive staging directory for a build
- Mirrors the source tree into staging (symlinks assets, copies documents)
- Publishes build products to the output directory
- Salvages partial output when a build fails

Owns: Staging directory lifecycle, source mirroring, output publication
Never: Invokes the typesetting engine or auxiliary tools
"""

from latexflow.contexts.staging.publisher import publish, recover_partial_output
from latexflow.contexts.staging.source_mirror import (
    SourcePlan,
    classify_entries,
    mirror_source_tree,
)
from latexflow.contexts.staging.staging_area import acquire, release, staging_area

__all__ = [
    "SourcePlan",
    "acquire",
    "classify_entries",
    "mirror_source_tree",
    "publish",
    "recover_partial_output",
    "release",
    "staging_area",
]
