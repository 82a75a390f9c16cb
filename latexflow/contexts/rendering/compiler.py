"""
LaTeX Build Module

Compiles a LaTeX document in an isolated staging directory and publishes the
build products (PDF, synctex data, logs, ...) to an output directory.

Pipeline:
    acquire staging -> mirror source tree -> preprocess -> pass loop -> publish
On any failure the partial products are copied to the output directory without
overwriting anything, and the original error is re-raised. The staging
directory is removed on every exit path.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, FrozenSet, List, Optional

from latexflow.contexts.rendering.exceptions import ToolInvocationError
from latexflow.contexts.rendering.log_parsing import read_engine_log
from latexflow.contexts.rendering.logger import (
    _log_debug,
    log_build_failure,
    log_build_result,
    log_build_start,
)
from latexflow.contexts.rendering.pass_runner import ENGINE, PassRunner, ToolInvocation
from latexflow.contexts.rendering.toolchain import (
    SubprocessToolRunner,
    Toolchain,
    ToolRunner,
    load_toolchain,
)
from latexflow.contexts.staging import (
    mirror_source_tree,
    publish,
    recover_partial_output,
    staging_area,
)
from latexflow.utils.event_logging import log_build_event
from latexflow.utils.pdf_processing import page_count


@dataclass(frozen=True)
class BuildRequest:
    """
    What to build and where to put it.

    Attributes:
        source_document: Main .tex file; its directory is the source tree
        output_directory: Destination for build products (relative paths are
            resolved against the document's directory)
        excluded_entries: Source entry names never staged (the output
            directory's own name is always excluded as well)
        preprocess: Optional hook that rewrites the staged document in place
            before the first engine pass
    """

    source_document: Path
    output_directory: Path
    excluded_entries: FrozenSet[str] = frozenset()
    preprocess: Optional[Callable[[Path], None]] = None

    @property
    def source_dir(self) -> Path:
        return Path(self.source_document).resolve().parent

    @property
    def document_name(self) -> str:
        return Path(self.source_document).stem

    @property
    def output_dir(self) -> Path:
        return (self.source_dir / self.output_directory).resolve()

    @property
    def staging_exclusions(self) -> FrozenSet[str]:
        """Ignore list plus the source entry holding the output directory, if any."""
        exclusions = frozenset(self.excluded_entries)
        try:
            nested = self.output_dir.relative_to(self.source_dir)
        except ValueError:
            # Output lives outside the source tree
            return exclusions
        if not nested.parts:
            return exclusions
        return exclusions | {nested.parts[0]}

    def validate(self) -> None:
        """
        Raises:
            ValueError: If the document is missing or the output directory
                would swallow the source tree
        """
        source_document = Path(self.source_document)
        if not source_document.is_file():
            raise ValueError(f"LaTeX document not found: {source_document}")

        # Publishing clears the output directory; it must never contain the sources
        if self.output_dir == self.source_dir or self.output_dir in self.source_dir.parents:
            raise ValueError(
                f"Output directory {self.output_dir} must not contain the source "
                f"directory {self.source_dir}"
            )


@dataclass
class BuildReport:
    """
    Outcome of a successful build.

    Attributes:
        document_name: Document stem
        output_dir: Directory the products were published to
        invocations: Tool runs in execution order
        published: Entry names copied into output_dir
        warnings: Warnings parsed from the final engine log
        pdf_path: Published PDF (None if the engine produced none)
        page_count: Number of pages in the PDF (None if not available)
        elapsed_time: Wall-clock build time in seconds
    """

    document_name: str
    output_dir: Path
    invocations: List[ToolInvocation] = field(default_factory=list)
    published: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    pdf_path: Optional[Path] = None
    page_count: Optional[int] = None
    elapsed_time: float = 0.0

    @property
    def engine_passes(self) -> int:
        return sum(1 for inv in self.invocations if inv.role == ENGINE)

    @property
    def tools_run(self) -> List[str]:
        return [inv.role for inv in self.invocations]


def compile_latex(
    request: BuildRequest,
    toolchain: Optional[Toolchain] = None,
    runner: Optional[ToolRunner] = None,
    verbose: bool = False,
) -> BuildReport:
    """
    Build a LaTeX document and publish the results.

    Args:
        request: Document, output directory and exclusions
        toolchain: Tools to run (default: environment defaults via load_toolchain())
        runner: Tool runner (default: SubprocessToolRunner)
        verbose: Log more engine warnings on success

    Returns:
        BuildReport describing the passes run and the products published

    Raises:
        ValueError: If the request is invalid (nothing is staged or published)
        ToolInvocationError: If the engine or an auxiliary tool fails
        OSError: If staging or publishing fails
    """
    toolchain = toolchain if toolchain is not None else load_toolchain()
    runner = runner if runner is not None else SubprocessToolRunner()

    request.validate()
    document_filename = Path(request.source_document).name
    if Path(document_filename).suffix.lower() not in {s.lower() for s in toolchain.rewritable_suffixes}:
        # The staged document must be a private copy, never a link into the source tree
        raise ValueError(
            f"Document suffix must be one of {toolchain.rewritable_suffixes}: {document_filename}"
        )

    document_name = request.document_name
    output_dir = request.output_dir
    staging_root = Path(toolchain.staging_root) if toolchain.staging_root else None

    log_build_start(document_name, Path(request.source_document), output_dir)
    log_build_event("build_started", document_name, source="rendering",
                    output_dir=str(output_dir))
    start_time = time.time()

    with staging_area(document_name, staging_root) as staging_dir:
        try:
            mirror_source_tree(
                request.source_dir,
                staging_dir,
                excluded=request.staging_exclusions,
                rewritable_suffixes=toolchain.rewritable_suffixes,
            )

            if request.preprocess is not None:
                _log_debug(f"Preprocessing {document_filename}")
                request.preprocess(staging_dir / document_filename)

            invocations = PassRunner(toolchain, runner).run(staging_dir, document_filename)
            _, warnings = read_engine_log(staging_dir, document_name)

            published = publish(
                staging_dir,
                output_dir,
                overwrite=True,
                excluded_suffixes=toolchain.rewritable_suffixes,
            )
        except Exception as e:
            recover_partial_output(staging_dir, output_dir, toolchain.rewritable_suffixes)

            elapsed_time = time.time() - start_time
            log_build_failure(document_name, e, elapsed_time)
            log_build_event(
                "build_failed",
                document_name,
                source="rendering",
                elapsed_time_s=round(elapsed_time, 2),
                error=str(e),
                exit_code=e.exit_code if isinstance(e, ToolInvocationError) else None,
            )
            raise

    pdf_path = output_dir / f"{document_name}.pdf"
    pdf_path = pdf_path if pdf_path.name in published else None

    report = BuildReport(
        document_name=document_name,
        output_dir=output_dir,
        invocations=invocations,
        published=published,
        warnings=warnings,
        pdf_path=pdf_path,
        page_count=page_count(pdf_path) if pdf_path else None,
        elapsed_time=time.time() - start_time,
    )

    log_build_result(report, verbose=verbose)
    log_build_event(
        "build_completed",
        document_name,
        source="rendering",
        elapsed_time_s=round(report.elapsed_time, 2),
        engine_passes=report.engine_passes,
        tools_run=report.tools_run,
        warning_count=len(report.warnings),
        page_count=report.page_count,
    )

    return report
