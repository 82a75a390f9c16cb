"""
Conditional multi-pass compilation.

The engine always runs once. Afterwards each auxiliary tool runs only if the
engine left its marker artifact behind, and every auxiliary run is followed by
exactly one more engine pass so the engine picks up what the tool produced:

    engine -> [code execution -> engine] -> [bibliography -> engine]

Code execution is resolved before the bibliography because executed code can
itself emit citations.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Collection, List

from latexflow.contexts.rendering.artifacts import (
    artifact_exists,
    clear_stale_build_state,
)
from latexflow.contexts.rendering.exceptions import ToolInvocationError
from latexflow.contexts.rendering.log_parsing import read_engine_log
from latexflow.contexts.rendering.logger import _log_debug, _log_info, _log_warning
from latexflow.contexts.rendering.toolchain import Toolchain, ToolRunner

ENGINE = "engine"
CODE_EXECUTION = "code_execution"
BIBLIOGRAPHY = "bibliography"


@dataclass
class ToolInvocation:
    """
    One external tool run during a build.

    Attributes:
        role: ENGINE, CODE_EXECUTION, or BIBLIOGRAPHY
        command: Executable that was run
        args: Arguments passed to it
        exit_code: Exit status reported by the runner
    """

    role: str
    command: str
    args: List[str]
    exit_code: int


class PassRunner:
    """
    Runs the engine and auxiliary tools over a staged document.

    Args:
        toolchain: Tools and marker artifacts to use
        runner: Executes each tool in the staging directory
    """

    def __init__(self, toolchain: Toolchain, runner: ToolRunner):
        self.toolchain = toolchain
        self.runner = runner

    def run(self, staging_dir: Path, document_filename: str) -> List[ToolInvocation]:
        """
        Execute the pass loop for one document.

        Args:
            staging_dir: Populated staging directory (working directory of every tool)
            document_filename: Main document filename inside staging (e.g. thesis.tex)

        Returns:
            Invocations in the order they ran

        Raises:
            ToolInvocationError: If any tool exits with a non-tolerated status
        """
        toolchain = self.toolchain
        document_name = Path(document_filename).stem
        invocations: List[ToolInvocation] = []

        clear_stale_build_state(staging_dir, document_name, toolchain)

        self._run_engine(staging_dir, document_filename, invocations)

        if artifact_exists(staging_dir, document_name, toolchain.code_execution_marker_suffix):
            _log_info(f"Found {document_name}{toolchain.code_execution_marker_suffix}, "
                      f"running {toolchain.code_execution_tool}")
            self._invoke(
                CODE_EXECUTION,
                toolchain.code_execution_tool,
                [document_filename],
                staging_dir,
                invocations,
            )
            self._run_engine(staging_dir, document_filename, invocations)

        if artifact_exists(staging_dir, document_name, toolchain.bibliography_marker_suffix):
            _log_info(f"Found {document_name}{toolchain.bibliography_marker_suffix}, "
                      f"running {toolchain.bibliography_tool}")
            self._invoke(
                BIBLIOGRAPHY,
                toolchain.bibliography_tool,
                [document_name],
                staging_dir,
                invocations,
                tolerated_exit_codes=toolchain.bibliography_tolerated_exit_codes,
            )
            self._run_engine(staging_dir, document_filename, invocations)

        engine_passes = sum(1 for inv in invocations if inv.role == ENGINE)
        _log_debug(f"Pass loop finished: {engine_passes} engine passes, "
                   f"{len(invocations)} invocations")
        return invocations

    def _run_engine(
        self, staging_dir: Path, document_filename: str, invocations: List[ToolInvocation]
    ) -> None:
        pass_number = sum(1 for inv in invocations if inv.role == ENGINE) + 1
        _log_info(f"Engine pass {pass_number}: {self.toolchain.engine} {document_filename}")
        self._invoke(
            ENGINE,
            self.toolchain.engine,
            self.toolchain.engine_args(document_filename),
            staging_dir,
            invocations,
        )

    def _invoke(
        self,
        role: str,
        command: str,
        args: List[str],
        staging_dir: Path,
        invocations: List[ToolInvocation],
        tolerated_exit_codes: Collection[int] = (),
    ) -> None:
        exit_code = self.runner.run(command, args, staging_dir)
        invocations.append(ToolInvocation(role=role, command=command, args=list(args),
                                          exit_code=exit_code))

        if exit_code == 0:
            return

        if exit_code in tolerated_exit_codes:
            # e.g. bibtex exits 2 when the document has nothing to cite
            _log_warning(f"{command} exited with status {exit_code}; treating as nothing to process")
            return

        errors = []
        if role == ENGINE:
            errors, _ = read_engine_log(staging_dir, Path(args[-1]).stem)

        raise ToolInvocationError(
            f"Command failed with exit code {exit_code}: {command} {' '.join(args)}",
            command=command,
            arguments=args,
            exit_code=exit_code,
            errors=errors,
        )
