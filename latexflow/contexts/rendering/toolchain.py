"""
Toolchain configuration and external tool invocation.

The Toolchain names the engine and auxiliary tools and the artifacts that
trigger them. Defaults come from the environment (.env supported); a YAML file
can override any field.

Tools are run through the ToolRunner interface so the pass loop can be driven
by a fake runner in tests.
"""

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

from dotenv import load_dotenv
from omegaconf import OmegaConf

from latexflow.contexts.rendering.exceptions import ToolInvocationError
from latexflow.contexts.rendering.logger import _log_debug

load_dotenv()

LATEX_ENGINE = os.getenv("LATEX_ENGINE", "lualatex")
LATEX_CODE_EXECUTION_TOOL = os.getenv("LATEX_CODE_EXECUTION_TOOL", "pythontex")
LATEX_BIBLIOGRAPHY_TOOL = os.getenv("LATEX_BIBLIOGRAPHY_TOOL", "bibtex")
LATEX_STAGING_ROOT = os.getenv("LATEX_STAGING_ROOT")

# shell-escape/write18 for embedded code, synctex for editor sync,
# batch mode with file:line error reporting
ENGINE_FLAGS = [
    "--shell-escape",
    "--enable-write18",
    "-synctex=1",
    "-interaction=nonstopmode",
    "-file-line-error",
]

# Files the engine and auxiliary tools write next to the document. Links to
# same-named files from an earlier in-place build are dropped from staging.
BUILD_OUTPUT_SUFFIXES = [
    ".aux",
    ".log",
    ".pdf",
    ".synctex.gz",
    ".out",
    ".toc",
    ".lof",
    ".lot",
    ".bbl",
    ".blg",
    ".run.xml",
    ".fls",
    ".nav",
    ".snm",
]


@dataclass
class Toolchain:
    """
    External tools and the artifacts that trigger them.

    Attributes:
        engine: Typesetting engine executable
        engine_flags: Flags passed before the document filename
        code_execution_tool: Embedded-code tool, run with the document filename
        code_execution_marker_suffix: Engine output that requests the code tool
        code_execution_cache_prefix: Prefix of the code tool's per-document cache directory
        bibliography_tool: Bibliography processor, run with the document stem
        bibliography_marker_suffix: Engine output that requests the bibliography tool
        bibliography_tolerated_exit_codes: Bibliography exit codes meaning "nothing to process"
        rewritable_suffixes: Document suffixes copied into staging and never published
        build_output_suffixes: Engine and tool outputs never taken from a previous build
        staging_root: Parent directory for staging areas (None: system temp dir)
    """

    engine: str = LATEX_ENGINE
    engine_flags: List[str] = field(default_factory=lambda: list(ENGINE_FLAGS))
    code_execution_tool: str = LATEX_CODE_EXECUTION_TOOL
    code_execution_marker_suffix: str = ".pytxcode"
    code_execution_cache_prefix: str = "pythontex-files-"
    bibliography_tool: str = LATEX_BIBLIOGRAPHY_TOOL
    bibliography_marker_suffix: str = ".bcf"
    bibliography_tolerated_exit_codes: List[int] = field(default_factory=lambda: [2])
    rewritable_suffixes: List[str] = field(default_factory=lambda: [".tex"])
    build_output_suffixes: List[str] = field(default_factory=lambda: list(BUILD_OUTPUT_SUFFIXES))
    staging_root: Optional[str] = LATEX_STAGING_ROOT

    def engine_args(self, document_filename: str) -> List[str]:
        return [*self.engine_flags, document_filename]

    def code_execution_cache_dir(self, document_name: str) -> str:
        return f"{self.code_execution_cache_prefix}{document_name}"

    def stale_output_suffixes(self) -> List[str]:
        """Build outputs plus both marker suffixes, without duplicates."""
        suffixes = [
            *self.build_output_suffixes,
            self.code_execution_marker_suffix,
            self.bibliography_marker_suffix,
        ]
        return list(dict.fromkeys(suffixes))


def load_toolchain(config_path: Optional[Union[str, Path]] = None) -> Toolchain:
    """
    Build a Toolchain from environment defaults and an optional YAML file.

    Args:
        config_path: YAML file whose keys override Toolchain fields

    Returns:
        Toolchain instance

    Raises:
        FileNotFoundError: If config_path does not exist
        omegaconf.errors.ConfigKeyError: If the YAML names an unknown field

    Example:
        # latexflow.yaml
        engine: xelatex
        bibliography_tool: biber
        bibliography_tolerated_exit_codes: []
    """
    schema = OmegaConf.structured(Toolchain)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Toolchain config not found: {config_path}")
        schema = OmegaConf.merge(schema, OmegaConf.load(config_path))

    return OmegaConf.to_object(schema)


class ToolRunner(Protocol):
    """Runs one external tool and reports its exit status."""

    def run(self, command: str, args: Sequence[str], cwd: Path) -> int: ...


class SubprocessToolRunner:
    """
    Runs tools as subprocesses in an explicit working directory.

    Standard output and error are inherited, so engine output streams straight
    to the caller's terminal. The process working directory is never changed.
    """

    def run(self, command: str, args: Sequence[str], cwd: Path) -> int:
        cmd = [command, *args]
        _log_debug(f"$ {' '.join(cmd)}  (cwd={cwd})")
        try:
            result = subprocess.run(cmd, cwd=cwd)
        except FileNotFoundError as e:
            raise ToolInvocationError(
                f"Command not found: {command}", command=command, arguments=args
            ) from e
        except OSError as e:
            # e.g. PermissionError for a tool without the executable bit
            raise ToolInvocationError(
                f"Could not start {command}: {e.strerror or e}", command=command, arguments=args
            ) from e
        return result.returncode
