"""Shared fixtures: a fake tool runner and a small LaTeX source tree."""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from latexflow.contexts.rendering.toolchain import Toolchain

ENGINE = "fake-lualatex"
CODE_TOOL = "fake-pythontex"
BIB_TOOL = "fake-bibtex"


class FakeToolRunner:
    """
    Deterministic stand-in for the engine and auxiliary tools.

    Every engine pass writes <stem>.pdf, <stem>.log and <stem>.synctex.gz into
    the working directory. The first engine pass additionally writes the
    configured marker files. Exit codes can be set per command and per call.

    Args:
        markers: Suffixes the first engine pass emits (e.g. [".pytxcode", ".bcf"])
        exit_codes: {(command, call_number): exit_code}, call numbers start at 1
        log_text: Content written to the engine log
    """

    def __init__(
        self,
        markers: Sequence[str] = (),
        exit_codes: Optional[Dict[Tuple[str, int], int]] = None,
        log_text: str = "This is a fake engine log.\n",
        products: Sequence[str] = (".pdf", ".log", ".synctex.gz"),
    ):
        self.markers = list(markers)
        self.exit_codes = exit_codes or {}
        self.log_text = log_text
        self.products = list(products)
        self.calls: List[Tuple[str, List[str], Path]] = []

    @property
    def commands(self) -> List[str]:
        return [command for command, _, _ in self.calls]

    def count(self, command: str) -> int:
        return self.commands.count(command)

    def run(self, command: str, args: Sequence[str], cwd: Path) -> int:
        self.calls.append((command, list(args), Path(cwd)))
        call_number = self.count(command)
        exit_code = self.exit_codes.get((command, call_number), 0)

        if command == ENGINE:
            stem = Path(args[-1]).stem
            for suffix in self.products:
                if suffix == ".log":
                    # The engine writes its log even when it fails
                    (Path(cwd) / f"{stem}.log").write_text(self.log_text)
                elif exit_code == 0:
                    (Path(cwd) / f"{stem}{suffix}").write_text(f"pass {call_number}")
            if exit_code == 0 and call_number == 1:
                    for suffix in self.markers:
                        (Path(cwd) / f"{stem}{suffix}").write_text("marker")
        elif command == CODE_TOOL:
            stem = Path(args[0]).stem
            cache_dir = Path(cwd) / f"pythontex-files-{stem}"
            cache_dir.mkdir(exist_ok=True)
            (cache_dir / "output.stdout").write_text("42")
        elif command == BIB_TOOL:
            (Path(cwd) / f"{args[0]}.bbl").write_text("bibliography")

        return exit_code


@pytest.fixture
def staging_root(tmp_path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def toolchain(staging_root) -> Toolchain:
    return Toolchain(
        engine=ENGINE,
        code_execution_tool=CODE_TOOL,
        bibliography_tool=BIB_TOOL,
        staging_root=str(staging_root),
    )


@pytest.fixture
def source_tree(tmp_path) -> Path:
    """
    Minimal document directory:

        src/
            thesis.tex
            chapter.tex
            refs.bib
            figures/plot.png
    """
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    (source_dir / "thesis.tex").write_text(
        "\\documentclass{article}\n\\begin{document}\nHello\n\\end{document}\n"
    )
    (source_dir / "chapter.tex").write_text("Chapter text\n")
    (source_dir / "refs.bib").write_text("@book{key, title={Title}}\n")
    figures = source_dir / "figures"
    figures.mkdir()
    (figures / "plot.png").write_bytes(b"\x89PNG")
    return source_dir


@pytest.fixture
def make_runner():
    """Factory for FakeToolRunner instances (keyword arguments as in FakeToolRunner)."""
    return FakeToolRunner
