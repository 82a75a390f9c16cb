"""
Integration tests for compile_latex() - runs the real engine.
"""

import shutil

import pytest

from latexflow.contexts.rendering import BuildRequest, ToolInvocationError, compile_latex
from latexflow.contexts.rendering.toolchain import Toolchain

LUALATEX_AVAILABLE = shutil.which("lualatex") is not None
skip_if_no_lualatex = pytest.mark.skipif(
    not LUALATEX_AVAILABLE,
    reason="lualatex not installed - install TeX Live, MiKTeX, or MacTeX"
)


@pytest.fixture
def real_toolchain(tmp_path):
    return Toolchain(engine="lualatex", staging_root=str(tmp_path / "staging"))


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_lualatex
def test_compile_simple_document(tmp_path, real_toolchain):
    source_dir = tmp_path / "doc"
    source_dir.mkdir()
    (source_dir / "simple.tex").write_text(
        r"""
\documentclass{article}
\begin{document}
Hello from latexflow.
\end{document}
"""
    )

    report = compile_latex(
        BuildRequest(source_document=source_dir / "simple.tex", output_directory="out"),
        toolchain=real_toolchain,
    )

    output_dir = source_dir / "out"
    assert report.engine_passes == 1
    assert report.pdf_path == output_dir / "simple.pdf"
    assert report.pdf_path.stat().st_size > 0
    assert (output_dir / "simple.synctex.gz").exists()
    assert not (output_dir / "simple.tex").exists()
    assert not (tmp_path / "staging").exists()


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_lualatex
def test_compile_with_intentional_error(tmp_path, real_toolchain):
    source_dir = tmp_path / "doc"
    source_dir.mkdir()
    (source_dir / "broken.tex").write_text(
        r"""
\documentclass{article}
\begin{document}
This has an \undefinedcommand{test} that should fail.
\end{document}
"""
    )

    with pytest.raises(ToolInvocationError) as exc_info:
        compile_latex(
            BuildRequest(source_document=source_dir / "broken.tex", output_directory="out"),
            toolchain=real_toolchain,
        )

    assert any("Undefined control sequence" in err for err in exc_info.value.errors)
    # The engine log is recovered for inspection
    assert (source_dir / "out" / "broken.log").exists()
    assert not (tmp_path / "staging").exists()
