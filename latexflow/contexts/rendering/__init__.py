"""
Rendering Context

Responsibilities:
- Configures the typesetting engine and auxiliary tools
- Runs the conditional engine/code-execution/bibliography pass loop
- Orchestrates a full build from staging to publication
- Reports tool failures with engine diagnostics

Owns: Tool invocation, pass ordering, build orchestration
Never: Parses or rewrites LaTeX source
"""

from latexflow.contexts.rendering.compiler import BuildReport, BuildRequest, compile_latex
from latexflow.contexts.rendering.exceptions import LatexBuildError, ToolInvocationError
from latexflow.contexts.rendering.pass_runner import PassRunner, ToolInvocation
from latexflow.contexts.rendering.toolchain import (
    SubprocessToolRunner,
    Toolchain,
    ToolRunner,
    load_toolchain,
)

__all__ = [
    "BuildReport",
    "BuildRequest",
    "LatexBuildError",
    "PassRunner",
    "SubprocessToolRunner",
    "ToolInvocation",
    "ToolInvocationError",
    "ToolRunner",
    "Toolchain",
    "compile_latex",
    "load_toolchain",
]
