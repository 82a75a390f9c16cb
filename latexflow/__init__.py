"""
latexflow - staged LaTeX builds with conditional auxiliary passes

Compiles a LaTeX document inside an isolated staging directory, running the
bibliography and embedded-code tools only when the engine asks for them, and
publishes the build products to an output directory.

Architecture:
- Staging Context: Staging directory lifecycle, source mirroring, result publication
- Rendering Context: Toolchain, engine/auxiliary pass loop, build orchestration
"""

__version__ = "0.1.0"
