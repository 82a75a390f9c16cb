#!/usr/bin/env python3
"""
LaTeX Build CLI

Compiles a LaTeX document in an isolated staging directory and publishes the
build products to an output directory.

Commands:
    compile - Build a document
    events  - Show recent build events

Examples:\n

    compile_latex.py compile thesis/thesis.tex                      # Output to thesis/out

    compile_latex.py compile thesis/thesis.tex -o build -i drafts   # Custom output, skip drafts/

    compile_latex.py compile paper.tex --config latexflow.yaml      # Override the toolchain
"""

import os
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from latexflow.contexts.rendering import (
    BuildRequest,
    ToolInvocationError,
    compile_latex,
    load_toolchain,
)
from latexflow.contexts.rendering.logger import setup_rendering_logger
from latexflow.utils.event_logging import get_recent_events
from latexflow.utils.timestamp import format_duration, now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Compile LaTeX documents in an isolated staging directory",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("compile")
def compile_command(
    document: Annotated[
        Path,
        typer.Argument(help="Main .tex file", exists=True, dir_okay=False),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (relative paths resolve against the document's directory)",
        ),
    ] = Path("out"),
    ignore: Annotated[
        Optional[List[str]],
        typer.Option(
            "--ignore",
            "-i",
            help="Source entry to leave out of the staging directory (repeatable)",
        ),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="YAML file overriding toolchain settings",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output on the console"),
    ] = False,
):
    """
    Compile a LaTeX document.

    Runs the engine once, then the code-execution and bibliography tools (each
    followed by another engine pass) when the engine asks for them.

    Examples:\n

        $ compile_latex.py compile thesis/thesis.tex

        $ compile_latex.py compile thesis/thesis.tex --ignore drafts --ignore old
    """
    toolchain = load_toolchain(config)

    log_dir = LOGS_PATH / f"build_{now()}"
    log_file = setup_rendering_logger(
        log_dir, engine=toolchain.engine, console_level="DEBUG" if verbose else "INFO"
    )

    typer.secho(f"\nCompiling: {document}", fg=typer.colors.BLUE, bold=True)
    typer.echo("")

    request = BuildRequest(
        source_document=document,
        output_directory=output,
        excluded_entries=frozenset(ignore or []),
    )

    try:
        report = compile_latex(request, toolchain=toolchain, verbose=verbose)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except (ToolInvocationError, OSError) as e:
        typer.echo("")
        typer.secho("✗ Build failed", fg=typer.colors.RED, bold=True)
        typer.secho(f"  {e}", fg=typer.colors.RED)
        typer.echo(f"  Partial output: {request.output_dir}")
        typer.echo(f"  Log: {log_file}")
        typer.echo("")
        raise typer.Exit(code=1)

    typer.echo("")
    typer.secho("✓ Build succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Tools: {' -> '.join(report.tools_run)}")
    typer.echo(f"  Warnings: {len(report.warnings)}")
    if report.pdf_path:
        typer.echo(f"  PDF: {report.pdf_path}")
    typer.echo(f"  Time: {format_duration(report.elapsed_time)}")
    typer.echo(f"  Log: {log_file}")
    typer.echo("")


@app.command("events")
def events_command(
    count: Annotated[
        int, typer.Option("--count", "-n", help="Number of events to show", min=1)
    ] = 10,
    document: Annotated[
        Optional[str], typer.Option("--document", "-d", help="Filter by document name")
    ] = None,
):
    """Show recent build events from the pipeline event log."""
    events = get_recent_events(count, document_name=document)
    if not events:
        typer.echo("No build events recorded (is PIPELINE_EVENTS_FILE set?)")
        raise typer.Exit()

    for event in events:
        color = typer.colors.RED if event["event_type"] == "build_failed" else None
        typer.secho(
            f"{event['timestamp']}  {event['event_type']:<16} {event['document_name']}",
            fg=color,
        )


if __name__ == "__main__":
    app()
