"""Exceptions raised by the rendering context."""

from typing import List, Optional, Sequence


class LatexBuildError(Exception):
    """Base class for build failures raised by latexflow."""


class ToolInvocationError(LatexBuildError):
    """
    Exception raised when an external tool exits with a non-zero status.

    Attributes:
        message: Diagnostic message from the failed invocation
        command: Executable that was run
        arguments: Arguments passed to the executable
        exit_code: Exit status (None if the tool could not be started)
        errors: Errors parsed from the engine log, if any
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        arguments: Optional[Sequence[str]] = None,
        exit_code: Optional[int] = None,
        errors: Optional[List[str]] = None,
    ):
        self.message = message
        self.command = command
        self.arguments = list(arguments or [])
        self.exit_code = exit_code
        self.errors = list(errors or [])

        parts = [message]

        if self.errors:
            parts.append("\nEngine errors:")
            # Keep the message readable; the full list stays on .errors
            parts.extend(f"  {err}" for err in self.errors[:5])
            if len(self.errors) > 5:
                parts.append(f"  ... and {len(self.errors) - 5} more errors")

        super().__init__("\n".join(parts))
