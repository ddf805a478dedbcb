"""Error types and error display for buildplan.

Detection never raises for missing files; these errors cover the outer
surface: bad configuration, unknown plan types and output problems.
"""

import sys
from typing import List, Optional, Self, Tuple

from rich.console import Console
from rich.panel import Panel

console = Console(stderr=True)


class BuildPlanError(Exception):
    """Base exception class for buildplan errors."""

    def __init__(self: Self, message: str, suggestions: Optional[List[str]] = None) -> None:
        """Initialize buildplan error.

        Args:
            message: The error message to display.
            suggestions: Optional list of recovery suggestions.
        """
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []


class ConfigurationError(BuildPlanError):
    """Raised when buildplan.json is unreadable or invalid."""
    pass


class UnknownPlanTypeError(BuildPlanError):
    """Raised when a plan type name does not match any ecosystem."""
    pass


class ProjectNotFoundError(BuildPlanError):
    """Raised when the project directory does not exist."""
    pass


class DockerfileExistsError(BuildPlanError):
    """Raised when writing would overwrite an existing Dockerfile."""
    pass


# Keywords in an error message mapped to recovery hints. Checked in order.
ERROR_PATTERNS: List[Tuple[str, Tuple[str, ...], List[str]]] = [
    ('invalid_json', ('json', 'expecting value', 'decode'), [
        "Check buildplan.json for trailing commas or missing quotes",
        "Validate the file with: python -m json.tool buildplan.json",
    ]),
    ('permission_denied', ('permission denied', 'read-only file system'), [
        "Check write permissions on the output directory",
        "Print the Dockerfile to stdout instead of using --output",
    ]),
]

DEFAULT_SUGGESTIONS = [
    "Run again with --verbose to see how the project was classified",
    "Force an ecosystem with --plan-type",
]


class ErrorHandler:
    """Renders errors as a panel with recovery hints."""

    def identify_error_type(self: Self, error_message: str) -> Optional[str]:
        """Return the name of the first pattern whose keyword appears in the message."""
        message = error_message.lower()
        return next(
            (name for name, keywords, _ in ERROR_PATTERNS if any(k in message for k in keywords)),
            None,
        )

    def get_suggestions(self: Self, error_message: str) -> List[str]:
        error_type = self.identify_error_type(error_message)
        for name, _, suggestions in ERROR_PATTERNS:
            if name == error_type:
                return suggestions
        return DEFAULT_SUGGESTIONS

    def display_error(self: Self, error: Exception, context: Optional[str] = None) -> None:
        """Print the error, prefixed by what was being done.

        Suggestions carried by a BuildPlanError win over pattern matches.
        """
        suggestions = getattr(error, 'suggestions', None) or self.get_suggestions(str(error))

        body = f"[bold]Context:[/bold] {context}\n\n" if context else ""
        body += f"[bold red]Error:[/bold red] {error}\n\n[bold blue]Suggested solutions:[/bold blue]"
        body += "".join(f"\n  {i}. {hint}" for i, hint in enumerate(suggestions, 1))

        console.print(Panel(body, title="[bold red]buildplan error[/bold red]", border_style="red", expand=False))


def handle_exception(error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
    """Display an error and exit with exit_code."""
    ErrorHandler().display_error(error, context)
    sys.exit(exit_code)
