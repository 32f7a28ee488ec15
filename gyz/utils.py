"""Utility functions for gyz.

Provides clipboard operations, output formatting, and Rich console
messages.
"""

from pathlib import Path

import pyperclip
from rich.console import Console
from rich.markup import escape

from .models import UploadOutcome


console = Console()
err_console = Console(stderr=True)

OUTPUT_FORMATS = ("plain", "markdown", "html")


def copy_to_clipboard(text: str) -> bool:
    """Copy text to system clipboard.

    Args:
        text: Text to copy

    Returns:
        True if successful, False otherwise
    """
    try:
        pyperclip.copy(text)
        return True
    except pyperclip.PyperclipException:
        return False


def format_plain(outcomes: list[UploadOutcome]) -> str:
    """Format upload results as plain permalink URLs."""
    return '\n'.join(o.url for o in outcomes if o.url)


def format_markdown(outcomes: list[UploadOutcome]) -> str:
    """Format upload results as Markdown images, using the file name as alt text."""
    return '\n'.join(
        f"![{Path(o.path).stem}]({o.url})" for o in outcomes if o.url
    )


def format_html(outcomes: list[UploadOutcome]) -> str:
    """Format upload results as HTML links."""
    return '\n'.join(
        f'<a href="{o.url}">{Path(o.path).name}</a>' for o in outcomes if o.url
    )


def format_output(outcomes: list[UploadOutcome], format_type: str) -> str:
    """Format successful upload results.

    Args:
        outcomes: Upload outcomes (failed ones are skipped)
        format_type: Output format (plain, markdown, html)

    Returns:
        Formatted output string
    """
    formatters = {
        'plain': format_plain,
        'markdown': format_markdown,
        'html': format_html,
    }

    formatter = formatters.get(format_type, format_plain)
    return formatter(outcomes)


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    err_console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message with X mark."""
    err_console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message with exclamation mark."""
    err_console.print(f"[yellow]![/yellow] {escape(message)}")
