"""CLI interface for gyz using Typer.

Main entry point for the application. Handles command definitions,
argument parsing, progress display, and Rich console output.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from . import __version__
from .config import ACCESS_TOKEN_ENV, ConfigError, has_access_token, load_gyazo_config
from .models import UploadOutcome
from .options import FlagSource, InteractiveSource, build_upload_option
from .pipeline import DEFAULT_PARALLEL, UploadBatchError, UploadReporter, run_uploads
from .upload import GyazoClient
from .utils import (
    OUTPUT_FORMATS,
    console,
    copy_to_clipboard,
    err_console,
    format_output,
    print_error,
    print_success,
    print_warning,
)

COMMAND_NAMES = {"upload"}
GLOBAL_FLAGS = {"--help", "--version"}


app = typer.Typer(
    name="gyz",
    help="Upload images to Gyazo",
    add_completion=False,
)


def setup_logging(quiet: bool) -> None:
    """Route log records to a Rich handler, or drop them when quiet."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if quiet:
        root_logger.addHandler(logging.NullHandler())
        return

    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)


class ProgressReporter(UploadReporter):
    """Shows per-file results on a Rich progress bar."""

    def __init__(self, progress: Progress, verbose: bool = True) -> None:
        self.progress = progress
        self.verbose = verbose
        self.task = progress.add_task("[cyan]Uploading...", total=None)

    def on_resolved(self, paths: list[str]) -> None:
        self.progress.update(self.task, total=len(paths))

    def on_start(self, path: str) -> None:
        self.progress.update(self.task, description=f"[cyan]Uploading {escape(Path(path).name)}...")

    def on_success(self, path: str, url: str) -> None:
        if self.verbose:
            self.progress.console.print(f"[green]✓[/green] {escape(path)} → {url}")
        self.progress.advance(self.task)

    def on_failure(self, path: str, error: BaseException) -> None:
        if self.verbose:
            self.progress.console.print(f"[red]✗[/red] failed to upload {escape(path)}: {escape(str(error))}")
        self.progress.advance(self.task)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"gyz {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Upload image files and folders to Gyazo."""
    if not has_access_token():
        print_error(f"environment variable {ACCESS_TOKEN_ENV} is not set")
        raise typer.Exit(1)


@app.command()
def upload(
    paths: list[Path] = typer.Argument(
        ...,
        help="Image files (jpg, png, gif) or folders to upload",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Do not log messages",
    ),
    parallel: int = typer.Option(
        DEFAULT_PARALLEL,
        "--parallel",
        "-p",
        help="Number of parallel uploads",
        min=1,
    ),
    interactive: bool = typer.Option(
        False,
        "--interactive",
        "-i",
        help="Ask for upload options interactively",
    ),
    desc: str = typer.Option("", "--desc", help="Description (comments or tags)"),
    app_name: str = typer.Option("", "--app", help="Application the capture came from"),
    access_policy: str = typer.Option("", "--access-policy", help="anyone|only_me"),
    metadata_is_public: bool = typer.Option(
        False,
        "--metadata-is-public",
        help="Make URL, title and description public",
    ),
    exif: bool = typer.Option(False, "--exif", help="Use EXIF capture time and camera info"),
    title: str = typer.Option("", "--title", help="Title of the capture"),
    referer_url: str = typer.Option("", "--referer-url", help="Source URL of the capture"),
    collection_id: str = typer.Option("", "--collection-id", help="Collection to add images to"),
    created_at: str = typer.Option("", "--created-at", help="Capture time (ISO 8601)"),
    output_format: str = typer.Option(
        "plain",
        "--output-format",
        "-o",
        help="Output format: plain|markdown|html",
    ),
    copy: bool = typer.Option(False, "--copy", "-c", help="Copy the URLs to the clipboard"),
) -> None:
    """Upload images to Gyazo."""
    setup_logging(quiet)

    if output_format not in OUTPUT_FORMATS:
        print_error(f"Unknown output format: {output_format}")
        raise typer.Exit(1)

    try:
        config = load_gyazo_config()

        if interactive:
            source = InteractiveSource(console=err_console)
        else:
            source = FlagSource({
                "desc": desc,
                "app": app_name,
                "access_policy": access_policy,
                "metadata_is_public": metadata_is_public,
                "exif": exif,
                "title": title,
                "referer_url": referer_url,
                "collection_id": collection_id,
                "created_at": created_at,
            })
        option = build_upload_option(source)

        client = GyazoClient(config)
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=err_console,
                disable=quiet,
            ) as progress:
                reporter = ProgressReporter(progress, verbose=not quiet)
                outcomes = run_uploads(
                    [str(p) for p in paths],
                    option,
                    client,
                    max_parallel=parallel,
                    reporter=reporter,
                )
        finally:
            client.close()

    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)
    except OSError as e:
        print_error(f"Failed to list files: {e}")
        raise typer.Exit(1)
    except UploadBatchError as e:
        report_results(e.outcomes, output_format, copy, quiet)
        print_error(str(e))
        raise typer.Exit(1)

    if not outcomes:
        print_warning("No supported images found")
        return

    report_results(outcomes, output_format, copy, quiet)


def report_results(outcomes: list[UploadOutcome], output_format: str, copy: bool, quiet: bool) -> None:
    """Print successful URLs to stdout and optionally copy them."""
    output = format_output(outcomes, output_format)
    if not output:
        return

    console.print(output, markup=False, highlight=False, soft_wrap=True)

    uploaded = sum(1 for o in outcomes if o.ok)
    if copy:
        if copy_to_clipboard(output):
            if not quiet:
                print_success(f"{uploaded} URL{'s' if uploaded != 1 else ''} copied to clipboard")
        else:
            print_warning("Could not copy to clipboard")


def normalize_args(args: list[str]) -> list[str]:
    """Make `upload` the default command.

    `gyz a.png` runs as `gyz upload a.png`; subcommands and global flags
    are left alone.
    """
    if not args:
        return args
    if args[0] in COMMAND_NAMES or args[0] in GLOBAL_FLAGS:
        return args
    return ["upload", *args]


def main() -> None:
    """Main entry point for the CLI."""
    app(args=normalize_args(sys.argv[1:]), prog_name="gyz")


if __name__ == "__main__":
    main()
