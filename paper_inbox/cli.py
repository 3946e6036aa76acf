"""Typer-based CLI for paper-inbox."""

from __future__ import annotations

import logging
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Literal

import typer
from dotenv import load_dotenv
from rich.console import Console

from paper_inbox import inbox
from paper_inbox.config import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_INBOX_ROOT,
    DEFAULT_LIBRARY_COMMAND,
    DEFAULT_PDF_VIEWER,
    InboxConfig,
    build_config,
)
from paper_inbox.prompts import make_prompter
from paper_inbox.workflow import WorkflowDispatcher

app = typer.Typer(help="Stage, annotate and file the papers open in your PDF viewer.")
view_app = typer.Typer(help="Inspect one paper by its index in `list`.")
app.add_typer(view_app, name="view")
console = Console()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    inbox_root: Path = typer.Option(
        DEFAULT_INBOX_ROOT,
        "--inbox",
        envvar="PAPERS_INBOX_FOLDER",
        help="Inbox directory holding one folder per paper.",
    ),
    viewer: str = typer.Option(
        DEFAULT_PDF_VIEWER,
        envvar="PDF_EDITOR",
        help="PDF viewer executable to inspect and launch.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        envvar="DEBUG_MODE",
        help="Trace every external command.",
    ),
    library_command: str = typer.Option(
        DEFAULT_LIBRARY_COMMAND,
        envvar="PAPERS_LIBRARY_COMMAND",
        help="Library tool command, e.g. 'papis -l papers'.",
    ),
    prompter: Literal["gum", "rich"] = typer.Option(
        "gum",
        envvar="PAPERS_PROMPTER",
        help="Prompt backend for interactive menus.",
    ),
    http_timeout: int = typer.Option(
        DEFAULT_HTTP_TIMEOUT,
        envvar="PAPERS_HTTP_TIMEOUT",
        help="Timeout in seconds for ACL downloads.",
    ),
) -> None:
    """Build the shared configuration; show help when no subcommand is given."""

    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    try:
        ctx.obj = build_config(
            inbox_root=inbox_root,
            pdf_viewer=viewer,
            debug_mode=debug,
            library_command=library_command,
            prompter=prompter,
            http_timeout=http_timeout,
        )
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def run() -> None:
    """Load ``.env`` and invoke the Typer app."""

    load_dotenv()
    app()


def _dispatcher(ctx: typer.Context) -> WorkflowDispatcher:
    config: InboxConfig = ctx.find_root().obj
    return WorkflowDispatcher(config, make_prompter(config), console=console)


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Translate domain errors into CLI exit codes."""

    try:
        yield
    except (inbox.PaperNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except subprocess.CalledProcessError as exc:
        typer.echo(f"External command failed: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except OSError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


@app.command()
def interactive(ctx: typer.Context) -> None:
    """Pick commands from a menu until you choose exit."""

    with _cli_errors():
        _dispatcher(ctx).run()


@app.command()
def fill(ctx: typer.Context) -> None:
    """Stage every PDF open in the viewer into the inbox."""

    with _cli_errors():
        _dispatcher(ctx).fill()


@app.command("list")
def list_papers(ctx: typer.Context) -> None:
    """List inbox papers with their indices."""

    with _cli_errors():
        _dispatcher(ctx).show_list()


@app.command()
def tree(ctx: typer.Context) -> None:
    """Show the inbox folder tree."""

    with _cli_errors():
        _dispatcher(ctx).show_tree()


@app.command()
def process(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="'all', 'some' or an index from `list`."),
) -> None:
    """Comment on, delete or file papers one at a time."""

    with _cli_errors():
        _dispatcher(ctx).process(target)


@app.command()
def empty(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation."),
) -> None:
    """Delete every paper in the inbox."""

    with _cli_errors():
        if yes:
            removed = inbox.clear_all(ctx.find_root().obj)
            console.print(f"Removed {removed} entries.")
        else:
            _dispatcher(ctx).empty()


def view_metadata(
    ctx: typer.Context,
    index: int = typer.Argument(..., help="Index from `list`."),
) -> None:
    """Show files, comments and BibTeX for one paper."""

    with _cli_errors():
        _dispatcher(ctx).view_metadata(index)


def view_paper(
    ctx: typer.Context,
    index: int = typer.Argument(..., help="Index from `list`."),
) -> None:
    """Open one paper in the PDF viewer."""

    with _cli_errors():
        _dispatcher(ctx).view_paper(index)


view_app.command("metadata")(view_metadata)
view_app.command("meta", hidden=True)(view_metadata)
view_app.command("paper")(view_paper)
view_app.command("pdf", hidden=True)(view_paper)
for _alias in ("view_metadata", "view_meta", "meta"):
    app.command(_alias, hidden=True)(view_metadata)
for _alias in ("view_paper", "view_pdf", "pdf"):
    app.command(_alias, hidden=True)(view_paper)
