"""Interactive menus for working through the inbox.

The workflow is a small state machine. Each handler prompts once and returns
the next state, or None when control goes back to the previous level:

    TOP_MENU -> process -> PER_PAPER -> LIBRARY_METHOD -> BIBTEX_SOURCE

Only TOP_MENU can reach EXIT.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

import requests
import typer
from rich.console import Console
from rich.markup import escape

from paper_inbox import inbox
from paper_inbox.config import InboxConfig
from paper_inbox.display import (
    listing_labels,
    position_from_label,
    render_list,
    render_metadata,
    render_tree,
)
from paper_inbox.external import edit_file, edit_text, open_in_viewer
from paper_inbox.library import ingest_from_acl, ingest_from_arxiv, ingest_from_bibtex
from paper_inbox.processes import OpenDocument, open_documents
from paper_inbox.prompts import Prompter

LOGGER = logging.getLogger(__name__)

TOP_COMMANDS = ("fill", "list", "tree", "process", "view", "empty", "exit")
PROCESS_TARGETS = ("all", "some")
VIEW_TARGETS = ("metadata", "paper")
PAPER_ACTIONS = ("comment", "delete", "add_to_library")
LIBRARY_METHODS = ("Arxiv", "ACL", "Bibtex")
BIBTEX_SOURCES = ("Paste", "File")
EXIT_CHOICE = "exit"

BIBTEX_TEMPLATE = (
    "# Paste the BibTeX entry for this paper below.\n"
    "# Lines starting with '#' are dropped.\n"
)

_INGESTION_ERRORS = (
    subprocess.CalledProcessError,
    requests.RequestException,
    OSError,
    ValueError,
)


class MenuState(Enum):
    """States of the interactive workflow."""

    TOP_MENU = "top_menu"
    PER_PAPER = "per_paper"
    LIBRARY_METHOD = "library_method"
    BIBTEX_SOURCE = "bibtex_source"
    EXIT = "exit"


def strip_comment_lines(text: str) -> str:
    """Drop lines starting with ``#`` from pasted text."""

    kept = [line for line in text.splitlines() if not line.startswith("#")]
    return "\n".join(kept).strip() + "\n" if any(kept) else ""


class WorkflowDispatcher:
    """Drive the inbox menus through a synchronous prompt backend."""

    def __init__(
        self,
        config: InboxConfig,
        prompter: Prompter,
        *,
        console: Console | None = None,
        documents: Callable[[InboxConfig], list[OpenDocument]] | None = None,
        viewer: Callable[[str, Path], None] | None = None,
        editor: Callable[[Path], None] | None = None,
        text_editor: Callable[[str, str], str] | None = None,
        run: Callable[[Sequence[str]], None] | None = None,
        http_get: Callable[..., requests.Response] | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Runtime configuration.
            prompter: Prompt backend.
            console: Optional rich console for output.
            documents: Optional open-document lister for testing.
            viewer: Optional PDF launcher for testing.
            editor: Optional file editor for testing.
            text_editor: Optional text-collecting editor for testing.
            run: Optional external command runner for the library tool.
            http_get: Optional HTTP GET function for ACL downloads.
        """

        self._config = config
        self._prompter = prompter
        self._console = console or Console()
        self._documents = documents or open_documents
        self._viewer = viewer or open_in_viewer
        self._editor = editor or edit_file
        self._text_editor = text_editor or edit_text
        self._run = run
        self._http_get = http_get
        self._handlers: dict[MenuState, Callable[[Path], MenuState | None]] = {
            MenuState.PER_PAPER: self._per_paper,
            MenuState.LIBRARY_METHOD: self._library_method,
            MenuState.BIBTEX_SOURCE: self._bibtex_source,
        }

    @property
    def config(self) -> InboxConfig:
        """Return the active configuration."""

        return self._config

    # Top level

    def run(self) -> None:
        """Loop on the top menu until the user exits."""

        state = MenuState.TOP_MENU
        while state is not MenuState.EXIT:
            state = self._top_menu()

    def _top_menu(self) -> MenuState:
        choice = self._prompter.choose(TOP_COMMANDS, header="paper-inbox")
        if choice is None or choice == EXIT_CHOICE:
            return MenuState.EXIT
        if choice == "fill":
            self.fill()
        elif choice == "list":
            self.show_list()
        elif choice == "tree":
            self.show_tree()
        elif choice == "process":
            self._prompt_process()
        elif choice == "view":
            self._prompt_view()
        elif choice == "empty":
            self.empty()
        else:
            typer.echo(f"Unknown command: {choice}", err=True)
        return MenuState.TOP_MENU

    def _prompt_process(self) -> None:
        index = inbox.build_index(self._config)
        choice = self._prompter.choose(
            [*PROCESS_TARGETS, *listing_labels(index)], header="process"
        )
        if choice is None:
            return
        if choice not in PROCESS_TARGETS:
            choice = str(position_from_label(choice))
        try:
            self.process(choice)
        except inbox.PaperNotFoundError as exc:
            typer.echo(str(exc), err=True)

    def _prompt_view(self) -> None:
        what = self._prompter.choose(VIEW_TARGETS, header="view")
        if what is None:
            return
        label = self._prompter.choose(
            listing_labels(inbox.build_index(self._config)), header=f"view {what}"
        )
        if label is None:
            return
        try:
            if what == "metadata":
                self.view_metadata(position_from_label(label))
            else:
                self.view_paper(position_from_label(label))
        except inbox.PaperNotFoundError as exc:
            typer.echo(str(exc), err=True)

    # Commands

    def fill(self) -> inbox.FillReport:
        """Stage every file currently open in the PDF viewer."""

        report = inbox.fill(self._config, self._documents(self._config))
        for folder in report.staged:
            self._console.print(f"Staged {escape(folder.name)}")
        self._console.print(
            f"{len(report.staged)} staged, {len(report.skipped)} skipped."
        )
        return report

    def show_list(self) -> int:
        """Print the numbered inbox listing."""

        return render_list(self._config, self._console)

    def show_tree(self) -> None:
        """Print the inbox folder tree."""

        render_tree(self._config, self._console)

    def view_metadata(self, position: int) -> None:
        """Print metadata for the paper at a listing position."""

        render_metadata(inbox.index_of(self._config, position), self._console)

    def view_paper(self, position: int) -> None:
        """Open the paper at a listing position in the PDF viewer."""

        folder = inbox.index_of(self._config, position)
        self._viewer(self._config.pdf_viewer, folder / inbox.PAPER_LINK)

    def empty(self) -> int:
        """Remove every paper from the inbox after confirmation.

        Returns:
            Number of entries removed, 0 if the user declined.
        """

        if not self._prompter.confirm(
            f"Delete everything in {self._config.inbox_root}?"
        ):
            self._console.print("Aborted.")
            return 0
        removed = inbox.clear_all(self._config)
        self._console.print(f"Removed {removed} entries.")
        return removed

    def process(self, target: str) -> None:
        """Work through papers with the per-paper menu.

        Args:
            target: ``all``, ``some`` or a 1-based listing position.
        Raises:
            ValueError: If target is neither a keyword nor an integer.
            PaperNotFoundError: If a position does not match any folder.
        """

        if target == "all":
            for folder in inbox.build_index(self._config).values():
                if not folder.is_dir():
                    LOGGER.debug("Skipping %s: removed during processing.", folder)
                    continue
                self.process_paper(folder)
        elif target == "some":
            self._process_some()
        else:
            try:
                position = int(target)
            except ValueError as exc:
                raise ValueError(
                    f"Expected 'all', 'some' or an index, got {target!r}."
                ) from exc
            self.process_paper(inbox.index_of(self._config, position))

    def _process_some(self) -> None:
        while True:
            index = inbox.build_index(self._config)
            if not index:
                self._console.print("Inbox is empty.")
                return
            choice = self._prompter.choose(
                [*listing_labels(index), EXIT_CHOICE], header="Pick a paper"
            )
            if choice is None or choice == EXIT_CHOICE:
                return
            self.process_paper(index[position_from_label(choice)])

    # Per-paper state machine

    def process_paper(self, folder: Path) -> None:
        """Run the per-paper menus for one folder until they return."""

        state: MenuState | None = MenuState.PER_PAPER
        while state is not None:
            state = self._handlers[state](folder)

    def _per_paper(self, folder: Path) -> MenuState | None:
        self._console.print(f"[bold]{escape(folder.name)}[/bold]")
        action = self._prompter.choose(PAPER_ACTIONS, header=folder.name)
        if action == "comment":
            self._editor(inbox.ensure_comments(folder))
        elif action == "delete":
            self._viewer(self._config.pdf_viewer, folder / inbox.PAPER_LINK)
            if self._prompter.confirm(f"Delete {folder.name}?"):
                inbox.delete(folder)
                self._console.print(f"Deleted {escape(folder.name)}")
        elif action == "add_to_library":
            return MenuState.LIBRARY_METHOD
        else:
            typer.echo(f"Unrecognized action: {action or '(none)'}", err=True)
        return None

    def _library_method(self, folder: Path) -> MenuState | None:
        method = self._prompter.choose(LIBRARY_METHODS, header="Add to library via")
        if method == "Bibtex":
            return MenuState.BIBTEX_SOURCE
        if method == "Arxiv":
            if not (url := self._prompter.input("arXiv PDF URL")):
                return None
            self._ingest_then_offer_delete(
                folder,
                lambda: ingest_from_arxiv(url, config=self._config, run=self._run),
            )
        elif method == "ACL":
            if not (url := self._prompter.input("ACL Anthology URL")):
                return None
            self._ingest_then_offer_delete(
                folder,
                lambda: ingest_from_acl(
                    url,
                    config=self._config,
                    run=self._run,
                    http_get=self._http_get,
                ),
            )
        else:
            typer.echo(f"Unrecognized method: {method or '(none)'}", err=True)
        return None

    def _bibtex_source(self, folder: Path) -> MenuState | None:
        source = self._prompter.choose(BIBTEX_SOURCES, header="BibTeX from")
        bib_path = folder / inbox.BIBLIOGRAPHY_FILE
        if source == "Paste":
            pasted = self._text_editor(BIBTEX_TEMPLATE, ".bib")
            bib_path.write_text(strip_comment_lines(pasted), encoding="utf-8")
        elif source == "File":
            if (picked := self._prompter.choose_file(Path.home())) is None:
                return None
            shutil.copyfile(picked, bib_path)
        else:
            typer.echo(f"Unrecognized source: {source or '(none)'}", err=True)
            return None

        self._ingest_then_offer_delete(
            folder,
            lambda: ingest_from_bibtex(
                folder / inbox.PAPER_LINK,
                bib_path,
                config=self._config,
                run=self._run,
            ),
        )
        return None

    def _ingest_then_offer_delete(
        self,
        folder: Path,
        ingest: Callable[[], object],
    ) -> None:
        # The deletion prompt follows even a failed ingestion.
        try:
            ingest()
        except _INGESTION_ERRORS as exc:
            typer.echo(f"Adding {folder.name} to the library failed: {exc}", err=True)
        else:
            self._console.print(f"Added {escape(folder.name)} to the library.")
        if self._prompter.confirm(f"Delete {folder.name} from the inbox?"):
            inbox.delete(folder)
            self._console.print(f"Deleted {escape(folder.name)}")
