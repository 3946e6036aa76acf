"""Rich renderings of the inbox."""

from __future__ import annotations

import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from paper_inbox.config import InboxConfig
from paper_inbox.inbox import PaperEntry, build_index


def listing_labels(index: dict[int, Path]) -> list[str]:
    """Format an index snapshot as ``"<position> <name>"`` picker options."""

    return [f"{position} {folder.name}" for position, folder in index.items()]


def position_from_label(label: str) -> int:
    """Parse the position back out of a picker label."""

    return int(label.split(" ", 1)[0])


def render_list(config: InboxConfig, console: Console) -> int:
    """Print the numbered inbox listing.

    Returns:
        Number of papers listed.
    """

    index = build_index(config)
    if not index:
        console.print(f"Inbox is empty ({config.inbox_root}).")
        return 0

    table = Table(title=f"Inbox ({config.inbox_root})")
    table.add_column("#", justify="right")
    table.add_column("Paper")
    table.add_column("Comments", justify="center")
    table.add_column("BibTeX", justify="center")
    for position, folder in index.items():
        entry = PaperEntry.from_folder(folder)
        table.add_row(
            str(position),
            escape(entry.name),
            "yes" if entry.comments else "",
            "yes" if entry.bibliography else "",
        )
    console.print(table)
    return len(index)


def render_tree(config: InboxConfig, console: Console) -> None:
    """Print the inbox folder structure."""

    tree = Tree(f"[bold]{config.inbox_root}[/bold]")
    for position, folder in build_index(config).items():
        branch = tree.add(escape(f"{position} {folder.name}/"))
        for child in sorted(folder.iterdir()):
            if child.is_symlink():
                branch.add(escape(f"{child.name} -> {os.readlink(child)}"))
            else:
                branch.add(escape(child.name))
    console.print(tree)


def render_metadata(folder: Path, console: Console) -> None:
    """Print what is known about one paper: files, comments and BibTeX."""

    entry = PaperEntry.from_folder(folder)
    table = Table(show_header=False, box=None)
    table.add_row("Folder", str(entry.folder))
    table.add_row(
        "Original", str(entry.original_file) if entry.original_file else "missing"
    )
    table.add_row("Link", "ok" if entry.paper_link.exists() else "broken")
    console.print(Panel(table, title=escape(entry.name)))

    if entry.comments is not None:
        text = entry.comments.read_text(encoding="utf-8").strip()
        console.print(Panel(escape(text) or "(empty)", title="Comments"))
    if entry.bibliography is not None:
        text = entry.bibliography.read_text(encoding="utf-8").strip()
        console.print(Panel(escape(text) or "(empty)", title="BibTeX"))
