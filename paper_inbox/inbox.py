"""Inbox store: one folder per paper under the configured root."""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from paper_inbox.config import InboxConfig
from paper_inbox.processes import OpenDocument

LOGGER = logging.getLogger(__name__)

PAPER_LINK = "paper.pdf"
COMMENTS_FILE = "comments.txt"
BIBLIOGRAPHY_FILE = "paper.bib"
_RESERVED_NAMES = {PAPER_LINK, COMMENTS_FILE, BIBLIOGRAPHY_FILE}


class PaperNotFoundError(LookupError):
    """Raised when an inbox position does not match any folder."""


@dataclass(frozen=True)
class PaperEntry:
    """A per-paper folder and the files it holds.

    Attributes:
        folder: Folder path, unique per paper.
        original_file: Copied source file, None if it cannot be found.
        paper_link: Canonical ``paper.pdf`` path inside the folder.
        comments: Comments file path when present.
        bibliography: BibTeX file path when present.
    """

    folder: Path
    original_file: Path | None
    paper_link: Path
    comments: Path | None = None
    bibliography: Path | None = None

    @property
    def name(self) -> str:
        """Return the folder name."""

        return self.folder.name

    @classmethod
    def from_folder(cls, folder: Path) -> "PaperEntry":
        """Describe an existing inbox folder.

        Args:
            folder: Per-paper folder.
        Returns:
            PaperEntry with optional files filled in when they exist.
        Edge cases:
            When the original file is itself named ``paper.pdf`` it is both
            the original and the link.
        """

        paper_link = folder / PAPER_LINK
        original_file: Path | None = None
        if paper_link.is_symlink():
            original_file = folder / os.readlink(paper_link)
        else:
            candidates = sorted(
                path
                for path in folder.iterdir()
                if path.is_file() and path.name not in _RESERVED_NAMES
            )
            if candidates:
                original_file = candidates[0]
            elif paper_link.is_file():
                original_file = paper_link

        comments = folder / COMMENTS_FILE
        bibliography = folder / BIBLIOGRAPHY_FILE
        return cls(
            folder=folder,
            original_file=original_file,
            paper_link=paper_link,
            comments=comments if comments.exists() else None,
            bibliography=bibliography if bibliography.exists() else None,
        )


@dataclass
class FillReport:
    """Outcome of staging the documents open in the viewer."""

    staged: list[Path] = field(default_factory=list)
    skipped: list[OpenDocument] = field(default_factory=list)


def enumerate_entries(config: InboxConfig) -> list[Path]:
    """List per-paper folders in directory read order.

    Args:
        config: Runtime configuration naming the inbox root.
    Returns:
        Folder paths in the order the filesystem returns them.
    Edge cases:
        Returns an empty list when the inbox root does not exist.
    """

    if not config.inbox_root.is_dir():
        return []
    with os.scandir(config.inbox_root) as entries:
        return [Path(entry.path) for entry in entries if entry.is_dir()]


def build_index(config: InboxConfig) -> dict[int, Path]:
    """Map 1-based positions to folders from a fresh enumeration.

    Positions are only meaningful for this snapshot. Any change to the inbox
    can shift them.
    """

    return {
        position: folder
        for position, folder in enumerate(enumerate_entries(config), start=1)
    }


def index_of(config: InboxConfig, position: int) -> Path:
    """Resolve a 1-based position against the current listing.

    Args:
        config: Runtime configuration naming the inbox root.
        position: 1-based index as displayed by ``list``.
    Returns:
        Folder at that position.
    Raises:
        PaperNotFoundError: If no folder is at that position.
    """

    entries = enumerate_entries(config)
    if position < 1 or position > len(entries):
        raise PaperNotFoundError(
            f"No paper at index {position} (inbox has {len(entries)})."
        )
    return entries[position - 1]


def folder_name_for(source: Path) -> str:
    """Derive the per-paper folder name from a source filename."""

    name = source.name
    if name.lower().endswith(".pdf"):
        return name[: -len(".pdf")]
    return name


def stage(config: InboxConfig, source: Path) -> Path:
    """Copy a file into its per-paper folder and link ``paper.pdf`` to it.

    Args:
        config: Runtime configuration naming the inbox root.
        source: File to stage.
    Returns:
        The per-paper folder.
    Raises:
        FileNotFoundError: If the source file does not exist.
        OSError: If copying or linking fails.
    Edge cases:
        Staging the same source again reuses the folder and leaves one copy
        and one link.
    """

    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    folder = config.inbox_root / folder_name_for(source)
    folder.mkdir(parents=True, exist_ok=True)

    destination = folder / source.name
    if destination.exists() and (
        os.path.samefile(source, destination)
        or filecmp.cmp(source, destination, shallow=False)
    ):
        LOGGER.debug("Already staged: %s", destination)
    else:
        shutil.copy2(source, destination)

    if destination.name != PAPER_LINK:
        link = folder / PAPER_LINK
        if link.is_symlink() or link.exists():
            link.unlink()
        link.symlink_to(destination.name)
    return folder


def fill(config: InboxConfig, documents: Iterable[OpenDocument]) -> FillReport:
    """Stage every document open in the viewer.

    Args:
        config: Runtime configuration.
        documents: Open documents reported by the process inspector.
    Returns:
        FillReport listing staged folders and skipped documents.
    Edge cases:
        Documents that resolve to a file already under the inbox root, such as
        a staged ``paper.pdf`` reopened from the inbox, are skipped.
    """

    report = FillReport()
    config.inbox_root.mkdir(parents=True, exist_ok=True)
    inbox_root = config.inbox_root.resolve()
    for document in documents:
        if not document.file_path:
            LOGGER.warning("Skipping pid %s: no open file.", document.pid)
            report.skipped.append(document)
            continue
        source = Path(document.file_path).resolve()
        if not source.is_file():
            LOGGER.warning(
                "Skipping pid %s: %s is not a file.", document.pid, source
            )
            report.skipped.append(document)
            continue
        if source.is_relative_to(inbox_root):
            LOGGER.info(
                "Skipping pid %s: %s is already in the inbox.", document.pid, source
            )
            report.skipped.append(document)
            continue
        report.staged.append(stage(config, source))
    return report


def ensure_comments(folder: Path) -> Path:
    """Create an empty comments file if the folder has none."""

    comments = folder / COMMENTS_FILE
    comments.touch(exist_ok=True)
    return comments


def delete(folder: Path) -> None:
    """Remove a per-paper folder and everything in it.

    Irrecoverable; callers must confirm with the user first.
    """

    LOGGER.debug("Deleting %s", folder)
    shutil.rmtree(folder)


def clear_all(config: InboxConfig) -> int:
    """Remove every entry under the inbox root, keeping the root itself.

    Args:
        config: Runtime configuration naming the inbox root.
    Returns:
        Number of entries removed.
    """

    if not config.inbox_root.is_dir():
        return 0
    removed = 0
    for child in list(config.inbox_root.iterdir()):
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
        removed += 1
    LOGGER.debug("Removed %s entries from %s", removed, config.inbox_root)
    return removed
