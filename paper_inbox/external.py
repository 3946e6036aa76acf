"""Thin wrappers around the external programs paper-inbox delegates to."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Sequence

import typer

LOGGER = logging.getLogger(__name__)


def run_tool(args: Sequence[str]) -> None:
    """Run an external command and wait for it to finish.

    Args:
        args: Argument vector, executable first.
    Raises:
        subprocess.CalledProcessError: If the command exits non-zero.
        OSError: If the executable cannot be started.
    """

    LOGGER.debug("Running: %s", shlex.join(args))
    subprocess.run(list(args), check=True)


def open_in_viewer(viewer: str, path: Path) -> None:
    """Launch the PDF viewer on a file without waiting for it.

    Args:
        viewer: Viewer executable name.
        path: File to open.
    Raises:
        OSError: If the viewer cannot be started.
    """

    args = [viewer, str(path)]
    LOGGER.debug("Launching: %s", shlex.join(args))
    subprocess.Popen(
        args,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def edit_file(path: Path) -> None:
    """Open a file in ``$VISUAL``/``$EDITOR`` and block until it closes."""

    LOGGER.debug("Editing: %s", path)
    typer.edit(filename=str(path))


def edit_text(template: str, extension: str = ".txt") -> str:
    """Collect free text through the editor.

    Args:
        template: Initial buffer contents.
        extension: Suffix for the temporary file, used for syntax highlighting.
    Returns:
        Edited text, or an empty string when the editor was closed unchanged.
    """

    edited = typer.edit(text=template, extension=extension, require_save=True)
    return edited or ""
