"""Inspect running PDF viewer processes and the files they have open."""

from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from paper_inbox.config import InboxConfig

LOGGER = logging.getLogger(__name__)

PROC_ROOT = Path("/proc")


@dataclass(frozen=True)
class OpenDocument:
    """A running viewer process and the file it was launched with.

    Attributes:
        pid: Process ID of the viewer.
        file_path: Last command-line argument, empty when unavailable.
    """

    pid: int
    file_path: str


def list_viewer_pids(
    viewer: str,
    *,
    run: Callable[..., subprocess.CompletedProcess] | None = None,
) -> set[int]:
    """List PIDs of processes whose name matches the viewer exactly.

    Args:
        viewer: Viewer executable name.
        run: Optional subprocess.run replacement for testing.
    Returns:
        Set of PIDs, empty when no viewer is running.
    Raises:
        subprocess.CalledProcessError: If pgrep fails for a reason other than no match.
    """

    run = run or subprocess.run
    completed = run(
        ["pgrep", "-x", viewer],
        capture_output=True,
        text=True,
        check=False,
    )
    # pgrep exits 1 when nothing matched.
    if completed.returncode == 1:
        return set()
    if completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode,
            completed.args,
            output=completed.stdout,
            stderr=completed.stderr,
        )
    return {int(line) for line in completed.stdout.split() if line.strip().isdigit()}


def resolve_open_path(pid: int, proc_root: Path | None = None) -> str:
    """Return the last command-line argument of a process.

    Args:
        pid: Process ID.
        proc_root: procfs mount point, ``/proc`` by default.
    Returns:
        The file path the viewer was launched with, or an empty string.
    Edge cases:
        Returns an empty string if the process exited or has no arguments.
        A relative argument is joined with the process working directory,
        or yields an empty string when that directory cannot be read.
    """

    process_dir = (proc_root or PROC_ROOT) / str(pid)
    try:
        raw = (process_dir / "cmdline").read_bytes()
    except OSError:
        return ""
    args = [part for part in raw.split(b"\0") if part]
    if len(args) < 2:
        return ""
    path = args[-1].decode("utf-8", errors="surrogateescape")
    if os.path.isabs(path):
        return path
    try:
        cwd = os.readlink(process_dir / "cwd")
    except OSError:
        LOGGER.debug("Cannot read working directory of pid %s.", pid)
        return ""
    return os.path.join(cwd, path)


def open_documents(
    config: InboxConfig,
    *,
    list_pids: Callable[[str], set[int]] | None = None,
    proc_root: Path | None = None,
) -> list[OpenDocument]:
    """Resolve the files open in every running viewer.

    Args:
        config: Runtime configuration naming the viewer.
        list_pids: Optional PID lister for testing.
        proc_root: Optional procfs root for testing.
    Returns:
        One OpenDocument per viewer process, in no particular order.
    """

    pids = sorted((list_pids or list_viewer_pids)(config.pdf_viewer))
    if not pids:
        LOGGER.debug("No %s processes found.", config.pdf_viewer)
        return []

    with ThreadPoolExecutor(max_workers=len(pids)) as executor:
        paths = executor.map(lambda pid: resolve_open_path(pid, proc_root), pids)
        return [
            OpenDocument(pid=pid, file_path=path) for pid, path in zip(pids, paths)
        ]
