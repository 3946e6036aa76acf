"""Runtime configuration for paper-inbox."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

DEFAULT_INBOX_ROOT = Path("~/papers/inbox")
DEFAULT_PDF_VIEWER = "zathura"
DEFAULT_LIBRARY_COMMAND = "papis"
DEFAULT_HTTP_TIMEOUT = 30
_USER_AGENT = "paper-inbox/0.1.0"

PrompterName = Literal["gum", "rich"]


@dataclass(frozen=True)
class InboxConfig:
    """Configuration shared by every component.

    Attributes:
        inbox_root: Directory holding one subfolder per paper.
        pdf_viewer: Executable name of the PDF viewer to inspect and launch.
        debug_mode: Whether to trace external commands at DEBUG level.
        library_command: Argument vector prefix for the papis executable.
        prompter: Prompt backend name.
        http_timeout: Timeout in seconds for HTTP downloads.
        user_agent: User-Agent header for HTTP downloads.
    """

    inbox_root: Path
    pdf_viewer: str = DEFAULT_PDF_VIEWER
    debug_mode: bool = False
    library_command: tuple[str, ...] = (DEFAULT_LIBRARY_COMMAND,)
    prompter: PrompterName = "gum"
    http_timeout: int = DEFAULT_HTTP_TIMEOUT
    user_agent: str = _USER_AGENT


def default_config() -> InboxConfig:
    """Build the default configuration from module constants.

    Returns:
        InboxConfig rooted at the expanded default inbox path.
    """

    return InboxConfig(inbox_root=DEFAULT_INBOX_ROOT.expanduser())


def build_config(
    *,
    inbox_root: Path,
    pdf_viewer: str,
    debug_mode: bool,
    library_command: str,
    prompter: PrompterName,
    http_timeout: int,
) -> InboxConfig:
    """Build a configuration from CLI/environment values.

    Args:
        inbox_root: Inbox directory, may contain a leading ``~``.
        pdf_viewer: PDF viewer executable name.
        debug_mode: Whether debug tracing is enabled.
        library_command: Shell-style library command string.
        prompter: Prompt backend name.
        http_timeout: HTTP timeout in seconds.
    Returns:
        Frozen InboxConfig.
    Raises:
        ValueError: If the library command is empty or the timeout is not positive.
    """

    command = tuple(shlex.split(library_command))
    if not command:
        raise ValueError("library_command must not be empty")
    if http_timeout <= 0:
        raise ValueError("http_timeout must be > 0")
    return InboxConfig(
        inbox_root=inbox_root.expanduser(),
        pdf_viewer=pdf_viewer,
        debug_mode=debug_mode,
        library_command=command,
        prompter=prompter,
        http_timeout=http_timeout,
    )
