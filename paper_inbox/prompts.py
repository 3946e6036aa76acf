"""Synchronous prompt backends for the interactive workflow."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Protocol, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt

from paper_inbox.config import InboxConfig

LOGGER = logging.getLogger(__name__)


class Prompter(Protocol):
    """Structural type for prompt backends used by the workflow."""

    def choose(
        self, options: Sequence[str], header: str = ""
    ) -> str | None:  # pragma: no cover - protocol
        """Return the selected option, or None if the user aborted."""

    def input(self, prompt: str) -> str | None:  # pragma: no cover - protocol
        """Return a line of text, or None if the user aborted."""

    def confirm(self, prompt: str) -> bool:  # pragma: no cover - protocol
        """Return True if the user confirmed."""

    def choose_file(self, start: Path) -> Path | None:  # pragma: no cover
        """Return a picked file, or None if the user aborted."""


class GumPrompter:
    """Prompts rendered by the ``gum`` terminal tool.

    gum draws on the terminal and prints the answer on stdout. A non-zero
    exit status means the user pressed escape or ctrl-c.
    """

    def __init__(
        self,
        executable: str = "gum",
        run: Callable[..., subprocess.CompletedProcess] | None = None,
    ) -> None:
        self._executable = executable
        self._run = run or subprocess.run

    def _gum(self, *args: str) -> subprocess.CompletedProcess:
        argv = [self._executable, *args]
        LOGGER.debug("Running: %s", shlex.join(argv))
        return self._run(argv, stdout=subprocess.PIPE, text=True, check=False)

    def _answer(self, *args: str) -> str | None:
        completed = self._gum(*args)
        if completed.returncode != 0:
            return None
        return completed.stdout.strip()

    def choose(self, options: Sequence[str], header: str = "") -> str | None:
        args = ["choose"]
        if header:
            args.extend(["--header", header])
        return self._answer(*args, "--", *options)

    def input(self, prompt: str) -> str | None:
        return self._answer("input", "--placeholder", prompt)

    def confirm(self, prompt: str) -> bool:
        return self._gum("confirm", prompt).returncode == 0

    def choose_file(self, start: Path) -> Path | None:
        answer = self._answer("file", str(start))
        return Path(answer) if answer else None


class RichPrompter:
    """Plain numbered prompts drawn with rich, for terminals without gum."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def choose(self, options: Sequence[str], header: str = "") -> str | None:
        if not options:
            return None
        if header:
            self._console.print(f"[bold]{header}[/bold]")
        for number, option in enumerate(options, start=1):
            self._console.print(f"  {number}) {option}")
        answer = Prompt.ask(
            "Select",
            console=self._console,
            choices=[str(number) for number in range(1, len(options) + 1)],
            show_choices=False,
        )
        return options[int(answer) - 1]

    def input(self, prompt: str) -> str | None:
        answer = Prompt.ask(prompt, console=self._console, default="")
        return answer.strip() or None

    def confirm(self, prompt: str) -> bool:
        return Confirm.ask(prompt, console=self._console, default=False)

    def choose_file(self, start: Path) -> Path | None:
        answer = Prompt.ask(
            "File path", console=self._console, default=str(start)
        ).strip()
        if not answer:
            return None
        path = Path(answer).expanduser()
        return path if path.is_file() else None


def make_prompter(config: InboxConfig) -> Prompter:
    """Build the prompt backend named in the configuration."""

    if config.prompter == "rich":
        return RichPrompter()
    return GumPrompter()
