from pathlib import Path

from typer.testing import CliRunner

from paper_inbox import cli, inbox, workflow
from paper_inbox.config import InboxConfig


class ScriptedPrompter:
    def __init__(self, choices=(), confirms=()):
        self._choices = list(choices)
        self._confirms = list(confirms)

    def choose(self, options, header=""):
        return self._choices.pop(0)

    def input(self, prompt):
        return None

    def confirm(self, prompt):
        return self._confirms.pop(0)

    def choose_file(self, start):
        return None


def _seed_inbox(tmp_path: Path, *names: str) -> Path:
    config = InboxConfig(inbox_root=tmp_path / "inbox")
    for name in names:
        source = tmp_path / "downloads" / f"{name}.pdf"
        source.parent.mkdir(parents=True, exist_ok=True)
        source.write_bytes(b"%PDF")
        inbox.stage(config, source)
    return config.inbox_root


def test_no_command_prints_help() -> None:
    result = CliRunner().invoke(cli.app, [])

    assert result.exit_code == 0
    assert "Usage" in result.output


def test_unknown_command_fails_with_usage() -> None:
    result = CliRunner().invoke(cli.app, ["frobnicate"])

    assert result.exit_code != 0


def test_list_reads_inbox_from_environment(tmp_path: Path) -> None:
    root = _seed_inbox(tmp_path, "attention", "bert")

    result = CliRunner().invoke(
        cli.app, ["list"], env={"PAPERS_INBOX_FOLDER": str(root)}
    )

    assert result.exit_code == 0
    assert "attention" in result.output
    assert "bert" in result.output


def test_list_empty_inbox(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli.app, ["--inbox", str(tmp_path / "missing"), "list"]
    )

    assert result.exit_code == 0
    assert "Inbox is empty" in result.output


def test_tree_shows_link_targets(tmp_path: Path) -> None:
    root = _seed_inbox(tmp_path, "gpt")

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "tree"])

    assert result.exit_code == 0
    assert "paper.pdf -> gpt.pdf" in result.output


def test_view_metadata_aliases(tmp_path: Path) -> None:
    root = _seed_inbox(tmp_path, "gpt")
    (root / "gpt" / inbox.COMMENTS_FILE).write_text(
        "read section 3", encoding="utf-8"
    )
    runner = CliRunner()

    for args in (["view", "metadata", "1"], ["meta", "1"], ["view_meta", "1"]):
        result = runner.invoke(cli.app, ["--inbox", str(root), *args])
        assert result.exit_code == 0, args
        assert "read section 3" in result.output


def test_view_paper_opens_viewer(tmp_path: Path, monkeypatch) -> None:
    root = _seed_inbox(tmp_path, "gpt")
    opened: list[tuple[str, Path]] = []
    monkeypatch.setattr(
        workflow, "open_in_viewer", lambda viewer, path: opened.append((viewer, path))
    )

    result = CliRunner().invoke(
        cli.app, ["--inbox", str(root), "--viewer", "evince", "pdf", "1"]
    )

    assert result.exit_code == 0
    assert opened == [("evince", root / "gpt" / inbox.PAPER_LINK)]


def test_view_out_of_range_exits_with_code_1(tmp_path: Path) -> None:
    root = _seed_inbox(tmp_path, "gpt")

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "view", "paper", "2"])

    assert result.exit_code == 1
    assert "No paper at index 2" in result.output


def test_process_index_runs_per_paper_menu(tmp_path: Path, monkeypatch) -> None:
    root = _seed_inbox(tmp_path, "gpt")
    edited: list[Path] = []
    monkeypatch.setattr(
        cli, "make_prompter", lambda _config: ScriptedPrompter(["comment"])
    )
    monkeypatch.setattr(workflow, "edit_file", edited.append)

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "process", "1"])

    assert result.exit_code == 0
    assert edited == [root / "gpt" / inbox.COMMENTS_FILE]
    assert edited[0].exists()


def test_process_rejects_unknown_target(tmp_path: Path, monkeypatch) -> None:
    root = _seed_inbox(tmp_path, "gpt")
    monkeypatch.setattr(cli, "make_prompter", lambda _config: ScriptedPrompter())

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "process", "first"])

    assert result.exit_code == 1


def test_empty_with_yes_clears_inbox(tmp_path: Path) -> None:
    root = _seed_inbox(tmp_path, "a", "b")

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "empty", "--yes"])

    assert result.exit_code == 0
    assert list(root.iterdir()) == []


def test_empty_declined_keeps_inbox(tmp_path: Path, monkeypatch) -> None:
    root = _seed_inbox(tmp_path, "a")
    monkeypatch.setattr(
        cli, "make_prompter", lambda _config: ScriptedPrompter(confirms=[False])
    )

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "empty"])

    assert result.exit_code == 0
    assert (root / "a").is_dir()


def test_interactive_exits_from_top_menu(tmp_path: Path, monkeypatch) -> None:
    root = _seed_inbox(tmp_path, "a")
    monkeypatch.setattr(
        cli, "make_prompter", lambda _config: ScriptedPrompter(["list", "exit"])
    )

    result = CliRunner().invoke(cli.app, ["--inbox", str(root), "interactive"])

    assert result.exit_code == 0
    assert "Comments" in result.output


def test_fill_reports_external_failure(tmp_path: Path, monkeypatch) -> None:
    def broken_documents(_config):
        raise FileNotFoundError("pgrep not found")

    monkeypatch.setattr(workflow, "open_documents", broken_documents)

    result = CliRunner().invoke(cli.app, ["--inbox", str(tmp_path / "inbox"), "fill"])

    assert result.exit_code == 2
    assert "pgrep not found" in result.output


def test_invalid_timeout_is_rejected(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli.app, ["--inbox", str(tmp_path), "--http-timeout", "0", "list"]
    )

    assert result.exit_code == 1
