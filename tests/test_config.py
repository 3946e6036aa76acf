from pathlib import Path

import pytest

from paper_inbox.config import build_config, default_config


def test_default_config_expands_home() -> None:
    config = default_config()

    assert "~" not in str(config.inbox_root)
    assert config.pdf_viewer == "zathura"
    assert config.library_command == ("papis",)
    assert config.debug_mode is False


def test_build_config_splits_library_command(tmp_path: Path) -> None:
    config = build_config(
        inbox_root=tmp_path,
        pdf_viewer="evince",
        debug_mode=True,
        library_command="papis -l 'my papers'",
        prompter="rich",
        http_timeout=10,
    )

    assert config.library_command == ("papis", "-l", "my papers")
    assert config.pdf_viewer == "evince"
    assert config.prompter == "rich"


@pytest.mark.parametrize(
    ("library_command", "http_timeout"),
    [("", 30), ("papis", 0)],
)
def test_build_config_rejects_invalid_values(
    tmp_path: Path, library_command: str, http_timeout: int
) -> None:
    with pytest.raises(ValueError):
        build_config(
            inbox_root=tmp_path,
            pdf_viewer="zathura",
            debug_mode=False,
            library_command=library_command,
            prompter="gum",
            http_timeout=http_timeout,
        )
