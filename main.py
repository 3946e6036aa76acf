"""Compatibility entrypoint for running the CLI via python main.py."""

from paper_inbox.cli import run


def main() -> None:
    """Invoke the Typer CLI app."""
    run()


if __name__ == "__main__":
    main()
