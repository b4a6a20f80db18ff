"""Entry point for running latinspeak as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the latinspeak CLI application."""
    app()


if __name__ == "__main__":
    main()
