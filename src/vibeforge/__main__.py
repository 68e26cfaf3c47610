"""Vibeforge CLI entry point."""

from vibeforge.cli import app

if __name__ == "__main__":
    app()
