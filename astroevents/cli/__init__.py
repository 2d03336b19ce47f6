"""Command line entry points for astroevents."""

from __future__ import annotations

from .app import app

__all__ = ["app", "main"]


def main() -> None:
    app()
