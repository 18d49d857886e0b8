"""Anchor service CLI bootstrap."""

from __future__ import annotations

from anchorsvc.cli import app

if __name__ == "__main__":
    app()
