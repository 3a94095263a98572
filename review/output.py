"""Shared rich consoles and colour helpers for progress output."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def removed(text: str | Path) -> str:
    return f"[red]{escape(str(text))}[/]"


def ref(text: str | Path) -> str:
    return f"[yellow]{escape(str(text))}[/]"


def name(text: str) -> str:
    return f"[blue]{escape(text)}[/]"


def template(text: str | Path) -> str:
    return f"[green]{escape(str(text))}[/]"
