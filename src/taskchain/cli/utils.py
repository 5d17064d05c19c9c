"""
CLI utility helpers — consoles, handler-module loading and output formatting.
"""

from __future__ import annotations

import importlib
import json
from collections.abc import Iterable
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def import_handler_modules(modules: Iterable[str]) -> list[str]:
    """Import modules whose ``@register_task`` decorators populate the registry.

    Exits with code 1 when a module cannot be imported.
    """
    loaded = []
    for module in modules:
        try:
            importlib.import_module(module)
        except ImportError as exc:
            err_console.print(f"[bold red]Error[/bold red]: cannot import {module!r}: {exc}")
            raise typer.Exit(code=1) from exc
        loaded.append(module)
    return loaded


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of flat dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(value) if value is not None else "" for value in row.values()))
    console.print(table)
