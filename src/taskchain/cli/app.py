"""
Root Typer application for the taskchain CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from taskchain.cli.utils import console, import_handler_modules, print_json, print_table

app = Typer(
    name="taskchain",
    help="taskchain — dispatch task signatures and their continuation chains.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from taskchain import __version__

        typer.echo(f"taskchain {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """taskchain CLI — inspect handlers and run task envelopes locally."""


@app.command("handlers")
def handlers(
    modules: list[str] | None = typer.Option(  # noqa: UP007
        None, "--import", "-i", help="Module to import for handler registration"
    ),
    builtins: bool = typer.Option(True, "--builtins/--no-builtins", help="Include the built-in handlers"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List registered handlers and the argument types they accept."""
    from taskchain.execution.registry import get_default_registry

    if builtins:
        from taskchain.execution.handlers import register_builtin_handlers

        register_builtin_handlers()
    import_handler_modules(modules or [])

    entries = get_default_registry().list_with_metadata()
    if as_json:
        print_json(entries)
        return

    rows = [
        {
            "name": entry["name"],
            "params": ", ".join(f"{p['name']}: {p['accepts']}" for p in entry["params"]) or "-",
            "description": (entry["description"] or "").splitlines()[0] if entry["description"] else "",
        }
        for entry in entries
    ]
    print_table(rows, title="Registered handlers")
    console.print(f"\n[dim]{len(rows)} handler(s)[/dim]")


# ── Sub-command registration ─────────────────────────────────────────────

from taskchain.cli.worker import app as worker_app  # noqa: E402

app.add_typer(worker_app, name="worker", help="Run task envelopes through a local worker.")
