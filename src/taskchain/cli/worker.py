"""
CLI: ``taskchain worker`` — feed task envelopes through a local worker.

The envelope is enqueued on an :class:`InMemoryBroker`, consumed by a
:class:`Worker`, and the continuations it publishes are printed as JSON.
With ``--follow`` the published continuations are consumed as well, so a
whole chain runs to completion in-process.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from taskchain.cli.utils import err_console, import_handler_modules, print_json

app = typer.Typer(no_args_is_help=True)


def _read_envelope(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        err_console.print(f"[bold red]Error[/bold red]: envelope file not found: {source}")
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8")


@app.command("run")
def run(
    envelope: str = typer.Argument(..., help="Path to a JSON task envelope, or '-' for stdin"),
    modules: list[str] | None = typer.Option(  # noqa: UP007
        None, "--import", "-i", help="Module to import for handler registration"
    ),
    follow: bool = typer.Option(False, "--follow/--no-follow", help="Also consume published continuations"),
    max_messages: int = typer.Option(100, "--max-messages", min=1, help="Delivery limit with --follow"),
    builtins: bool = typer.Option(True, "--builtins/--no-builtins", help="Register the built-in handlers"),
    consumer_tag: str = typer.Option("taskchain-cli", "--consumer-tag", help="Consumer tag bound into logs"),
) -> None:
    """Process one task envelope and print the continuations it publishes.

    Example::

        taskchain worker run task.json
        echo '{"Name": "add", "Args": [...]}' | taskchain worker run - --follow
    """
    from taskchain.core.errors import ConfigError, DecodeError, PublishError
    from taskchain.core.logging import configure_logging
    from taskchain.core.settings import get_settings
    from taskchain.execution.broker import InMemoryBroker
    from taskchain.execution.registry import get_default_registry
    from taskchain.execution.signature import decode_signature
    from taskchain.execution.worker import Worker

    try:
        settings = get_settings()
    except ConfigError as exc:
        err_console.print(f"[bold red]Configuration error[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc
    configure_logging(level=settings.log_level, json_format=settings.json_logs, stream=sys.stderr)

    if builtins:
        from taskchain.execution.handlers import register_builtin_handlers

        register_builtin_handlers()
    import_handler_modules(modules or [])

    body = _read_envelope(envelope)
    try:
        signature = decode_signature(body)
    except DecodeError as exc:
        err_console.print(f"[bold red]Invalid envelope[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc

    broker = InMemoryBroker(max_messages=max_messages if follow else 1)
    broker.send_task(signature)
    worker = Worker(get_default_registry(), publisher=broker, consumer_tag=consumer_tag)

    try:
        worker.launch(broker, settings)
    except PublishError as exc:
        err_console.print(f"[bold red]Publish failed[/bold red]: {exc}")
        raise typer.Exit(code=1) from exc

    print_json([published.to_dict() for published in broker.published])
    stats = broker.stats()
    err_console.print(
        f"[dim]delivered={stats['delivered']} published={stats['published']} pending={stats['pending']}[/dim]"
    )
    if follow and stats["pending"]:
        err_console.print(f"[yellow]Stopped after {max_messages} message(s), {stats['pending']} still pending[/yellow]")
