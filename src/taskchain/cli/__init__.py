"""taskchain command-line interface (``taskchain``)."""

from taskchain.cli.app import app

__all__ = ["app"]
