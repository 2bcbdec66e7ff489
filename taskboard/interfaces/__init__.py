"""Interfaces layer for Taskboard.

Adapters for external interactions:
- CLI: Command-line interface using Typer
- API: REST API using FastAPI

The interfaces layer accepts user input, calls the Tracker facade and
formats output. It holds no business rules.
"""

from taskboard.interfaces.cli import app

__all__ = ["app"]
