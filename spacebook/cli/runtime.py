"""Shared plumbing for CLI commands: stores, session, event loop, errors."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, NoReturn, TypeVar

import typer
from rich import print as rprint

from spacebook.api.result import Result
from spacebook.api.transport import UnreachableError
from spacebook.content.drafts import DraftStore
from spacebook.content.models import Session
from spacebook.content.session import NotAuthenticatedError, SessionStore
from spacebook.content.storage import get_store

T = TypeVar("T")


def sessions() -> SessionStore:
    return SessionStore(get_store())


def drafts() -> DraftStore:
    return DraftStore(get_store())


def require_session() -> Session:
    """Load the session once at command start; everything else receives it."""
    try:
        return sessions().require()
    except NotAuthenticatedError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async command body, turning transport failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except UnreachableError as exc:
        rprint(f"[red]Server unreachable:[/red] {exc}\n[dim]Nothing was changed; try again later.[/dim]")
        raise typer.Exit(2)


def fail(result: Result) -> NoReturn:
    rprint(f"[red]✗[/red] {result.message.capitalize()}")
    if result.needs_login:
        rprint("[dim]Your session has expired. Run [cyan]spacebook auth login[/cyan].[/dim]")
    raise typer.Exit(1)
