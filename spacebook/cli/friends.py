"""
Friend commands.

  spacebook friends list
  spacebook friends requests
  spacebook friends accept  USER
  spacebook friends decline USER
  spacebook friends add     USER
  spacebook friends search  QUERY [--friends-only]
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from spacebook.api.client import SpacebookClient
from spacebook.cli.runtime import fail, require_session, run
from spacebook.content.models import UserSummary
from spacebook.feed.engine import PostEngine
from spacebook.social.friendship import FriendRequestsInbox, FriendshipResolver, FriendsSnapshot

console = Console()
app = typer.Typer(help="Friends, friend requests and people search.")


def _user_table(title: str, users: list[UserSummary]) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="cyan", width=28)
    table.add_column("Email", width=32)
    for u in users:
        table.add_row(str(u.user_id), u.full_name, u.email)
    return table


def _render_snapshot(snapshot: FriendsSnapshot) -> None:
    if snapshot.requests:
        console.print(_user_table(f"📨 Friend requests — {len(snapshot.requests)}", snapshot.requests))
    if snapshot.friends:
        console.print(_user_table(f"👥 Friends — {len(snapshot.friends)}", snapshot.friends))
    else:
        rprint("[yellow]You have no friends yet. Try [cyan]spacebook friends search[/cyan]![/yellow]")


@app.command("list")
def list_friends() -> None:
    """Show pending requests and friends."""
    session = require_session()

    async def _list() -> None:
        async with SpacebookClient() as api:
            result = await FriendRequestsInbox(api.friends).refresh(session)
        if not result.ok:
            fail(result)
        _render_snapshot(result.body)

    run(_list())


@app.command()
def requests() -> None:
    """Show pending friend requests only."""
    session = require_session()

    async def _requests() -> None:
        async with SpacebookClient() as api:
            result = await api.friends.get_friend_requests(session)
        if not result.ok:
            fail(result)
        if not result.body:
            rprint("[green]✓ No pending friend requests.[/green]")
            return
        console.print(_user_table(f"📨 Friend requests — {len(result.body)}", result.body))

    run(_requests())


@app.command()
def accept(user_id: int) -> None:
    """Accept a friend request."""
    _answer(user_id, accept=True)


@app.command()
def decline(user_id: int) -> None:
    """Decline a friend request."""
    _answer(user_id, accept=False)


def _answer(user_id: int, *, accept: bool) -> None:
    session = require_session()

    async def _go() -> None:
        async with SpacebookClient() as api:
            inbox = FriendRequestsInbox(api.friends)
            if accept:
                result = await inbox.accept(session, user_id)
            else:
                result = await inbox.decline(session, user_id)
        if not result.ok:
            fail(result)
        rprint(f"[green]✓ {result.message.capitalize()}[/green]")
        _render_snapshot(result.body)

    run(_go())


@app.command()
def add(user_id: int) -> None:
    """Send a friend request."""
    session = require_session()

    async def _add() -> None:
        async with SpacebookClient() as api:
            resolver = FriendshipResolver(api.friends, PostEngine(api.posts))
            result = await resolver.add_friend(session, user_id)
        if not result.ok:
            fail(result)
        rprint(f"[green]✓ Friend request sent to user {user_id}.[/green]")

    run(_add())


@app.command()
def search(
    query: str = typer.Argument(..., help="Name or email to search for"),
    friends_only: bool = typer.Option(False, "--friends-only", help="Only search your friends"),
    limit: int = typer.Option(20, "--limit", "-n"),
    offset: int = typer.Option(0, "--offset"),
) -> None:
    """Search for people."""
    session = require_session()

    async def _search() -> None:
        async with SpacebookClient() as api:
            resolver = FriendshipResolver(api.friends, PostEngine(api.posts))
            result = await resolver.search(
                session,
                query,
                search_in="friends" if friends_only else "all",
                limit=limit,
                offset=offset,
            )
        if not result.ok:
            fail(result)
        if not result.body:
            rprint("[yellow]No one found.[/yellow]")
            return
        console.print(_user_table(f"🔎 Results for {query!r}", result.body))

    run(_search())
