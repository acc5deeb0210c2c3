"""
Post commands.

  spacebook posts list   [USER]            — profile feed, friendship-gated
  spacebook posts create TEXT [--on USER]
  spacebook posts show   USER POST
  spacebook posts edit   USER POST TEXT
  spacebook posts delete USER POST
  spacebook posts like   USER POST         — toggles
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from spacebook.api.client import SpacebookClient
from spacebook.cli.runtime import fail, require_session, run
from spacebook.content.models import Post, Session
from spacebook.feed.engine import LikeOutcome, PostEngine
from spacebook.feed.permissions import post_permissions
from spacebook.feed.scope import ViewScope
from spacebook.social.friendship import FriendshipResolver, ProfileView

console = Console()
app = typer.Typer(help="Read, write and like posts.")


def _format_ts(ms: int) -> str:
    return dt.datetime.fromtimestamp(ms / 1000).strftime("%d/%m/%Y %H:%M")


def _render_feed(session: Session, view: ProfileView) -> None:
    if view.friendship is None:
        rprint(f"[red]✗[/red] {view.message.capitalize()}")
        raise typer.Exit(1)

    if view.can_add_friend:
        rprint(
            f"[yellow]You are not friends with user {view.profile_id}.[/yellow]\n"
            f"[dim]Send a request with [cyan]spacebook friends add {view.profile_id}[/cyan].[/dim]"
        )
        return

    if view.posts is not None and not view.posts.ok:
        fail(view.posts)

    posts = view.posts.body if view.posts is not None else []
    if not posts:
        rprint("[yellow]No posts yet.[/yellow]")
        return

    table = Table(title=f"📝 Posts on profile {view.profile_id}", show_lines=False)
    table.add_column("ID", style="dim", width=6)
    table.add_column("Author", style="cyan", width=20)
    table.add_column("When", width=16)
    table.add_column("Text", width=48)
    table.add_column("♥", justify="right", width=4)
    table.add_column("Actions", style="dim", width=14)

    for post in posts:
        perms = post_permissions(session.user_id, view.profile_id, post)
        actions = [name for name, allowed in (
            ("like", perms.can_like),
            ("edit", perms.can_edit),
            ("delete", perms.can_delete),
        ) if allowed]
        table.add_row(
            str(post.post_id),
            post.author.full_name,
            _format_ts(post.timestamp),
            (post.text[:48] + "…") if len(post.text) > 48 else post.text,
            str(post.num_likes),
            " ".join(actions),
        )
    console.print(table)


async def _authored_post(engine: PostEngine, session: Session, user_id: int, post_id: int) -> Post:
    """Fetch a post and check the viewer may edit/delete it."""
    result = await engine.get_post(session, user_id, post_id)
    if not result.ok:
        fail(result)
    if not post_permissions(session.user_id, user_id, result.body).can_edit:
        rprint("[red]✗[/red] You can only change your own posts.")
        raise typer.Exit(1)
    return result.body


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@app.command("list")
def list_posts(
    user_id: Optional[int] = typer.Argument(None, help="Profile to show (default: you)"),
) -> None:
    """Show a profile's posts, if you are allowed to see them."""
    session = require_session()
    profile_id = user_id if user_id is not None else session.user_id

    async def _list() -> None:
        async with SpacebookClient() as api:
            resolver = FriendshipResolver(api.friends, PostEngine(api.posts))
            with ViewScope(f"profile:{profile_id}") as scope:
                await scope.run(
                    resolver.load_profile(session, profile_id),
                    lambda view: _render_feed(session, view),
                )

    run(_list())


# ---------------------------------------------------------------------------
# create / show / edit / delete
# ---------------------------------------------------------------------------


@app.command()
def create(
    text: str = typer.Argument(..., help="Post text"),
    on: Optional[int] = typer.Option(None, "--on", help="Post on a friend's profile"),
) -> None:
    """Publish a post now."""
    session = require_session()

    async def _create() -> None:
        async with SpacebookClient() as api:
            result = await PostEngine(api.posts).create_post(session, text, on)
        if not result.ok:
            fail(result)
        rprint(f"[green]✓ Posted[/green] (id [cyan]{result.body.id}[/cyan])")

    run(_create())


@app.command()
def show(user_id: int, post_id: int) -> None:
    """Show a single post."""
    session = require_session()

    async def _show() -> None:
        async with SpacebookClient() as api:
            result = await PostEngine(api.posts).get_post(session, user_id, post_id)
        if not result.ok:
            fail(result)
        post = result.body
        rprint(
            f"[cyan]{post.author.full_name}[/cyan] on {_format_ts(post.timestamp)}\n"
            f"{post.text}\n[dim]♥ {post.num_likes}[/dim]"
        )

    run(_show())


@app.command()
def edit(user_id: int, post_id: int, text: str) -> None:
    """Replace the text of one of your posts."""
    session = require_session()

    async def _edit() -> None:
        async with SpacebookClient() as api:
            engine = PostEngine(api.posts)
            await _authored_post(engine, session, user_id, post_id)
            result = await engine.update_post(session, user_id, post_id, text)
        if not result.ok:
            fail(result)
        rprint("[green]✓ Post updated.[/green]")

    run(_edit())


@app.command()
def delete(
    user_id: int,
    post_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete one of your posts."""
    session = require_session()
    if not yes:
        typer.confirm(f"Delete post {post_id}?", abort=True)

    async def _delete() -> None:
        async with SpacebookClient() as api:
            engine = PostEngine(api.posts)
            await _authored_post(engine, session, user_id, post_id)
            result = await engine.delete_post(session, user_id, post_id)
        if not result.ok:
            fail(result)
        rprint("[green]✓ Post deleted.[/green]")

    run(_delete())


# ---------------------------------------------------------------------------
# like
# ---------------------------------------------------------------------------


@app.command()
def like(user_id: int, post_id: int) -> None:
    """Like a post, or unlike it if you already do."""
    session = require_session()

    async def _like() -> None:
        async with SpacebookClient() as api:
            toggled, feed = await PostEngine(api.posts).toggle_like_and_reload(
                session, user_id, post_id
            )
        if not toggled.ok:
            fail(toggled.result)

        verb = "Liked" if toggled.outcome is LikeOutcome.LIKED else "Unliked"
        likes = ""
        if feed is not None and feed.ok:
            post = next((p for p in feed.body if p.post_id == post_id), None)
            if post is not None:
                likes = f" — now ♥ {post.num_likes}"
        rprint(f"[green]✓ {verb}[/green] post {post_id}{likes}")

    run(_like())
