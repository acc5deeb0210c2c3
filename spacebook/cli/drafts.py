"""
Draft and schedule commands. These work offline; only ``edit --post`` needs
the server.

  spacebook drafts save       TEXT
  spacebook drafts list
  spacebook drafts edit       ID [--post]
  spacebook drafts update     ID TEXT
  spacebook drafts delete     ID
  spacebook drafts schedule   ID --at "2026-03-01T10:00"
  spacebook drafts queue
  spacebook drafts unschedule ID
"""

from __future__ import annotations

import datetime as dt

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from spacebook.api.client import SpacebookClient
from spacebook.api.transport import UnreachableError
from spacebook.cli.runtime import drafts, fail, require_session, run
from spacebook.content.models import now_ms
from spacebook.feed.engine import PostEngine

console = Console()
app = typer.Typer(help="Save drafts and schedule them for later.")


def _format_ms(ms: int) -> str:
    return dt.datetime.fromtimestamp(ms / 1000, tz=dt.timezone.utc).strftime("%d/%m/%Y %H:%M")


def _preview(text: str, width: int = 50) -> str:
    return (text[:width] + "…") if len(text) > width else text


@app.command()
def save(text: str = typer.Argument(..., help="Draft text")) -> None:
    """Save a draft locally."""
    draft = drafts().save_draft(text)
    rprint(f"[green]✓ Draft saved[/green] (id [cyan]{draft.id}[/cyan])")


@app.command("list")
def list_drafts() -> None:
    """List saved drafts."""
    items = drafts().list_drafts()
    if not items:
        rprint("[yellow]No drafts saved.[/yellow]")
        return

    table = Table(title=f"📝 Drafts — {len(items)}", show_lines=False)
    table.add_column("ID", style="dim", width=14)
    table.add_column("Saved (UTC)", width=16)
    table.add_column("Text", width=50)
    for d in items:
        table.add_row(str(d.id), _format_ms(d.id), _preview(d.text))
    console.print(table)


@app.command()
def delete(draft_id: int) -> None:
    """Delete a draft."""
    if not drafts().delete_draft(draft_id):
        rprint(f"[red]Draft not found:[/red] {draft_id}")
        raise typer.Exit(1)
    rprint("[green]✓ Draft deleted.[/green]")


@app.command()
def edit(
    draft_id: int,
    post: bool = typer.Option(False, "--post", help="Publish the edited text right away"),
) -> None:
    """Load a draft into the composer. The draft leaves the store."""
    store = drafts()
    # Check the session before the draft leaves the store
    session = require_session() if post else None

    draft = store.take_draft(draft_id)
    if draft is None:
        rprint(f"[red]Draft not found:[/red] {draft_id}")
        raise typer.Exit(1)

    text = typer.prompt("Text", default=draft.text)

    if session is None:
        saved = store.save_draft(text)
        rprint(f"[green]✓ Draft saved[/green] (id [cyan]{saved.id}[/cyan])")
        return

    async def _post() -> None:
        async with SpacebookClient() as api:
            try:
                result = await PostEngine(api.posts).create_post(session, text)
            except UnreachableError:
                kept = store.save_draft(text)
                rprint(f"[dim]Text kept as draft {kept.id}.[/dim]")
                raise
        if not result.ok:
            # Keep the user's text rather than losing it
            kept = store.save_draft(text)
            rprint(f"[dim]Text kept as draft {kept.id}.[/dim]")
            fail(result)
        rprint(f"[green]✓ Posted[/green] (id [cyan]{result.body.id}[/cyan])")

    run(_post())


@app.command()
def update(draft_id: int, text: str = typer.Argument(..., help="New draft text")) -> None:
    """Replace a saved draft's text, keeping its id."""
    if drafts().update_draft(draft_id, text) is None:
        rprint(f"[red]Draft not found:[/red] {draft_id}")
        raise typer.Exit(1)
    rprint("[green]✓ Draft updated.[/green]")


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


@app.command()
def schedule(
    draft_id: int,
    at: str = typer.Option(..., "--at", "-t", help='ISO datetime in UTC, e.g. "2026-03-01T10:00"'),
) -> None:
    """Schedule a draft for the background publisher."""
    store = drafts()
    draft = store.get_draft(draft_id)
    if draft is None:
        rprint(f"[red]Draft not found:[/red] {draft_id}")
        raise typer.Exit(1)

    try:
        when = dt.datetime.fromisoformat(at)
    except ValueError:
        rprint(f"[red]Invalid --at format:[/red] {at!r}. Use ISO 8601, e.g. 2026-03-01T10:00")
        raise typer.Exit(1)
    if when.tzinfo is None:
        when = when.replace(tzinfo=dt.timezone.utc)
    timestamp = int(when.timestamp() * 1000)

    if timestamp <= now_ms():
        rprint(
            "[yellow]Warning:[/yellow] scheduled time is in the past — "
            "it will be posted on the next [cyan]publish run-due[/cyan]."
        )

    entry = store.schedule_draft(draft, timestamp)
    rprint(
        f"[green]✓ Scheduled[/green] draft [cyan]{draft_id}[/cyan] for "
        f"{_format_ms(entry.timestamp)} UTC"
    )


@app.command()
def queue() -> None:
    """List scheduled drafts."""
    entries = sorted(drafts().list_schedule(), key=lambda e: e.timestamp)
    if not entries:
        rprint("[yellow]Nothing scheduled.[/yellow]")
        return

    now = now_ms()
    table = Table(title=f"📅 Scheduled — {len(entries)}", show_lines=False)
    table.add_column("Draft", style="dim", width=14)
    table.add_column("Publish at (UTC)", width=16)
    table.add_column("Status", width=10)
    table.add_column("Text", width=45)
    for e in entries:
        table.add_row(
            str(e.draft.id),
            _format_ms(e.timestamp),
            "⏳ due" if e.is_due(now) else "waiting",
            _preview(e.draft.text, 45),
        )
    console.print(table)


@app.command()
def unschedule(draft_id: int) -> None:
    """Cancel a scheduled draft and keep it as a draft."""
    store = drafts()
    entry = next((e for e in store.list_schedule() if e.draft.id == draft_id), None)
    if entry is None or not store.unschedule(draft_id):
        rprint(f"[red]Not scheduled:[/red] {draft_id}")
        raise typer.Exit(1)
    restored = store.save_draft(entry.draft.text)
    rprint(f"[green]✓ Unscheduled.[/green] Text kept as draft [cyan]{restored.id}[/cyan].")
