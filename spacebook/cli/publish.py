"""
Background publishing commands.

  spacebook publish run-due   — one invocation (for cron / systemd timers)
  spacebook publish worker    — keep running, adapting the interval
"""

from __future__ import annotations

from typing import Optional

import typer
from rich import print as rprint

from config.settings import settings
from spacebook.api.client import SpacebookClient
from spacebook.cli.runtime import drafts, run, sessions
from spacebook.feed.engine import PostEngine
from spacebook.publish.background import BackgroundPublisher, FetchResult
from spacebook.publish.host import BackgroundTaskHost

app = typer.Typer(help="Publish scheduled drafts in the background.")

TASK_NAME = "background-post"


@app.command("run-due")
def run_due() -> None:
    """Publish every scheduled draft whose time has arrived."""

    async def _run() -> None:
        async with SpacebookClient() as api:
            publisher = BackgroundPublisher(sessions(), drafts(), PostEngine(api.posts))
            report = await publisher.run_once()

        for entry in report.published:
            rprint(f"  [green]✓[/green] draft {entry.draft.id} published")
        for entry, reason in report.failed:
            rprint(f"  [red]✗[/red] draft {entry.draft.id}: {reason}")

        if report.result is FetchResult.NO_DATA:
            rprint("[green]✓ No posts due.[/green]")
        elif report.result is FetchResult.FAILED:
            raise typer.Exit(1)

    run(_run())


@app.command()
def worker(
    interval: Optional[float] = typer.Option(
        None, "--interval", help="Minimum seconds between runs (default from settings)."
    ),
) -> None:
    """Run the publisher until interrupted."""
    minimum = interval if interval is not None else settings.publish_interval_seconds

    async def _work() -> None:
        async with SpacebookClient() as api:
            publisher = BackgroundPublisher(sessions(), drafts(), PostEngine(api.posts))
            host = BackgroundTaskHost()
            runner = host.register(TASK_NAME, publisher, minimum_interval=minimum)
            try:
                await runner
            finally:
                await host.unregister(TASK_NAME)

    rprint(f"[bold]Publishing scheduled drafts every {minimum:.0f}s or slower.[/bold] Ctrl+C to stop.")
    try:
        run(_work())
    except KeyboardInterrupt:
        rprint("\n[dim]Stopped.[/dim]")
