"""
Account commands.

  spacebook auth login
  spacebook auth signup     — two-step wizard
  spacebook auth logout
  spacebook auth whoami
  spacebook auth update     [--first-name] [--last-name] [--email] [--password]
  spacebook auth photo      --save FILE | --upload FILE
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print as rprint
from rich.panel import Panel

from spacebook.api.client import SpacebookClient
from spacebook.cli.runtime import fail, require_session, run, sessions
from spacebook.content.models import Registration

app = typer.Typer(help="Log in, sign up and manage your session.")


@app.command()
def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
    """Log in and store the session for later commands and the publisher."""

    async def _login() -> None:
        async with SpacebookClient() as api:
            result = await api.users.login(email, password)
        if not result.ok:
            fail(result)
        session = sessions().authenticate(result.body.to_session())
        rprint(f"[green]✓ Logged in[/green] as user [cyan]{session.user_id}[/cyan]")

    run(_login())


@app.command()
def signup() -> None:
    """Create an account, then log straight in."""
    reg = Registration()

    rprint("[bold]Step 1/2[/bold] — account")
    reg = reg.with_credentials(
        typer.prompt("Email"),
        typer.prompt("Password", hide_input=True, confirmation_prompt=True),
    )

    rprint("[bold]Step 2/2[/bold] — about you")
    reg = reg.with_details(typer.prompt("First name"), typer.prompt("Last name"))

    async def _signup() -> None:
        async with SpacebookClient() as api:
            created = await api.users.signup(reg)
            if not created.ok:
                fail(created)
            logged_in = await api.users.login(reg.email or "", reg.password or "")
        if not logged_in.ok:
            fail(logged_in)
        session = sessions().authenticate(logged_in.body.to_session())
        rprint(f"[green]✓ Welcome, {reg.first_name}![/green] Your user id is [cyan]{session.user_id}[/cyan].")

    run(_signup())


@app.command()
def logout() -> None:
    """Invalidate the session on the server and forget it locally."""
    session = require_session()

    async def _logout() -> None:
        async with SpacebookClient() as api:
            result = await api.users.logout(session)
        # A 401 means the token is already dead server-side
        if not result.ok and not result.needs_login:
            fail(result)
        sessions().unauthenticate()
        rprint("[green]✓ Logged out.[/green]")

    run(_logout())


@app.command()
def whoami() -> None:
    """Show the signed-in user's profile."""
    session = require_session()

    async def _whoami() -> None:
        async with SpacebookClient() as api:
            result = await api.users.get_user(session, session.user_id)
        if not result.ok:
            fail(result)
        user = result.body
        rprint(
            Panel(
                f"[bold]{user.full_name}[/bold]\n{user.email}\n"
                f"[dim]id {user.user_id} · {user.friend_count} friend(s)[/dim]",
                border_style="cyan",
                expand=False,
            )
        )

    run(_whoami())


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@app.command()
def update(
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    email: Optional[str] = typer.Option(None, "--email"),
    password: bool = typer.Option(False, "--password", help="Prompt for a new password"),
) -> None:
    """Change your profile details, then show the updated profile."""
    new_password = (
        typer.prompt("New password", hide_input=True, confirmation_prompt=True) if password else None
    )
    if not any((first_name, last_name, email, new_password)):
        rprint("[yellow]Nothing to update.[/yellow]")
        raise typer.Exit(1)
    session = require_session()

    async def _update() -> None:
        async with SpacebookClient() as api:
            result = await api.users.update_user(
                session,
                session.user_id,
                first_name=first_name,
                last_name=last_name,
                email=email,
                password=new_password,
            )
            if not result.ok:
                fail(result)
            reloaded = await api.users.get_user(session, session.user_id)
        rprint("[green]✓ Profile updated.[/green]")
        if reloaded.ok:
            rprint(f"[bold]{reloaded.body.full_name}[/bold] · {reloaded.body.email}")

    run(_update())


@app.command()
def photo(
    output: Optional[Path] = typer.Option(None, "--save", help="Download your photo to this file"),
    upload: Optional[Path] = typer.Option(None, "--upload", help="Upload a PNG or JPEG"),
    user_id: Optional[int] = typer.Option(None, "--user", help="Whose photo to download"),
) -> None:
    """Download or upload a profile photo."""
    if (output is None) == (upload is None):
        rprint("[red]Give exactly one of --save or --upload.[/red]")
        raise typer.Exit(1)
    session = require_session()

    async def _photo() -> None:
        async with SpacebookClient() as api:
            if upload is not None:
                content_type = "image/jpeg" if upload.suffix.lower() in (".jpg", ".jpeg") else "image/png"
                result = await api.users.upload_profile_photo(
                    session, session.user_id, upload.read_bytes(), content_type
                )
            else:
                result = await api.users.get_profile_photo(
                    session, user_id if user_id is not None else session.user_id
                )
        if not result.ok:
            fail(result)
        if output is not None:
            output.write_bytes(result.body)
            rprint(f"[green]✓ Saved[/green] {output} ({len(result.body):,} bytes)")
        else:
            rprint("[green]✓ Profile picture uploaded.[/green]")

    run(_photo())
