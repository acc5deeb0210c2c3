"""
Main CLI entry point.
Usage: spacebook [COMMAND]
"""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from config.settings import settings
from spacebook.cli.auth import app as auth_app
from spacebook.cli.drafts import app as drafts_app
from spacebook.cli.friends import app as friends_app
from spacebook.cli.posts import app as posts_app
from spacebook.cli.publish import app as publish_app

app = typer.Typer(
    name="spacebook",
    help="🚀 Spacebook — posts, friends and scheduled drafts from the terminal",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
)

console = Console()

# Register sub-apps
app.add_typer(auth_app, name="auth", help="🔑 Log in, sign up, log out")
app.add_typer(posts_app, name="posts", help="📝 Read, write and like posts")
app.add_typer(friends_app, name="friends", help="👥 Friends and friend requests")
app.add_typer(drafts_app, name="drafts", help="🗂️  Drafts and the schedule")
app.add_typer(publish_app, name="publish", help="📤 Publish scheduled drafts")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests at debug level"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


if __name__ == "__main__":
    app()
