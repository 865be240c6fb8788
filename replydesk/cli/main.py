"""CLI entry point for replydesk."""

import logging

import click
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Read Gmail, draft replies with Claude, review and send them."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,  # keep CLI output clean
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )


# Import and register commands after cli is defined to avoid circular imports.
from replydesk.cli.commands import draft, inbox, reply, show  # noqa: E402

cli.add_command(inbox)
cli.add_command(show)
cli.add_command(draft)
cli.add_command(reply)
