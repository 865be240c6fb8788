"""CLI command implementations; each command runs its Gmail work inside MailboxSession scopes."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from functools import update_wrapper
from typing import Any, NoReturn, TypeVar

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from replydesk.cli.inbox import InboxView
from replydesk.config import ConfigError, Settings, load_settings
from replydesk.gmail.client import AuthError, TransportError
from replydesk.gmail.composer import MissingHeaderError
from replydesk.gmail.session import MailboxSession, mailbox_session
from replydesk.gmail.types import Email
from replydesk.processing.drafter import GenerationError, ReplyDrafter
from replydesk.processing.sanitizer import sanitize
from replydesk.processing.types import ReplyDraft, ReplyTone

logger = logging.getLogger(__name__)
console = Console(width=200)
_err_console = Console(stderr=True)

_T = TypeVar("_T")

_TONE_CHOICE = click.Choice([t.value for t in ReplyTone])


def pass_settings(f: Callable[..., _T]) -> Callable[..., _T]:
    """Like ``click.pass_obj``, but loads Settings when the command runs.

    Loading happens after option parsing, so ``--help`` works without
    credentials.  A ConfigError is printed and exits 1.
    """

    @click.pass_context
    def new_func(ctx: click.Context, *args: Any, **kwargs: Any) -> _T:
        if ctx.obj is None:
            try:
                ctx.obj = load_settings()
            except ConfigError as exc:
                _err_console.print(f"[red]{exc}[/red]")
                ctx.exit(1)
        return ctx.invoke(f, ctx.obj, *args, **kwargs)

    return update_wrapper(new_func, f)


def _run(settings: Settings, action: Callable[[InboxView], Awaitable[_T]]) -> _T:
    """Open a session, run ``action`` against a fresh InboxView, map failures to exit 1."""

    async def _inner() -> _T:
        async with mailbox_session(settings) as session:
            view = _make_view(session, settings)
            return await action(view)

    try:
        return asyncio.run(_inner())
    except AuthError as exc:
        console.print(f"[red]Authentication failed: {exc}[/red]")
    except TransportError as exc:
        console.print(f"[red]Gmail request failed: {exc}[/red]")
    except GenerationError as exc:
        console.print(f"[red]Draft generation failed: {exc}[/red]")
    except MissingHeaderError as exc:
        console.print(f"[red]Cannot reply: {exc}[/red]")
    sys.exit(1)


def _make_view(session: MailboxSession, settings: Settings) -> InboxView:
    drafter = ReplyDrafter(api_key=settings.anthropic_api_key, model=settings.model)
    return InboxView(session, drafter, page_size=settings.page_size)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{message}[/red]")
    sys.exit(1)


# ── replydesk inbox ─────────────────────────────────────────────────────────────


@click.command()
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Emails per page (default: REPLYDESK_PAGE_SIZE or 20).")
@click.option("--page-token", default=None, help="Continue from a previous page.")
@pass_settings
def inbox(settings: Settings, limit: int | None, page_token: str | None) -> None:
    """List one page of the inbox."""

    async def _action(view: InboxView) -> InboxView:
        if limit is not None:
            view.page_size = limit
        if page_token:
            view.next_page_token = page_token
            await view.load_more()
        else:
            await view.refresh()
        return view

    view = _run(settings, _action)
    if view.error:
        _fail(view.error)

    if not view.emails:
        console.print("[yellow]No emails on this page.[/yellow]")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("ID", style="dim", width=18)
    table.add_column("Subject", max_width=48)
    table.add_column("From", max_width=32)
    table.add_column("Date", width=16)

    for i, email in enumerate(view.emails, start=1):
        style = "bold" if not email.read else ""
        subject = email.subject or "(no subject)"
        table.add_row(
            str(i),
            email.id,
            f"[{style}]{subject}[/{style}]" if style else subject,
            email.sender,
            email.timestamp.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
    if view.next_page_token:
        console.print(f"\n  [dim]Next page:[/dim] replydesk inbox --page-token {view.next_page_token}")


# ── replydesk show ──────────────────────────────────────────────────────────────


@click.command()
@click.argument("email_id")
@pass_settings
def show(settings: Settings, email_id: str) -> None:
    """Show one email as clean plain text."""

    async def _action(view: InboxView) -> Email:
        return await view.session.get_email(email_id)

    email = _run(settings, _action)
    console.print(f"[bold]{email.sender}[/bold] • {email.timestamp:%Y-%m-%d %H:%M} UTC")
    console.print(
        Panel(sanitize(email.body) or "[dim](empty body)[/dim]", title=email.subject, border_style="blue")
    )


# ── replydesk draft ─────────────────────────────────────────────────────────────


@click.command()
@click.argument("email_id")
@click.option("--tone", type=_TONE_CHOICE, default=ReplyTone.FORMAL.value, show_default=True)
@pass_settings
def draft(settings: Settings, email_id: str, tone: str) -> None:
    """Generate a draft reply without sending it."""

    async def _action(view: InboxView) -> tuple[ReplyDraft | None, str | None]:
        email = await view.session.get_email(email_id)
        return await view.draft_reply(email, ReplyTone(tone)), view.error

    result, error = _run(settings, _action)
    if result is None:
        _fail(error or "Failed to generate reply.")
    console.print(Panel(result.body_text, title=f"Draft reply ({tone})", border_style="green"))


# ── replydesk reply ─────────────────────────────────────────────────────────────


@click.command()
@click.argument("email_id")
@click.option("--tone", type=_TONE_CHOICE, default=ReplyTone.FORMAL.value, show_default=True)
@click.option("--body", default=None, help="Reply text; skips draft generation.")
@click.option("--yes", "-y", is_flag=True, help="Send without review.")
@pass_settings
def reply(settings: Settings, email_id: str, tone: str, body: str | None, yes: bool) -> None:
    """Draft (or take) a reply, let the user review it, then send it in-thread."""

    async def _draft(view: InboxView) -> tuple[ReplyDraft | None, str | None]:
        email = await view.session.get_email(email_id)
        return await view.draft_reply(email, ReplyTone(tone)), view.error

    if body is None:
        generated, error = _run(settings, _draft)
        if generated is None:
            _fail(error or "Failed to generate reply.")
        body = generated.body_text

    # Review happens between the two sessions, outside any event loop.
    if not yes:
        edited = click.edit(body)
        if edited is not None:
            body = edited.rstrip("\n")
        console.print(Panel(body, title="Reply", border_style="green"))
        if not click.confirm("Send this reply?", default=False):
            console.print("[yellow]Reply not sent.[/yellow]")
            return

    text = body

    async def _send(view: InboxView) -> tuple[bool, str | None]:
        sent = await view.send_reply(email_id, text)
        return sent, view.error

    sent, error = _run(settings, _send)
    if not sent:
        _fail(error or "Failed to send reply")
    console.print("[green]Reply sent.[/green]")
