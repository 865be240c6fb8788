"""User-facing inbox state on top of a MailboxSession and a reply drafter."""

import logging

from replydesk.gmail.client import AuthError, TransportError
from replydesk.gmail.composer import MissingHeaderError
from replydesk.gmail.session import MailboxSession
from replydesk.gmail.types import Email
from replydesk.processing.drafter import GenerationError, ReplyDrafter
from replydesk.processing.sanitizer import sanitize
from replydesk.processing.types import ReplyDraft, ReplyTone

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Please authenticate first"
LOAD_FAILED = "Failed to load emails"
SEND_FAILED = "Failed to send reply"
GENERATION_FAILED = "Failed to generate reply. Please try again."


class InboxView:
    """Coordinates listing, drafting and sending behind one stateful interface.

    Failures never propagate out of the public methods; they land in
    ``error`` as a message fit to show the user.  Only one page load runs
    at a time: ``load_more`` is ignored while a load is in flight or when
    there are no more pages.

    Usage::

        view = InboxView(session, ReplyDrafter(), page_size=20)
        await view.refresh()
        draft = await view.draft_reply(view.emails[0], ReplyTone.CASUAL)
        await view.send_reply(draft.email_id, draft.body_text)
    """

    def __init__(self, session: MailboxSession, drafter: ReplyDrafter, page_size: int = 20) -> None:
        self.session = session
        self.drafter = drafter
        self.page_size = page_size
        self.emails: list[Email] = []
        self.next_page_token: str | None = None
        self.has_more = True
        self.loading = False
        self.error: str | None = None

    async def refresh(self) -> None:
        """Replace the email list with the first page."""
        await self._load(load_more=False)

    async def load_more(self) -> None:
        """Append the next page, if there is one and nothing else is loading."""
        if self.has_more and not self.loading:
            await self._load(load_more=True)

    async def draft_reply(self, email: Email, tone: ReplyTone) -> ReplyDraft | None:
        """Generate a draft from the sanitized body; None (with ``error`` set) on failure."""
        try:
            text = await self.drafter.generate_reply(sanitize(email.body), tone)
        except GenerationError as exc:
            logger.error("Draft for %s failed: %s", email.id, exc)
            self.error = GENERATION_FAILED
            return None
        self.error = None
        return ReplyDraft(email_id=email.id, tone=ReplyTone(tone), body_text=text)

    async def send_reply(self, email_id: str, reply_body: str) -> bool:
        """Send a reply, then reload the first page.  Returns whether the send succeeded."""
        if not self.session.is_authenticated():
            self.error = NOT_AUTHENTICATED
            return False
        try:
            await self.session.send_reply(email_id, reply_body)
        except (AuthError, TransportError, MissingHeaderError) as exc:
            logger.error("Sending reply to %s failed: %s", email_id, exc)
            self.error = SEND_FAILED
            return False
        await self.refresh()
        return True

    async def _load(self, load_more: bool) -> None:
        if not self.session.is_authenticated():
            self.error = NOT_AUTHENTICATED
            return

        self.loading = True
        try:
            page = await self.session.list_emails(
                self.page_size, self.next_page_token if load_more else None
            )
        except (AuthError, TransportError) as exc:
            logger.error("Loading emails failed: %s", exc)
            self.error = LOAD_FAILED
            return
        finally:
            self.loading = False

        self.emails = self.emails + page.emails if load_more else page.emails
        self.next_page_token = page.next_page_token
        self.has_more = page.has_more
        self.error = None
