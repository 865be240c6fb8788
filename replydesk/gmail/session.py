"""Mailbox session: the explicit handle every mailbox operation goes through."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from replydesk.config import Settings
from replydesk.gmail.client import AuthError, GmailClient, gmail_client
from replydesk.gmail.composer import compose_reply
from replydesk.gmail.extractor import extract_body
from replydesk.gmail.types import Email, EmailPage, FetchedMessage, OutgoingMessage

logger = logging.getLogger(__name__)


class MailboxSession:
    """Authenticated access to one mailbox.

    Passed explicitly to whatever needs transport access; there is no
    process-wide instance.  Every operation checks authentication before
    touching the network and raises AuthError if the session has none.

    Usage::

        async with mailbox_session(settings) as session:
            page = await session.list_emails()
            await session.send_reply(page.emails[0].id, "Thanks!")
    """

    def __init__(self, client: GmailClient) -> None:
        self._client = client

    def is_authenticated(self) -> bool:
        return self._client.is_authenticated()

    async def authenticate(self) -> None:
        await self._client.authenticate()

    async def list_emails(self, max_results: int = 20, page_token: str | None = None) -> EmailPage:
        """Return one page of display-ready emails in provider order.

        Messages are fetched one at a time after the ID listing, so a page
        costs ``1 + len(ids)`` round trips.
        """
        self._require_auth()
        page = await self._client.list_messages(max_results, page_token)
        emails = [await self.get_email(message_id) for message_id in page.message_ids]
        logger.debug("Listed %d emails (next page token: %s)", len(emails), page.next_page_token)
        return EmailPage(emails=emails, next_page_token=page.next_page_token)

    async def get_message(self, message_id: str) -> FetchedMessage:
        self._require_auth()
        return await self._client.get_message(message_id)

    async def get_email(self, message_id: str) -> Email:
        """Fetch one message and build its display model (body extracted, not sanitized)."""
        message = await self.get_message(message_id)
        return Email.from_message(message, extract_body(message.payload))

    async def send(self, message: OutgoingMessage) -> str:
        self._require_auth()
        return await self._client.send_message(message)

    async def send_reply(self, email_id: str, reply_body: str) -> OutgoingMessage:
        """Reply to ``email_id`` in its thread and return what was sent."""
        original = await self.get_message(email_id)
        outgoing = compose_reply(original, reply_body)
        await self.send(outgoing)
        logger.info("Replied to message %s", email_id)
        return outgoing

    def _require_auth(self) -> None:
        if not self.is_authenticated():
            raise AuthError("Not authenticated")


@asynccontextmanager
async def mailbox_session(settings: Settings) -> AsyncIterator[MailboxSession]:
    """Yield an authenticated MailboxSession and release its HTTP client on exit."""
    async with gmail_client(settings) as client:
        yield MailboxSession(client)
