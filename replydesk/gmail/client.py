"""Gmail REST client — wraps messages.list/get/send behind a typed async API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from replydesk.config import Settings
from replydesk.gmail.types import FetchedMessage, MessagePage, OutgoingMessage

logger = logging.getLogger(__name__)

GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1/users/me"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

_TIMEOUT_SECONDS = 30.0
_AUTH_STATUSES = (401, 403)


class AuthError(Exception):
    """Raised when a mailbox operation is attempted without a valid session."""


class TransportError(Exception):
    """Raised when Gmail or the network fails on list/get/send."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GmailClient:
    """Thin async wrapper around the Gmail REST API.

    Holds one ``httpx.AsyncClient`` for the lifetime of the session.  The
    access token is either supplied up front or obtained by ``authenticate()``
    through the OAuth refresh-token grant.  No call is retried; callers decide.
    Use the `gmail_client()` context manager to construct and tear down correctly.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        access_token: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        refresh_token: str | None = None,
    ) -> None:
        self._http = http
        self._access_token = access_token
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token

    # ── Authentication ─────────────────────────────────────────────────────────

    def is_authenticated(self) -> bool:
        return bool(self._access_token)

    async def authenticate(self) -> None:
        """Obtain an access token, exchanging the refresh token if needed.

        A pre-supplied access token is kept as-is.

        Raises:
            AuthError: if no credentials are configured or the token endpoint refuses.
        """
        if self._access_token:
            return
        if not (self._client_id and self._client_secret and self._refresh_token):
            raise AuthError("No Gmail access token or refresh credentials configured")

        try:
            response = await self._http.post(
                TOKEN_ENDPOINT,
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "refresh_token": self._refresh_token,
                    "grant_type": "refresh_token",
                },
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"Network error during token refresh: {exc}") from exc

        data = _json_or_empty(response)
        if response.status_code != 200 or "access_token" not in data:
            detail = data.get("error_description") or data.get("error") or response.text
            raise AuthError(f"Token refresh failed: {detail} (status={response.status_code})")

        self._access_token = str(data["access_token"])
        logger.info("Gmail access token obtained (expires in %ss)", data.get("expires_in", "?"))

    # ── Public API ─────────────────────────────────────────────────────────────

    async def list_messages(self, max_results: int = 20, page_token: str | None = None) -> MessagePage:
        """Return one page of message IDs, newest first, plus the next page token."""
        params: dict[str, Any] = {"maxResults": max_results}
        if page_token:
            params["pageToken"] = page_token
        data = await self._call("GET", "messages", params=params)
        ids = [
            str(m["id"])
            for m in data.get("messages") or []
            if isinstance(m, dict) and m.get("id")
        ]
        return MessagePage(message_ids=ids, next_page_token=data.get("nextPageToken") or None)

    async def get_message(self, message_id: str) -> FetchedMessage:
        """Return a single message with headers and the full payload tree."""
        data = await self._call("GET", f"messages/{message_id}", params={"format": "full"})
        return FetchedMessage.from_api(data)

    async def send_message(self, message: OutgoingMessage) -> str:
        """Send a raw message and return the ID Gmail assigned to it."""
        data = await self._call("POST", "messages/send", json=message.as_request_body())
        sent_id = str(data.get("id", ""))
        logger.info("Sent message %s (thread=%s)", sent_id, message.thread_id)
        return sent_id

    # ── Internal helpers ───────────────────────────────────────────────────────

    async def _call(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """Make an authenticated Gmail API call and return the parsed JSON body.

        Raises:
            AuthError: without a token, or when Gmail answers 401/403.
            TransportError: on network failure or any other non-2xx status.
        """
        if not self.is_authenticated():
            raise AuthError("Not authenticated")

        logger.debug("Gmail → %s %s %s", method, endpoint, kwargs.get("params", ""))
        try:
            response = await self._http.request(
                method,
                f"{GMAIL_API_BASE}/{endpoint}",
                headers={"Authorization": f"Bearer {self._access_token}"},
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Network error calling {endpoint!r}: {exc}") from exc

        data = _json_or_empty(response)
        if response.status_code in _AUTH_STATUSES:
            raise AuthError(f"Gmail rejected credentials: {_error_message(data, response)}")
        if not response.is_success:
            raise TransportError(
                f"{method} {endpoint} failed: {_error_message(data, response)}",
                status_code=response.status_code,
            )
        return data


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(data: dict[str, Any], response: httpx.Response) -> str:
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return f"{error['message']} (status={response.status_code})"
    return f"status={response.status_code}"


@asynccontextmanager
async def gmail_client(settings: Settings) -> AsyncIterator[GmailClient]:
    """Async context manager that yields an authenticated GmailClient.

    Example::

        async with gmail_client(load_settings()) as client:
            page = await client.list_messages()
    """
    async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as http:
        client = GmailClient(
            http,
            access_token=settings.gmail_access_token,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            refresh_token=settings.google_refresh_token,
        )
        await client.authenticate()
        yield client
