"""Data types shared across Gmail client modules.

Message payloads are modelled as a tagged variant instead of one object with
optional fields: every part is exactly one of LeafPart, ContainerPart or
EmptyPart, so consumers can branch on the type rather than probing for keys.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

logger = logging.getLogger(__name__)

_UNREAD = "UNREAD"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ── Message parts ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LeafPart:
    """A part carrying encoded content of its own.

    ``parts`` holds any child parts Gmail sent alongside the content.  The
    leaf's own data is still its body, but a parent treats a leaf that has
    children like a nested container.
    """

    mime_type: str
    body_data: str
    parts: tuple[MessagePart, ...] = ()


@dataclass(frozen=True)
class ContainerPart:
    """A multipart container: no content of its own, only ordered child parts."""

    mime_type: str
    parts: tuple[MessagePart, ...]


@dataclass(frozen=True)
class EmptyPart:
    """A part with neither content nor children (malformed, or attachment-only)."""

    mime_type: str = ""


MessagePart = LeafPart | ContainerPart | EmptyPart


def parse_part(payload: Any) -> MessagePart:
    """Convert a Gmail API ``MessagePart`` dict into a typed MessagePart.

    Inline body data wins over child parts when both are present; the
    children are kept on the LeafPart.  Anything structurally unexpected
    degrades to EmptyPart rather than raising.
    """
    if not isinstance(payload, dict):
        return EmptyPart()

    mime_type = payload.get("mimeType")
    mime_type = mime_type if isinstance(mime_type, str) else ""

    body = payload.get("body")
    data = body.get("data") if isinstance(body, dict) else None
    children = payload.get("parts")
    parts = (
        tuple(parse_part(child) for child in children)
        if isinstance(children, list)
        else ()
    )

    if isinstance(data, str) and data:
        return LeafPart(mime_type=mime_type, body_data=data, parts=parts)
    if parts:
        return ContainerPart(mime_type=mime_type, parts=parts)
    return EmptyPart(mime_type=mime_type)


# ── Headers ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Header:
    name: str
    value: str


def parse_headers(raw: Any) -> tuple[Header, ...]:
    """Convert a Gmail ``headers`` list into Header tuples, skipping junk entries."""
    if not isinstance(raw, list):
        return ()
    return tuple(
        Header(name=str(h["name"]), value=str(h.get("value", "")))
        for h in raw
        if isinstance(h, dict) and "name" in h
    )


def find_header(headers: tuple[Header, ...] | list[Header], name: str) -> str | None:
    """Return the value of the first header named exactly ``name``, or None.

    Matching is case-sensitive: ``Message-ID`` does not match ``Message-Id``.
    """
    for header in headers:
        if header.name == name:
            return header.value
    return None


# ── Provider responses ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MessagePage:
    """One page of message IDs from ``messages.list``."""

    message_ids: list[str]
    next_page_token: str | None = None


@dataclass(frozen=True)
class FetchedMessage:
    """A single message as returned by ``messages.get`` with ``format=full``."""

    id: str
    thread_id: str | None
    headers: tuple[Header, ...]
    payload: MessagePart
    label_ids: tuple[str, ...] = ()
    internal_date: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> FetchedMessage:
        """Map a raw Gmail message resource onto a FetchedMessage."""
        payload = data.get("payload")
        headers = payload.get("headers") if isinstance(payload, dict) else None
        thread_id = data.get("threadId")
        return cls(
            id=str(data.get("id", "")),
            thread_id=str(thread_id) if thread_id else None,
            headers=parse_headers(headers),
            payload=parse_part(payload),
            label_ids=tuple(str(label) for label in data.get("labelIds") or []),
            internal_date=_parse_internal_date(data.get("internalDate")),
        )


def _parse_internal_date(value: Any) -> datetime | None:
    """Gmail's internalDate is epoch milliseconds, serialised as a string."""
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


# ── Display model ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Email:
    """An email ready for display.

    ``body`` is the extracted text and may still contain markup; consumers
    run it through the sanitizer before showing it or sending it to a model.
    ``timestamp`` is always timezone-aware UTC.
    """

    id: str
    subject: str
    body: str
    sender: str
    timestamp: datetime
    read: bool
    thread_id: str | None = None

    @classmethod
    def from_message(cls, message: FetchedMessage, body: str) -> Email:
        return cls(
            id=message.id,
            subject=find_header(message.headers, "Subject") or "",
            body=body,
            sender=find_header(message.headers, "From") or "",
            timestamp=normalize_timestamp(
                find_header(message.headers, "Date"), message.internal_date
            ),
            read=_UNREAD not in message.label_ids,
            thread_id=message.thread_id,
        )


@dataclass(frozen=True)
class EmailPage:
    emails: list[Email] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.next_page_token)


def normalize_timestamp(date_header: str | None, fallback: datetime | None = None) -> datetime:
    """Parse an RFC 2822 ``Date`` header into an aware UTC datetime.

    Falls back to the provider's internal date, then to the Unix epoch, when
    the header is missing or unparseable.  Naive results are taken as UTC.
    """
    if date_header:
        try:
            parsed = parsedate_to_datetime(date_header)
        except (TypeError, ValueError):
            logger.debug("Unparseable Date header %r; using fallback", date_header)
        else:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    if fallback is not None:
        return fallback.astimezone(timezone.utc)
    return _EPOCH


# ── Outgoing ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class OutgoingMessage:
    """A wire-ready reply: URL-safe encoded RFC 822 text plus its thread ID."""

    raw: str
    thread_id: str | None = None

    def as_request_body(self) -> dict[str, str]:
        """Return the JSON body for ``messages.send``."""
        body = {"raw": self.raw}
        if self.thread_id:
            body["threadId"] = self.thread_id
        return body
