"""Shared pytest fixtures and payload builders."""

import base64
from typing import Any

import pytest


def b64url(text: str) -> str:
    """Encode text the way Gmail encodes body data."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def leaf(mime_type: str, text: str) -> dict[str, Any]:
    return {"mimeType": mime_type, "body": {"data": b64url(text)}}


def container(mime_type: str, *parts: dict[str, Any]) -> dict[str, Any]:
    return {"mimeType": mime_type, "body": {"size": 0}, "parts": list(parts)}


@pytest.fixture
def sample_message_resource() -> dict[str, Any]:
    """A Gmail ``messages.get`` (format=full) resource with a multipart/alternative body."""
    payload = container(
        "multipart/alternative",
        leaf("text/plain", "Hi Bob, see you Friday."),
        leaf("text/html", "<p>Hi Bob, <b>see you</b> Friday.</p>"),
    )
    payload["headers"] = [
        {"name": "From", "value": "Alice <alice@example.com>"},
        {"name": "To", "value": "bob@example.com"},
        {"name": "Subject", "value": "Friday lunch"},
        {"name": "Date", "value": "Fri, 27 Feb 2026 09:00:00 +0100"},
        {"name": "Message-ID", "value": "<CAF123@mail.example.com>"},
    ]
    return {
        "id": "msg_001",
        "threadId": "thread_001",
        "labelIds": ["INBOX", "UNREAD"],
        "internalDate": "1772179200000",
        "payload": payload,
    }
