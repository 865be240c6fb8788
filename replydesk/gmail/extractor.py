"""Recover the best human-readable body from a multipart message payload."""

import logging

from replydesk.gmail.encoding import DecodeError, decode_base64url
from replydesk.gmail.types import ContainerPart, EmptyPart, LeafPart, MessagePart

logger = logging.getLogger(__name__)

_HTML = "text/html"
_PLAIN = "text/plain"


def extract_body(part: MessagePart) -> str:
    """Return the single best text body of ``part``.

    A leaf is decoded directly.  For a container the children are scanned in
    order and the HTML candidate wins over the plain-text one, since HTML
    alternatives usually carry the fuller content.  A child with children of
    its own (a container, or a leaf carrying parts) is nested and counts
    as HTML when its own mime type mentions ``html``.  Never raises: bad
    or missing content yields an empty string.
    """
    if isinstance(part, LeafPart):
        return _decode_leaf(part)
    if isinstance(part, EmptyPart):
        return ""

    html = ""
    plain = ""
    for child in part.parts:
        if isinstance(child, LeafPart) and child.mime_type == _HTML:
            html = _decode_leaf(child)
        elif isinstance(child, LeafPart) and child.mime_type == _PLAIN:
            plain = _decode_leaf(child)
        elif isinstance(child, (ContainerPart, LeafPart)) and child.parts:
            # Recursing into a leaf that has children returns its own data.
            nested = extract_body(child)
            if nested:
                if "html" in child.mime_type:
                    html = nested
                else:
                    plain = nested

    return html or plain


def _decode_leaf(part: LeafPart) -> str:
    try:
        return decode_base64url(part.body_data)
    except DecodeError as exc:
        logger.warning("Failed to decode %s part: %s", part.mime_type or "unknown", exc)
        return ""
