"""Build threaded reply messages in the raw form ``messages.send`` expects."""

from replydesk.gmail.encoding import encode_base64url
from replydesk.gmail.types import FetchedMessage, OutgoingMessage, find_header

# Fixed header block; To/Subject/References are filled in per reply.
_CONTENT_TYPE = 'Content-Type: text/plain; charset="UTF-8"'
_MIME_VERSION = "MIME-Version: 1.0"
_TRANSFER_ENCODING = "Content-Transfer-Encoding: 7bit"


class MissingHeaderError(KeyError):
    """Raised when the original message has no header to address the reply to."""


def build_reply_document(original: FetchedMessage, reply_body: str) -> str:
    """Return the plain RFC 822 text of a reply to ``original``.

    The subject is always prefixed with ``Re: ``, even when it already starts
    with one.  Only ``References`` is set for threading; no ``In-Reply-To``
    header is written.  When the original has no ``Message-ID`` the
    References line is left out rather than written empty.

    Raises:
        MissingHeaderError: if the original has no ``From`` header.
    """
    to = find_header(original.headers, "From")
    if to is None:
        raise MissingHeaderError(f"Message {original.id!r} has no From header to reply to")
    subject = find_header(original.headers, "Subject") or ""
    references = find_header(original.headers, "Message-ID")

    lines = [
        _CONTENT_TYPE,
        _MIME_VERSION,
        f"To: {to}",
        f"Subject: Re: {subject}",
    ]
    if references is not None:
        lines.append(f"References: {references}")
    lines += [_TRANSFER_ENCODING, "", reply_body]
    return "\n".join(lines)


def compose_reply(original: FetchedMessage, reply_body: str) -> OutgoingMessage:
    """Encode a reply to ``original`` and attach its thread ID unchanged."""
    document = build_reply_document(original, reply_body)
    return OutgoingMessage(raw=encode_base64url(document), thread_id=original.thread_id)
