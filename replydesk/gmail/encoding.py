"""URL-safe base64 codec used by the Gmail API for message bodies and raw sends."""

import base64
import binascii

# Gmail's URL-safe alphabet differs from standard base64 in exactly two symbols.
_TO_STANDARD = str.maketrans("-_", "+/")


class DecodeError(ValueError):
    """Raised when encoded message content is not valid URL-safe base64 UTF-8."""


def encode_base64url(text: str) -> str:
    """Encode text as UTF-8, standard base64 (padded), then swap to the URL-safe alphabet."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def decode_base64url(data: str) -> str:
    """Decode a URL-safe base64 payload into text.

    Gmail usually pads body data but not always, so missing ``=`` padding is
    restored before decoding.  Decoding is strict: characters outside the
    alphabet or bytes that are not UTF-8 raise DecodeError.
    """
    standard = data.strip().translate(_TO_STANDARD)
    standard += "=" * (-len(standard) % 4)
    try:
        raw = base64.b64decode(standard, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise DecodeError(f"Invalid base64url content: {exc}") from exc
