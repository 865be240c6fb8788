"""System prompt and message builder for reply drafting."""

from replydesk.processing.types import ReplyTone

# Maximum characters of sanitized email text sent to the model per draft.
BODY_CHAR_LIMIT = 8_000

TRUNCATION_MARKER = "\n[… email truncated …]"


def build_system_prompt(tone: ReplyTone) -> str:
    """Return the fixed assistant instructions with ``tone`` embedded."""
    return (
        "You are a professional email assistant. Write replies that are:\n"
        "- Clear and concise\n"
        "- Professional and courteous\n"
        "- Appropriate for business communication\n"
        f"- In a {tone.value} tone\n"
        "- Without any unnecessary pleasantries\n"
        "- Focused on addressing the key points\n"
        "Return only the reply body, with no subject line or commentary."
    )


def build_messages(clean_text: str, tone: ReplyTone) -> list[dict[str, str]]:
    """Build the Anthropic messages list for drafting a reply to ``clean_text``.

    The text is expected to be sanitized already; it is truncated to
    BODY_CHAR_LIMIT so very long threads stay within the context window.
    """
    body = clean_text[:BODY_CHAR_LIMIT]
    if len(clean_text) > BODY_CHAR_LIMIT:
        body += TRUNCATION_MARKER

    return [
        {
            "role": "user",
            "content": (
                f"Please write a professional email reply with a {tone.value} tone "
                f"to the following email:\n\n{body}\n\nReply:"
            ),
        }
    ]
