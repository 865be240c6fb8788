"""Types for the reply drafting pipeline."""

from dataclasses import dataclass
from enum import Enum


class ReplyTone(str, Enum):
    """Style directive steering the phrasing of a generated reply."""

    FORMAL = "formal"
    CASUAL = "casual"
    TECHNICAL = "technical"


@dataclass
class ReplyDraft:
    """A reply being reviewed by the user before it is sent.

    Mutable on purpose: the user edits ``body_text`` in place.  Never
    persisted; dropped once the reply is sent or abandoned.
    """

    email_id: str
    tone: ReplyTone = ReplyTone.FORMAL
    body_text: str = ""
