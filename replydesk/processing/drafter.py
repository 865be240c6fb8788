"""Reply drafting — Claude-powered candidate replies for user review."""

import logging
import os

import anthropic
from anthropic import AsyncAnthropic
from anthropic.types import TextBlock

from replydesk.processing.prompts import build_messages, build_system_prompt
from replydesk.processing.types import ReplyTone

logger = logging.getLogger(__name__)

# Default drafting model; REPLYDESK_MODEL overrides it via Settings.model.
_MODEL = "claude-sonnet-4-6"
_MAX_TOKENS = 1024

FALLBACK_REPLY = "Sorry, I could not generate a reply."


class GenerationError(Exception):
    """Raised when the model call itself fails (network, auth, quota)."""


class ReplyDrafter:
    """Sends sanitized email text to Claude and returns a draft reply.

    The result is only a candidate: it goes back to the user for editing
    and is never sent automatically.

    Usage::

        drafter = ReplyDrafter()
        draft = await drafter.generate_reply(sanitize(email.body), ReplyTone.CASUAL)
    """

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        self._client = AsyncAnthropic(
            api_key=api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        )
        self._model = model or _MODEL

    async def generate_reply(self, clean_text: str, tone: ReplyTone | str) -> str:
        """Return the first generated reply, or FALLBACK_REPLY if the model gave none.

        Raises:
            ValueError: if ``tone`` is not one of formal, casual or technical.
            GenerationError: if the API call fails.
        """
        tone = ReplyTone(tone)
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=_MAX_TOKENS,
                system=build_system_prompt(tone),
                messages=build_messages(clean_text, tone),  # type: ignore[arg-type]
            )
        except anthropic.APIError as exc:
            logger.error("Reply generation failed: %s", exc)
            raise GenerationError(f"Failed to generate email reply: {exc}") from exc

        for block in response.content:
            if isinstance(block, TextBlock) and block.text.strip():
                return block.text.strip()

        logger.warning(
            "Model returned no reply text (stop_reason=%r); using fallback",
            response.stop_reason,
        )
        return FALLBACK_REPLY
