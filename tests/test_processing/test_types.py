"""Tests for reply drafting types."""

from replydesk.processing.types import ReplyDraft, ReplyTone


class TestReplyTone:
    def test_values(self) -> None:
        assert {t.value for t in ReplyTone} == {"formal", "casual", "technical"}

    def test_is_str_enum(self) -> None:
        assert isinstance(ReplyTone.CASUAL, str)
        assert ReplyTone.CASUAL == "casual"

    def test_round_trip(self) -> None:
        for t in ReplyTone:
            assert ReplyTone(t.value) is t


class TestReplyDraft:
    def test_defaults(self) -> None:
        draft = ReplyDraft(email_id="m1")
        assert draft.tone is ReplyTone.FORMAL
        assert draft.body_text == ""

    def test_body_is_editable(self) -> None:
        draft = ReplyDraft(email_id="m1", tone=ReplyTone.CASUAL, body_text="Sure!")
        draft.body_text = "Sure, see you then."
        assert draft.body_text == "Sure, see you then."
