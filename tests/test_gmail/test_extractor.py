"""Tests for body extraction from message part trees."""

import logging

import pytest
from conftest import b64url, container, leaf

from replydesk.gmail.extractor import extract_body
from replydesk.gmail.types import ContainerPart, EmptyPart, LeafPart, parse_part


def _leaf(mime_type: str, text: str) -> LeafPart:
    return LeafPart(mime_type=mime_type, body_data=b64url(text))


def _container(mime_type: str, *parts: object) -> ContainerPart:
    return ContainerPart(mime_type=mime_type, parts=tuple(parts))  # type: ignore[arg-type]


_BROKEN = LeafPart(mime_type="text/plain", body_data="%%% not base64 %%%")


# ── Base cases ──────────────────────────────────────────────────────────────────


class TestBaseCases:
    def test_single_leaf_is_decoded(self) -> None:
        assert extract_body(_leaf("text/plain", "Hello")) == "Hello"

    def test_top_level_leaf_decoded_regardless_of_type(self) -> None:
        assert extract_body(_leaf("application/octet-stream", "raw")) == "raw"

    def test_empty_part_yields_empty_string(self) -> None:
        assert extract_body(EmptyPart()) == ""

    def test_multibyte_content(self) -> None:
        assert extract_body(_leaf("text/plain", "Привет, мир 👋")) == "Привет, мир 👋"


# ── Preference rules ────────────────────────────────────────────────────────────


class TestPreference:
    def test_html_preferred_over_plain(self) -> None:
        part = _container("multipart/alternative", _leaf("text/plain", "plain"), _leaf("text/html", "<b>html</b>"))
        assert extract_body(part) == "<b>html</b>"

    def test_html_preferred_regardless_of_order(self) -> None:
        part = _container("multipart/alternative", _leaf("text/html", "<b>html</b>"), _leaf("text/plain", "plain"))
        assert extract_body(part) == "<b>html</b>"

    def test_plain_when_no_html(self) -> None:
        part = _container("multipart/mixed", _leaf("text/plain", "plain"))
        assert extract_body(part) == "plain"

    def test_later_sibling_overwrites_earlier(self) -> None:
        part = _container("multipart/mixed", _leaf("text/plain", "first"), _leaf("text/plain", "second"))
        assert extract_body(part) == "second"

    def test_other_leaf_types_ignored(self) -> None:
        part = _container("multipart/mixed", _leaf("image/png", "PNGDATA"), _leaf("text/plain", "caption"))
        assert extract_body(part) == "caption"

    def test_only_non_text_leaves_yields_empty(self) -> None:
        part = _container("multipart/mixed", _leaf("application/pdf", "%PDF"), EmptyPart("image/png"))
        assert extract_body(part) == ""


# ── Nesting ─────────────────────────────────────────────────────────────────────


class TestNesting:
    def test_deep_plain_leaf_classified_as_plain(self) -> None:
        part = _container("multipart/mixed", _container("multipart/related", _leaf("text/plain", "deep")))
        assert extract_body(part) == "deep"

    def test_nested_plain_loses_to_sibling_html(self) -> None:
        part = _container(
            "multipart/mixed",
            _container("multipart/alternative", _leaf("text/plain", "nested plain")),
            _leaf("text/html", "<p>top html</p>"),
        )
        assert extract_body(part) == "<p>top html</p>"

    def test_nested_result_goes_to_html_when_container_type_mentions_html(self) -> None:
        part = _container(
            "multipart/mixed",
            _container("multipart/x-html-bundle", _leaf("text/plain", "bundled")),
            _leaf("text/plain", "sibling plain"),
        )
        assert extract_body(part) == "bundled"

    def test_nested_container_classified_by_its_own_type_not_its_content(self) -> None:
        # The nested alternative picks its HTML, but the container type has no
        # "html" in it, so the result counts as plain at this level.
        part = _container(
            "multipart/mixed",
            _container("multipart/alternative", _leaf("text/plain", "p"), _leaf("text/html", "<i>h</i>")),
            _leaf("text/plain", "later plain"),
        )
        assert extract_body(part) == "later plain"

    def test_empty_nested_result_does_not_overwrite(self) -> None:
        part = _container(
            "multipart/mixed",
            _leaf("text/plain", "keep me"),
            _container("multipart/alternative", EmptyPart()),
        )
        assert extract_body(part) == "keep me"

    def test_nested_part_with_own_data_contributes_that_data(self) -> None:
        nested = container("multipart/alternative", leaf("text/plain", "child"))
        nested["body"] = {"data": b64url("inline")}
        payload = container("multipart/mixed", nested)
        assert extract_body(parse_part(payload)) == "inline"

    def test_text_leaf_with_children_decoded_directly(self) -> None:
        html_part = leaf("text/html", "<p>own</p>")
        html_part["parts"] = [leaf("text/plain", "child")]
        payload = container("multipart/mixed", leaf("text/plain", "plain"), html_part)
        assert extract_body(parse_part(payload)) == "<p>own</p>"


# ── Malformed content ───────────────────────────────────────────────────────────


class TestMalformed:
    def test_bad_leaf_yields_empty_without_raising(self) -> None:
        assert extract_body(_BROKEN) == ""

    def test_bad_leaf_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="replydesk.gmail.extractor"):
            extract_body(_BROKEN)
        assert "Failed to decode" in caplog.text

    def test_message_of_only_a_bad_leaf_is_empty(self) -> None:
        assert extract_body(_container("multipart/mixed", _BROKEN)) == ""

    def test_bad_html_falls_back_to_plain(self) -> None:
        bad_html = LeafPart(mime_type="text/html", body_data="!!!")
        part = _container("multipart/alternative", _leaf("text/plain", "plain survives"), bad_html)
        assert extract_body(part) == "plain survives"
