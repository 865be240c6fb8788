"""Turn HTML email bodies into clean plain text for display and for the drafter.

``sanitize`` runs a fixed sequence of small string → string steps.  Each step
is a public function so it can be exercised on its own; the order matters,
since later steps assume the whitespace shape left by earlier ones.
"""

import html
import logging
import re
from collections.abc import Callable
from html.parser import HTMLParser

logger = logging.getLogger(__name__)

_STYLE_BLOCK = re.compile(
    r"{[^}]*}|@media[^{]*{[^}]*}|<style[^>]*>[^<]*</style>",
    re.IGNORECASE,
)
_BLANK_LINES = re.compile(r"\s*\n\s*\n\s*")
_EDGE_WHITESPACE = re.compile(r"\A\s+|\s+\Z")
_SPACE_RUN = re.compile(r"[ \t]+")
_LINE_INDENT = re.compile(r"\n[^\S\n]+")
_LEADING_CSS_DEBRIS = re.compile(r"\A(?:@|\{|\}|\s)*")
_CSS_DECLARATION = re.compile(
    r"\b(?:padding|margin|width|height|display|overflow|text-align):[^;}\n]+[;}\n]*[ \t]*"
)
_ANY_TAG = re.compile(r"<[^>]*>")


# ── HTML stripper ───────────────────────────────────────────────────────────────


class _TextExtractor(HTMLParser):
    """HTMLParser subclass that keeps every visible text node verbatim.

    Unlike a word-joining stripper, whitespace inside text nodes is kept so
    the later steps can normalise line structure.  Text inside title, style
    and script elements, and anything else inside head, is not visible
    and is dropped.
    """

    _HIDDEN = frozenset({"title", "style", "script"})

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._hidden_depth = 0
        self._in_head = False

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "head":
            self._in_head = True
        elif tag == "body":
            # An unclosed head ends where the body starts.
            self._in_head = False
        elif tag in self._HIDDEN:
            self._hidden_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag == "head":
            self._in_head = False
        elif tag in self._HIDDEN and self._hidden_depth:
            self._hidden_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._hidden_depth and not self._in_head:
            self._parts.append(data)

    def get_text(self) -> str:
        return "".join(self._parts)


# ── Pipeline steps ──────────────────────────────────────────────────────────────


def remove_style_blocks(text: str) -> str:
    """Drop ``{...}`` rule bodies, ``@media`` blocks and simple ``<style>`` elements."""
    return _STYLE_BLOCK.sub("", text)


def extract_text(text: str) -> str:
    """Return the text content of ``text`` parsed as HTML, with entities decoded."""
    extractor = _TextExtractor()
    try:
        extractor.feed(text)
        extractor.close()
    except Exception as exc:  # noqa: BLE001
        # HTMLParser is lenient but not guaranteed total; fall back to a blunt strip.
        logger.debug("HTML parse failed (%s); stripping tags by pattern", exc)
        return html.unescape(_ANY_TAG.sub("", text))
    return extractor.get_text()


def collapse_blank_lines(text: str) -> str:
    """Squash any run of two or more newlines (plus surrounding whitespace) to one blank line."""
    return _BLANK_LINES.sub("\n\n", text)


def trim(text: str) -> str:
    return _EDGE_WHITESPACE.sub("", text)


def collapse_spaces(text: str) -> str:
    return _SPACE_RUN.sub(" ", text)


def strip_line_indent(text: str) -> str:
    """Remove leading spaces and tabs from every line, keeping blank lines."""
    return _LINE_INDENT.sub("\n", text)


def strip_leading_css_debris(text: str) -> str:
    """Drop stray ``@``, braces and whitespace left at the very start by partial rule removal."""
    return _LEADING_CSS_DEBRIS.sub("", text)


def remove_css_declarations(text: str) -> str:
    """Remove leftover layout declarations such as ``padding: 0;`` or ``width: 100%``.

    Spaces and tabs after the terminator go with the declaration, so prose
    around it stays single-spaced.
    """
    return _CSS_DECLARATION.sub("", text)


#: Steps applied in order by sanitize().
PIPELINE: tuple[Callable[[str], str], ...] = (
    remove_style_blocks,
    extract_text,
    collapse_blank_lines,
    trim,
    collapse_spaces,
    strip_line_indent,
    strip_leading_css_debris,
    remove_css_declarations,
    trim,
)


def sanitize(raw: str | None) -> str:
    """Return human-readable plain text from an HTML (or already plain) body.

    Never raises.  Markup-only input, such as a lone ``<style>`` block,
    comes back as an empty string.

    Example::

        sanitize("<style>.a{color:red}</style><p>Hi</p>")  # → "Hi"
    """
    text = raw or ""
    for step in PIPELINE:
        text = step(text)
    return text
