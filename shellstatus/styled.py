"""Styled text for prompts.

A ``Text`` is an immutable sequence of ``Segment`` values, each carrying a
set of attribute names. It renders either to prompt_toolkit formatted text
(for the live prompt) or to a rich ``Text`` (for console output).

Recognized attributes:
    bold, dim, italic, underlined, blink, inverse
    <color>, fg-<color>, bg-<color>
where <color> is one of the eight ANSI colors, optionally prefixed with
"bright-".
"""

from __future__ import annotations

from dataclasses import dataclass, field

from prompt_toolkit.formatted_text import FormattedText
from rich.text import Text as RichText

from .defaults import STALE_ATTR

_COLORS = {"black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"}

# attribute -> (prompt_toolkit style, rich style)
_FLAGS = {
    "bold": ("bold", "bold"),
    "dim": ("", "dim"),
    "italic": ("italic", "italic"),
    "underlined": ("underline", "underline"),
    "blink": ("blink", "blink"),
    "inverse": ("reverse", "reverse"),
}


@dataclass(frozen=True, slots=True)
class Segment:
    """A run of text sharing one set of attributes."""

    text: str
    attrs: frozenset[str] = field(default_factory=frozenset)

    def with_attr(self, attr: str) -> Segment:
        return Segment(self.text, self.attrs | {attr})


@dataclass(frozen=True, slots=True)
class Text:
    """Immutable, order-preserving sequence of segments."""

    segments: tuple[Segment, ...] = ()

    def __str__(self) -> str:
        return "".join(seg.text for seg in self.segments)

    def __add__(self, other: Text) -> Text:
        if not isinstance(other, Text):
            return NotImplemented
        return Text(self.segments + other.segments)

    def __bool__(self) -> bool:
        return any(seg.text for seg in self.segments)

    def with_attr(self, attr: str) -> Text:
        """Return a copy with ``attr`` added to every segment."""
        return Text(tuple(seg.with_attr(attr) for seg in self.segments))

    def stale(self) -> Text:
        """Return the stale rendition: same text, all segments inverted."""
        return self.with_attr(STALE_ATTR)

    def to_formatted_text(self) -> FormattedText:
        """Render as prompt_toolkit formatted text."""
        return FormattedText(
            [(_ptk_style(seg.attrs), seg.text) for seg in self.segments]
        )

    def to_rich(self) -> RichText:
        """Render as a rich Text instance."""
        out = RichText()
        for seg in self.segments:
            out.append(seg.text, style=_rich_style(seg.attrs) or None)
        return out


def plain(text: str) -> Text:
    """A single segment with no attributes."""
    return Text((Segment(text),))


def make_text(text: str, *attrs: str) -> Text:
    """A single segment carrying the given attributes."""
    for attr in attrs:
        _check_attr(attr)
    return Text((Segment(text, frozenset(attrs)),))


def join(*parts: Text) -> Text:
    """Concatenate several texts."""
    segments: tuple[Segment, ...] = ()
    for part in parts:
        segments += part.segments
    return Text(segments)


@dataclass(frozen=True, slots=True)
class Content:
    """What a prompt engine publishes: styled text plus a stale flag."""

    text: Text
    is_stale: bool = False

    def mark_stale(self) -> Content:
        return Content(self.text, True)

    def styled(self) -> Text:
        """The text as it should be displayed."""
        return self.text.stale() if self.is_stale else self.text

    def __str__(self) -> str:
        return str(self.text)


# --- Attribute translation ---


def _check_attr(attr: str) -> None:
    if attr in _FLAGS:
        return
    if _color_of(attr) is None:
        raise ValueError(f"Unknown style attribute: {attr!r}")


def _color_of(attr: str) -> tuple[str, str] | None:
    """Split a color attribute into (layer, color), or None if it isn't one."""
    layer = "fg"
    name = attr
    if attr.startswith("fg-") or attr.startswith("bg-"):
        layer, name = attr[:2], attr[3:]
    base = name.removeprefix("bright-")
    if base not in _COLORS:
        return None
    return layer, name


def _ptk_style(attrs: frozenset[str]) -> str:
    parts = []
    for attr in sorted(attrs):
        if attr in _FLAGS:
            if _FLAGS[attr][0]:
                parts.append(_FLAGS[attr][0])
            continue
        color = _color_of(attr)
        if color is None:
            continue
        layer, name = color
        ansi = "ansi" + name.replace("bright-", "bright")
        parts.append(f"{layer}:{ansi}")
    return " ".join(parts)


def _rich_style(attrs: frozenset[str]) -> str:
    parts = []
    for attr in sorted(attrs):
        if attr in _FLAGS:
            parts.append(_FLAGS[attr][1])
            continue
        color = _color_of(attr)
        if color is None:
            continue
        layer, name = color
        name = name.replace("-", "_")
        parts.append(f"on {name}" if layer == "bg" else name)
    return " ".join(parts)
