"""Tests for styled text and its renderers."""

import pytest

from shellstatus.styled import Content, Segment, Text, join, make_text, plain


class TestText:
    def test_plain(self):
        text = plain("hello")
        assert str(text) == "hello"
        assert text.segments == (Segment("hello"),)

    def test_make_text_attrs(self):
        text = make_text("x", "bold", "red")
        assert text.segments[0].attrs == frozenset({"bold", "red"})

    def test_unknown_attr_raises(self):
        with pytest.raises(ValueError, match="Unknown style attribute"):
            make_text("x", "sparkly")

    def test_concatenation_preserves_order(self):
        text = plain("a") + make_text("b", "bold") + plain("c")
        assert [seg.text for seg in text.segments] == ["a", "b", "c"]
        assert str(text) == "abc"

    def test_join(self):
        assert join(plain("a"), plain("b")) == plain("a") + plain("b")
        assert join() == Text()

    def test_empty_text_is_falsy(self):
        assert not Text()
        assert not plain("")
        assert plain(" ")

    def test_equality_by_value(self):
        assert make_text("x", "bold", "red") == make_text("x", "red", "bold")
        assert plain("x") != make_text("x", "bold")

    def test_stale_adds_inverse_everywhere(self):
        text = plain("a") + make_text("b", "bold")
        stale = text.stale()
        assert str(stale) == "ab"
        assert stale.segments[0].attrs == frozenset({"inverse"})
        assert stale.segments[1].attrs == frozenset({"bold", "inverse"})
        # The receiver is unchanged.
        assert text.segments[0].attrs == frozenset()


class TestContent:
    def test_mark_stale_returns_new_value(self):
        content = Content(plain("1> "))
        stale = content.mark_stale()
        assert stale is not content
        assert stale.is_stale
        assert not content.is_stale

    def test_styled_applies_inverse_only_when_stale(self):
        assert Content(plain("1> ")).styled() == plain("1> ")
        assert Content(plain("1> "), True).styled() == make_text("1> ", "inverse")

    def test_str(self):
        assert str(Content(plain("1> "), True)) == "1> "


class TestFormattedText:
    def test_plain_has_empty_style(self):
        assert list(plain("> ").to_formatted_text()) == [("", "> ")]

    def test_inverse_maps_to_reverse(self):
        assert list(make_text("x", "inverse").to_formatted_text()) == [("reverse", "x")]

    def test_colors(self):
        fragments = list(make_text("x", "red", "bg-blue").to_formatted_text())
        style = fragments[0][0]
        assert "fg:ansired" in style
        assert "bg:ansiblue" in style

    def test_bright_color(self):
        fragments = list(make_text("x", "fg-bright-green").to_formatted_text())
        assert fragments[0][0] == "fg:ansibrightgreen"

    def test_underlined(self):
        fragments = list(make_text("x", "underlined").to_formatted_text())
        assert fragments[0][0] == "underline"


class TestRich:
    def test_plain_text(self):
        rendered = plain("hello").to_rich()
        assert rendered.plain == "hello"

    def test_styles_applied_to_spans(self):
        rendered = (plain("a") + make_text("b", "bold", "inverse")).to_rich()
        assert rendered.plain == "ab"
        assert len(rendered.spans) == 1
        span = rendered.spans[0]
        assert (span.start, span.end) == (1, 2)
        assert str(span.style) == "bold reverse"

    def test_background_color(self):
        rendered = make_text("x", "bg-red").to_rich()
        assert str(rendered.spans[0].style) == "on red"
