"""Tests for paragraph wrapping of rich-text fields."""

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from core.richtext import autop, format_rich_text


def test_autop_splits_on_blank_lines():
    assert autop("line one\n\nline two") == "<p>line one</p>\n<p>line two</p>\n"


def test_autop_single_newline_becomes_break():
    assert autop("street\ncity") == "<p>street<br />\ncity</p>\n"


def test_autop_empty_and_whitespace():
    assert autop("") == ""
    assert autop("   \n\n  ") == ""
    assert autop(None) == ""


def test_autop_normalises_windows_newlines():
    assert autop("a\r\n\r\nb") == "<p>a</p>\n<p>b</p>\n"


def test_autop_keeps_block_markup():
    assert autop("<ul><li>x</li></ul>\n\nafter") == "<ul><li>x</li></ul>\n<p>after</p>\n"


def test_format_rich_text_only_for_configured_fields(config):
    assert format_rich_text("bio", "line one\n\nline two", config).count("<p>") == 2
    assert format_rich_text("date", "2024-01-01", config) == "2024-01-01"
    assert format_rich_text("bio", "", config) == ""


def test_format_rich_text_lists(config):
    assert format_rich_text("contact", ["a", "b"], config) == ["<p>a</p>\n", "<p>b</p>\n"]
