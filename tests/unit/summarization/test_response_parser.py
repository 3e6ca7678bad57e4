"""Unit tests for parsing freeform provider replies."""
import pytest

from textdigest.summarization import ResponseParser
from textdigest.summarization.response_parser import FALLBACK_SUMMARY_LIMIT

from tests.fakes import WELL_FORMED_REPLY


@pytest.fixture
def parser():
    return ResponseParser()


def test_parse_well_formed_reply(parser):
    """Summary is taken verbatim and all bullets are kept in order."""
    parsed = parser.parse(WELL_FORMED_REPLY)

    assert parsed.summary == "Solar adoption doubled last year as panel prices fell."
    assert parsed.bullet_points == [
        "Panel prices dropped by a third",
        "Residential installs doubled",
        "Grid operators are adding storage",
    ]


@pytest.mark.parametrize("glyph", ["•", "-", "*"])
def test_each_bullet_glyph_is_stripped(parser, glyph):
    parsed = parser.parse(f"SUMMARY: s\nBULLET POINTS:\n{glyph}   Key fact  ")
    assert parsed.bullet_points == ["Key fact"]


def test_headers_are_case_insensitive(parser):
    parsed = parser.parse("summary:  lower case works \nbullet points:\n- one")

    assert parsed.summary == "lower case works"
    assert parsed.bullet_points == ["one"]


def test_bullets_before_header_are_ignored(parser):
    parsed = parser.parse("- stray\nSUMMARY: s\n- also stray\nBULLET POINTS:\n- kept")
    assert parsed.bullet_points == ["kept"]


def test_unprefixed_lines_in_bullet_section_are_ignored(parser):
    parsed = parser.parse(
        "SUMMARY: s\nBULLET POINTS:\n- first\nHere are more thoughts\n\n   \n* second"
    )
    assert parsed.bullet_points == ["first", "second"]


def test_windows_line_endings(parser):
    parsed = parser.parse("SUMMARY: crlf\r\n\r\nBULLET POINTS:\r\n• one\r\n• two\r\n")

    assert parsed.summary == "crlf"
    assert parsed.bullet_points == ["one", "two"]


def test_summary_after_bullet_section_is_still_captured(parser):
    """Bullet mode never closes, but a later SUMMARY: line still wins."""
    parsed = parser.parse(
        "SUMMARY: first\nBULLET POINTS:\n- a\nSUMMARY: second\n- b"
    )

    assert parsed.summary == "second"
    assert parsed.bullet_points == ["a", "b"]


def test_header_must_match_exactly_to_open_bullets(parser):
    parsed = parser.parse("SUMMARY: s\nBULLET POINTS: inline text\n- not a bullet")
    assert parsed.bullet_points == []


def test_fallback_short_reply_is_used_whole(parser):
    raw = "The model ignored the requested format entirely."
    parsed = parser.parse(raw)

    assert parsed.summary == raw
    assert parsed.bullet_points == []


def test_fallback_long_reply_is_truncated(parser):
    raw = "x" * 600
    parsed = parser.parse(raw)

    assert parsed.summary == "x" * FALLBACK_SUMMARY_LIMIT + "..."
    assert len(parsed.summary) == 503
    assert parsed.bullet_points == []


def test_fallback_exactly_at_limit_is_not_truncated(parser):
    raw = "y" * FALLBACK_SUMMARY_LIMIT
    assert parser.parse(raw).summary == raw


def test_fallback_keeps_bullets_found_without_summary(parser):
    raw = "BULLET POINTS:\n- only bullets"
    parsed = parser.parse(raw)

    assert parsed.summary == raw
    assert parsed.bullet_points == ["only bullets"]


def test_empty_summary_line_falls_back(parser):
    raw = "SUMMARY:\nBULLET POINTS:\n- a"
    parsed = parser.parse(raw)

    assert parsed.summary == raw
    assert parsed.bullet_points == ["a"]
