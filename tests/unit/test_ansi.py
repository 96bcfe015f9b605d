"""Unit tests for ANSI escape parsing of device output."""

from __future__ import annotations

from mrbwriter.utils.ansi import ANSI_COLORS, AnsiSegment, parse_ansi, strip_ansi


class TestParseAnsi:
    def test_plain_text(self):
        assert parse_ansi("hello") == [AnsiSegment("hello")]

    def test_color_and_reset(self):
        segments = parse_ansi("\x1b[31mfail\x1b[0m ok")

        assert segments == [
            AnsiSegment("fail", ANSI_COLORS["31"]),
            AnsiSegment(" ok"),
        ]

    def test_bold_combined_with_color(self):
        segments = parse_ansi("\x1b[1;32mPASS\x1b[22m done")

        assert segments[0] == AnsiSegment("PASS", ANSI_COLORS["32"], bold=True)
        assert segments[1] == AnsiSegment(" done", ANSI_COLORS["32"], bold=False)
        assert segments[0].css == f"color: {ANSI_COLORS['32']}; font-weight: bold"

    def test_empty_sgr_resets(self):
        segments = parse_ansi("\x1b[33mwarn\x1b[m plain")

        assert segments[1] == AnsiSegment(" plain")

    def test_cursor_escapes_dropped(self):
        assert strip_ansi("\x1b[2K\x1b[1Gprogress 50%\r") == "progress 50%"

    def test_osc_title_dropped(self):
        assert strip_ansi("\x1b]0;title\x07text") == "text"
