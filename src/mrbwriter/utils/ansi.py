"""Split device output carrying ANSI escapes into styled text segments."""

from __future__ import annotations

import re
from dataclasses import dataclass

ANSI_COLORS: dict[str, str] = {
    "30": "#000000", "31": "#cd3131", "32": "#0dbc79", "33": "#e5e510",
    "34": "#2472c8", "35": "#bc3fbc", "36": "#11a8cd", "37": "#e5e5e5",
    "90": "#666666", "91": "#f14c4c", "92": "#23d18b", "93": "#f5f543",
    "94": "#3b8eea", "95": "#d670d6", "96": "#29b8db", "97": "#ffffff",
}

# Splits text into plain runs and escape sequences
_ANSI_RE = re.compile(
    r"("
    r"\x1b\].*?(?:\x07|\x1b\\)"       # OSC
    r"|\x1b\[[\d;]*m"                 # SGR
    r"|\x1b\[[\x20-\x3F]*[\x40-\x7E]"  # other CSI
    r"|\x1b[\x20-\x7E]"               # two-byte escapes
    r"|\x1b"                          # stray ESC
    r")"
)
_SGR_RE = re.compile(r"\x1b\[([\d;]*)m")


@dataclass(frozen=True)
class AnsiSegment:
    """A run of text sharing one style."""
    text: str
    color: str | None = None
    bold: bool = False

    @property
    def css(self) -> str:
        parts = []
        if self.color:
            parts.append(f"color: {self.color}")
        if self.bold:
            parts.append("font-weight: bold")
        return "; ".join(parts)


def parse_ansi(text: str) -> list[AnsiSegment]:
    """Parse SGR colour and bold codes; every other escape is dropped."""
    segments: list[AnsiSegment] = []
    color: str | None = None
    bold = False

    for part in _ANSI_RE.split(text.replace("\r", "")):
        if not part:
            continue
        if not part.startswith("\x1b"):
            segments.append(AnsiSegment(part, color, bold))
            continue
        match = _SGR_RE.fullmatch(part)
        if not match:
            continue
        codes = match.group(1).split(";") if match.group(1) else ["0"]
        for code in codes:
            code = code.lstrip("0") or "0"
            if code == "0":
                color, bold = None, False
            elif code == "1":
                bold = True
            elif code == "22":
                bold = False
            elif code == "39":
                color = None
            elif code in ANSI_COLORS:
                color = ANSI_COLORS[code]
    return segments


def strip_ansi(text: str) -> str:
    return "".join(segment.text for segment in parse_ansi(text))
