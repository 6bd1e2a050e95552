"""ANSI-aware width measurement for panel and status text.

Filenames can contain East Asian wide characters, so layout uses display
columns rather than ``len``. Escape sequences never count toward width.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks consume no columns and wide/fullwidth characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    plain = ANSI_ESCAPE_RE.sub("", text)
    return sum(char_display_width(ch) for ch in plain)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Escape sequences are kept verbatim so styling survives the cut.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        w = char_display_width(text[i])
        if col + w > max_cols:
            break
        out.append(text[i])
        col += w
        i += 1
    return "".join(out)


def pad_ansi_line(text: str, cols: int) -> str:
    """Clip then right-pad ``text`` with spaces to exactly ``cols`` columns."""
    clipped = clip_ansi_line(text, cols)
    return clipped + " " * max(0, cols - display_width(clipped))


def wrap_plain_text(text: str, cols: int) -> list[str]:
    """Hard-wrap unstyled text on display-column boundaries."""
    if cols <= 0:
        return []
    rows: list[str] = []
    for paragraph in text.splitlines() or [""]:
        current: list[str] = []
        used = 0
        for ch in paragraph:
            w = char_display_width(ch)
            if used + w > cols and current:
                rows.append("".join(current))
                current = []
                used = 0
            current.append(ch)
            used += w
        rows.append("".join(current))
    return rows


__all__ = [
    "ANSI_ESCAPE_RE",
    "char_display_width",
    "display_width",
    "clip_ansi_line",
    "pad_ansi_line",
    "wrap_plain_text",
]
