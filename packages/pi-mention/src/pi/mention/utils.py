"""Grapheme and display-width helpers for terminal rendering."""

from __future__ import annotations

import re

import grapheme
import wcwidth as _wcwidth

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJ]")


def graphemes(text: str) -> list[str]:
    return list(grapheme.graphemes(text))


def grapheme_width(g: str) -> int:
    """Terminal columns taken by one grapheme cluster."""
    if not g:
        return 0
    cp = ord(g[0])
    if cp < 0x20 or (0x7F <= cp <= 0x9F):
        return 0
    # ZWJ sequences and VS16 emoji render double width
    if len(g) > 1 and ("\u200d" in g or "\ufe0f" in g):
        return 2
    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Width of ``text`` in terminal columns, ignoring ANSI styling."""
    stripped = _ANSI_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)
    return sum(grapheme_width(g) for g in graphemes(stripped))


def truncate_to_width(text: str, max_width: int, ellipsis: str = "...") -> str:
    """Cut plain ``text`` at a grapheme boundary so it fits ``max_width``."""
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return ellipsis[:max_width]

    result: list[str] = []
    cols = 0
    for g in graphemes(text):
        w = grapheme_width(g)
        if cols + w > target:
            break
        result.append(g)
        cols += w
    return "".join(result) + ellipsis


def last_grapheme_length(text: str) -> int:
    """Code units in the final grapheme of ``text`` (1 when empty)."""
    parts = graphemes(text)
    return len(parts[-1]) if parts else 1


def first_grapheme_length(text: str) -> int:
    parts = graphemes(text)
    return len(parts[0]) if parts else 1
