"""Greedy line wrapping, by measured width or by character count."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def split_words(text: str) -> list[str]:
    """Split on runs of whitespace, dropping empty pieces."""
    return [w for w in _WHITESPACE_RE.split(text or "") if w]


def wrap_by_width(text: str, font, font_size: float, max_width: float) -> list[str]:
    """Wrap ``text`` into lines no wider than ``max_width`` points.

    Args:
        text: Free text; any whitespace run separates words.
        font: Anything with a ``width(text, size)`` method (see ``FontHandle``).
        font_size: Size in points used for measuring.
        max_width: Width budget per line in points.

    Returns:
        The lines in order. A word wider than ``max_width`` is never split;
        it gets a line of its own.
    """
    lines: list[str] = []
    current = ""

    for word in split_words(text):
        candidate = f"{current} {word}" if current else word
        if font.width(candidate, font_size) <= max_width:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def wrap_by_approx_chars(text: str, max_chars: int) -> list[str]:
    """Wrap ``text`` into lines of at most ``max_chars`` characters.

    Same greedy rule as :func:`wrap_by_width`, with string length standing
    in for measured width and one character charged per separating space.
    """
    lines: list[str] = []
    current = ""

    for word in split_words(text):
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines
