"""Publication numbers of the form ``{CATEGORY}-{YEAR}-{SEQ}``."""

from __future__ import annotations

import re
from collections.abc import Iterable

from coverpage.models import Category

_NUMBER_RE = re.compile(r"^([A-Z]{2})-(\d{4})-(\d+)$")


def format_number(category: Category | str, year: int, seq: int) -> str:
    """Format a publication number, zero-padding the sequence to three digits."""
    return f"{Category.parse(category).value}-{year}-{seq:03d}"


def parse_number(text: str) -> tuple[Category, int, int] | None:
    """Split a publication number into (category, year, sequence), or None."""
    match = _NUMBER_RE.match(str(text).strip())
    if not match:
        return None
    try:
        category = Category(match.group(1))
    except ValueError:
        return None
    return category, int(match.group(2)), int(match.group(3))


def next_number(category: Category | str, year: int, existing: Iterable[str]) -> str:
    """Return the next number for ``category`` and ``year``.

    The sequence is the highest one already issued under the same
    category and year, plus one. Numbers for other prefixes are ignored.
    """
    category = Category.parse(category)
    highest = 0
    for value in existing:
        parsed = parse_number(value)
        if parsed and parsed[0] is category and parsed[1] == year:
            highest = max(highest, parsed[2])
    return format_number(category, year, highest + 1)
