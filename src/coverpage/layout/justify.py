"""Full justification by stretching inter-word gaps."""

from __future__ import annotations

Placement = tuple[str, float]


def justify(
    line: str,
    font,
    font_size: float,
    target_width: float,
    left: float = 0.0,
) -> list[Placement]:
    """Place each word of ``line`` so the line spans exactly ``target_width``.

    The gap between words is ``(target_width - natural_width) / (n - 1)``,
    where the natural width is the summed width of the words alone, so the
    words and gaps add up to ``target_width``. Each word's width is measured
    again while placing it.

    Returns:
        ``(word, x)`` pairs, the first word at ``left``. Lines with fewer
        than two words come back as a single placement at ``left``.
    """
    words = line.split()
    if len(words) < 2:
        return [(line, left)]

    natural_width = sum(font.width(word, font_size) for word in words)
    extra_space = (target_width - natural_width) / (len(words) - 1)

    placements: list[Placement] = []
    x = left
    for word in words:
        placements.append((word, x))
        x += font.width(word, font_size) + extra_space
    return placements


def place_line(
    line: str,
    font,
    font_size: float,
    target_width: float,
    left: float = 0.0,
    last: bool = False,
) -> list[Placement]:
    """Justify ``line`` unless it closes its paragraph.

    The last line of a paragraph keeps natural spacing and starts at ``left``.
    """
    if last:
        return [(line, left)]
    return justify(line, font, font_size, target_width, left)
