"""Text layout primitives: wrapping, justification and page flow."""

from coverpage.layout.flow import PageFlow
from coverpage.layout.fonts import FontHandle, FontSet
from coverpage.layout.justify import justify, place_line
from coverpage.layout.wrap import wrap_by_approx_chars, wrap_by_width

__all__ = [
    "FontHandle",
    "FontSet",
    "PageFlow",
    "justify",
    "place_line",
    "wrap_by_approx_chars",
    "wrap_by_width",
]
