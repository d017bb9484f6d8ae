"""Top-to-bottom page flow with automatic page allocation."""

from __future__ import annotations

import logging

import pymupdf

logger = logging.getLogger(__name__)

A4_WIDTH = 595
A4_HEIGHT = 842
TOP_MARGIN = 780
BOTTOM_MARGIN = 80


class PageFlow:
    """Owns the current page and the vertical cursor for flowed content.

    ``y`` is a baseline position measured from the bottom edge of the page.
    It only moves down as content is drawn and is reset to ``top`` when a
    new page is allocated; it never goes below ``bottom``.
    """

    def __init__(
        self,
        document: pymupdf.Document,
        width: float = A4_WIDTH,
        height: float = A4_HEIGHT,
        top: float = TOP_MARGIN,
        bottom: float = BOTTOM_MARGIN,
    ) -> None:
        if not bottom < top <= height:
            raise ValueError(f"Invalid margins: bottom={bottom}, top={top}, height={height}")
        self.document = document
        self.width = width
        self.height = height
        self.top = top
        self.bottom = bottom
        self.pages: list[pymupdf.Page] = []
        self.page_breaks = 0
        self.page = self._allocate()
        self.y = top

    @property
    def printable_height(self) -> float:
        return self.top - self.bottom

    @property
    def at_top(self) -> bool:
        return self.y >= self.top

    def fits(self, height: float) -> bool:
        return self.y - height >= self.bottom

    def ensure(self, height: float) -> bool:
        """Make room for a block of ``height`` points before drawing it.

        Starts a new page when the block would cross the bottom margin.
        A block that cannot fit even on an empty page is drawn where it is
        if the current page is still empty.

        Returns:
            True if a new page was allocated.
        """
        if self.fits(height) or self.at_top:
            return False
        self.new_page()
        return True

    def advance(self, height: float) -> None:
        """Move the cursor down past drawn content or a gap."""
        if height < 0:
            raise ValueError("The cursor only moves down the page.")
        self.y = max(self.y - height, self.bottom)

    def new_page(self) -> pymupdf.Page:
        self.page = self._allocate()
        self.y = self.top
        self.page_breaks += 1
        logger.debug("Page break: continuing on page %d", self.page.number + 1)
        return self.page

    def _allocate(self) -> pymupdf.Page:
        page = self.document.new_page(width=self.width, height=self.height)
        self.pages.append(page)
        return page
