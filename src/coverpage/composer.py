"""Cover page and abstract page generation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

import pymupdf

from coverpage.config import Settings
from coverpage.errors import CoverpageError, InvalidInputError, LayoutError
from coverpage.layout.flow import A4_HEIGHT, A4_WIDTH, PageFlow
from coverpage.layout.fonts import BLACK, Color, FontHandle, FontSet
from coverpage.layout.justify import place_line
from coverpage.layout.wrap import wrap_by_approx_chars, wrap_by_width
from coverpage.letterhead import Letterhead
from coverpage.models import Metadata

logger = logging.getLogger(__name__)

COVER_BACKGROUND: Color = (0.851, 1, 1)
MAROON: Color = (0.5, 0, 0)
BLUE: Color = (0, 0, 1)

# Cover page
NUMBER_SIZE = 14
NUMBER_INSET = 50        # from the right and top edges
COVER_TITLE_SIZE = 19
COVER_TITLE_STEP = 25
COVER_TITLE_TOP = 100    # first title baseline, below the top edge
COVER_AUTHOR_GAP = 80
COVER_AUTHOR_SIZE = 13
COVER_AUTHOR_STEP = 18
COVER_SIDE_MARGIN = 50
COVER_AUTHOR_MIN_GAP = 20
COVER_LOGO_CLEARANCE = 10
# Title and author are scaled down by these factors until they clear the logo.
COVER_SCALES = (1.0, 0.9, 0.8, 0.7, 0.6)
ADDRESS_TOP = 200
ADDRESS_NAME_SIZE = 14
ADDRESS_SIZE = 13
ADDRESS_STEP = 20
DATE_SIZE = 12
DATE_GAP = 30

# Abstract pages
MARGIN_LEFT = 50
MARGIN_RIGHT = 590
BODY_WIDTH = MARGIN_RIGHT - MARGIN_LEFT
BODY_SIZE = 11
BODY_CHARS = 95
BODY_STEP = BODY_SIZE + 6
KEYWORD_STEP = BODY_SIZE + 5
LABEL_STEP = BODY_SIZE + 4
TITLE_SIZE = 18
TITLE_STEP = 26
TITLE_GAP = 20
AUTHOR_SIZE = 12
AUTHOR_STEP = 20
AUTHOR_GAP = 10
EMAIL_SIZE = 11
EMAIL_STEP = 16
EMAIL_GAP = 40
HEADING_SIZE = 14
HEADING_STEP = 45
ABSTRACT_GAP = 35
KEYWORDS_GAP = 15
JEL_STEP = 45
JEL_BLOCK = 55
ACK_GAP = 10


def format_issue_date(day: date) -> str:
    """Date stamp printed on the cover, e.g. ``"March 2025"``."""
    return day.strftime("%B %Y")


class DocumentComposer:
    """Builds the cover page and abstract page(s) for one submission."""

    def __init__(
        self,
        issued: date | None = None,
        letterhead: Letterhead | None = None,
        fonts: FontSet | None = None,
    ) -> None:
        self.issued = issued
        self.letterhead = letterhead or Letterhead()
        self.fonts = fonts or FontSet()

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentComposer:
        """Use the configured font files, or the Base-14 fonts if none are set."""
        fonts = None
        if settings.font_regular:
            fonts = FontSet.from_files(
                settings.font_regular,
                settings.font_bold,
                settings.font_italic,
            )
        return cls(fonts=fonts)

    def check(self, meta: Metadata) -> None:
        """Reject metadata the document fonts cannot print.

        Raises:
            InvalidInputError: naming the field and the first bad character.
        """
        fonts = self.fonts
        fields = (
            ("title", meta.title, fonts.bold),
            ("author", meta.author, fonts.regular),
            ("email", meta.email, fonts.regular),
            ("abstract", meta.abstract, fonts.regular),
            ("keywords", meta.keywords, fonts.regular),
            ("JEL code", meta.jel_code, fonts.regular),
            ("acknowledgement", meta.acknowledgement, fonts.italic),
        )
        for label, text, font in fields:
            char = font.unsupported(text)
            if char is not None:
                raise InvalidInputError(
                    f"The {label} contains {char!r}, which the document fonts cannot print."
                )

    def compose(self, number: str, meta: Metadata) -> pymupdf.Document:
        """Draw the generated pages into a new in-memory document.

        Raises:
            LayoutError: if measuring or drawing fails, including text the
                fonts cannot render. No partial document is returned.
        """
        doc = pymupdf.open()
        try:
            self._draw_cover(doc, number, meta)
            flow = PageFlow(doc)
            _AbstractPages(flow, self.fonts, meta).draw()
        except CoverpageError:
            doc.close()
            raise
        except Exception as exc:
            doc.close()
            raise LayoutError(f"Could not lay out pages for {number}: {exc}") from exc

        logger.debug(
            "Composed %d pages for %s (%d abstract page breaks)",
            doc.page_count,
            number,
            flow.page_breaks,
        )
        return doc

    def compose_bytes(self, number: str, meta: Metadata) -> bytes:
        doc = self.compose(number, meta)
        try:
            return doc.tobytes(garbage=3, deflate=True)
        finally:
            doc.close()

    def _draw_cover(self, doc: pymupdf.Document, number: str, meta: Metadata) -> None:
        fonts = self.fonts
        page = doc.new_page(width=A4_WIDTH, height=A4_HEIGHT)
        width, height = page.rect.width, page.rect.height
        page.draw_rect(page.rect, color=None, fill=COVER_BACKGROUND)

        # Publication number, top right
        number_width = fonts.bold.width(number, NUMBER_SIZE)
        fonts.bold.draw(
            page,
            width - number_width - NUMBER_INSET,
            height - NUMBER_INSET,
            number,
            NUMBER_SIZE,
        )

        y = height - COVER_TITLE_TOP
        title, author, scale, gap = self._fit_cover_text(meta, width - 2 * COVER_SIDE_MARGIN, y)
        for line in title:
            fonts.bold.draw_centered(page, y, line, COVER_TITLE_SIZE * scale, MAROON)
            y -= COVER_TITLE_STEP * scale

        y -= gap
        for line in author:
            fonts.regular.draw_centered(page, y, line, COVER_AUTHOR_SIZE * scale)
            y -= COVER_AUTHOR_STEP * scale

        self.letterhead.draw_logo(page)

        y = ADDRESS_TOP
        fonts.bold.draw_centered(page, y, self.letterhead.name, ADDRESS_NAME_SIZE)
        for line in self.letterhead.address:
            y -= ADDRESS_STEP
            fonts.regular.draw_centered(page, y, line, ADDRESS_SIZE)

        stamp = format_issue_date(self.issued or date.today())
        fonts.italic.draw_centered(page, y - DATE_GAP, stamp, DATE_SIZE)

    def _fit_cover_text(
        self,
        meta: Metadata,
        max_width: float,
        top: float,
    ) -> tuple[list[str], list[str], float, float]:
        """Wrap the cover title and author so the last author line clears the logo.

        The gap between the blocks narrows first, down to
        ``COVER_AUTHOR_MIN_GAP``; after that both blocks are scaled down.

        Returns:
            Title lines, author lines, the scale factor and the gap.
        """
        floor = self.letterhead.logo_top + COVER_LOGO_CLEARANCE
        for scale in COVER_SCALES:
            title = wrap_by_width(meta.title, self.fonts.bold, COVER_TITLE_SIZE * scale, max_width)
            author = wrap_by_width(meta.author, self.fonts.regular, COVER_AUTHOR_SIZE * scale, max_width)
            used = (
                len(title) * COVER_TITLE_STEP * scale
                + max(len(author) - 1, 0) * COVER_AUTHOR_STEP * scale
            )
            gap = min(COVER_AUTHOR_GAP, top - floor - used)
            if gap >= COVER_AUTHOR_MIN_GAP:
                if scale < 1:
                    logger.debug("Cover title and author scaled to %.0f%%", scale * 100)
                return title, author, scale, gap
        raise LayoutError("The title and author are too long to fit on the cover.")


def _always(meta: Metadata) -> bool:
    return True


class _AbstractPages:
    """Flows the abstract page sections top to bottom through a ``PageFlow``."""

    def __init__(self, flow: PageFlow, fonts: FontSet, meta: Metadata) -> None:
        self.flow = flow
        self.fonts = fonts
        self.meta = meta

    def sections(self) -> list[tuple[Callable[[Metadata], bool], Callable[[], None]]]:
        return [
            (_always, self._title),
            (_always, self._author),
            (lambda m: bool(m.email), self._email),
            (_always, self._abstract),
            (lambda m: bool(m.keywords), self._keywords),
            (lambda m: bool(m.jel_code), self._jel_code),
            (lambda m: bool(m.acknowledgement), self._acknowledgement),
        ]

    def draw(self) -> None:
        for applies, render in self.sections():
            if applies(self.meta):
                render()

    # -- sections ---------------------------------------------------------

    def _title(self) -> None:
        bold = self.fonts.bold
        lines = wrap_by_width(self.meta.title, bold, TITLE_SIZE, BODY_WIDTH)
        self._centered(lines, bold, TITLE_SIZE, TITLE_STEP)
        self.flow.advance(TITLE_GAP)

    def _author(self) -> None:
        regular = self.fonts.regular
        lines = wrap_by_width(self.meta.author, regular, AUTHOR_SIZE, BODY_WIDTH)
        self._centered(lines, regular, AUTHOR_SIZE, AUTHOR_STEP)
        self.flow.advance(AUTHOR_GAP)

    def _email(self) -> None:
        regular = self.fonts.regular
        text = f"Email (corresponding author): {self.meta.email}"
        lines = wrap_by_width(text, regular, EMAIL_SIZE, BODY_WIDTH)
        self._centered(lines, regular, EMAIL_SIZE, EMAIL_STEP, BLUE)
        self.flow.advance(EMAIL_GAP)

    def _abstract(self) -> None:
        # Keep the heading with the first line of the body.
        self.flow.ensure(HEADING_STEP + BODY_STEP)
        self.fonts.bold.draw_centered(self.flow.page, self.flow.y, "ABSTRACT", HEADING_SIZE)
        self.flow.advance(HEADING_STEP)

        regular = self.fonts.regular
        self._paragraph(self._body_lines(self.meta.abstract, regular), regular, BODY_STEP)
        self.flow.advance(ABSTRACT_GAP)

    def _keywords(self) -> None:
        regular = self.fonts.regular
        lines = self._body_lines(self.meta.keywords, regular)
        self._labeled("Keywords:", lines, regular, KEYWORD_STEP)
        self.flow.advance(KEYWORDS_GAP)

    def _jel_code(self) -> None:
        label = "JEL Code: "
        x = MARGIN_LEFT + self.fonts.bold.width(label, BODY_SIZE)
        regular = self.fonts.regular
        lines = wrap_by_width(self.meta.jel_code, regular, BODY_SIZE, MARGIN_RIGHT - x)
        extra = (len(lines) - 1) * KEYWORD_STEP

        self.flow.ensure(JEL_BLOCK + extra)
        self.fonts.bold.draw(self.flow.page, MARGIN_LEFT, self.flow.y, label, BODY_SIZE)
        for i, line in enumerate(lines):
            if i:
                self.flow.advance(KEYWORD_STEP)
                self.flow.ensure(KEYWORD_STEP)
            regular.draw(self.flow.page, x, self.flow.y, line, BODY_SIZE)
        self.flow.advance(JEL_STEP)

    def _acknowledgement(self) -> None:
        italic = self.fonts.italic
        lines = self._body_lines(self.meta.acknowledgement, italic)
        self._labeled("Acknowledgment:", lines, italic, BODY_STEP)
        self.flow.advance(ACK_GAP)

    # -- helpers ----------------------------------------------------------

    def _body_lines(self, text: str, font: FontHandle) -> list[str]:
        """Wrap at ``BODY_CHARS``, then re-wrap any line wider than the column."""
        lines: list[str] = []
        for line in wrap_by_approx_chars(text, BODY_CHARS):
            if font.width(line, BODY_SIZE) > BODY_WIDTH:
                lines.extend(wrap_by_width(line, font, BODY_SIZE, BODY_WIDTH))
            else:
                lines.append(line)
        return lines

    def _centered(
        self,
        lines: list[str],
        font: FontHandle,
        size: float,
        step: float,
        color: Color = BLACK,
    ) -> None:
        for line in lines:
            self.flow.ensure(step)
            font.draw_centered(self.flow.page, self.flow.y, line, size, color)
            self.flow.advance(step)

    def _paragraph(self, lines: list[str], font: FontHandle, step: float) -> None:
        """Justified body text; may continue on the next page after any line."""
        for i, line in enumerate(lines):
            self.flow.ensure(step)
            last = i == len(lines) - 1
            for word, x in place_line(line, font, BODY_SIZE, BODY_WIDTH, MARGIN_LEFT, last):
                font.draw(self.flow.page, x, self.flow.y, word, BODY_SIZE)
            self.flow.advance(step)

    def _labeled(self, label: str, lines: list[str], font: FontHandle, step: float) -> None:
        """A bold label followed by body lines, never split after the label.

        The whole section moves to a new page when it does not fit; a section
        longer than a page starts on a fresh page and continues line by line.
        """
        block = LABEL_STEP + max(len(lines), 1) * step
        self.flow.ensure(min(block, self.flow.printable_height))
        self.fonts.bold.draw(self.flow.page, MARGIN_LEFT, self.flow.y, label, BODY_SIZE)
        self.flow.advance(LABEL_STEP)
        self._paragraph(lines, font, step)
