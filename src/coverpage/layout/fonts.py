"""Font handles for measuring and drawing text with PyMuPDF."""

from __future__ import annotations

from pathlib import Path

import pymupdf

from coverpage.errors import LayoutError

Color = tuple[float, float, float]

BLACK: Color = (0, 0, 0)


class FontHandle:
    """One typeface in one style: a Base-14 font, or a font file to embed.

    Coordinates passed to :meth:`draw` use a bottom-left origin (PDF user
    space) and are flipped to PyMuPDF's top-left origin here, so layout code
    never has to think about it.

    Text with a character the font cannot render raises ``LayoutError``
    from both :meth:`width` and :meth:`draw`; nothing is substituted.
    """

    def __init__(self, fontname: str, fontfile: str | Path | None = None) -> None:
        self.fontname = fontname
        self.fontfile = str(fontfile) if fontfile else None
        try:
            if self.fontfile:
                self._font = pymupdf.Font(fontfile=self.fontfile)
            else:
                self._font = pymupdf.Font(fontname=fontname)
        except Exception as exc:
            raise LayoutError(f"Could not load font {self.fontfile or fontname}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FontHandle({self.fontname!r})"

    def unsupported(self, text: str) -> str | None:
        """Return the first character of ``text`` this font cannot render."""
        for char in text:
            if char.isspace():
                continue
            if self.fontfile is None:
                # Base-14 fonts are written with a one-byte encoding.
                if ord(char) > 255:
                    return char
            elif not self._font.has_glyph(ord(char)):
                return char
        return None

    def check(self, text: str) -> None:
        char = self.unsupported(text)
        if char is not None:
            raise LayoutError(
                f"Font {self.fontname!r} cannot render {char!r} (U+{ord(char):04X})."
            )

    def width(self, text: str, size: float) -> float:
        """Rendered width of ``text`` at ``size`` points."""
        self.check(text)
        return self._font.text_length(text, fontsize=size)

    def draw(
        self,
        page: pymupdf.Page,
        x: float,
        y: float,
        text: str,
        size: float,
        color: Color = BLACK,
    ) -> None:
        """Draw ``text`` with its baseline starting at (x, y)."""
        self.check(text)
        if self.fontfile:
            page.insert_font(fontname=self.fontname, fontfile=self.fontfile)
        page.insert_text(
            pymupdf.Point(x, page.rect.height - y),
            text,
            fontsize=size,
            fontname=self.fontname,
            color=color,
        )

    def draw_centered(
        self,
        page: pymupdf.Page,
        y: float,
        text: str,
        size: float,
        color: Color = BLACK,
    ) -> None:
        x = (page.rect.width - self.width(text, size)) / 2
        self.draw(page, x, y, text, size, color)


class FontSet:
    """The regular, bold and italic handles used for one document."""

    def __init__(
        self,
        regular: str | FontHandle = "helv",
        bold: str | FontHandle = "hebo",
        italic: str | FontHandle = "heit",
    ) -> None:
        self.regular = _handle(regular)
        self.bold = _handle(bold)
        self.italic = _handle(italic)

    @classmethod
    def from_files(
        cls,
        regular: str | Path,
        bold: str | Path | None = None,
        italic: str | Path | None = None,
    ) -> FontSet:
        """Embed TrueType/OpenType files; missing styles reuse ``regular``."""
        return cls(
            FontHandle("CoverRegular", regular),
            FontHandle("CoverBold", bold or regular),
            FontHandle("CoverItalic", italic or regular),
        )


def _handle(font: str | FontHandle) -> FontHandle:
    return font if isinstance(font, FontHandle) else FontHandle(font)
