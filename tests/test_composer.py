from dataclasses import replace

import pymupdf
import pytest

from coverpage.composer import (
    ADDRESS_TOP,
    COVER_LOGO_CLEARANCE,
    KEYWORD_STEP,
    MARGIN_RIGHT,
    DocumentComposer,
    format_issue_date,
)
from coverpage.config import Settings
from coverpage.errors import InvalidInputError, LayoutError
from coverpage.layout.fonts import BLACK, FontHandle
from coverpage.letterhead import Letterhead

from conftest import filler


@pytest.fixture
def draws(monkeypatch):
    """Record (page number, y, text) for every string drawn."""
    calls = []
    original = FontHandle.draw

    def spy(self, page, x, y, text, size, color=BLACK):
        calls.append((page.number, y, text))
        return original(self, page, x, y, text, size, color)

    monkeypatch.setattr(FontHandle, "draw", spy)
    return calls


def _words_between(calls, start, stop):
    texts = [t for _, _, t in calls]
    begin = texts.index(start) + 1
    end = texts.index(stop) if stop in texts else len(texts)
    return " ".join(texts[begin:end]).split()


def test_issue_date_format():
    from datetime import date

    assert format_issue_date(date(2024, 3, 9)) == "March 2024"


def test_cover_and_abstract_page(composer, metadata):
    doc = composer.compose("PP-2024-007", metadata)
    try:
        assert doc.page_count == 2
        cover = doc[0].get_text()
        assert "PP-2024-007" in cover
        assert "Economic Growth in South Asia" in cover
        assert "J. Doe" in cover
        assert "INDIRA GANDHI INSTITUTE OF DEVELOPMENT RESEARCH" in cover
        assert "March 2024" in cover

        abstract = doc[1].get_text()
        assert "ABSTRACT" in abstract
        assert "Email (corresponding author): j.doe@example.org" in abstract
        assert "Keywords:" in abstract
        assert "JEL Code:" in abstract and "O11" in abstract
        assert "Acknowledgment:" not in abstract
    finally:
        doc.close()


def test_publication_number_is_right_aligned(composer, metadata):
    doc = composer.compose("PP-2024-007", metadata)
    try:
        rect = doc[0].search_for("PP-2024-007")[0]
        assert rect.x1 == pytest.approx(595 - 50, abs=1)
        assert rect.y1 == pytest.approx(50, abs=6)
    finally:
        doc.close()


def test_optional_sections_are_skipped(composer, metadata, draws):
    meta = replace(metadata, email="", keywords="", jel_code="", acknowledgement="")
    composer.compose_bytes("WP-2024-001", meta)
    texts = [t for _, _, t in draws]
    assert not any(t.startswith("Email") for t in texts)
    assert "Keywords:" not in texts
    assert "JEL Code: " not in texts


def test_acknowledgement_is_drawn_in_italic(composer, metadata, monkeypatch):
    fonts = []
    original = FontHandle.draw

    def spy(self, page, x, y, text, size, color=BLACK):
        fonts.append((self.fontname, text))
        return original(self, page, x, y, text, size, color)

    monkeypatch.setattr(FontHandle, "draw", spy)
    meta = replace(metadata, acknowledgement="We thank the referees for helpful comments.")
    composer.compose_bytes("PP-2024-002", meta)

    label = fonts.index(("hebo", "Acknowledgment:"))
    assert {name for name, _ in fonts[label + 1:]} == {"heit"}


def test_long_abstract_spills_onto_more_pages(composer, metadata, draws):
    abstract = filler(700)
    meta = replace(metadata, abstract=abstract)
    doc = composer.compose("PP-2024-003", meta)
    try:
        assert doc.page_count > 2
    finally:
        doc.close()

    # Every word of the abstract is drawn once, in order, never split.
    assert _words_between(draws, "ABSTRACT", "Keywords:") == abstract.split()


def test_abstract_pages_never_draw_below_bottom_margin(composer, metadata, draws):
    meta = replace(
        metadata,
        abstract=filler(750),
        acknowledgement=filler(250),
        keywords=", ".join(filler(60).split()),
    )
    composer.compose_bytes("PP-2024-004", meta)
    assert all(y >= 80 for page, y, _ in draws if page > 0)
    pages = [page for page, _, _ in draws]
    assert pages == sorted(pages)


@pytest.mark.parametrize("words", range(430, 640, 9))
def test_labels_stay_with_their_first_line(composer, metadata, draws, words):
    meta = replace(
        metadata,
        abstract=filler(words),
        acknowledgement=filler(80),
        keywords="growth, trade, rural credit, household surveys",
    )
    composer.compose_bytes("PP-2024-005", meta)

    for label in ("Keywords:", "Acknowledgment:"):
        index = next(i for i, call in enumerate(draws) if call[2] == label)
        assert draws[index][0] == draws[index + 1][0]
        assert draws[index][1] > draws[index + 1][1]


def test_drawing_failure_becomes_layout_error(composer, metadata, monkeypatch):
    def broken(self, *args, **kwargs):
        raise RuntimeError("unsupported glyph")

    monkeypatch.setattr(FontHandle, "draw", broken)
    with pytest.raises(LayoutError, match="unsupported glyph"):
        composer.compose("PP-2024-006", metadata)


def test_output_is_a_valid_pdf(composer, metadata):
    data = composer.compose_bytes("BR-2024-010", metadata)
    doc = pymupdf.open(stream=data, filetype="pdf")
    try:
        assert doc.page_count == 2
        assert doc[0].rect.width == 595
        assert doc[0].rect.height == 842
    finally:
        doc.close()


@pytest.fixture
def cjk_font_file(tmp_path):
    path = tmp_path / "fallback.ttf"
    path.write_bytes(pymupdf.Font("cjk").buffer)
    return path


def test_unsupported_characters_raise(composer, metadata):
    meta = replace(metadata, author="Ananya Dāsgupta and Śrī Rāmānujan")
    with pytest.raises(LayoutError, match="U\\+0101"):
        composer.compose("PP-2024-011", meta)


@pytest.mark.parametrize("text", ["Bhārat", "₹ 100", "中文"])
def test_base14_fonts_reject_text_outside_latin1(text):
    font = FontHandle("helv")
    assert font.unsupported(text) is not None
    with pytest.raises(LayoutError):
        font.width(text, 11)


def test_latin1_text_is_printed(composer, metadata):
    meta = replace(metadata, author="José Müller")
    doc = composer.compose("PP-2024-012", meta)
    try:
        assert "José Müller" in doc[0].get_text()
    finally:
        doc.close()


def test_check_names_the_field(composer, metadata):
    with pytest.raises(InvalidInputError, match="title"):
        composer.check(replace(metadata, title="Growth in Bhārat"))
    composer.check(metadata)


def test_font_file_is_embedded(cjk_font_file):
    font = FontHandle("CoverCJK", cjk_font_file)
    assert font.unsupported("中文") is None

    doc = pymupdf.open()
    page = doc.new_page()
    try:
        font.draw(page, 50, 700, "中文", 12)
        assert "CoverCJK" in {entry[4] for entry in page.get_fonts()}
    finally:
        doc.close()


def test_composer_uses_configured_font_files(cjk_font_file):
    composer = DocumentComposer.from_settings(Settings(font_regular=cjk_font_file))
    assert composer.fonts.regular.fontfile == str(cjk_font_file)
    assert composer.fonts.italic.fontfile == str(cjk_font_file)
    assert DocumentComposer.from_settings(Settings()).fonts.regular.fontname == "helv"


def test_missing_font_file_raises(tmp_path):
    with pytest.raises(LayoutError):
        FontHandle("CoverRegular", tmp_path / "missing.ttf")


@pytest.fixture
def placed(monkeypatch):
    """Record (page number, y, x, text, width) for every string drawn."""
    calls = []
    original = FontHandle.draw

    def spy(self, page, x, y, text, size, color=BLACK):
        calls.append((page.number, y, x, text, self.width(text, size)))
        return original(self, page, x, y, text, size, color)

    monkeypatch.setattr(FontHandle, "draw", spy)
    return calls


def test_wide_body_lines_stay_inside_the_column(composer, metadata, placed):
    meta = replace(
        metadata,
        abstract="WORLD BANK IMF WTO OECD " * 20,
        keywords="",
        jel_code="",
    )
    composer.compose_bytes("PP-2024-013", meta)

    start = next(i for i, call in enumerate(placed) if call[3] == "ABSTRACT") + 1
    lines = {}
    for page, y, x, text, width in placed[start:]:
        lines.setdefault((page, y), []).append((x, width))

    assert len(lines) > 1
    for words in lines.values():
        words.sort()
        for (x, width), (next_x, _) in zip(words, words[1:]):
            assert x + width <= next_x + 1e-6
        x, width = words[-1]
        assert x + width <= MARGIN_RIGHT + 1e-6


def test_long_cover_text_clears_the_logo(composer, metadata, placed):
    meta = replace(
        metadata,
        title=("Development " * 25).strip(),
        author=("Ananya Dasgupta and " * 15).strip(),
    )
    composer.compose_bytes("PP-2024-014", meta)

    floor = Letterhead().logo_top + COVER_LOGO_CLEARANCE
    cover = [y for page, y, _, _, _ in placed if page == 0 and y > ADDRESS_TOP]
    assert min(cover) >= floor
    drawn = " ".join(text for page, _, _, text, _ in placed if page == 0).split()
    assert drawn.count("Development") == 25


def test_jel_code_lines_follow_the_cursor(composer, metadata, placed):
    codes = " ".join(f"O{i}" for i in range(11, 71))
    meta = replace(metadata, jel_code=codes)
    composer.compose_bytes("PP-2024-015", meta)

    label = next(i for i, call in enumerate(placed) if call[3] == "JEL Code: ")
    page = placed[label][0]
    rows = []
    for call in placed[label + 1:]:
        if not call[3].startswith("O"):
            break
        rows.append(call)

    assert len(rows) > 1
    assert rows[0][1] == placed[label][1]
    assert " ".join(text for _, _, _, text, _ in rows) == codes
    for upper, lower in zip(rows, rows[1:]):
        assert lower[0] == page
        assert upper[1] - lower[1] == pytest.approx(KEYWORD_STEP)
