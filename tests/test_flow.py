import pymupdf
import pytest

from coverpage.layout.flow import PageFlow


@pytest.fixture
def flow():
    doc = pymupdf.open()
    yield PageFlow(doc)
    doc.close()


def test_starts_at_top_of_new_page(flow):
    assert flow.document.page_count == 1
    assert flow.y == 780
    assert flow.page_breaks == 0


def test_ensure_allocates_when_block_crosses_bottom(flow):
    flow.advance(650)  # y = 130
    assert flow.ensure(40) is False
    assert flow.ensure(60) is True
    assert flow.y == 780
    assert flow.document.page_count == 2
    assert flow.page_breaks == 1


def test_ensure_does_not_skip_an_empty_page(flow):
    assert flow.ensure(10_000) is False
    assert flow.document.page_count == 1


def test_advance_never_goes_below_bottom(flow):
    flow.advance(5000)
    assert flow.y == 80


def test_advance_rejects_upward_moves(flow):
    with pytest.raises(ValueError):
        flow.advance(-1)


def test_line_by_line_stays_above_bottom(flow):
    drawn = []
    for _ in range(200):
        flow.ensure(17)
        drawn.append((flow.page.number, flow.y))
        flow.advance(17)

    assert all(y - 17 >= 80 for _, y in drawn)
    pages = [p for p, _ in drawn]
    assert pages == sorted(pages)
    assert flow.document.page_count == len(flow.pages) == pages[-1] + 1


def test_invalid_margins():
    doc = pymupdf.open()
    with pytest.raises(ValueError):
        PageFlow(doc, top=50, bottom=80)
