from datetime import date, datetime

import pymupdf
import pytest

from coverpage.composer import DocumentComposer
from coverpage.ledgers.local import LocalLedger
from coverpage.models import Category, Metadata

WORDS = ["growth", "trade", "policy", "rural", "credit", "markets", "households", "India"]


def make_pdf(pages: int, label: str = "Manuscript page") -> bytes:
    """Build an A4 PDF whose pages say ``"<label> <n>"``."""
    doc = pymupdf.open()
    for i in range(pages):
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), f"{label} {i + 1}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def filler(word_count: int) -> str:
    return " ".join(WORDS[i % len(WORDS)] for i in range(word_count))


def page_texts(data: bytes) -> list[str]:
    doc = pymupdf.open(stream=data, filetype="pdf")
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


class FixedWidthFont:
    """Every character is ``advance`` points wide at size 1."""

    def __init__(self, advance: float = 0.5) -> None:
        self.advance = advance
        self.calls: list[str] = []

    def width(self, text: str, size: float) -> float:
        self.calls.append(text)
        return len(text) * self.advance * size


@pytest.fixture
def mono_font():
    return FixedWidthFont()


@pytest.fixture
def metadata():
    return Metadata(
        category=Category.PP,
        title="Economic Growth in South Asia",
        author="J. Doe",
        email="j.doe@example.org",
        abstract=filler(120),
        keywords="growth,trade",
        jel_code="O11",
        acknowledgement="",
    )


@pytest.fixture
def composer():
    return DocumentComposer(issued=date(2024, 3, 1))


@pytest.fixture
def manuscript():
    return make_pdf(5)


@pytest.fixture
def ledger(tmp_path):
    return LocalLedger(tmp_path / "archive", clock=lambda: datetime(2024, 3, 1, 10, 30))
