"""Data models for publication metadata and submissions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

from coverpage.errors import InvalidInputError


class Category(str, Enum):
    """Publication series. The value is the prefix of the publication number."""

    PP = "PP"   # PP Series
    WP = "WP"   # Working paper series
    MN = "MN"   # MN Series
    BR = "BR"   # Book review

    @property
    def series_name(self) -> str:
        return _SERIES_NAMES[self]

    @classmethod
    def parse(cls, value: str | Category) -> Category:
        """Accept a code in any letter case."""
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidInputError(
                f"Unknown category '{value}'. Available: {', '.join(c.value for c in cls)}"
            ) from None


_SERIES_NAMES = {
    Category.PP: "PP Series",
    Category.WP: "WP Series",
    Category.MN: "MN Series",
    Category.BR: "Book Review",
}


# Maximum characters accepted per metadata field.
FIELD_LIMITS: dict[str, int] = {
    "title": 300,
    "author": 300,
    "email": 254,
    "abstract": 5000,
    "keywords": 500,
    "jel_code": 100,
    "acknowledgement": 2000,
}

# Form/ledger field names used by the web app protocol.
FORM_FIELDS: dict[str, str] = {
    "category": "category",
    "author": "author",
    "email": "email",
    "title": "title",
    "abstract": "abstract",
    "jel_code": "jelcode",
    "keywords": "keywords",
    "acknowledgement": "acknow",
}


@dataclass(frozen=True)
class Metadata:
    """Bibliographic metadata entered alongside a manuscript."""

    category: Category
    title: str
    author: str
    email: str = ""
    abstract: str = ""
    keywords: str = ""
    jel_code: str = ""
    acknowledgement: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", Category.parse(self.category))
        for name in FIELD_LIMITS:
            object.__setattr__(self, name, (getattr(self, name) or "").strip())

    def validate(self) -> Metadata:
        """Raise ``InvalidInputError`` if a required field is empty or a field is too long."""
        for name in ("title", "author"):
            if not getattr(self, name):
                raise InvalidInputError(f"The {name} field is required.")
        for name, limit in FIELD_LIMITS.items():
            value = getattr(self, name)
            if len(value) > limit:
                raise InvalidInputError(
                    f"The {name.replace('_', ' ')} field is {len(value)} characters long; "
                    f"the limit is {limit}."
                )
        return self

    def form_fields(self) -> dict[str, str]:
        """Return the metadata keyed by the web app's form field names."""
        values = asdict(self)
        values["category"] = self.category.value
        return {FORM_FIELDS[key]: values[key] for key in FORM_FIELDS}


@dataclass
class SubmissionResult:
    """Outcome of a successful submission."""

    number: str
    file_url: str
    generated_pages: int
    manuscript_pages: int

    @property
    def total_pages(self) -> int:
        return self.generated_pages + self.manuscript_pages


@dataclass
class LedgerRecord:
    """One row of the publication ledger."""

    number: str
    category: Category
    status: str = "RESERVED"
    fields: dict[str, str] = field(default_factory=dict)
    file_url: str = ""
    updated: str = ""
