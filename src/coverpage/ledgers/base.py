"""Abstract base for publication ledgers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from coverpage.models import Category, LedgerRecord, Metadata


class Ledger(ABC):
    """Interface that all ledgers must implement.

    A ledger issues publication numbers and archives the merged PDF
    together with its metadata, keyed by publication number.
    """

    name: str

    @abstractmethod
    async def reserve(self, category: Category) -> str:
        """Reserve and return the next publication number for ``category``."""

    @abstractmethod
    async def upload(self, number: str, meta: Metadata, pdf: bytes) -> str:
        """Store the merged PDF and its metadata; return the file URL."""

    @abstractmethod
    async def list(self, category: Category) -> list[LedgerRecord]:
        """Return the records of one category, oldest first."""

    @abstractmethod
    async def finalize(self, number: str) -> None:
        """Lock a record after the submitter has checked the stored file."""

    @abstractmethod
    async def delete(self, number: str) -> None:
        """Remove a record and its stored file."""

    async def aclose(self) -> None:
        """Release any resources held by the ledger."""
