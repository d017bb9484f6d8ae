"""Directory-backed ledger for development and offline use."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from coverpage.errors import LedgerError
from coverpage.ledgers.base import Ledger
from coverpage.models import Category, LedgerRecord, Metadata
from coverpage.numbering import next_number

logger = logging.getLogger(__name__)

INDEX_NAME = "ledger.json"


class LocalLedger(Ledger):
    """Keeps records in ``ledger.json`` and PDFs as ``<number>.pdf`` in one directory.

    Deleted records stay in the index with status ``DELETED`` so their
    numbers are never issued again.
    """

    name = "local"

    def __init__(
        self,
        directory: str | Path,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.directory = Path(directory)
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def index_path(self) -> Path:
        return self.directory / INDEX_NAME

    def records(self) -> list[LedgerRecord]:
        if not self.index_path.exists():
            return []
        raw = json.loads(self.index_path.read_text(encoding="utf-8"))
        return [
            LedgerRecord(**{**row, "category": Category(row["category"])})
            for row in raw.get("records", [])
        ]

    def get(self, number: str) -> LedgerRecord | None:
        return _find(self.records(), number)

    async def list(self, category: Category) -> list[LedgerRecord]:
        category = Category.parse(category)
        return [r for r in self.records() if r.category is category]

    async def reserve(self, category: Category) -> str:
        category = Category.parse(category)
        async with self._lock:
            records = self.records()
            now = self._clock()
            number = next_number(category, now.year, (r.number for r in records))
            records.append(
                LedgerRecord(
                    number=number,
                    category=category,
                    status="RESERVED",
                    updated=now.isoformat(timespec="seconds"),
                )
            )
            self._save(records)
        logger.info("Reserved %s", number)
        return number

    async def upload(self, number: str, meta: Metadata, pdf: bytes) -> str:
        async with self._lock:
            records = self.records()
            record = _find(records, number)
            if record is None:
                # Reservation row missing: record the upload anyway.
                record = LedgerRecord(number=number, category=meta.category)
                records.append(record)
            elif record.status != "RESERVED":
                raise LedgerError(f"{number} is {record.status.lower()}; it cannot be uploaded again.")

            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / f"{number}.pdf"
            path.write_bytes(pdf)

            record.fields = meta.form_fields()
            record.file_url = path.resolve().as_uri()
            record.status = "UPLOADED"
            record.updated = self._clock().isoformat(timespec="seconds")
            self._save(records)
        logger.info("Stored %s (%d bytes) at %s", number, len(pdf), record.file_url)
        return record.file_url

    async def finalize(self, number: str) -> None:
        async with self._lock:
            records = self.records()
            record = self._require(records, number)
            if record.status != "UPLOADED":
                raise LedgerError(f"{number} is {record.status.lower()}; only uploaded records can be finalized.")
            record.status = "FINALIZED"
            record.updated = self._clock().isoformat(timespec="seconds")
            self._save(records)
        logger.info("Finalized %s", number)

    async def delete(self, number: str) -> None:
        async with self._lock:
            records = self.records()
            record = self._require(records, number)
            if record.status in ("FINALIZED", "DELETED"):
                raise LedgerError(f"{number} is {record.status.lower()} and cannot be deleted.")
            (self.directory / f"{number}.pdf").unlink(missing_ok=True)
            record.status = "DELETED"
            record.file_url = ""
            record.updated = self._clock().isoformat(timespec="seconds")
            self._save(records)
        logger.info("Deleted %s", number)

    def _require(self, records: list[LedgerRecord], number: str) -> LedgerRecord:
        record = _find(records, number)
        if record is None:
            raise LedgerError(f"No record found for {number}.")
        return record

    def _save(self, records: list[LedgerRecord]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        rows = [{**asdict(r), "category": r.category.value} for r in records]
        tmp = self.index_path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"records": rows}, indent=2), encoding="utf-8")
        tmp.replace(self.index_path)


def _find(records: list[LedgerRecord], number: str) -> LedgerRecord | None:
    for record in records:
        if record.number == number:
            return record
    return None
