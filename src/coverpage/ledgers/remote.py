"""Client for the spreadsheet web app that issues numbers and archives PDFs."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from coverpage.errors import LedgerError
from coverpage.ledgers.base import Ledger
from coverpage.models import Category, LedgerRecord, Metadata
from coverpage.numbering import parse_number

logger = logging.getLogger(__name__)

# Columns of a sheet row after the publication number, before file URL, date and status.
ROW_FIELDS = ("author", "email", "title", "abstract", "jelcode", "keywords", "acknow")


class RemoteLedger(Ledger):
    """Talks to the web app over its form-encoded JSON protocol.

    ``GET ?action=reserve&category=PP`` reserves a number; a form ``POST``
    with ``publicationNo`` and the base64 ``fileContent`` uploads; form
    ``POST`` with ``action=finalize`` or ``action=delete`` manages the record.
    ``GET ?action=list&category=PP`` returns the raw sheet rows.
    Every reply is ``{"success": bool, ...}``.
    """

    name = "remote"

    def __init__(
        self,
        url: str,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url:
            raise LedgerError("The remote ledger needs the web app URL.")
        self.url = url
        self._client = client or httpx.AsyncClient(follow_redirects=True, timeout=timeout)

    async def reserve(self, category: Category) -> str:
        category = Category.parse(category)
        reply = await self._call("GET", params={"action": "reserve", "category": category.value})
        number = reply.get("number")
        if not number:
            raise LedgerError("Reserve reply did not include a publication number.")
        logger.info("Reserved %s", number)
        return number

    async def upload(self, number: str, meta: Metadata, pdf: bytes) -> str:
        form = {
            "publicationNo": number,
            **meta.form_fields(),
            "fileContent": base64.b64encode(pdf).decode("ascii"),
            "fileType": "application/pdf",
            "fileName": f"{number}.pdf",
        }
        reply = await self._call("POST", data=form)
        file_url = reply.get("fileUrl", "")
        logger.info("Uploaded %s (%d bytes) to %s", number, len(pdf), file_url or "<no url>")
        return file_url

    async def list(self, category: Category) -> list[LedgerRecord]:
        category = Category.parse(category)
        reply = await self._call("GET", params={"action": "list", "category": category.value})
        records = [_record(row, category) for row in reply.get("rows", [])]
        return [r for r in records if r is not None]

    async def finalize(self, number: str) -> None:
        await self._call("POST", data={"action": "finalize", "publicationNo": number})
        logger.info("Finalized %s", number)

    async def delete(self, number: str) -> None:
        await self._call("POST", data={"action": "delete", "publicationNo": number})
        logger.info("Deleted %s", number)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, self.url, **kwargs)
            resp.raise_for_status()
            reply = resp.json()
        except httpx.HTTPStatusError as exc:
            raise LedgerError(f"Ledger request failed: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise LedgerError(f"Could not reach the ledger: {exc}") from exc
        except ValueError as exc:
            raise LedgerError("The ledger replied with something other than JSON.") from exc

        if not isinstance(reply, dict) or not reply.get("success"):
            error = reply.get("error") if isinstance(reply, dict) else None
            raise LedgerError(f"Ledger error: {error or 'unknown'}")
        return reply


def _record(row: list[Any], category: Category) -> LedgerRecord | None:
    """Map one sheet row to a record; the header and blank rows give None."""
    if not row or parse_number(str(row[0])) is None:
        return None
    cells = [str(cell) if cell is not None else "" for cell in row]
    cells += [""] * (len(ROW_FIELDS) + 4 - len(cells))
    fields = dict(zip(ROW_FIELDS, cells[1:]))
    tail = cells[len(ROW_FIELDS) + 1:]
    return LedgerRecord(
        number=cells[0],
        category=category,
        status=tail[2] or "RESERVED",
        fields=fields if any(fields.values()) else {},
        file_url=tail[0],
        updated=tail[1],
    )
