"""Ledger registry.

A ledger reserves publication numbers and archives the merged PDFs.
"""

from __future__ import annotations

from coverpage.config import Settings, check_ledger_configured
from coverpage.ledgers.base import Ledger
from coverpage.ledgers.local import LocalLedger
from coverpage.ledgers.remote import RemoteLedger

__all__ = [
    "Ledger",
    "LocalLedger",
    "RemoteLedger",
    "get_ledger",
]


def get_ledger(settings: Settings) -> Ledger:
    """Instantiate the ledger selected by ``settings``.

    Raises ``LedgerNotConfiguredError`` if the selection is unknown or
    missing its endpoint.
    """
    check_ledger_configured(settings)

    if settings.ledger == "remote":
        return RemoteLedger(settings.ledger_url, timeout=settings.timeout)
    return LocalLedger(settings.storage_dir)
