"""Runtime settings, read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from coverpage.errors import LedgerNotConfiguredError

LEDGER_CHOICES = ("local", "remote")


@dataclass(frozen=True)
class Settings:
    ledger: str = "local"
    ledger_url: str | None = None
    storage_dir: Path = Path("archive")
    max_upload_mb: int = 10
    timeout: float = 60.0
    # Font files to embed instead of the Base-14 fonts, for non-Latin-1 text.
    font_regular: Path | None = None
    font_bold: Path | None = None
    font_italic: Path | None = None

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> Settings:
        """Build settings from ``COVERPAGE_*`` environment variables."""
        load_dotenv(env_file)
        return cls(
            ledger=os.environ.get("COVERPAGE_LEDGER", "local").strip().lower(),
            ledger_url=os.environ.get("COVERPAGE_LEDGER_URL") or None,
            storage_dir=Path(os.environ.get("COVERPAGE_STORAGE_DIR", "archive")),
            max_upload_mb=int(os.environ.get("COVERPAGE_MAX_UPLOAD_MB", "10")),
            timeout=float(os.environ.get("COVERPAGE_TIMEOUT", "60")),
            font_regular=_optional_path("COVERPAGE_FONT_REGULAR"),
            font_bold=_optional_path("COVERPAGE_FONT_BOLD"),
            font_italic=_optional_path("COVERPAGE_FONT_ITALIC"),
        )


def _optional_path(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value) if value else None


def check_ledger_configured(settings: Settings) -> None:
    """Raise ``LedgerNotConfiguredError`` if the selected ledger can't be used.

    Call this *before* accepting a submission so the user gets a clear
    message instead of a failure halfway through the pipeline.
    """
    if settings.ledger not in LEDGER_CHOICES:
        raise LedgerNotConfiguredError(
            f"Unknown ledger '{settings.ledger}'. Available: {', '.join(LEDGER_CHOICES)}"
        )
    if settings.ledger == "remote" and not settings.ledger_url:
        raise LedgerNotConfiguredError(
            "The remote ledger requires the COVERPAGE_LEDGER_URL environment variable, "
            "but it is not set."
        )
