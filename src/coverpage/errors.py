"""Error types raised across the submission pipeline."""

from __future__ import annotations


class CoverpageError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInputError(CoverpageError):
    """Manuscript or metadata rejected before any document work starts."""


class MalformedInputDocumentError(CoverpageError):
    """The manuscript bytes cannot be opened as a PDF."""


class LayoutError(CoverpageError):
    """A measuring or drawing primitive failed while composing pages."""


class MergeError(CoverpageError):
    """Combining the generated pages with the manuscript failed."""


class LedgerError(CoverpageError):
    """The number reservation or storage service reported a failure."""


class LedgerNotConfiguredError(LedgerError):
    """Raised when the selected ledger is missing required settings."""


class SubmissionError(CoverpageError):
    """A pipeline failure tagged with the stage it happened in."""

    def __init__(self, stage: str, cause: Exception) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"Submission failed during {stage}: {cause}")

    @property
    def user_message(self) -> str:
        return _STAGE_MESSAGES.get(self.stage, "Submission failed") + f": {self.cause}"


_STAGE_MESSAGES = {
    "validate": "Please fix the submission form",
    "reserve": "Could not reserve a publication number",
    "compose": "Could not generate the cover and abstract pages",
    "merge": "Could not merge the cover pages with your manuscript",
    "upload": "Could not store the merged document",
}
