"""Submission pipeline: validate, reserve a number, compose, merge, upload."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import PurePath

from coverpage.composer import DocumentComposer
from coverpage.errors import CoverpageError, InvalidInputError, SubmissionError
from coverpage.ledgers.base import Ledger
from coverpage.merger import merge, page_count
from coverpage.models import Metadata, SubmissionResult

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def validate_manuscript(
    data: bytes | None,
    filename: str | None = None,
    content_type: str | None = None,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> int:
    """Check an uploaded manuscript before any work is done on it.

    Returns:
        The manuscript's page count.

    Raises:
        InvalidInputError: missing file, not a PDF, or over ``max_bytes``.
        MalformedInputDocumentError: the bytes don't open as a PDF.
    """
    if not data:
        raise InvalidInputError("Please select a PDF file.")
    if content_type and content_type.split(";")[0].strip().lower() not in PDF_CONTENT_TYPES:
        raise InvalidInputError("Only PDF files are allowed.")
    if filename and PurePath(filename).suffix.lower() != ".pdf":
        raise InvalidInputError("Only PDF files are allowed.")
    if len(data) > max_bytes:
        raise InvalidInputError(f"File exceeds the {max_bytes // (1024 * 1024)} MB limit.")
    return page_count(data)


def pdf_metadata(number: str, meta: Metadata) -> dict[str, str]:
    """PDF info fields for the merged document."""
    return {
        "title": meta.title,
        "author": meta.author,
        "subject": f"{meta.category.series_name} {number}",
        "keywords": meta.keywords,
        "creator": "coverpage",
    }


def build_document(
    number: str,
    meta: Metadata,
    manuscript: bytes,
    composer: DocumentComposer | None = None,
) -> tuple[bytes, int]:
    """Compose the cover/abstract pages and merge them ahead of ``manuscript``.

    Returns:
        The merged PDF bytes and the number of generated pages.
    """
    composer = composer or DocumentComposer()
    generated = composer.compose(number, meta)
    try:
        pdf = merge(generated, manuscript, metadata=pdf_metadata(number, meta))
        return pdf, generated.page_count
    finally:
        generated.close()


@contextmanager
def _stage(name: str, on_stage: Callable[[str], None] | None) -> Iterator[None]:
    if on_stage:
        on_stage(name)
    try:
        yield
    except CoverpageError as exc:
        raise SubmissionError(name, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected failure during %s", name)
        raise SubmissionError(name, exc) from exc


async def submit(
    meta: Metadata,
    manuscript: bytes | None,
    ledger: Ledger,
    *,
    filename: str | None = None,
    content_type: str | None = None,
    max_bytes: int = MAX_UPLOAD_BYTES,
    composer: DocumentComposer | None = None,
    on_stage: Callable[[str], None] | None = None,
) -> SubmissionResult:
    """Run one submission end to end.

    Nothing is uploaded unless composing and merging both succeed. A number
    reserved before a later failure stays reserved in the ledger. Text the
    document fonts cannot print is rejected before a number is reserved.

    Args:
        meta: The submitted metadata.
        manuscript: The uploaded PDF bytes.
        ledger: Where numbers come from and the merged PDF goes.
        filename: Original upload name, checked for a ``.pdf`` suffix.
        content_type: Upload MIME type, if known.
        max_bytes: Upload size limit.
        composer: Override for the page composer (e.g. a fixed date).
        on_stage: Callback(stage_name) called as each stage starts.

    Raises:
        SubmissionError: naming the stage that failed.
    """
    composer = composer or DocumentComposer()
    with _stage("validate", on_stage):
        meta.validate()
        composer.check(meta)
        manuscript_pages = validate_manuscript(manuscript, filename, content_type, max_bytes)

    with _stage("reserve", on_stage):
        number = await ledger.reserve(meta.category)

    with _stage("compose", on_stage):
        generated = composer.compose(number, meta)

    try:
        with _stage("merge", on_stage):
            pdf = merge(generated, manuscript, metadata=pdf_metadata(number, meta))
        generated_pages = generated.page_count
    finally:
        generated.close()

    with _stage("upload", on_stage):
        file_url = await ledger.upload(number, meta, pdf)

    logger.info(
        "Submitted %s: %d generated + %d manuscript pages",
        number,
        generated_pages,
        manuscript_pages,
    )
    return SubmissionResult(
        number=number,
        file_url=file_url,
        generated_pages=generated_pages,
        manuscript_pages=manuscript_pages,
    )
