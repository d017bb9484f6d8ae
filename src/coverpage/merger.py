"""Page-level merge of the generated pages with the uploaded manuscript."""

from __future__ import annotations

import logging

import pymupdf

from coverpage.errors import MalformedInputDocumentError, MergeError

logger = logging.getLogger(__name__)

PdfSource = bytes | pymupdf.Document


def open_pdf(data: bytes) -> pymupdf.Document:
    """Open PDF bytes, rejecting anything that isn't a readable, non-empty PDF.

    Raises:
        MalformedInputDocumentError: if the bytes can't be parsed, the
            document is password protected, or it has no pages.
    """
    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise MalformedInputDocumentError(f"Not a readable PDF: {exc}") from exc

    if doc.needs_pass:
        doc.close()
        raise MalformedInputDocumentError("The PDF is password protected.")
    if doc.page_count == 0:
        doc.close()
        raise MalformedInputDocumentError("The PDF has no pages.")
    return doc


def page_count(data: bytes) -> int:
    doc = open_pdf(data)
    try:
        return doc.page_count
    finally:
        doc.close()


def merge(
    generated: PdfSource,
    manuscript: PdfSource,
    metadata: dict[str, str] | None = None,
) -> bytes:
    """Concatenate ``generated`` and ``manuscript`` pages into one new PDF.

    Pages are copied unchanged, generated pages first. Documents passed in
    open are left open; documents opened here are closed.

    Args:
        generated: The cover/abstract document, as bytes or an open document.
        manuscript: The uploaded manuscript, as bytes or an open document.
        metadata: Optional PDF info fields (title, author, ...) for the output.

    Raises:
        MalformedInputDocumentError: if the manuscript bytes can't be opened.
        MergeError: if copying pages or writing the output fails.
    """
    owned: list[pymupdf.Document] = []
    try:
        manuscript_doc = _as_document(manuscript, owned)
        try:
            generated_doc = _as_document(generated, owned)
        except MalformedInputDocumentError as exc:
            raise MergeError(f"Generated pages could not be read back: {exc}") from exc

        merged = pymupdf.open()
        try:
            merged.insert_pdf(generated_doc)
            merged.insert_pdf(manuscript_doc)
            if metadata:
                merged.set_metadata(metadata)
            expected = generated_doc.page_count + manuscript_doc.page_count
            if merged.page_count != expected:
                raise MergeError(
                    f"Merged document has {merged.page_count} pages, expected {expected}"
                )
            data = merged.tobytes(garbage=3, deflate=True)
        except MergeError:
            raise
        except Exception as exc:
            raise MergeError(f"Could not merge documents: {exc}") from exc
        finally:
            merged.close()

        logger.debug(
            "Merged %d generated + %d manuscript pages (%d bytes)",
            generated_doc.page_count,
            manuscript_doc.page_count,
            len(data),
        )
        return data
    finally:
        for doc in owned:
            doc.close()


def _as_document(source: PdfSource, owned: list[pymupdf.Document]) -> pymupdf.Document:
    if isinstance(source, pymupdf.Document):
        return source
    doc = open_pdf(source)
    owned.append(doc)
    return doc
