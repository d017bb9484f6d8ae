"""FastAPI web app for publication submissions."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from coverpage.composer import DocumentComposer
from coverpage.config import Settings
from coverpage.errors import (
    InvalidInputError,
    LedgerError,
    LedgerNotConfiguredError,
    MalformedInputDocumentError,
    SubmissionError,
)
from coverpage.ledgers import Ledger, get_ledger
from coverpage.models import FIELD_LIMITS, Category, LedgerRecord, Metadata
from coverpage.submission import submit

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parent.parent.parent
_TEMPLATES = _ROOT / "templates"

templates = Jinja2Templates(directory=str(_TEMPLATES))


def create_app(settings: Settings | None = None, ledger: Ledger | None = None) -> FastAPI:
    """Build the app. The ledger is created on first use unless one is given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if app.state.ledger is not None:
            await app.state.ledger.aclose()

    app = FastAPI(title="Publication Upload", lifespan=lifespan)
    app.state.settings = settings or Settings.from_env()
    app.state.ledger = ledger
    app.state.composer = DocumentComposer.from_settings(app.state.settings)

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "index.html",
            {"categories": list(Category), "limits": FIELD_LIMITS},
        )

    @app.get("/categories")
    async def categories() -> list[dict[str, str]]:
        return [{"code": c.value, "name": c.series_name} for c in Category]

    @app.post("/submit")
    async def submit_publication(
        request: Request,
        category: str = Form(default="PP"),
        author: str = Form(default=""),
        email: str = Form(default=""),
        title: str = Form(default=""),
        abstract: str = Form(default=""),
        jelcode: str = Form(default=""),
        keywords: str = Form(default=""),
        acknow: str = Form(default=""),
        file: UploadFile | None = None,
    ) -> JSONResponse:
        """Reserve a number, build the merged PDF and archive it."""
        try:
            ledger = _ledger(request.app)
        except LedgerNotConfiguredError as exc:
            return _error("reserve", str(exc), 503)

        try:
            meta = Metadata(
                category=category,
                title=title,
                author=author,
                email=email,
                abstract=abstract,
                keywords=keywords,
                jel_code=jelcode,
                acknowledgement=acknow,
            )
        except InvalidInputError as exc:
            return _error("validate", str(exc), 400)

        data = await file.read() if file and file.filename else None
        try:
            result = await submit(
                meta,
                data,
                ledger,
                filename=file.filename if file else None,
                content_type=file.content_type if file else None,
                max_bytes=request.app.state.settings.max_upload_bytes,
                composer=request.app.state.composer,
            )
        except SubmissionError as exc:
            logger.warning("Submission failed during %s: %s", exc.stage, exc.cause)
            return _error(exc.stage, exc.user_message, _status_for(exc.cause))

        return JSONResponse(
            {
                "success": True,
                "number": result.number,
                "fileUrl": result.file_url,
                "pages": result.total_pages,
            }
        )

    @app.get("/records")
    async def records(request: Request, category: str | None = None) -> JSONResponse:
        """List ledger records, for one category or all of them."""
        try:
            selected = [Category.parse(category)] if category else list(Category)
        except InvalidInputError as exc:
            return _error("list", str(exc), 400)

        try:
            ledger = _ledger(request.app)
            found: list[LedgerRecord] = []
            for selected_category in selected:
                found.extend(await ledger.list(selected_category))
        except LedgerError as exc:
            return _error("list", str(exc), 503 if isinstance(exc, LedgerNotConfiguredError) else 502)

        return JSONResponse({"success": True, "records": [_record_json(r) for r in found]})

    @app.post("/records/{number}/finalize")
    async def finalize(request: Request, number: str) -> JSONResponse:
        return await _record_action(request.app, number, "finalize")

    @app.post("/records/{number}/delete")
    async def delete(request: Request, number: str) -> JSONResponse:
        return await _record_action(request.app, number, "delete")

    return app


def _ledger(app: FastAPI) -> Ledger:
    if app.state.ledger is None:
        app.state.ledger = get_ledger(app.state.settings)
    return app.state.ledger


async def _record_action(app: FastAPI, number: str, action: str) -> JSONResponse:
    try:
        ledger = _ledger(app)
        if action == "finalize":
            await ledger.finalize(number)
        else:
            await ledger.delete(number)
    except LedgerError as exc:
        return _error(action, str(exc), 503 if isinstance(exc, LedgerNotConfiguredError) else 502)

    status = "FINALIZED" if action == "finalize" else "DELETED"
    return JSONResponse({"success": True, "number": number, "status": status})


def _record_json(record: LedgerRecord) -> dict[str, object]:
    return {
        "number": record.number,
        "category": record.category.value,
        "status": record.status,
        "title": record.fields.get("title", ""),
        "author": record.fields.get("author", ""),
        "fileUrl": record.file_url,
        "updated": record.updated,
    }


def _status_for(cause: Exception) -> int:
    if isinstance(cause, (InvalidInputError, MalformedInputDocumentError)):
        return 400
    if isinstance(cause, LedgerError):
        return 502
    return 500


def _error(stage: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        {"success": False, "stage": stage, "error": message},
        status_code=status_code,
    )


app = create_app()
