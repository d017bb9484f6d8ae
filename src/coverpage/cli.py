"""CLI interface for composing and submitting publications."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from coverpage.composer import DocumentComposer
from coverpage.config import Settings
from coverpage.errors import CoverpageError, SubmissionError
from coverpage.ledgers import Ledger, get_ledger
from coverpage.models import Category, LedgerRecord, Metadata
from coverpage.submission import build_document, submit, validate_manuscript

app = typer.Typer(
    name="coverpage",
    help="Generate cover and abstract pages for a manuscript and archive the merged PDF.",
    no_args_is_help=True,
)

console = Console()

_STAGE_LABELS = {
    "validate": "Checking the manuscript...",
    "reserve": "Reserving a publication number...",
    "compose": "Generating cover and abstract pages...",
    "merge": "Merging with the manuscript...",
    "upload": "Uploading the merged PDF...",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _read_text(value: str, path: Path | None) -> str:
    return path.read_text(encoding="utf-8") if path else value


def _metadata(
    category: str,
    title: str,
    author: str,
    email: str,
    abstract: str,
    keywords: str,
    jel_code: str,
    acknowledgement: str,
) -> Metadata:
    try:
        return Metadata(
            category=category,
            title=title,
            author=author,
            email=email,
            abstract=abstract,
            keywords=keywords,
            jel_code=jel_code,
            acknowledgement=acknowledgement,
        ).validate()
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)


@app.command()
def compose(
    manuscript: Path = typer.Argument(help="The manuscript PDF to append after the generated pages."),
    number: str = typer.Option(..., "--number", "-n", help="Publication number to stamp, e.g. PP-2025-001."),
    title: str = typer.Option(..., "--title", help="Publication title."),
    author: str = typer.Option(..., "--author", help="Author line as it should be printed."),
    category: str = typer.Option("PP", "--category", "-c", help="PP, WP, MN or BR."),
    email: str = typer.Option("", "--email", help="Corresponding author's email."),
    abstract: str = typer.Option("", "--abstract", help="Abstract text."),
    abstract_file: Path | None = typer.Option(None, "--abstract-file", help="Read the abstract from a file."),
    keywords: str = typer.Option("", "--keywords", help="Comma separated keywords."),
    jel_code: str = typer.Option("", "--jel", help="JEL classification codes."),
    acknowledgement: str = typer.Option("", "--ack", help="Acknowledgement text."),
    ack_file: Path | None = typer.Option(None, "--ack-file", help="Read the acknowledgement from a file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Where to write the merged PDF."),
) -> None:
    """Build the merged PDF locally without touching the ledger."""
    meta = _metadata(
        category,
        title,
        author,
        email,
        _read_text(abstract, abstract_file),
        keywords,
        jel_code,
        _read_text(acknowledgement, ack_file),
    )
    composer = _open_composer(Settings.from_env())
    data = manuscript.read_bytes()
    try:
        composer.check(meta)
        manuscript_pages = validate_manuscript(data, manuscript.name)
        pdf, generated_pages = build_document(number, meta, data, composer)
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    target = output or manuscript.with_name(f"{number}.pdf")
    target.write_bytes(pdf)
    console.print(
        f"[green]Wrote {target}[/green] "
        f"({generated_pages} generated + {manuscript_pages} manuscript pages)"
    )


@app.command(name="submit")
def submit_command(
    manuscript: Path = typer.Argument(help="The manuscript PDF (A4, at most 10 MB)."),
    title: str = typer.Option(..., "--title", help="Publication title."),
    author: str = typer.Option(..., "--author", help="Author line as it should be printed."),
    category: str = typer.Option("PP", "--category", "-c", help="PP, WP, MN or BR."),
    email: str = typer.Option("", "--email", help="Corresponding author's email."),
    abstract: str = typer.Option("", "--abstract", help="Abstract text."),
    abstract_file: Path | None = typer.Option(None, "--abstract-file", help="Read the abstract from a file."),
    keywords: str = typer.Option("", "--keywords", help="Comma separated keywords."),
    jel_code: str = typer.Option("", "--jel", help="JEL classification codes."),
    acknowledgement: str = typer.Option("", "--ack", help="Acknowledgement text."),
    ack_file: Path | None = typer.Option(None, "--ack-file", help="Read the acknowledgement from a file."),
) -> None:
    """Reserve a number, build the merged PDF and archive it in the ledger."""
    meta = _metadata(
        category,
        title,
        author,
        email,
        _read_text(abstract, abstract_file),
        keywords,
        jel_code,
        _read_text(acknowledgement, ack_file),
    )
    settings = Settings.from_env()
    composer = _open_composer(settings)
    ledger = _open_ledger(settings)

    console.print(
        Panel(
            f"[bold]{meta.title}[/bold]\n"
            f"Author: {meta.author}\n"
            f"Series: {meta.category.series_name}\n"
            f"Ledger: {ledger.name}",
            border_style="cyan",
        )
    )
    asyncio.run(_run_submission(meta, manuscript, ledger, composer, settings))


async def _run_submission(
    meta: Metadata,
    manuscript: Path,
    ledger: Ledger,
    composer: DocumentComposer,
    settings: Settings,
) -> None:
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=None)

            def on_stage(stage: str) -> None:
                progress.update(task, description=_STAGE_LABELS[stage])

            result = await submit(
                meta,
                manuscript.read_bytes(),
                ledger,
                filename=manuscript.name,
                max_bytes=settings.max_upload_bytes,
                composer=composer,
                on_stage=on_stage,
            )
            progress.update(task, description="[green]Submitted!")
    except SubmissionError as exc:
        console.print(f"[red]{exc.user_message}[/red]")
        raise typer.Exit(code=1)
    finally:
        await ledger.aclose()

    console.print(f"\nNumber: [bold cyan]{result.number}[/bold cyan]")
    console.print(f"Pages: {result.generated_pages} generated + {result.manuscript_pages} manuscript")
    console.print(f"File: {result.file_url}")
    console.print(
        "[dim]Check the file, then run `coverpage finalize` or `coverpage delete`. "
        "`coverpage list` shows every record.[/dim]"
    )


@app.command()
def finalize(number: str = typer.Argument(help="Publication number to lock.")) -> None:
    """Finalize a record after checking the uploaded file."""
    _run_record_action(number, "finalize")
    console.print(f"[green]Record {number} finalized.[/green]")


@app.command()
def delete(number: str = typer.Argument(help="Publication number to remove.")) -> None:
    """Delete a record whose details or file are wrong."""
    _run_record_action(number, "delete")
    console.print(f"[green]Record {number} deleted.[/green]")


@app.command(name="list")
def list_records(
    category: str | None = typer.Option(None, "--category", "-c", help="Only this series (PP, WP, MN or BR)."),
) -> None:
    """Show ledger records with their status."""
    try:
        selected = [Category.parse(category)] if category else list(Category)
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    ledger = _open_ledger(Settings.from_env())

    async def run() -> list[LedgerRecord]:
        found: list[LedgerRecord] = []
        try:
            for selected_category in selected:
                found.extend(await ledger.list(selected_category))
        finally:
            await ledger.aclose()
        return found

    try:
        records = asyncio.run(run())
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if not records:
        console.print("[dim]No records.[/dim]")
        return

    table = Table("Number", "Status", "Title", "Updated", "File")
    for record in records:
        table.add_row(
            record.number,
            record.status,
            record.fields.get("title", ""),
            record.updated,
            record.file_url,
        )
    console.print(table)


@app.command()
def categories() -> None:
    """Show the publication series that can be submitted to."""
    table = Table("Code", "Series")
    for category in Category:
        table.add_row(category.value, category.series_name)
    console.print(table)


def _open_composer(settings: Settings) -> DocumentComposer:
    try:
        return DocumentComposer.from_settings(settings)
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)


def _open_ledger(settings: Settings) -> Ledger:
    try:
        return get_ledger(settings)
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)


def _run_record_action(number: str, action: str) -> None:
    ledger = _open_ledger(Settings.from_env())

    async def run() -> None:
        try:
            await getattr(ledger, action)(number)
        finally:
            await ledger.aclose()

    try:
        asyncio.run(run())
    except CoverpageError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
