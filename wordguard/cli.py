"""Command-line bulk import / export for the moderation dictionary.

    python -m wordguard import words.csv --overwrite
    python -m wordguard import list.txt --format text --dry-run
    python -m wordguard export --language Filipino --format pipe -o fil.txt
    python -m wordguard serve
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from wordguard.config import settings
from wordguard.database import init_db
from wordguard.errors import StoreUnavailableError, UnsupportedFormatError
from wordguard.models.dictionary import ImportPolicy, ReconciliationResult
from wordguard.services.exporter import export_words, render_export
from wordguard.services.parser import ImportFormat, parse_candidates
from wordguard.services.reconciler import import_words
from wordguard.services.store import DictionaryStore, InMemoryDictionaryStore, get_store

COLORS = {
    "error": "#FF4444",
    "warning": "#FFB800",
    "info": "#00D26A",
    "muted": "#666666",
    "primary": "#015763",
}

EXIT_OK = 0
EXIT_RECORD_ERRORS = 1
EXIT_BAD_FORMAT = 2
EXIT_STORE_DOWN = 3


def _open_store() -> DictionaryStore:
    if settings.store_backend == "sql":
        init_db()
    return get_store()


def _summary_table(result: ReconciliationResult, title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style=f"bold {COLORS['primary']}")
    table.add_column("Total", justify="right")
    table.add_column("Imported", justify="right", style=COLORS["info"])
    table.add_column("Updated", justify="right")
    table.add_column("Skipped", justify="right", style=COLORS["muted"])
    table.add_column("Errors", justify="right", style=COLORS["error"])
    table.add_row(
        str(result.total),
        str(result.imported),
        str(result.updated),
        str(result.skipped),
        str(len(result.errors)),
    )
    return table


def _print_result(console: Console, result: ReconciliationResult, *, dry_run: bool, error_limit: int) -> None:
    title = "Import summary (dry run)" if dry_run else "Import summary"
    console.print(_summary_table(result, title))
    if not result.completed:
        console.print(f"[{COLORS['warning']}]Import stopped early; counts cover processed records only.")
    if result.errors:
        shown = result.errors[:error_limit]
        body = "\n".join(shown)
        if len(result.errors) > len(shown):
            body += f"\n… and {len(result.errors) - len(shown)} more"
        console.print(Panel(body, title="Rejected records", border_style=COLORS["error"]))


async def _import(args: argparse.Namespace, console: Console) -> int:
    try:
        candidates = parse_candidates(args.file.read_bytes(), args.format, filename=args.file.name)
    except UnsupportedFormatError as exc:
        console.print(f"[{COLORS['error']}]Cannot import {args.file}: {exc}")
        return EXIT_BAD_FORMAT

    policy = ImportPolicy(overwrite_existing=args.overwrite, skip_invalid=not args.report_invalid)
    backing = _open_store()
    store: DictionaryStore = backing
    try:
        if args.dry_run:
            store = InMemoryDictionaryStore(await backing.fetch_all())

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Importing", total=len(candidates))
            result = await import_words(
                candidates,
                policy,
                store,
                progress=lambda done, _total: progress.update(task, completed=done),
            )
    except StoreUnavailableError as exc:
        console.print(f"[{COLORS['error']}]Dictionary store unavailable: {exc}")
        if exc.partial_result is not None:
            _print_result(console, exc.partial_result, dry_run=args.dry_run, error_limit=args.show_errors)
        return EXIT_STORE_DOWN
    finally:
        await backing.close()

    _print_result(console, result, dry_run=args.dry_run, error_limit=args.show_errors)
    return EXIT_RECORD_ERRORS if result.errors else EXIT_OK


async def _export(args: argparse.Namespace, console: Console) -> int:
    store = _open_store()
    try:
        document = await export_words(store, args.language, args.category)
    except StoreUnavailableError as exc:
        console.print(f"[{COLORS['error']}]Dictionary store unavailable: {exc}")
        return EXIT_STORE_DOWN
    finally:
        await store.close()

    text = render_export(document, args.format)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        console.print(f"Exported {document.total_count} words to {args.output}")
    else:
        sys.stdout.write(text)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordguard", description="Moderation dictionary tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    formats = [f.value for f in ImportFormat] + ["tsv", "txt"]

    imp = sub.add_parser("import", help="Bulk import words from a file")
    imp.add_argument("file", type=Path, help="JSON, CSV/TSV, pipe-delimited or plain word list")
    imp.add_argument("--format", choices=formats, default=None, help="Override format detection")
    imp.add_argument("--overwrite", action="store_true", help="Overwrite words that already exist")
    imp.add_argument(
        "--report-invalid",
        action="store_true",
        help="Report records with an empty word as errors instead of skipping them",
    )
    imp.add_argument("--dry-run", action="store_true", help="Reconcile against a copy; write nothing")
    imp.add_argument("--show-errors", type=int, default=settings.error_preview_limit, metavar="N")

    exp = sub.add_parser("export", help="Export the dictionary")
    exp.add_argument("--language", default=None)
    exp.add_argument("--category", default=None)
    exp.add_argument("--format", choices=formats, default="json")
    exp.add_argument("-o", "--output", type=Path, default=None)

    sub.add_parser("serve", help="Run the API server")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console(stderr=args.command == "export" and args.output is None)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("wordguard.main:app", host=settings.host, port=settings.port, reload=settings.debug)
        return EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )
    handler = _import if args.command == "import" else _export
    return asyncio.run(handler(args, console))
