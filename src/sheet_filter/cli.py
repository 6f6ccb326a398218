"""CLI entry point for sheet-filter."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from sheet_filter import OUTPUT_SHEET_NAME, __version__
from sheet_filter.artifacts import write_projection_report, write_run_manifest
from sheet_filter.config import settings
from sheet_filter.errors import SheetFilterError
from sheet_filter.fields import output_filename, parse_fields_json, require_fields
from sheet_filter.headers import extract_headers
from sheet_filter.io import load_source_bytes, write_bytes
from sheet_filter.models import ProjectionReport, RunManifest
from sheet_filter.projector import project_workbook
from sheet_filter.utils import sha256_bytes, utcnow_iso

app = typer.Typer(
    name="sfilter",
    help="sheet-filter — Keep only the spreadsheet columns you pick.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"sheet-filter v{__version__}")
        raise typer.Exit()


def _collect_fields(field: list[str] | None, fields_json: str | None) -> list[str]:
    """Merge ``--field`` values and a ``--fields-json`` array, keeping order."""
    collected = list(field or [])
    if fields_json is not None:
        collected.extend(parse_fields_json(fields_json))
    return require_fields(collected)


def _input_sha256(input_file: Path) -> str:
    try:
        return sha256_bytes(input_file.read_bytes())
    except OSError:
        return ""


def _output_path(out_dir: Path, input_file: Path) -> Path:
    return out_dir / Path(output_filename(input_file.name)).with_suffix(".xlsx")


def _write_failure_manifest(
    out_dir: Path,
    input_file: Path,
    created_at: str,
    fields: list[str],
    *,
    kind: str,
    message: str,
) -> Path:
    manifest = RunManifest(
        version=__version__,
        input_path=str(input_file.resolve()),
        created_at_utc=created_at,
        fields=fields,
        sha256=_input_sha256(input_file),
        status="failed",
        error_kind=kind,
        error_message=message,
    )
    return write_run_manifest(out_dir, manifest)


def _print_report(report: ProjectionReport) -> None:
    tbl = RichTable(title="Projection Summary", show_lines=True)
    tbl.add_column("Check", style="bold")
    tbl.add_column("Result")

    tbl.add_row("Rows", str(report.rows_out))
    tbl.add_row("Columns", str(report.columns_out))
    tbl.add_row("Matched", ", ".join(report.matched_fields) or "[yellow]none[/yellow]")
    if report.unmatched_fields:
        tbl.add_row("Not found", f"[yellow]{', '.join(report.unmatched_fields)}[/yellow]")
    for w in report.warnings:
        tbl.add_row("Warning", f"[yellow]{w}[/yellow]")
    console.print(tbl)


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """sheet-filter CLI."""


# ── headers command ──────────────────────────────────────────────


@app.command()
def headers(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to XLSX or CSV input file.",
        exists=True, readable=True,
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="CSV delimiter (sniffed when omitted).",
    ),
    as_json: bool = typer.Option(
        False, "--json",
        help="Print the headers as a JSON array.",
    ),
) -> None:
    """List the header row of the first sheet."""
    try:
        names = extract_headers(load_source_bytes(input_file, delimiter=delimiter))
    except SheetFilterError as exc:
        _err(exc.message)
        raise typer.Exit(code=2)

    if as_json:
        typer.echo(json.dumps(names, ensure_ascii=False))
        return

    if not names:
        console.print("[yellow]![/yellow] First sheet has no header row")
        return

    tbl = RichTable(title=f"Headers of {input_file.name}")
    tbl.add_column("#", justify="right")
    tbl.add_column("Header")
    for idx, name in enumerate(names, 1):
        tbl.add_row(str(idx), name if name else "[dim](blank)[/dim]")
    console.print(tbl)


# ── filter command ───────────────────────────────────────────────


@app.command(name="filter")
def filter_columns(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to XLSX or CSV input file.",
        exists=True, readable=True,
    ),
    field: list[str] | None = typer.Option(
        None, "--field", "-f",
        help="Header name to keep. Repeat for more columns.",
    ),
    fields_json: str | None = typer.Option(
        None, "--fields-json",
        help='JSON array of header names, e.g. \'["Name", "Date"]\'.',
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Output directory for the filtered workbook + report + manifest.",
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d",
        help="CSV delimiter (sniffed when omitted).",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
) -> None:
    """Write a workbook holding only the selected columns."""
    echo = _printer(quiet)
    created_at = utcnow_iso()
    out_dir.mkdir(parents=True, exist_ok=True)
    requested = list(field or [])

    try:
        requested = _collect_fields(field, fields_json)

        if not quiet:
            console.print(Panel(
                f"[bold]sheet-filter[/bold] v{__version__}\n"
                f"Input:  {input_file}\nOutput: {out_dir}\n"
                f"Fields: {', '.join(requested)}",
                title="Filter", border_style="blue",
            ))

        echo("[blue]>[/blue] Loading input file …")
        data = load_source_bytes(input_file, delimiter=delimiter)

        echo("[blue]>[/blue] Projecting columns …")
        output, report = project_workbook(data, requested)

        output_path = write_bytes(_output_path(out_dir, input_file), output)
        echo(f"  Workbook -> {output_path}  (sheet {OUTPUT_SHEET_NAME!r})")
        report_path = write_projection_report(out_dir, report)
        echo(f"  Report   -> {report_path}")

        manifest = RunManifest(
            version=__version__,
            input_path=str(input_file.resolve()),
            output_path=str(output_path.resolve()),
            created_at_utc=created_at,
            fields=requested,
            rows_in=report.rows_in,
            rows_out=report.rows_out,
            sha256=sha256_bytes(data),
        )
        manifest_path = write_run_manifest(out_dir, manifest)
        echo(f"  Manifest -> {manifest_path}")

        if not quiet:
            _print_report(report)
    except SheetFilterError as exc:
        manifest_path = _write_failure_manifest(
            out_dir, input_file, created_at, requested,
            kind=exc.kind.value, message=exc.message,
        )
        _err(exc.message)
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=2)
    except Exception as exc:
        message = f"Unexpected internal error: {exc}"
        manifest_path = _write_failure_manifest(
            out_dir, input_file, created_at, requested,
            kind="internal_error", message=message,
        )
        _err(message)
        console.print(f"  Manifest -> {manifest_path}")
        raise typer.Exit(code=1)


# ── serve command ────────────────────────────────────────────────


@app.command()
def serve(
    host: str = typer.Option(settings.host, "--host", help="Host to bind to."),
    port: int = typer.Option(settings.port, "--port", help="Port to bind to."),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development."),
) -> None:
    """Run the HTTP API."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console.print(f"[bold]sheet-filter[/bold] v{__version__} listening on http://{host}:{port}")
    uvicorn.run(
        "sheet_filter.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )
