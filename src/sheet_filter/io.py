"""I/O helpers — load workbooks from bytes or files, write artifacts."""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from pathlib import Path
from typing import Any
from xml.etree.ElementTree import ParseError as XMLParseError
from zipfile import BadZipFile
from zlib import error as ZlibError

import pandas as pd
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from sheet_filter.errors import WorkbookParseError

XLSX_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")

# ── Workbooks ────────────────────────────────────────────────────


def load_workbook_bytes(data: bytes) -> Workbook:
    """Parse raw xlsx bytes into an openpyxl workbook.

    Formula cells are read as their cached values.

    Raises
    ------
    WorkbookParseError
        If *data* is not a readable workbook.
    """
    if not data:
        raise WorkbookParseError("File is empty, expected an .xlsx workbook")
    try:
        return load_workbook(io.BytesIO(data), data_only=True)
    except (
        BadZipFile, ZlibError, EOFError, InvalidFileException, XMLParseError,
        KeyError, ValueError, OSError,
    ) as exc:
        raise WorkbookParseError(f"Could not read workbook: {exc}") from exc


def workbook_to_bytes(wb: Workbook) -> bytes:
    """Serialize *wb* to xlsx bytes."""
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# ── Source files (CLI) ───────────────────────────────────────────


CSV_DELIMITERS = ",;\t|"
_SNIFF_SAMPLE_CHARS = 64 * 1024


def _sniff_delimiter(path: Path, encoding: str) -> str:
    """Pick a separator from ``CSV_DELIMITERS``; a single-column file gets ``,``."""
    with open(path, encoding=encoding, errors="strict", newline="") as fh:
        sample = fh.read(_SNIFF_SAMPLE_CHARS)
    if not sample.strip():
        return ","
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _read_csv(path: Path, delimiter: str | None) -> pd.DataFrame:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            sep = delimiter if delimiter else _sniff_delimiter(path, encoding)
            return pd.read_csv(
                path,
                header=None,
                dtype="string",
                sep=sep,
                engine="c",
                encoding=encoding,
                encoding_errors="strict",
                na_filter=True,
                keep_default_na=False,
                na_values=[""],
            )
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
    raise WorkbookParseError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def _frame_to_workbook(df: pd.DataFrame) -> Workbook:
    wb = Workbook()
    ws = wb.active
    for row_vals in df.itertuples(index=False, name=None):
        ws.append([None if pd.isna(val) else val for val in row_vals])
    return wb


def load_source_bytes(path: Path, delimiter: str | None = None) -> bytes:
    """Return xlsx bytes for *path*, converting a CSV into a one-sheet workbook.

    The CSV's first line stays row 1, so it is treated as the header row.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    WorkbookParseError
        If the extension is not supported, or CSV decoding/parsing fails.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in XLSX_SUFFIXES:
        return path.read_bytes()
    if suffix == ".csv":
        return workbook_to_bytes(_frame_to_workbook(_read_csv(path, delimiter)))

    raise WorkbookParseError(f"Unsupported file type: {suffix!r}. Use .xlsx or .csv")


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_bytes(path: Path, data: bytes) -> Path:
    """Write *data* to *path* atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_bytes(data)
    tmp_path.replace(path)
    return path


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    return write_bytes(path, payload.encode("utf-8"))
