"""Header extraction: read row 1 of the first worksheet."""

from __future__ import annotations

import logging
from datetime import date, datetime, time

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from sheet_filter.errors import WorkbookParseError
from sheet_filter.io import load_workbook_bytes

logger = logging.getLogger(__name__)


def cell_text(value: object) -> str:
    """Return the display text used to name and match a header cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def first_worksheet(wb: Workbook) -> Worksheet | None:
    """Return the first worksheet of *wb*, skipping chartsheets."""
    return wb.worksheets[0] if wb.worksheets else None


def header_values(ws: Worksheet) -> list[object]:
    """Raw values of row 1, gaps kept as ``None``, trailing empties dropped."""
    values: list[object] = []
    for row in ws.iter_rows(min_row=1, max_row=1, values_only=True):
        values = list(row)
    while values and values[-1] is None:
        values.pop()
    return values


def extract_headers(data: bytes) -> list[str]:
    """Return the header names of the first worksheet in *data*.

    A gap in the header row yields ``""`` so positions stay aligned with
    source column indexes. A sheet without rows yields ``[]``.

    Raises
    ------
    WorkbookParseError
        If *data* is not a readable workbook or has no worksheet.
    """
    wb = load_workbook_bytes(data)
    ws = first_worksheet(wb)
    if ws is None:
        raise WorkbookParseError("Workbook has no worksheet")
    headers = [cell_text(v) for v in header_values(ws)]
    logger.debug("Extracted %d headers from sheet %r", len(headers), ws.title)
    return headers
