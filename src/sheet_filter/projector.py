"""Column projection: keep only the selected header columns.

Pure functions: bytes in, bytes out. Source column order wins over selection
order, every populated source row is kept, and duplicate header names are matched
independently.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from sheet_filter import OUTPUT_SHEET_NAME
from sheet_filter.errors import WorkbookValidationError
from sheet_filter.headers import cell_text, first_worksheet, header_values
from sheet_filter.io import load_workbook_bytes, workbook_to_bytes
from sheet_filter.models import ProjectionReport, TargetColumn

logger = logging.getLogger(__name__)

Row = list[object]

# ── Target map ───────────────────────────────────────────────────


def build_target_map(headers: Sequence[object], fields: Iterable[str]) -> list[TargetColumn]:
    """Scan *headers* left to right and keep the cells named in *fields*.

    Matching is exact on cell text. Each matching occurrence is kept, so a
    repeated header name maps to several columns.
    """
    selected = set(fields)
    target_map: list[TargetColumn] = []
    for col_idx, value in enumerate(headers, 1):
        text = cell_text(value)
        if text in selected:
            target_map.append(TargetColumn(name=text, index=col_idx))
    return target_map


# ── Rows ─────────────────────────────────────────────────────────


def _source_rows(ws: Worksheet) -> Iterable[tuple[object, ...]]:
    for row in ws.iter_rows(values_only=True):
        if any(val is not None for val in row):
            yield row


def project_rows(ws: Worksheet, target_map: Sequence[TargetColumn]) -> list[Row]:
    """Project every populated row of *ws* through *target_map*.

    The header row is projected too. A short row yields ``None`` for each
    target column it does not reach.
    """
    rows: list[Row] = []
    for row in _source_rows(ws):
        rows.append([row[t.index - 1] if t.index <= len(row) else None for t in target_map])
    return rows


def _rows_to_workbook(rows: Sequence[Row]) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = OUTPUT_SHEET_NAME
    for r_idx, values in enumerate(rows, 1):
        for c_idx, val in enumerate(values, 1):
            if val is None:
                continue
            cell = ws.cell(row=r_idx, column=c_idx, value=val)
            # openpyxl treats a leading "=" as a formula; source text stays text
            if isinstance(val, str) and val.startswith("="):
                cell.data_type = "s"
    return wb


# ── Public API ───────────────────────────────────────────────────


def _build_report(
    rows_in: int,
    rows: Sequence[Row],
    target_map: Sequence[TargetColumn],
    headers: Sequence[object],
    fields: Sequence[str],
) -> ProjectionReport:
    header_texts = {cell_text(v) for v in headers}
    matched: list[str] = []
    duplicates: list[str] = []
    for target in target_map:
        if target.name in matched:
            if target.name not in duplicates:
                duplicates.append(target.name)
        else:
            matched.append(target.name)
    unmatched: list[str] = []
    for name in fields:
        if name not in header_texts and name not in unmatched:
            unmatched.append(name)

    warnings: list[str] = []
    if not fields:
        warnings.append("No fields selected; output rows have zero columns")
    if unmatched:
        warnings.append(f"Fields not found in header row: {', '.join(unmatched)}")
    if duplicates:
        warnings.append(f"Duplicate header names kept as separate columns: {', '.join(duplicates)}")

    return ProjectionReport(
        rows_in=rows_in,
        rows_out=len(rows),
        columns_out=len(target_map),
        matched_fields=matched,
        unmatched_fields=unmatched,
        duplicate_headers=duplicates,
        warnings=warnings,
    )


def project_workbook(data: bytes, fields: Sequence[str]) -> tuple[bytes, ProjectionReport]:
    """Project the first sheet of *data* onto *fields*.

    Returns ``(xlsx_bytes, report)``. An empty *fields* is not rejected here;
    it produces rows with zero columns.

    Raises
    ------
    WorkbookParseError
        If *data* is not a readable workbook.
    WorkbookValidationError
        If there is no worksheet, or its header row is blank.
    """
    fields = list(fields)
    for name in fields:
        if not isinstance(name, str):
            raise TypeError("fields items must be strings")

    wb = load_workbook_bytes(data)
    ws = first_worksheet(wb)
    if ws is None:
        raise WorkbookValidationError("Workbook has no worksheet")
    headers = header_values(ws)
    if not headers:
        raise WorkbookValidationError(f"Sheet {ws.title!r} has no header row")

    target_map = build_target_map(headers, fields)
    rows = project_rows(ws, target_map)
    rows_in = sum(1 for _ in _source_rows(ws))
    report = _build_report(rows_in, rows, target_map, headers, fields)

    logger.info(
        "Projected %d rows onto %d of %d columns from sheet %r",
        report.rows_out, report.columns_out, len(headers), ws.title,
    )
    for warning in report.warnings:
        logger.warning(warning)

    return workbook_to_bytes(_rows_to_workbook(rows)), report


def project(data: bytes, fields: Sequence[str]) -> bytes:
    """Return xlsx bytes holding only the *fields* columns of *data*."""
    out, _report = project_workbook(data, fields)
    return out
