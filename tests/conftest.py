"""Shared fixtures — workbooks are built in memory with openpyxl."""

from __future__ import annotations

import io
import struct
import zipfile
from collections.abc import Callable, Sequence
from datetime import datetime

import pytest
from openpyxl import Workbook, load_workbook

Rows = Sequence[Sequence[object]]


def xlsx_bytes(rows: Rows, *, title: str = "Sheet1", extra_sheets: dict[str, Rows] | None = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(list(row))
    for name, sheet_rows in (extra_sheets or {}).items():
        extra = wb.create_sheet(title=name)
        for row in sheet_rows:
            extra.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def read_rows(data: bytes, sheet: str | None = None) -> list[list[object]]:
    wb = load_workbook(io.BytesIO(data))
    ws = wb[sheet] if sheet else wb.worksheets[0]
    return [list(row) for row in ws.iter_rows(values_only=True)]


@pytest.fixture
def make_xlsx() -> Callable[..., bytes]:
    return xlsx_bytes


@pytest.fixture
def sales_xlsx() -> bytes:
    return xlsx_bytes(
        [
            ["Name", "Amount", "Date"],
            ["Alice", 10, datetime(2024, 1, 1)],
            ["Bob", 20, datetime(2024, 1, 2)],
        ]
    )


@pytest.fixture
def read_xlsx() -> Callable[..., list[list[object]]]:
    return read_rows


def corrupt_member(data: bytes, member: str, span: int = 20) -> bytes:
    """Flip *span* bytes in the middle of *member*'s compressed stream."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo(member)
    raw = bytearray(data)
    offset = info.header_offset
    name_len, extra_len = struct.unpack("<HH", bytes(raw[offset + 26 : offset + 30]))
    start = offset + 30 + name_len + extra_len
    end = start + info.compress_size
    mid = start + info.compress_size // 2
    for pos in range(mid, min(mid + span, end)):
        raw[pos] ^= 0xFF
    return bytes(raw)


@pytest.fixture
def corrupt_sales_xlsx(sales_xlsx: bytes) -> bytes:
    return corrupt_member(sales_xlsx, "xl/worksheets/sheet1.xml")
