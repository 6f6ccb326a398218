"""Boundary helpers: parse and check the caller's field selection."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from pathlib import PurePath
from urllib.parse import quote

from sheet_filter.errors import InputMissingError

_UNSAFE_FILENAME_RE = re.compile(r'["\\\r\n]')


def parse_fields_json(raw: str | None) -> list[str]:
    """Decode the ``fields`` form value, a JSON array of header names."""
    if raw is None or not raw.strip():
        raise InputMissingError("No fields selected")
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputMissingError(f"fields is not valid JSON: {exc.msg}") from exc
    if not isinstance(decoded, list) or not all(isinstance(item, str) for item in decoded):
        raise InputMissingError("fields must be a JSON array of header names")
    return require_fields(decoded)


def require_fields(fields: Sequence[str] | None) -> list[str]:
    """Return *fields* as a list, rejecting an empty selection."""
    if not fields:
        raise InputMissingError("No fields selected")
    return list(fields)


def output_filename(original: str | None) -> str:
    """Name of the projected workbook for an upload called *original*."""
    name = PurePath(original or "").name or "workbook.xlsx"
    return "filtered_" + _UNSAFE_FILENAME_RE.sub("_", name)


def content_disposition(filename: str) -> str:
    """``attachment`` header value for *filename*.

    Header values are latin-1 on the wire, so a non-ASCII name gets an ASCII
    ``filename`` fallback plus an RFC 5987 ``filename*`` parameter.
    """
    ascii_name = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
