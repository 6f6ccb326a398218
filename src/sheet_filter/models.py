"""Data models used across the package."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass(frozen=True)
class TargetColumn:
    """One selected header and the 1-based source column it came from."""

    name: str
    index: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError("name must be a string")
        index = _to_non_negative_int(self.index, "index")
        if index < 1:
            raise ValueError("index must be >= 1")


@dataclass
class ProjectionReport:
    """Summary of a single projection.

    Contract invariant: ``rows_out == rows_in`` and ``columns_out`` equals the
    number of target columns, for every row.
    """

    rows_in: int = 0
    rows_out: int = 0
    columns_out: int = 0
    matched_fields: list[str] = field(default_factory=list)
    unmatched_fields: list[str] = field(default_factory=list)
    duplicate_headers: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        self.columns_out = _to_non_negative_int(self.columns_out, "columns_out")
        self.matched_fields = _to_string_list(self.matched_fields, "matched_fields")
        self.unmatched_fields = _to_string_list(self.unmatched_fields, "unmatched_fields")
        self.duplicate_headers = _to_string_list(self.duplicate_headers, "duplicate_headers")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.rows_out != self.rows_in:
            raise ValueError("rows_out must equal rows_in")

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "columns_out": self.columns_out,
            "matched_fields": list(self.matched_fields),
            "unmatched_fields": list(self.unmatched_fields),
            "duplicate_headers": list(self.duplicate_headers),
            "warnings": list(self.warnings),
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a single CLI run."""

    tool: str = "sheet-filter"
    version: str = ""
    input_path: str = ""
    output_path: str = ""
    created_at_utc: str = ""
    fields: list[str] = field(default_factory=list)
    rows_in: int = 0
    rows_out: int = 0
    sha256: str = ""
    status: str = "success"
    error_kind: str | None = None
    error_message: str = ""

    def __post_init__(self) -> None:
        self.fields = _to_string_list(self.fields, "fields")
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        if self.status not in ("success", "failed"):
            raise ValueError("status must be 'success' or 'failed'")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "output_path": self.output_path,
            "created_at_utc": self.created_at_utc,
            "fields": list(self.fields),
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "sha256": self.sha256,
            "status": self.status,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
        }
