"""Error taxonomy shared by the projector, the CLI and the HTTP layer."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    input_missing = "input_missing"
    parse_error = "parse_error"
    validation_error = "validation_error"


class SheetFilterError(Exception):
    """Base class; every failure is terminal for its request."""

    kind: ErrorKind = ErrorKind.validation_error

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind.value}


class InputMissingError(SheetFilterError):
    """No file, or no usable field selection, was supplied."""

    kind = ErrorKind.input_missing


class WorkbookParseError(SheetFilterError):
    """The bytes are not a readable workbook."""

    kind = ErrorKind.parse_error


class WorkbookValidationError(SheetFilterError):
    """The workbook is readable but has no worksheet or no header row."""

    kind = ErrorKind.validation_error
