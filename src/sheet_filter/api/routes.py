"""API routes for sheet-filter."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from .. import XLSX_MEDIA_TYPE, __version__
from ..config import Settings
from ..errors import ErrorKind, InputMissingError, SheetFilterError
from ..fields import content_disposition, output_filename, parse_fields_json
from ..headers import extract_headers
from ..projector import project_workbook

logger = logging.getLogger(__name__)

router = APIRouter()

COLLAPSED_ERROR_MESSAGE = "Missing file or fields"
UNREADABLE_FILE_MESSAGE = "Could not read the file. Is it a valid xlsx file?"


def _settings(request: Request) -> Settings:
    return request.app.state.settings


async def _read_upload(file: Optional[UploadFile], max_bytes: int) -> bytes:
    """Read the uploaded workbook fully into memory."""
    if file is None or not file.filename:
        raise InputMissingError("No file uploaded")
    data = await file.read()
    if len(data) > max_bytes:
        raise InputMissingError(f"File is larger than the {max_bytes} byte upload limit")
    return data


def _error_response(exc: SheetFilterError, app_settings: Settings) -> JSONResponse:
    if app_settings.collapse_errors:
        content = {"error": COLLAPSED_ERROR_MESSAGE}
    else:
        content = exc.to_dict()
    return JSONResponse(status_code=400, content=content)


@router.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok", "version": __version__}


@router.post("/headers")
async def read_headers(
    request: Request,
    file: Optional[UploadFile] = File(None),
):
    """Return the header row of the uploaded workbook."""
    app_settings = _settings(request)
    try:
        data = await _read_upload(file, app_settings.max_upload_bytes)
        headers = extract_headers(data)
    except SheetFilterError as exc:
        logger.warning("Header extraction failed (%s): %s", exc.kind.value, exc.message)
        if exc.kind is ErrorKind.parse_error:
            return JSONResponse(
                status_code=400,
                content={"error": UNREADABLE_FILE_MESSAGE, "kind": exc.kind.value},
            )
        return _error_response(exc, app_settings)
    return {"headers": headers}


@router.post("/filter-excel")
async def filter_excel(
    request: Request,
    file: Optional[UploadFile] = File(None),
    fields: Optional[str] = Form(None),
):
    """Return a workbook holding only the selected columns of the upload."""
    app_settings = _settings(request)
    try:
        data = await _read_upload(file, app_settings.max_upload_bytes)
        selection = parse_fields_json(fields)
        output, report = project_workbook(data, selection)
    except SheetFilterError as exc:
        logger.warning("Filter request rejected (%s): %s", exc.kind.value, exc.message)
        return _error_response(exc, app_settings)

    filename = output_filename(file.filename)
    logger.info(
        "Serving %s: %d rows x %d columns", filename, report.rows_out, report.columns_out
    )
    return Response(
        content=output,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )
