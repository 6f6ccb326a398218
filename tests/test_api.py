"""HTTP contract for the filter and header endpoints."""

from __future__ import annotations

import json
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from sheet_filter import XLSX_MEDIA_TYPE, __version__
from sheet_filter.api import create_app
from sheet_filter.config import Settings


def _client(**overrides) -> TestClient:
    return TestClient(create_app(Settings(**overrides)))


@pytest.fixture
def client() -> TestClient:
    return _client()


def _upload(data: bytes, name: str = "sales.xlsx") -> dict:
    return {"file": (name, data, XLSX_MEDIA_TYPE)}


class TestFilterExcel:
    def test_returns_filtered_workbook(self, client: TestClient, sales_xlsx: bytes, read_xlsx) -> None:
        resp = client.post(
            "/api/filter-excel",
            files=_upload(sales_xlsx),
            data={"fields": json.dumps(["Date", "Name"])},
        )

        assert resp.status_code == 200
        assert resp.headers["content-type"] == XLSX_MEDIA_TYPE
        assert resp.headers["content-disposition"] == 'attachment; filename="filtered_sales.xlsx"'
        assert read_xlsx(resp.content, "Filtered Data") == [
            ["Name", "Date"],
            ["Alice", datetime(2024, 1, 1)],
            ["Bob", datetime(2024, 1, 2)],
        ]

    def test_unknown_field_only_is_not_an_error(self, client: TestClient, sales_xlsx: bytes) -> None:
        resp = client.post(
            "/api/filter-excel",
            files=_upload(sales_xlsx),
            data={"fields": json.dumps(["Nonexistent"])},
        )

        assert resp.status_code == 200

    def test_missing_file(self, client: TestClient) -> None:
        resp = client.post("/api/filter-excel", data={"fields": json.dumps(["Name"])})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No file uploaded", "kind": "input_missing"}

    @pytest.mark.parametrize("fields", [None, "[]", "not json", '{"Name": 1}'])
    def test_missing_or_bad_fields(self, client: TestClient, sales_xlsx: bytes, fields) -> None:
        data = {} if fields is None else {"fields": fields}

        resp = client.post("/api/filter-excel", files=_upload(sales_xlsx), data=data)

        assert resp.status_code == 400
        assert resp.json()["kind"] == "input_missing"

    def test_unreadable_workbook(self, client: TestClient) -> None:
        resp = client.post(
            "/api/filter-excel",
            files=_upload(b"this is not a spreadsheet"),
            data={"fields": json.dumps(["Name"])},
        )

        assert resp.status_code == 400
        assert resp.json()["kind"] == "parse_error"

    def test_corrupt_sheet_stream_is_parse_error(
        self, client: TestClient, corrupt_sales_xlsx: bytes
    ) -> None:
        resp = client.post(
            "/api/filter-excel",
            files=_upload(corrupt_sales_xlsx),
            data={"fields": json.dumps(["Name"])},
        )

        assert resp.status_code == 400
        assert resp.json()["kind"] == "parse_error"

    def test_non_ascii_filename(self, client: TestClient, sales_xlsx: bytes) -> None:
        resp = client.post(
            "/api/filter-excel",
            files=_upload(sales_xlsx, name="数据.xlsx"),
            data={"fields": json.dumps(["Name"])},
        )

        assert resp.status_code == 200
        disposition = resp.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="filtered_')
        assert disposition.endswith("filename*=UTF-8''filtered_%E6%95%B0%E6%8D%AE.xlsx")

    def test_missing_header_row(self, client: TestClient, make_xlsx) -> None:
        resp = client.post(
            "/api/filter-excel",
            files=_upload(make_xlsx([])),
            data={"fields": json.dumps(["Name"])},
        )

        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation_error"

    def test_collapsed_errors_use_single_message(self, make_xlsx) -> None:
        client = _client(collapse_errors=True)

        resp = client.post(
            "/api/filter-excel",
            files=_upload(make_xlsx([])),
            data={"fields": json.dumps(["Name"])},
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing file or fields"}

    def test_upload_size_limit(self, sales_xlsx: bytes) -> None:
        client = _client(max_upload_bytes=16)

        resp = client.post(
            "/api/filter-excel",
            files=_upload(sales_xlsx),
            data={"fields": json.dumps(["Name"])},
        )

        assert resp.status_code == 400
        assert "upload limit" in resp.json()["error"]


class TestHeaders:
    def test_returns_headers(self, client: TestClient, make_xlsx) -> None:
        data = make_xlsx([["Name", None, "Amount"], ["Alice", 1, 2]])

        resp = client.post("/api/headers", files=_upload(data))

        assert resp.status_code == 200
        assert resp.json() == {"headers": ["Name", "", "Amount"]}

    def test_unreadable_file_notice(self, client: TestClient) -> None:
        resp = client.post("/api/headers", files=_upload(b"nope"))

        assert resp.status_code == 400
        assert resp.json()["error"] == "Could not read the file. Is it a valid xlsx file?"

    def test_missing_file(self, client: TestClient) -> None:
        resp = client.post("/api/headers")

        assert resp.status_code == 400
        assert resp.json()["kind"] == "input_missing"


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": __version__}
