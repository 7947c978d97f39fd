"""Tests for record export (JSON lines, JSON document, xlsx)."""

import json

import pytest
from openpyxl import load_workbook

from autoeval.core.errors import ExportError
from autoeval.ops.export import (
    HEADERS,
    SHEET,
    build_document,
    export_document,
    export_item,
    export_jsonl,
    export_xlsx,
)


@pytest.fixture
def records(evaluator, make_bundle, full_contents, script_with_type_error):
    contents = dict(full_contents)
    contents["script.js"] = script_with_type_error
    return [
        evaluator.evaluate_bundle(make_bundle(location="bundles/app-001")),
        evaluator.evaluate_bundle(make_bundle(contents, location="bundles/app-002")),
        evaluator.failure_record("bundles/app-003", OSError("unreadable")),
    ]


class TestExportItem:
    def test_keys(self, records) -> None:
        item = export_item(records[0])
        assert set(item) == {
            "timestamp", "producerId", "bundleId", "version", "criteriaVersion", "evaluation", "details",
        }
        assert item["evaluation"]["grade"] == "complete"
        assert item["evaluation"]["hasErrors"] is False
        assert item["details"]["recommendations"] == []

    def test_error_surfaces(self, records) -> None:
        item = export_item(records[2])
        assert item["error"] == "OSError: unreadable"
        assert item["details"]["completeness"] is None

    def test_without_details(self, records) -> None:
        assert "details" not in export_item(records[1], include_details=False)


class TestJsonl:
    def test_one_line_per_record(self, records, tmp_path) -> None:
        path = export_jsonl(records, tmp_path / "out" / "evals.jsonl")
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 3
        parsed = [json.loads(line) for line in lines]
        assert [p["bundleId"] for p in parsed] == ["app-001", "app-002", "app-003"]
        assert parsed[1]["evaluation"]["hasErrors"] is True

    def test_empty(self, tmp_path) -> None:
        path = export_jsonl([], tmp_path / "empty.jsonl")
        assert path.read_text(encoding="utf-8") == ""

    def test_unwritable_path(self, records, tmp_path) -> None:
        with pytest.raises(ExportError):
            export_jsonl(records, tmp_path)


class TestDocument:
    def test_metadata_and_statistics(self, records) -> None:
        doc = build_document(records)
        assert doc["metadata"]["totalEvaluations"] == 3
        assert doc["metadata"]["criteriaVersions"] == ["1.0"]
        assert len(doc["evaluations"]) == 3
        assert doc["statistics"]["has_data"] is True
        assert doc["statistics"]["total_evaluations"] == 3

    def test_without_statistics(self, records) -> None:
        assert build_document(records, include_statistics=False)["statistics"] is None

    def test_written_file(self, records, tmp_path) -> None:
        path = export_document(records, tmp_path / "evals.json", include_details=False)
        doc = json.loads(path.read_text(encoding="utf-8"))
        assert all("details" not in e for e in doc["evaluations"])


class TestXlsx:
    def test_rows(self, records, tmp_path) -> None:
        path = export_xlsx(records, tmp_path / "evals.xlsx")
        ws = load_workbook(path)[SHEET]
        rows = list(ws.iter_rows(values_only=True))
        assert list(rows[0]) == HEADERS
        assert len(rows) == 4
        assert rows[1][2] == "app-001"
        assert rows[1][4] == "complete"
        assert rows[3][4] == "failure"
        assert rows[3][10] == "OSError: unreadable"

    def test_unwritable_path(self, records, tmp_path) -> None:
        with pytest.raises(ExportError):
            export_xlsx(records, tmp_path)
