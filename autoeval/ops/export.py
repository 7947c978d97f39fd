from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from openpyxl import Workbook

from autoeval.core.errors import ExportError
from autoeval.core.eval_schemas import EvaluationRecord, StatisticsReport, now_iso_utc
from autoeval.core.statistics import aggregate_statistics
from autoeval.infra.logging import log_event

SHEET = "Evaluations"
HEADERS = [
    "timestamp",
    "producer_id",
    "bundle_id",
    "version",
    "grade",
    "overall_score",
    "completeness_score",
    "quality_score",
    "has_errors",
    "confidence",
    "error",
]


def export_item(record: EvaluationRecord, *, include_details: bool = True) -> Dict[str, Any]:
    """Flat, line-friendly view of one record."""
    item: Dict[str, Any] = {
        "timestamp": record.evaluated_at,
        "producerId": record.producer_id,
        "bundleId": record.bundle_id,
        "version": record.version,
        "criteriaVersion": record.criteria_version,
        "evaluation": {
            "grade": record.grade.value,
            "overallScore": record.overall_score,
            "completenessScore": record.completeness_score,
            "qualityScore": record.quality_score,
            "hasErrors": record.has_errors,
            "confidence": record.confidence,
        },
    }
    if record.error:
        item["error"] = record.error

    if include_details:
        item["details"] = {
            "completeness": record.completeness.model_dump(mode="json") if record.completeness else None,
            "quality": record.quality.model_dump(mode="json") if record.quality else None,
            "recommendations": [r.model_dump(mode="json") for r in record.recommendations],
        }
    return item


def _write_text(path: Path, text: str, fmt: str, count: int) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        log_event("export_failed", path=str(path), format=fmt, error=str(e))
        raise ExportError(f"Cannot write {fmt} export to {path}: {e}") from e

    log_event("export_complete", path=str(path), format=fmt, count=count)
    return path


def export_jsonl(
    records: Sequence[EvaluationRecord],
    path: Path,
    *,
    include_details: bool = True,
) -> Path:
    lines = [
        json.dumps(export_item(r, include_details=include_details), ensure_ascii=False)
        for r in records
    ]
    text = "\n".join(lines) + ("\n" if lines else "")
    return _write_text(Path(path), text, "jsonl", len(records))


def build_document(
    records: Sequence[EvaluationRecord],
    *,
    include_details: bool = True,
    include_statistics: bool = True,
    statistics: Optional[StatisticsReport] = None,
) -> Dict[str, Any]:
    criteria_versions = sorted({r.criteria_version for r in records})

    stats: Optional[Dict[str, Any]] = None
    if include_statistics:
        report = statistics if statistics is not None else aggregate_statistics(records)
        stats = report.model_dump(mode="json")

    return {
        "metadata": {
            "exportedAt": now_iso_utc(),
            "totalEvaluations": len(records),
            "criteriaVersions": criteria_versions,
            "tool": "autoeval.ops.export",
        },
        "evaluations": [export_item(r, include_details=include_details) for r in records],
        "statistics": stats,
    }


def export_document(
    records: Sequence[EvaluationRecord],
    path: Path,
    *,
    include_details: bool = True,
    include_statistics: bool = True,
) -> Path:
    doc = build_document(
        records,
        include_details=include_details,
        include_statistics=include_statistics,
    )
    text = json.dumps(doc, indent=2, ensure_ascii=False)
    return _write_text(Path(path), text, "json", len(records))


def export_xlsx(records: Sequence[EvaluationRecord], path: Path) -> Path:
    path = Path(path)
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET
    ws.append(HEADERS)

    for r in records:
        ws.append([
            r.evaluated_at,
            r.producer_id,
            r.bundle_id,
            r.version,
            r.grade.value,
            r.overall_score,
            r.completeness_score,
            r.quality_score,
            r.has_errors,
            r.confidence,
            r.error or "",
        ])

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
    except OSError as e:
        log_event("export_failed", path=str(path), format="xlsx", error=str(e))
        raise ExportError(f"Cannot write xlsx export to {path}: {e}") from e

    log_event("export_complete", path=str(path), format="xlsx", count=len(records))
    return path
