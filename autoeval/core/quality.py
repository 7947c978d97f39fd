from __future__ import annotations

import json
from typing import List

from autoeval.core.criteria import QualityRules
from autoeval.core.errors import MalformedStructuredFile
from autoeval.core.eval_schemas import ArtifactBundle, ErrorFinding, FileRecord, QualityResult

ERROR_PENALTY = 0.3
CONTEXT_CHARS = 100


def _size_of(record: FileRecord) -> int:
    if record.size is not None:
        return record.size
    return len((record.content or "").encode("utf-8"))


def parse_structured(file_name: str, content: str) -> None:
    try:
        json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedStructuredFile(file_name, e.msg) from e
    except (ValueError, RecursionError) as e:
        raise MalformedStructuredFile(file_name, str(e) or type(e).__name__) from e


def extract_error_context(content: str, signature: str) -> str:
    """First line containing the signature, stripped and cut to 100 chars."""
    for line in content.split("\n"):
        if signature in line:
            return line.strip()[:CONTEXT_CHARS]
    return ""


def evaluate_quality(bundle: ArtifactBundle, rules: QualityRules) -> QualityResult:
    """
    Level 2: are the files that exist any good?

    Missing files are skipped entirely here; completeness already charges for
    them. Error signatures are case-sensitive substrings, so prose that merely
    mentions "Exception" still counts as an error.
    """
    files = bundle.files

    healthy = 0
    health_total = 0
    health_issues: List[str] = []

    for name, record in files.items():
        if not record.exists:
            continue

        health_total += 1
        size = _size_of(record)
        if size >= rules.min_file_size_bytes:
            healthy += 1
        else:
            health_issues.append(f"{name}: too small ({size} bytes)")

        if record.content and name.endswith(tuple(rules.structured_data_extensions)):
            health_total += 1
            try:
                parse_structured(name, record.content)
                healthy += 1
            except MalformedStructuredFile as e:
                health_issues.append(str(e))

    passed = 0
    content_total = 0
    content_issues: List[str] = []

    for name, min_length in rules.min_content_length_by_file.items():
        record = files.get(name)
        if not (record and record.exists and record.content):
            continue
        content_total += 1
        length = len(record.content)
        if length >= min_length:
            passed += 1
        else:
            content_issues.append(f"{name}: content too short ({length}/{min_length} chars)")

    for name, keywords in rules.required_elements_by_file.items():
        record = files.get(name)
        if not (record and record.exists and record.content):
            continue
        content_total += 1
        lowered = record.content.lower()
        if any(keyword.lower() in lowered for keyword in keywords):
            passed += 1
        else:
            content_issues.append(f"{name}: missing required elements")

    findings: List[ErrorFinding] = []
    for name, record in files.items():
        if not (record.exists and record.content):
            continue
        for signature in rules.error_signatures:
            if signature in record.content:
                findings.append(
                    ErrorFinding(
                        file=name,
                        signature=signature,
                        context=extract_error_context(record.content, signature),
                    )
                )

    health_score = healthy / health_total if health_total > 0 else 0.0
    content_score = passed / content_total if content_total > 0 else 0.0
    errors_found = bool(findings)
    error_penalty = ERROR_PENALTY if errors_found else 0.0

    return QualityResult(
        file_health_healthy=healthy,
        file_health_total=health_total,
        file_health_issues=health_issues,
        content_quality_passed=passed,
        content_quality_total=content_total,
        content_quality_issues=content_issues,
        errors_found=errors_found,
        error_count=len(findings),
        error_details=findings,
        health_score=health_score,
        content_score=content_score,
        error_penalty=error_penalty,
        score=max(0.0, (health_score + content_score) / 2 - error_penalty),
    )
