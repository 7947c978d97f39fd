from __future__ import annotations

import json
import re
from pathlib import PurePath
from typing import Any, Callable, Optional

from autoeval.adapters.file_bundle import load_bundle
from autoeval.core.completeness import evaluate_completeness
from autoeval.core.criteria import DEFAULT_CRITERIA, EvaluationCriteria
from autoeval.core.errors import BundleUnavailable, InternalEvaluationError
from autoeval.core.eval_schemas import ArtifactBundle, EvaluationRecord, Grade
from autoeval.core.grading import classify_grade
from autoeval.core.quality import evaluate_quality
from autoeval.core.recommendations import generate_recommendations
from autoeval.core.tech_stack import detect_tech_stack
from autoeval.infra.ids import bundle_digest
from autoeval.infra.logging import log_event

BundleLoader = Callable[[str, EvaluationCriteria], ArtifactBundle]

SESSION_LOG = "session-log.json"
WORK_LOG = "work_log.md"
UNKNOWN = "unknown"

_VERSION_RE = re.compile(r"v\d+\.\d+")


def bundle_id_for(location: str) -> str:
    return PurePath(str(location)).name or str(location)


def extract_producer_id(bundle: ArtifactBundle) -> str:
    """
    Explicit producer id wins; otherwise the session log's
    meta.environment.hostname, then meta.environment.user.
    """
    if bundle.producer_id:
        return bundle.producer_id

    record = bundle.files.get(SESSION_LOG)
    if not (record and record.exists and record.content):
        return UNKNOWN
    try:
        session = json.loads(record.content)
    except (ValueError, RecursionError):
        return UNKNOWN

    env: Any = session.get("meta", {}) if isinstance(session, dict) else {}
    env = env.get("environment", {}) if isinstance(env, dict) else {}
    if not isinstance(env, dict):
        return UNKNOWN
    return str(env.get("hostname") or env.get("user") or UNKNOWN)


def extract_version(bundle: ArtifactBundle) -> str:
    record = bundle.files.get(WORK_LOG)
    if record and record.exists and record.content:
        m = _VERSION_RE.search(record.content)
        if m:
            return m.group(0)
    return UNKNOWN


class ArtifactEvaluator:
    """
    Reason:
    - One entry point that runs detect -> completeness -> quality -> grade ->
      recommendations and returns a single immutable record.
    Benefit:
    - Criteria are bound once at construction, so every record from this
      evaluator is comparable; there is no per-call override.
    """

    def __init__(self, criteria: EvaluationCriteria = DEFAULT_CRITERIA) -> None:
        self.criteria = criteria

    def evaluate_bundle(self, bundle: ArtifactBundle) -> EvaluationRecord:
        """
        Deterministic evaluation (no I/O, no LLM).
        Raises on unexpected faults; use evaluate_safely() at batch boundaries.
        """
        tech_stack = detect_tech_stack(bundle.files, bundle.all_files)

        completeness = evaluate_completeness(bundle, self.criteria, tech_stack)
        quality = evaluate_quality(bundle, self.criteria.quality_rules)

        decision = classify_grade(
            completeness.score,
            quality.score,
            quality.errors_found,
            self.criteria.grade_thresholds,
        )

        record = EvaluationRecord(
            producer_id=extract_producer_id(bundle),
            bundle_id=bundle_id_for(bundle.location),
            location=bundle.location,
            version=extract_version(bundle),
            criteria_version=self.criteria.version,
            bundle_digest=bundle_digest(bundle.files),
            tech_stack=sorted(tech_stack),
            file_count=bundle.file_count,
            total_size=bundle.total_size,
            completeness=completeness,
            quality=quality,
            grade=decision.grade,
            overall_score=decision.overall_score,
            confidence=decision.confidence,
            recommendations=generate_recommendations(completeness, quality),
        )

        log_event(
            "evaluation_complete",
            bundle_id=record.bundle_id,
            producer_id=record.producer_id,
            grade=record.grade.value,
            completeness_score=completeness.score,
            quality_score=quality.score,
        )
        return record

    def evaluate_safely(self, bundle: ArtifactBundle) -> EvaluationRecord:
        try:
            return self.evaluate_bundle(bundle)
        except Exception as e:
            err = InternalEvaluationError(f"{type(e).__name__}: {e}")
            return self.failure_record(bundle.location, err, producer_id=bundle.producer_id)

    def evaluate_location(
        self,
        location: str,
        loader: Optional[BundleLoader] = None,
        producer_id: Optional[str] = None,
    ) -> EvaluationRecord:
        """
        Load + evaluate one bundle. Never raises: an unreadable location or
        any internal fault becomes a synthetic failure record, so one bad
        bundle cannot abort a batch.
        """
        if loader is None:
            loader = load_bundle

        try:
            bundle = loader(str(location), self.criteria)
        except BundleUnavailable as e:
            return self.failure_record(location, e, producer_id=producer_id)
        except Exception as e:
            err = InternalEvaluationError(f"{type(e).__name__}: {e}")
            return self.failure_record(location, err, producer_id=producer_id)

        if producer_id and not bundle.producer_id:
            bundle = bundle.model_copy(update={"producer_id": producer_id})
        return self.evaluate_safely(bundle)

    def failure_record(
        self,
        location: str,
        error: Exception,
        producer_id: Optional[str] = None,
    ) -> EvaluationRecord:
        log_event(
            "evaluation_failed",
            location=str(location),
            error_type=type(error).__name__,
            error=str(error),
        )
        return EvaluationRecord(
            producer_id=producer_id or UNKNOWN,
            bundle_id=bundle_id_for(location),
            location=str(location),
            criteria_version=self.criteria.version,
            grade=Grade.FAILURE,
            overall_score=0.0,
            confidence=0.0,
            error=f"{type(error).__name__}: {error}",
        )
