"""
eval_schemas.py

Typed contracts for the artifact evaluation pipeline.

Design goals:
- Every result is built fully populated by one constructor (no partial dicts)
- Scores are validated to [0, 1] at construction
- Records are frozen once produced and serialize straight to JSON
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def now_iso_utc() -> str:
    """ISO-8601 timestamp in UTC with 'Z' suffix."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


# ----------------------------
# Grade (ranked, not string-compared)
# ----------------------------

class Grade(str, Enum):
    FAILURE = "failure"
    INSUFFICIENT = "insufficient"
    GOOD = "good"
    COMPLETE = "complete"

    @property
    def rank(self) -> int:
        return _GRADE_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Grade):
            return NotImplemented
        return self.rank >= other.rank


_GRADE_RANK = {
    Grade.FAILURE: 0,
    Grade.INSUFFICIENT: 1,
    Grade.GOOD: 2,
    Grade.COMPLETE: 3,
}

GRADE_ORDER: List[Grade] = sorted(Grade, key=lambda g: g.rank)


def empty_grade_distribution() -> Dict[str, int]:
    return {g.value: 0 for g in GRADE_ORDER}


# ----------------------------
# Input
# ----------------------------

class FileRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    exists: bool
    content: Optional[str] = None
    size: Optional[int] = None
    last_modified: Optional[str] = None
    error: Optional[str] = None


class ArtifactBundle(BaseModel):
    """
    One generation run's output, already materialized in memory.

    `files` holds the files the loader read (or probed and found missing);
    `all_files` lists every relative filename in the bundle, loaded or not.
    """

    model_config = ConfigDict(frozen=True)

    location: str
    producer_id: Optional[str] = None
    files: Dict[str, FileRecord] = Field(default_factory=dict)
    all_files: List[str] = Field(default_factory=list)
    file_count: int = 0
    total_size: int = 0


# ----------------------------
# Evaluator results
# ----------------------------

class CompletenessResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    mandatory_expected: int
    mandatory_found: int
    mandatory_missing: List[str] = Field(default_factory=list)
    app_expected: int
    app_found: int
    app_missing: List[str] = Field(default_factory=list)
    tech_stack: List[str] = Field(default_factory=list)

    mandatory_score: float = Field(ge=0.0, le=1.0)
    app_score: float = Field(ge=0.0, le=1.0)
    score: float = Field(ge=0.0, le=1.0)


class ErrorFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str
    signature: str
    context: str


class QualityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_health_healthy: int
    file_health_total: int
    file_health_issues: List[str] = Field(default_factory=list)

    content_quality_passed: int
    content_quality_total: int
    content_quality_issues: List[str] = Field(default_factory=list)

    errors_found: bool
    error_count: int
    error_details: List[ErrorFinding] = Field(default_factory=list)

    health_score: float = Field(ge=0.0, le=1.0)
    content_score: float = Field(ge=0.0, le=1.0)
    error_penalty: float = Field(ge=0.0, le=1.0)
    score: float = Field(ge=0.0, le=1.0)


class GradeDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    grade: Grade
    overall_score: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    priority: Literal["high", "medium"]
    category: Literal["completeness", "quality"]
    issue: str
    suggestion: str
    impact: Literal["critical", "moderate"]


# ----------------------------
# Output
# ----------------------------

class EvaluationRecord(BaseModel):
    """
    Reason:
    - One immutable object per evaluated bundle.
    Benefit:
    - Safe to collect across threads, persist, export and aggregate.

    `completeness` / `quality` are None only for synthetic failure records,
    which carry `error` instead.
    """

    model_config = ConfigDict(frozen=True)

    producer_id: str = "unknown"
    bundle_id: str
    location: str
    version: str = "unknown"
    evaluated_at: str = Field(default_factory=now_iso_utc)
    criteria_version: str
    bundle_digest: Optional[str] = None

    tech_stack: List[str] = Field(default_factory=list)
    file_count: int = 0
    total_size: int = 0

    completeness: Optional[CompletenessResult] = None
    quality: Optional[QualityResult] = None

    grade: Grade
    overall_score: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    recommendations: List[Recommendation] = Field(default_factory=list)

    error: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.quality and self.quality.errors_found)

    @property
    def completeness_score(self) -> float:
        return self.completeness.score if self.completeness else 0.0

    @property
    def quality_score(self) -> float:
        return self.quality.score if self.quality else 0.0


class AverageScores(BaseModel):
    completeness: float = Field(default=0.0, ge=0.0, le=1.0)
    quality: float = Field(default=0.0, ge=0.0, le=1.0)
    overall: float = Field(default=0.0, ge=0.0, le=1.0)


class ProducerStatistics(BaseModel):
    producer_id: str
    total_evaluations: int
    grade_distribution: Dict[str, int] = Field(default_factory=empty_grade_distribution)
    average_scores: AverageScores = Field(default_factory=AverageScores)
    success_rate: float = Field(ge=0.0, le=1.0)
    last_activity: Optional[str] = None


class StatisticsReport(BaseModel):
    """
    Folded view over many EvaluationRecords.

    `has_data` is False for an empty input; rates are then None rather than NaN.
    """

    generated_at: str = Field(default_factory=now_iso_utc)
    has_data: bool
    total_evaluations: int = 0
    unique_producers: int = 0
    grade_distribution: Dict[str, int] = Field(default_factory=empty_grade_distribution)
    average_success_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    last_evaluation: Optional[str] = None
    producers: Dict[str, ProducerStatistics] = Field(default_factory=dict)
