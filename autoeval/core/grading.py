from __future__ import annotations

from typing import Sequence

from autoeval.core.criteria import GradeThreshold
from autoeval.core.eval_schemas import Grade, GradeDecision

COMPLETENESS_WEIGHT = 0.6
QUALITY_WEIGHT = 0.4


def clamp01(x: float) -> float:
    return 0.0 if x < 0 else 1.0 if x > 1 else x


def overall_score(completeness: float, quality: float) -> float:
    return COMPLETENESS_WEIGHT * completeness + QUALITY_WEIGHT * quality


def _matches(rung: GradeThreshold, completeness: float, quality: float, has_errors: bool) -> bool:
    if has_errors and not rung.allow_errors:
        return False
    c_ok = completeness >= rung.min_completeness
    q_ok = quality >= rung.min_quality
    return (c_ok and q_ok) if rung.combine == "all" else (c_ok or q_ok)


def classify_grade(
    completeness: float,
    quality: float,
    has_errors: bool,
    thresholds: Sequence[GradeThreshold],
) -> GradeDecision:
    """
    Level 3: fuse both scores into an ordinal grade.

    Rungs are tried in order and the first match wins; failure is the
    fallback when none match. The overall score is computed independently of
    the grade, so a record can show a high overall score next to an
    "insufficient" grade (e.g. perfect files with one error signature).
    """
    decided = None
    for rung in thresholds:
        if _matches(rung, completeness, quality, has_errors):
            decided = rung
            break

    if decided is None:
        return GradeDecision(
            grade=Grade.FAILURE,
            overall_score=overall_score(completeness, quality),
            confidence=0.0,
        )

    basis = min(completeness, quality) if decided.confidence_from_weaker else max(completeness, quality)

    return GradeDecision(
        grade=decided.grade,
        overall_score=overall_score(completeness, quality),
        confidence=clamp01(basis * decided.confidence_factor),
    )
