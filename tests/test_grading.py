"""Tests for the grade classifier.

Covers:
- Each rung at and just below its boundary
- OR semantics of the insufficient rung ("any" combine)
- Confidence multipliers per grade
- Overall score computed independently of grade
- Monotonicity over a grid of inputs
- Ranked grade ordering
"""

import itertools

import pytest
from pydantic import ValidationError

from autoeval.core.criteria import GradeThreshold
from autoeval.core.eval_schemas import Grade
from autoeval.core.grading import classify_grade, overall_score


@pytest.fixture
def thresholds(criteria):
    return criteria.grade_thresholds


class TestRungs:
    def test_complete_at_boundary(self, thresholds) -> None:
        d = classify_grade(0.95, 0.90, False, thresholds)
        assert d.grade == Grade.COMPLETE
        assert d.confidence == pytest.approx(0.90)

    def test_errors_block_complete_and_good(self, thresholds) -> None:
        d = classify_grade(1.0, 1.0, True, thresholds)
        assert d.grade == Grade.INSUFFICIENT
        assert d.confidence == pytest.approx(0.6)

    def test_good(self, thresholds) -> None:
        d = classify_grade(0.94, 0.95, False, thresholds)
        assert d.grade == Grade.GOOD
        assert d.confidence == pytest.approx(0.94 * 0.9)

    def test_good_at_boundary(self, thresholds) -> None:
        assert classify_grade(0.80, 0.70, False, thresholds).grade == Grade.GOOD

    def test_insufficient_by_completeness_alone(self, thresholds) -> None:
        d = classify_grade(0.5, 0.0, False, thresholds)
        assert d.grade == Grade.INSUFFICIENT
        assert d.confidence == pytest.approx(0.5 * 0.6)

    def test_insufficient_by_quality_alone(self, thresholds) -> None:
        d = classify_grade(0.3, 0.4, False, thresholds)
        assert d.grade == Grade.INSUFFICIENT
        assert d.confidence == pytest.approx(0.4 * 0.6)

    def test_failure(self, thresholds) -> None:
        d = classify_grade(0.49, 0.39, True, thresholds)
        assert d.grade == Grade.FAILURE
        assert d.confidence == pytest.approx(0.49 * 0.3)

    def test_zero_inputs(self, thresholds) -> None:
        d = classify_grade(0.0, 0.0, False, thresholds)
        assert d.grade == Grade.FAILURE
        assert d.confidence == 0.0
        assert d.overall_score == 0.0


class TestCombine:
    def test_default_rungs(self, thresholds) -> None:
        assert [t.combine for t in thresholds] == ["all", "all", "any", "all"]

    def test_all_vs_any(self) -> None:
        rung = dict(grade=Grade.GOOD, min_completeness=0.8, min_quality=0.8,
                    allow_errors=False, confidence_factor=1.0)
        fallback = GradeThreshold(grade=Grade.FAILURE, min_completeness=0.0, min_quality=0.0,
                                  allow_errors=True, confidence_factor=0.3)
        strict = [GradeThreshold(**rung), fallback]
        loose = [GradeThreshold(combine="any", **rung), fallback]
        assert classify_grade(0.9, 0.1, False, strict).grade == Grade.FAILURE
        assert classify_grade(0.9, 0.1, False, loose).grade == Grade.GOOD

    def test_unknown_combine_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GradeThreshold(grade=Grade.GOOD, min_completeness=0.5, min_quality=0.5,
                           allow_errors=False, confidence_factor=1.0, combine="both")


class TestOverallScore:
    def test_formula(self) -> None:
        assert overall_score(0.5, 0.25) == 0.6 * 0.5 + 0.4 * 0.25

    def test_independent_of_grade(self, thresholds) -> None:
        """High overall score next to an insufficient grade is expected."""
        d = classify_grade(1.0, 0.7, True, thresholds)
        assert d.grade == Grade.INSUFFICIENT
        assert d.overall_score == pytest.approx(0.88)


class TestMonotonicity:
    def test_grade_monotonic_over_grid(self, thresholds) -> None:
        steps = [i / 10 for i in range(11)]
        points = list(itertools.product(steps, steps, [False, True]))
        decided = {p: classify_grade(p[0], p[1], p[2], thresholds).grade for p in points}

        for a, b in itertools.product(points, points):
            ca, qa, ea = a
            cb, qb, eb = b
            if ca >= cb and qa >= qb and (not ea or eb):
                assert decided[a] >= decided[b], (a, b)


class TestGradeOrder:
    def test_total_order(self) -> None:
        assert Grade.FAILURE < Grade.INSUFFICIENT < Grade.GOOD < Grade.COMPLETE

    def test_not_string_order(self) -> None:
        # alphabetically "good" < "insufficient"
        assert Grade.GOOD > Grade.INSUFFICIENT

    def test_sortable(self) -> None:
        grades = [Grade.GOOD, Grade.FAILURE, Grade.COMPLETE, Grade.INSUFFICIENT]
        assert sorted(grades) == [Grade.FAILURE, Grade.INSUFFICIENT, Grade.GOOD, Grade.COMPLETE]
