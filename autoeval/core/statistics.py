from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from autoeval.core.eval_schemas import (
    AverageScores,
    EvaluationRecord,
    ProducerStatistics,
    StatisticsReport,
    empty_grade_distribution,
)

UNKNOWN_PRODUCER = "unknown"


class _ProducerFold:
    def __init__(self, producer_id: str) -> None:
        self.producer_id = producer_id
        self.total = 0
        self.grades = empty_grade_distribution()
        self.completeness_sum = 0.0
        self.quality_sum = 0.0
        self.overall_sum = 0.0
        self.last_activity: Optional[str] = None

    def add(self, record: EvaluationRecord) -> None:
        self.total += 1
        self.grades[record.grade.value] += 1
        self.completeness_sum += record.completeness_score
        self.quality_sum += record.quality_score
        self.overall_sum += record.overall_score
        if self.last_activity is None or record.evaluated_at > self.last_activity:
            self.last_activity = record.evaluated_at

    def finish(self) -> ProducerStatistics:
        n = self.total
        return ProducerStatistics(
            producer_id=self.producer_id,
            total_evaluations=n,
            grade_distribution=self.grades,
            average_scores=AverageScores(
                completeness=self.completeness_sum / n,
                quality=self.quality_sum / n,
                overall=self.overall_sum / n,
            ),
            success_rate=(self.grades["complete"] + self.grades["good"]) / n,
            last_activity=self.last_activity,
        )


def aggregate_statistics(records: Iterable[EvaluationRecord]) -> StatisticsReport:
    """
    Fold evaluation records into per-producer and global statistics.

    average_success_rate is the plain mean of per-producer success rates:
    a producer with 2 evaluations weighs as much as one with 200. This is
    intentional for comparing producers, not a pooled rate.

    Empty input -> has_data=False and None rates (never NaN).
    """
    folds: Dict[str, _ProducerFold] = {}
    grade_distribution = empty_grade_distribution()
    total = 0
    last_evaluation: Optional[str] = None

    for record in records:
        producer_id = record.producer_id or UNKNOWN_PRODUCER
        fold = folds.get(producer_id)
        if fold is None:
            fold = folds[producer_id] = _ProducerFold(producer_id)
        fold.add(record)

        total += 1
        grade_distribution[record.grade.value] += 1
        if last_evaluation is None or record.evaluated_at > last_evaluation:
            last_evaluation = record.evaluated_at

    if total == 0:
        return StatisticsReport(has_data=False)

    producers = {pid: fold.finish() for pid, fold in sorted(folds.items())}
    rates: List[float] = [p.success_rate for p in producers.values()]

    return StatisticsReport(
        has_data=True,
        total_evaluations=total,
        unique_producers=len(producers),
        grade_distribution=grade_distribution,
        average_success_rate=sum(rates) / len(rates),
        last_evaluation=last_evaluation,
        producers=producers,
    )
