from __future__ import annotations

from typing import List

from autoeval.core.eval_schemas import CompletenessResult, QualityResult, Recommendation


def generate_recommendations(
    completeness: CompletenessResult,
    quality: QualityResult,
) -> List[Recommendation]:
    """
    Remediation items in a fixed order (not sorted by priority):
    missing mandatory files, missing app files, error signatures, thin content.
    Fixtures depend on this order.
    """
    recs: List[Recommendation] = []

    if completeness.mandatory_missing:
        recs.append(
            Recommendation(
                priority="high",
                category="completeness",
                issue="Missing mandatory files",
                suggestion=f"Generate the following files: {', '.join(completeness.mandatory_missing)}",
                impact="critical",
            )
        )

    if completeness.app_missing:
        recs.append(
            Recommendation(
                priority="medium",
                category="completeness",
                issue="Missing application files",
                suggestion=f"Add files expected for the detected tech stack: {', '.join(completeness.app_missing)}",
                impact="moderate",
            )
        )

    if quality.errors_found:
        recs.append(
            Recommendation(
                priority="high",
                category="quality",
                issue="Error signatures detected",
                suggestion=f"Fix the {quality.error_count} error(s) left in generated output",
                impact="critical",
            )
        )

    if quality.content_quality_issues:
        recs.append(
            Recommendation(
                priority="medium",
                category="quality",
                issue="Content quality",
                suggestion="Flesh out file contents (minimum length, required elements)",
                impact="moderate",
            )
        )

    return recs
