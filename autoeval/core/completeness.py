from __future__ import annotations

import posixpath
from typing import Iterable, List, Set

from autoeval.core.criteria import EvaluationCriteria
from autoeval.core.eval_schemas import ArtifactBundle, CompletenessResult

MANDATORY_WEIGHT = 0.7
APP_WEIGHT = 0.3

CANONICAL_STEMS = ("main", "app", "index")


def name_variations(file_name: str) -> List[str]:
    """
    Names that satisfy an expected app file.

    script.js -> script.js, scripts.js, main.js, app.js, index.js
    """
    stem, ext = posixpath.splitext(posixpath.basename(file_name))
    variants = [file_name, f"{stem}s{ext}"]
    variants.extend(f"{canonical}{ext}" for canonical in CANONICAL_STEMS)
    return variants


def existing_names(bundle: ArtifactBundle) -> Set[str]:
    names = {name for name, record in bundle.files.items() if record.exists}
    names.update(bundle.all_files)
    return names


def is_present(file_name: str, existing: Set[str]) -> bool:
    for variant in name_variations(file_name):
        if variant in existing:
            return True
        if any(variant in name for name in existing):
            return True
    return False


def expected_app_files(criteria: EvaluationCriteria, tech_stack: Iterable[str]) -> List[str]:
    expected = {criteria.primary_entry_file}
    for tag in tech_stack:
        expected.update(criteria.tech_stack_expected_files.get(tag, ()))
    return sorted(expected)


def _ratio(found: int, expected: int) -> float:
    return found / expected if expected > 0 else 1.0


def evaluate_completeness(
    bundle: ArtifactBundle,
    criteria: EvaluationCriteria,
    tech_stack: Iterable[str],
) -> CompletenessResult:
    """
    Level 1: are the files we expect actually there?

    Mandatory files are matched by exact name. App files tolerate naming
    drift (see name_variations) because generators rename entry points freely.
    """
    tags = sorted(tech_stack)

    mandatory = criteria.mandatory_core_files
    mandatory_missing = [
        name for name in mandatory
        if not (name in bundle.files and bundle.files[name].exists)
    ]
    mandatory_found = len(mandatory) - len(mandatory_missing)

    existing = existing_names(bundle)
    app_expected = expected_app_files(criteria, tags)
    app_missing = [name for name in app_expected if not is_present(name, existing)]
    app_found = len(app_expected) - len(app_missing)

    mandatory_score = _ratio(mandatory_found, len(mandatory))
    app_score = _ratio(app_found, len(app_expected))

    return CompletenessResult(
        mandatory_expected=len(mandatory),
        mandatory_found=mandatory_found,
        mandatory_missing=mandatory_missing,
        app_expected=len(app_expected),
        app_found=app_found,
        app_missing=app_missing,
        tech_stack=tags,
        mandatory_score=mandatory_score,
        app_score=app_score,
        score=MANDATORY_WEIGHT * mandatory_score + APP_WEIGHT * app_score,
    )
