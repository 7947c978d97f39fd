"""
criteria.py

Versioned, static evaluation criteria.

Criteria are picked once per deployment (AUTOEVAL_CRITERIA_VERSION) and never
overridden per call; historical grades are only comparable under the same
version. Bump the version for any change to these constants.
"""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from autoeval.core.eval_schemas import Grade


class QualityRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_file_size_bytes: int = Field(ge=0)
    min_content_length_by_file: Dict[str, int] = Field(default_factory=dict)
    # Case-sensitive substrings
    error_signatures: List[str] = Field(default_factory=list)
    # Any one keyword satisfies the file (case-insensitive)
    required_elements_by_file: Dict[str, List[str]] = Field(default_factory=dict)
    structured_data_extensions: List[str] = Field(default_factory=lambda: [".json"])


class GradeThreshold(BaseModel):
    """
    One rung of the ordinal classifier.

    combine="all" -> completeness AND quality must clear their minimums
    combine="any" -> either dimension alone qualifies
    """

    model_config = ConfigDict(frozen=True)

    grade: Grade
    min_completeness: float = Field(ge=0.0, le=1.0)
    min_quality: float = Field(ge=0.0, le=1.0)
    allow_errors: bool
    combine: Literal["all", "any"] = "all"
    confidence_factor: float = Field(ge=0.0, le=1.0)
    # min(c, q) when True, max(c, q) otherwise
    confidence_from_weaker: bool = True


class EvaluationCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    mandatory_core_files: List[str]
    primary_entry_file: str
    tech_stack_expected_files: Dict[str, List[str]] = Field(default_factory=dict)
    quality_rules: QualityRules
    # Ordered, first match wins; the last entry is the fallback
    grade_thresholds: List[GradeThreshold]
    # Extra files the directory loader reads besides the mandatory set
    loader_extra_files: List[str] = Field(default_factory=list)

    @property
    def files_to_load(self) -> List[str]:
        seen: List[str] = []
        for name in [*self.mandatory_core_files, self.primary_entry_file, *self.loader_extra_files]:
            if name not in seen:
                seen.append(name)
        return seen


DEFAULT_CRITERIA = EvaluationCriteria(
    version="1.0",
    mandatory_core_files=[
        "reflection.md",
        "requirements.md",
        "work_log.md",
        "session-log.json",
        "gemini-feedback.txt",
    ],
    primary_entry_file="index.html",
    tech_stack_expected_files={
        "JavaScript": ["script.js", "index.html"],
        "React": ["src/App.js", "src/index.js", "public/index.html"],
        "Vue.js": ["src/App.vue", "src/main.js", "public/index.html"],
        "Python": ["main.py", "requirements.txt"],
        "CSS": ["style.css", "styles.css"],
        "TypeScript": ["script.ts", "index.html"],
        "Node.js": ["package.json", "server.js"],
    },
    quality_rules=QualityRules(
        min_file_size_bytes=10,
        min_content_length_by_file={
            "reflection.md": 100,
            "requirements.md": 50,
            "work_log.md": 50,
            "script.js": 50,
        },
        error_signatures=["ERROR", "FAILED", "Exception", "Traceback", "SyntaxError", "TypeError"],
        required_elements_by_file={
            "reflection.md": ["reflection", "improvement", "learned", "challenge"],
            "requirements.md": ["-", "*", "1.", "2."],
            "script.js": ["function", "const", "let", "var"],
            "index.html": ["<html>", "<head>", "<body>"],
        },
        structured_data_extensions=[".json"],
    ),
    grade_thresholds=[
        GradeThreshold(
            grade=Grade.COMPLETE, min_completeness=0.95, min_quality=0.90,
            allow_errors=False, confidence_factor=1.0,
        ),
        GradeThreshold(
            grade=Grade.GOOD, min_completeness=0.80, min_quality=0.70,
            allow_errors=False, confidence_factor=0.9,
        ),
        GradeThreshold(
            grade=Grade.INSUFFICIENT, min_completeness=0.50, min_quality=0.40,
            allow_errors=True, combine="any",
            confidence_factor=0.6, confidence_from_weaker=False,
        ),
        GradeThreshold(
            grade=Grade.FAILURE, min_completeness=0.0, min_quality=0.0,
            allow_errors=True, confidence_factor=0.3, confidence_from_weaker=False,
        ),
    ],
    loader_extra_files=["script.js", "style.css"],
)


CRITERIA_REGISTRY: Dict[str, EvaluationCriteria] = {
    DEFAULT_CRITERIA.version: DEFAULT_CRITERIA,
}


def get_criteria(version: str = DEFAULT_CRITERIA.version) -> EvaluationCriteria:
    try:
        return CRITERIA_REGISTRY[version]
    except KeyError:
        raise ValueError(
            f"Unknown criteria version {version!r}. Known: {sorted(CRITERIA_REGISTRY)}"
        ) from None
