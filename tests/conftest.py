from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from autoeval.core.criteria import DEFAULT_CRITERIA, EvaluationCriteria
from autoeval.core.eval_schemas import ArtifactBundle, FileRecord
from autoeval.core.evaluator import ArtifactEvaluator


# Contents avoid every error signature and every content-detection keyword,
# so a bundle built from them grades "complete" with only the HTML tag.
FULL_CONTENTS: dict[str, str] = {
    "reflection.md": (
        "# Reflection\n\n"
        "What I learned: keeping the layout simple paid off. The main challenge "
        "was balancing the grid on small screens; the next improvement is keyboard shortcuts.\n"
    ),
    "requirements.md": (
        "# Requirements\n\n"
        "- Show a daily todo list\n"
        "- Allow adding and removing items\n"
        "- Persist items in local storage\n"
    ),
    "work_log.md": (
        "# Work log v1.2\n\n"
        "1. Set up the project skeleton\n"
        "2. Built the list view\n"
        "3. Added storage and polish\n"
    ),
    "session-log.json": '{"meta": {"environment": {"hostname": "worker-a", "user": "gen"}}, "steps": 3}',
    "gemini-feedback.txt": "Layout is clean and the list view works well on mobile.\n",
    "index.html": (
        "<html>\n"
        "<head><title>Todo</title></head>\n"
        "<body><ul id=\"list\"></ul></body>\n"
        "</html>\n"
    ),
}

SCRIPT_WITH_TYPE_ERROR = (
    "const items = [];\n"
    "function add(item) {\n"
    "  // guards against TypeError when item is undefined\n"
    "  if (item) items.push(item);\n"
    "}\n"
)


def file_record(content: str | None) -> FileRecord:
    if content is None:
        return FileRecord(exists=False)
    return FileRecord(exists=True, content=content, size=len(content.encode("utf-8")))


BundleFactory = Callable[..., ArtifactBundle]


@pytest.fixture
def make_bundle() -> BundleFactory:
    def _make(
        contents: dict[str, str | None] | None = None,
        location: str = "bundles/app-001",
        producer_id: str | None = None,
        all_files: list[str] | None = None,
    ) -> ArtifactBundle:
        if contents is None:
            contents = dict(FULL_CONTENTS)
        files = {name: file_record(content) for name, content in contents.items()}
        existing = [n for n, c in contents.items() if c is not None]
        return ArtifactBundle(
            location=location,
            producer_id=producer_id,
            files=files,
            all_files=all_files if all_files is not None else sorted(existing),
            file_count=len(existing),
            total_size=sum(r.size or 0 for r in files.values()),
        )

    return _make


@pytest.fixture
def full_contents() -> dict[str, str | None]:
    return dict(FULL_CONTENTS)


@pytest.fixture
def script_with_type_error() -> str:
    return SCRIPT_WITH_TYPE_ERROR


@pytest.fixture
def criteria() -> EvaluationCriteria:
    return DEFAULT_CRITERIA


@pytest.fixture
def evaluator(criteria: EvaluationCriteria) -> ArtifactEvaluator:
    return ArtifactEvaluator(criteria)


@pytest.fixture
def bundle_dir(tmp_path: Path) -> Path:
    """A complete bundle written to disk."""
    root = tmp_path / "app-001"
    root.mkdir()
    for name, content in FULL_CONTENTS.items():
        (root / name).write_text(content, encoding="utf-8")
    return root
