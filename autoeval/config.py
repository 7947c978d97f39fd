from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from autoeval.core.criteria import DEFAULT_CRITERIA, EvaluationCriteria, get_criteria


@dataclass(frozen=True)
class EvalConfig:
    # State
    data_dir: Path
    db_path: Path
    export_dir: Path

    # Batch
    max_workers: int | None

    # Criteria are a deployment setting, never a per-call override
    criteria_version: str

    @property
    def criteria(self) -> EvaluationCriteria:
        return get_criteria(self.criteria_version)


def load_config() -> EvalConfig:
    root = Path(os.getenv("AUTOEVAL_ROOT", str(Path.cwd())))

    # State
    data_dir = Path(os.getenv("AUTOEVAL_DATA_DIR", str(root / "data")))
    db_path = Path(os.getenv("AUTOEVAL_DB_PATH", str(data_dir / "autoeval.sqlite3")))
    export_dir = Path(os.getenv("AUTOEVAL_EXPORT_DIR", str(data_dir / "exports")))

    # Batch
    workers_raw = os.getenv("AUTOEVAL_MAX_WORKERS", "").strip()
    max_workers = int(workers_raw) if workers_raw else None

    criteria_version = (
        os.getenv("AUTOEVAL_CRITERIA_VERSION", DEFAULT_CRITERIA.version).strip()
        or DEFAULT_CRITERIA.version
    )

    return EvalConfig(
        data_dir=data_dir,
        db_path=db_path,
        export_dir=export_dir,
        max_workers=max_workers,
        criteria_version=criteria_version,
    )
