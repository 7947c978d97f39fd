from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from autoeval.core.criteria import DEFAULT_CRITERIA, EvaluationCriteria
from autoeval.core.errors import BundleUnavailable
from autoeval.core.eval_schemas import ArtifactBundle, FileRecord
from autoeval.infra.logging import log_event


def list_bundle_files(bundle_dir: Path) -> List[Path]:
    return sorted(p for p in bundle_dir.rglob("*") if p.is_file())


def read_file_record(path: Path) -> FileRecord:
    if not path.is_file():
        return FileRecord(exists=False)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
        stat = path.stat()
    except OSError as e:
        return FileRecord(exists=False, error=str(e))

    modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
    return FileRecord(
        exists=True,
        content=content,
        size=stat.st_size,
        last_modified=modified.replace(microsecond=0).isoformat().replace("+00:00", "Z"),
    )


def load_bundle(location: str, criteria: EvaluationCriteria = DEFAULT_CRITERIA) -> ArtifactBundle:
    """
    Materialize one bundle directory in memory.

    Only the files the criteria care about are read; everything else is
    listed by relative name so tech detection and name-drift matching can
    still see it.
    """
    bundle_dir = Path(location)
    if not bundle_dir.is_dir():
        raise BundleUnavailable(f"Bundle directory not found: {bundle_dir}")

    try:
        all_paths = list_bundle_files(bundle_dir)
    except OSError as e:
        raise BundleUnavailable(f"Cannot list bundle directory {bundle_dir}: {e}") from e

    files: Dict[str, FileRecord] = {
        name: read_file_record(bundle_dir / name) for name in criteria.files_to_load
    }

    total_size = 0
    for p in all_paths:
        try:
            total_size += p.stat().st_size
        except OSError:
            continue

    bundle = ArtifactBundle(
        location=str(bundle_dir),
        files=files,
        all_files=[p.relative_to(bundle_dir).as_posix() for p in all_paths],
        file_count=len(all_paths),
        total_size=total_size,
    )

    log_event(
        "bundle_loaded",
        location=bundle.location,
        file_count=bundle.file_count,
        loaded=sum(1 for r in files.values() if r.exists),
    )
    return bundle
