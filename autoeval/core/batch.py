from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

from autoeval.core.eval_schemas import EvaluationRecord
from autoeval.core.evaluator import ArtifactEvaluator, BundleLoader
from autoeval.infra.logging import log_event


def discover_bundles(root: str) -> List[str]:
    """Immediate subdirectories of root, sorted; each one is a bundle."""
    root_dir = Path(root)
    if not root_dir.is_dir():
        return []
    return [str(p) for p in sorted(root_dir.iterdir()) if p.is_dir()]


def evaluate_batch(
    locations: Sequence[str],
    evaluator: ArtifactEvaluator,
    *,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    loader: Optional[BundleLoader] = None,
) -> List[EvaluationRecord]:
    """
    Evaluate independent bundles on a thread pool.

    The calling thread is the only one that touches the result list; workers
    just return records. Cancellation is checked before a bundle starts,
    never mid-bundle; cancelled bundles produce no record. Results keep the
    input order.
    """
    if max_workers is None:
        max_workers = min(len(locations), os.cpu_count() or 4)
    max_workers = max(1, max_workers)

    log_event("batch_start", bundles=len(locations), max_workers=max_workers)

    def _run(location: str) -> Optional[EvaluationRecord]:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return evaluator.evaluate_location(location, loader=loader)

    results: List[EvaluationRecord] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures: List[Future] = [executor.submit(_run, loc) for loc in locations]
        for future in futures:
            record = future.result()
            if record is not None:
                results.append(record)

    skipped = len(locations) - len(results)
    if skipped:
        log_event("batch_cancelled", evaluated=len(results), skipped=skipped)

    log_event(
        "batch_complete",
        evaluated=len(results),
        failures=sum(1 for r in results if r.error),
    )
    return results
