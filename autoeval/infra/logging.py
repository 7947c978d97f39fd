import json
import sys
import time
from typing import Any, Dict


def log_event(event: str, **fields: Any) -> None:
    """
    Reason:
    - Batch evaluations interleave many bundles; one JSON line per event stays greppable.
    Benefit:
    - Filter by bundle_id, producer_id, grade, error_type, etc.
    - Goes to stderr so `--json` output on stdout stays machine-readable.
    """
    payload: Dict[str, Any] = {
        "ts": time.time(),
        "event": event,
        **fields,
    }
    print(json.dumps(payload, ensure_ascii=False, default=str), file=sys.stderr)
