import hashlib
import json
from typing import Any, Mapping


def _stable_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, ensure_ascii=False)


def bundle_digest(files: Mapping[str, Any]) -> str:
    """
    Reason:
    - Re-evaluations of the same bundle must be recognizable across runs.
    Benefit:
    - Same files -> same digest, so duplicate records are easy to spot in history.
    """
    payload = {
        name: record.model_dump() if hasattr(record, "model_dump") else record
        for name, record in files.items()
    }
    return hashlib.sha256(_stable_json(payload).encode("utf-8")).hexdigest()
