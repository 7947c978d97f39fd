import json
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from autoeval.core.eval_schemas import EvaluationRecord
from autoeval.infra.logging import log_event

DB_PATH = Path("data") / "autoeval.sqlite3"

HISTORY_KEY = "evaluations"


class KeyValueStore(Protocol):
    """
    Reason:
    - The engine must stay pure; persistence is handed in, never reached for.
    Benefit:
    - Tests swap in MemoryKeyValueStore and never touch disk.
    """

    def load(self, key: str) -> Optional[Any]: ...

    def save(self, key: str, value: Any) -> None: ...

    def extend(self, key: str, values: List[Any]) -> int: ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> None:
        # Round-trip through JSON so behaviour matches the sqlite store
        self._data[key] = json.dumps(value, ensure_ascii=False)

    def extend(self, key: str, values: List[Any]) -> int:
        with self._lock:
            current = self.load(key) or []
            self.save(key, list(current) + list(values))
        return len(values)


class SqliteKeyValueStore:
    def __init__(self, db_path: Path = DB_PATH) -> None:
        self.db_path = Path(db_path)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """
        Reason:
        - Ensure schema exists before the first read/write.
        Benefit:
        - Zero-manual setup; works on any machine.
        """
        if self._initialized:
            return
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    updated_ts REAL NOT NULL
                )
                """
            )
            conn.commit()
        self._initialized = True

    def load(self, key: str) -> Optional[Any]:
        self.init_db()
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value_json FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return json.loads(row["value_json"]) if row else None

    def save(self, key: str, value: Any) -> None:
        self.init_db()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value_json, updated_ts)
                VALUES (?, ?, ?)
                """,
                (key, json.dumps(value, ensure_ascii=False), time.time()),
            )
            conn.commit()

    def extend(self, key: str, values: List[Any]) -> int:
        """
        Append to a JSON list value.

        Read and write share one IMMEDIATE transaction, so two processes
        extending the same key serialize instead of overwriting each other.
        """
        self.init_db()
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT value_json FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
            current = json.loads(row["value_json"]) if row else []
            conn.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value_json, updated_ts)
                VALUES (?, ?, ?)
                """,
                (key, json.dumps(list(current) + list(values), ensure_ascii=False), time.time()),
            )
            conn.commit()
        return len(values)


class EvaluationHistory:
    """Append-only list of evaluation records kept in a KeyValueStore."""

    def __init__(self, store: KeyValueStore, key: str = HISTORY_KEY) -> None:
        self.store = store
        self.key = key

    def _raw(self) -> List[Dict[str, Any]]:
        return list(self.store.load(self.key) or [])

    def append(self, record: EvaluationRecord) -> None:
        self.append_many([record])

    def append_many(self, records: Iterable[EvaluationRecord]) -> int:
        new = [r.model_dump(mode="json") for r in records]
        if not new:
            return 0
        self.store.extend(self.key, new)
        log_event("history_saved", key=self.key, added=len(new))
        return len(new)

    def load_all(self) -> List[EvaluationRecord]:
        return [EvaluationRecord.model_validate(d) for d in self._raw()]

    def recent(self, limit: int = 20) -> List[EvaluationRecord]:
        records = self.load_all()
        records.sort(key=lambda r: r.evaluated_at, reverse=True)
        return records[:limit]
