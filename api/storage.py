"""JSON-file backed store for responses, evaluations, reports and jobs.

Each table lives in its own JSON file under DATA_DIR and is rewritten
atomically (temp file + replace) on every change. Every load-modify-save
runs under a thread lock plus a `DATA_DIR/.lock` file lock, so the API
process and queue workers sharing one DATA_DIR on one host serialize
their writes and claims.
"""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any, Dict

from filelock import FileLock, Timeout

from interview_core import config
from interview_core.errors import StoreError
from interview_core.stores import TABLES, MemoryStore, utcnow_iso


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()

_LOCK = threading.RLock()
_ROOT_LOCKS: Dict[Path, "_RootLock"] = {}


class _RootLock:
    """Re-entrant lock for one store root: threads first, then processes."""

    def __init__(self, root: Path) -> None:
        self._thread = threading.RLock()
        self._file = FileLock(str(root / ".lock"), timeout=config.STORE_LOCK_TIMEOUT)
        self.root = root

    def __enter__(self) -> "_RootLock":
        self._thread.acquire()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self._file.acquire()
        except (OSError, Timeout) as e:
            self._thread.release()
            raise StoreError(f"could not lock store: {e}") from e
        return self

    def __exit__(self, *exc: Any) -> None:
        try:
            self._file.release()
        finally:
            self._thread.release()


def _root_lock(root: Path) -> _RootLock:
    with _LOCK:
        lock = _ROOT_LOCKS.get(root)
        if lock is None:
            lock = _ROOT_LOCKS[root] = _RootLock(root)
        return lock


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise StoreError(f"could not read {path.name}: {e}") from e


def _write_json(path: Path, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(f"{path.suffix}.{os.getpid()}.tmp")
        tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        raise StoreError(f"could not write {path.name}: {e}") from e


class FileStore(MemoryStore):
    def __init__(self, root: Path | str | None = None) -> None:
        super().__init__()
        self.root = Path(root).resolve() if root else DATA_ROOT
        self._lock = _root_lock(self.root)

    def path_for(self, table: str) -> Path:
        if table not in TABLES:
            raise StoreError(f"unknown table {table!r}")
        return self.root / f"{table}.json"

    def _load(self, table: str) -> Dict[str, Any]:
        data = _read_json(self.path_for(table), {})
        if not isinstance(data, dict):
            raise StoreError(f"{table}.json is not a JSON object")
        return data

    def _save(self, table: str, data: Dict[str, Any]) -> None:
        _write_json(self.path_for(table), data)


__all__ = ["FileStore", "DATA_ROOT", "utcnow_iso"]
