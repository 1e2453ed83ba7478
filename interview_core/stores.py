"""Collaborator stores used by the router and the queue worker.

`MemoryStore` implements the four store contracts (questions excluded, see
question_bank.py) against in-process tables:

* responses:      append_responses / list_responses
* evaluations:    create_evaluation / list_evaluations
* final reports:  upsert_final_report / get_final_report
* jobs:           enqueue / fetch_pending / try_claim / claim_pending /
                  update_status / get_job / list_jobs / requeue_errors

Persistent backends subclass it and override `_load` / `_save` only; every
operation runs load-modify-save under one lock, which is what makes
`try_claim` a compare-and-swap.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .errors import StoreError
from .reporting import merge_final_report
from .types import EvaluationJob, JobStatus, Response

log = logging.getLogger(__name__)

TABLES: tuple[str, ...] = ("responses", "evaluations", "final_reports", "jobs")
JOB_STATUSES: tuple[str, ...] = ("pending", "processing", "done", "error")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryStore:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: Dict[str, Dict[str, Any]] = {t: {} for t in TABLES}

    # ---- backend hooks ----
    def _load(self, table: str) -> Dict[str, Any]:
        return copy.deepcopy(self._tables[table])

    def _save(self, table: str, data: Dict[str, Any]) -> None:
        self._tables[table] = copy.deepcopy(data)

    # ---- responses ----
    def append_responses(self, session_id: str, responses: Sequence[Response]) -> List[Response]:
        now = utcnow_iso()
        stamped = [
            Response.from_dict({**r.to_dict(), "created_at": r.created_at or now}) for r in responses
        ]
        with self._lock:
            table = self._load("responses")
            rows = table.setdefault(session_id, [])
            rows.extend(r.to_dict() for r in stamped)
            self._save("responses", table)
        return stamped

    def list_responses(self, session_id: str) -> List[Response]:
        rows = self._load("responses").get(session_id, [])
        # stable sort keeps submission order within one batch
        return sorted((Response.from_dict(r) for r in rows), key=lambda r: r.created_at)

    # ---- evaluations / final reports ----
    def create_evaluation(self, session_id: str, evaluation: Dict[str, Any]) -> str:
        eid = str(uuid.uuid4())
        with self._lock:
            table = self._load("evaluations")
            table.setdefault(session_id, []).append(
                {"id": eid, "session_id": session_id, "evaluation": evaluation, "created_at": utcnow_iso()}
            )
            self._save("evaluations", table)
        return eid

    def list_evaluations(self, session_id: str) -> List[Dict[str, Any]]:
        return self._load("evaluations").get(session_id, [])

    def upsert_final_report(self, session_id: str, update: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            table = self._load("final_reports")
            report = merge_final_report(table.get(session_id), update, session_id=session_id, now=utcnow_iso())
            table[session_id] = report
            self._save("final_reports", table)
        return report

    def get_final_report(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self._load("final_reports").get(session_id)

    # ---- job queue ----
    def enqueue(self, job: EvaluationJob) -> EvaluationJob:
        now = utcnow_iso()
        job.id = job.id or str(uuid.uuid4())
        job.status = "pending"
        job.created_at = job.created_at or now
        job.updated_at = now
        with self._lock:
            table = self._load("jobs")
            if job.id in table:
                raise StoreError(f"job {job.id} already exists")
            table[job.id] = job.to_dict()
            self._save("jobs", table)
        return job

    def list_jobs(self, status: Optional[JobStatus] = None) -> List[EvaluationJob]:
        rows = self._load("jobs").values()
        jobs = [EvaluationJob.from_dict(r) for r in rows if status is None or r.get("status") == status]
        jobs.sort(key=lambda j: j.created_at)
        return jobs

    def fetch_pending(self, limit: int) -> List[EvaluationJob]:
        return self.list_jobs("pending")[: max(0, int(limit))]

    def get_job(self, job_id: str) -> Optional[EvaluationJob]:
        row = self._load("jobs").get(job_id)
        return EvaluationJob.from_dict(row) if row else None

    def try_claim(self, job_id: str) -> bool:
        """Move a job pending -> processing; False if someone else got there first."""
        with self._lock:
            table = self._load("jobs")
            row = table.get(job_id)
            if not row or row.get("status") != "pending":
                return False
            row["status"] = "processing"
            row["updated_at"] = utcnow_iso()
            self._save("jobs", table)
        return True

    def claim_pending(self, limit: int) -> List[EvaluationJob]:
        with self._lock:
            claimed = []
            for job in self.fetch_pending(limit):
                if self.try_claim(job.id):
                    job.status = "processing"
                    claimed.append(job)
            return claimed

    def update_status(self, job_id: str, status: JobStatus) -> None:
        if status not in JOB_STATUSES:
            raise StoreError(f"unknown job status {status!r}")
        with self._lock:
            table = self._load("jobs")
            if job_id not in table:
                raise StoreError(f"job {job_id} not found")
            table[job_id]["status"] = status
            table[job_id]["updated_at"] = utcnow_iso()
            self._save("jobs", table)

    def requeue_errors(self) -> int:
        """Manual recovery: put every errored job back to pending."""
        with self._lock:
            table = self._load("jobs")
            now = utcnow_iso()
            n = 0
            for row in table.values():
                if row.get("status") == "error":
                    row["status"] = "pending"
                    row["updated_at"] = now
                    n += 1
            if n:
                self._save("jobs", table)
        log.info("requeued %d errored job(s)", n)
        return n


__all__ = ["MemoryStore", "utcnow_iso", "TABLES", "JOB_STATUSES"]
