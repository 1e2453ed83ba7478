# interview_core/queue_worker.py
from __future__ import annotations
import logging
from typing import Dict, Optional

from . import config
from .llm_bridge import Evaluator
from .stores import MemoryStore
from .types import EvaluationJob

log = logging.getLogger(__name__)


class QueueProcessor:
    """
    Drains deferred written-answer evaluations, one bounded batch per run.
    Jobs are processed sequentially; a job is only touched after this
    processor's own pending -> processing claim succeeded.
    """

    def __init__(self, store: MemoryStore, evaluator: Evaluator):
        self.store = store
        self.evaluator = evaluator

    def run_once(self, limit: Optional[int] = None) -> Dict[str, int]:
        batch = config.QUEUE_BATCH_LIMIT if limit is None else max(1, int(limit))
        jobs = self.store.fetch_pending(batch)
        stats = {"fetched": len(jobs), "done": 0, "error": 0, "skipped": 0}
        for job in jobs:
            if not self.store.try_claim(job.id):
                log.info("job=%s no longer pending; skipped", job.id)
                stats["skipped"] += 1
                continue
            if self._process(job):
                stats["done"] += 1
            else:
                stats["error"] += 1
        log.info("queue run complete: %s", stats)
        return stats

    def _process(self, job: EvaluationJob) -> bool:
        try:
            result = self.evaluator.evaluate(job.free_text, job.tech_stack, job.resume_text, job.mcq)
            evaluation = result.to_dict()
            self.store.create_evaluation(job.session_id, evaluation)
            self.store.upsert_final_report(job.session_id, {
                "tech_stack": job.tech_stack,
                "mcq_marks": job.mcq.marks,
                "mcq_total": job.mcq.total,
                "long_short_evaluation": evaluation,
            })
            self.store.update_status(job.id, "done")
        except Exception as e:
            log.error("job=%s session=%s failed: %s: %s", job.id, job.session_id, type(e).__name__, e)
            try:
                self.store.update_status(job.id, "error")
            except Exception:
                log.exception("job=%s could not be marked error", job.id)
            return False
        log.info("processed job=%s session=%s overall=%.1f", job.id, job.session_id, result.overall_score)
        return True


__all__ = ["QueueProcessor"]
