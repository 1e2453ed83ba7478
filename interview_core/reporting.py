# interview_core/reporting.py
from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from .types import REPORT_COMPLETE, REPORT_PROCESSING, EvaluationState

log = logging.getLogger(__name__)

_RANK_STATE: Dict[int, EvaluationState] = {
    0: "NO_EVALUATION",
    1: "MCQ_ONLY_PROVISIONAL",
    2: "FINAL",
}


def evaluation_rank(evaluation: Optional[Dict[str, Any]]) -> int:
    if not evaluation:
        return 0
    return 1 if evaluation.get("provisional") else 2


def evaluation_state(report: Optional[Dict[str, Any]]) -> EvaluationState:
    return _RANK_STATE[evaluation_rank((report or {}).get("long_short_evaluation"))]


def merge_final_report(
    existing: Optional[Dict[str, Any]],
    update: Dict[str, Any],
    *,
    session_id: str,
    now: str,
) -> Dict[str, Any]:
    """
    Apply `update` to a stored final report.
    long_short_evaluation only ever moves null -> provisional -> final; a
    lower-ranked evaluation in `update` is ignored.
    """
    report: Dict[str, Any] = dict(existing or {"session_id": session_id, "created_at": now})
    for k, v in update.items():
        if k in ("long_short_evaluation", "status", "session_id", "created_at"):
            continue
        report[k] = v

    if "long_short_evaluation" in update:
        incoming = update["long_short_evaluation"]
        current = report.get("long_short_evaluation")
        if evaluation_rank(incoming) >= evaluation_rank(current):
            report["long_short_evaluation"] = incoming
        else:
            log.info("ignoring evaluation regression for session=%s", session_id)
    report.setdefault("long_short_evaluation", None)

    if evaluation_rank(report["long_short_evaluation"]) == 2:
        report["status"] = REPORT_COMPLETE
    else:
        report["status"] = update.get("status") or report.get("status") or REPORT_PROCESSING
    report["updated_at"] = now
    return report


def score_label(score: Optional[float]) -> str:
    if score is None:
        return "N/A"
    s = round(float(score), 1)
    shown = f"{s:g}%"
    if s >= 90: return f"{shown} (Excellent)"
    if s >= 80: return f"{shown} (Very Good)"
    if s >= 70: return f"{shown} (Good)"
    if s >= 60: return f"{shown} (Satisfactory)"
    return f"{shown} (Needs Improvement)"


def report_view(report: Dict[str, Any]) -> Dict[str, Any]:
    """Final report plus derived state and a human-readable score label."""
    out = dict(report)
    evaluation = report.get("long_short_evaluation") or {}
    out["state"] = evaluation_state(report)
    out["score_label"] = score_label(evaluation.get("overallScore")) if evaluation else "N/A"
    return out


__all__ = [
    "evaluation_rank",
    "evaluation_state",
    "merge_final_report",
    "score_label",
    "report_view",
]
