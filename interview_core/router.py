"""Submission orchestration: MCQ grading plus tier-based written grading.

Per session the final report's evaluation moves
NO_EVALUATION -> MCQ_ONLY_PROVISIONAL -> FINAL:

* every submission grades MCQs and writes a report with a null evaluation;
* no written answers: an MCQ-only result is FINAL immediately (any tier);
* privileged tier: written answers graded synchronously;
* standard tier: provisional MCQ-only result stored and a job enqueued for
  the queue worker.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from . import config
from .errors import EvaluationError, ValidationError
from .llm_bridge import Evaluator
from .mcq import NOT_FOUND, grade_mcq
from .question_bank import QuestionBank
from .reporting import evaluation_state
from .schema import EvaluationResult, McqAnalysis, pass_fail_for
from .stores import MemoryStore
from .types import (
    REPORT_FAILED,
    REPORT_PROCESSING,
    EvaluationJob,
    McqDetail,
    McqGrade,
    Response,
    Submission,
)

log = logging.getLogger(__name__)

EVALUATION_UNAVAILABLE = "Written-answer evaluation is temporarily unavailable; your MCQ results have been recorded."


def _pick(d: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return None


def _flag(value: Any, name: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"", "0", "false", "no", "off"}:
            return False
    elif isinstance(value, (int, float)):
        return value != 0
    raise ValidationError(f"{name} must be a boolean")


def _response_from_payload(idx: int, item: Any) -> Response:
    if not isinstance(item, Mapping):
        raise ValidationError(f"responses[{idx}] must be an object")
    qid = _pick(item, "questionId", "question_id")
    if qid is None or str(qid).strip() == "":
        raise ValidationError(f"responses[{idx}].questionId is required")
    qtype = str(_pick(item, "questionType", "question_type") or "").lower()
    if qtype not in config.QUESTION_TYPES:
        raise ValidationError(f"responses[{idx}].questionType must be one of {', '.join(config.QUESTION_TYPES)}")
    try:
        spent = float(_pick(item, "timeSpent", "time_spent") or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"responses[{idx}].timeSpent must be a number") from None
    answer = _pick(item, "answer", "user_answer")
    return Response(
        question_id=str(qid),
        question_type=qtype,  # type: ignore[arg-type]
        answer="" if answer is None else str(answer),
        time_spent=spent,
        question_text=str(_pick(item, "questionText", "question_text") or ""),
    )


def submission_from_payload(payload: Any) -> Submission:
    """Build a Submission from a request body (camelCase or snake_case keys)."""
    if not isinstance(payload, Mapping):
        raise ValidationError("request body must be a JSON object")
    sid = _pick(payload, "sessionId", "session_id")
    raw_responses = _pick(payload, "responses")
    if not isinstance(raw_responses, list):
        raw_responses = None
    if not sid or not str(sid).strip() or not raw_responses:
        raise ValidationError("Missing required fields: sessionId, responses")
    tech = _pick(payload, "techStack", "tech_stack")
    resume = _pick(payload, "resumeText", "resume_text")
    sub = Submission(
        session_id=str(sid).strip(),
        tech_stack=str(tech).strip() if tech else None,
        responses=[_response_from_payload(i, r) for i, r in enumerate(raw_responses)],
        resume_text=str(resume) if resume else None,
        is_pro=_flag(_pick(payload, "isPro", "is_pro"), "isPro"),
    )
    validate_submission(sub)
    return sub


def validate_submission(sub: Submission) -> None:
    if not sub.session_id or not sub.session_id.strip():
        raise ValidationError("sessionId is required")
    if not sub.responses:
        raise ValidationError("responses must be a non-empty list")
    for i, r in enumerate(sub.responses):
        if r.question_type not in config.QUESTION_TYPES:
            raise ValidationError(f"responses[{i}].questionType must be one of {', '.join(config.QUESTION_TYPES)}")


def _mcq_explanation(d: McqDetail) -> str:
    if d.is_correct:
        return "Correct."
    if d.correct_answer == NOT_FOUND:
        return "Question not found in the bank; not scored."
    return f"Incorrect; the correct answer is {d.correct_answer}."


def mcq_only_evaluation(mcq: McqGrade, *, provisional: bool) -> EvaluationResult:
    """Deterministic result built from MCQ figures alone."""
    pct = mcq.percent
    return EvaluationResult(
        overall_score=pct,
        mcq_score=pct,
        written_answer_score=0.0,
        mcq_analysis=[
            McqAnalysis(
                question_number=d.question_number,
                question=d.question_text,
                user_answer=d.user_answer,
                correct_answer=d.correct_answer,
                is_correct=d.is_correct,
                explanation=_mcq_explanation(d),
            )
            for d in mcq.details
        ],
        summary=f"Answered {mcq.marks} of {mcq.total} multiple-choice questions correctly ({pct:g}%).",
        pass_fail=pass_fail_for(pct),
        provisional=provisional,
        status_message=config.PROVISIONAL_MESSAGE if provisional else None,
    )


class EvaluationRouter:
    def __init__(self, bank: QuestionBank, store: MemoryStore, evaluator: Evaluator):
        self.bank = bank
        self.store = store
        self.evaluator = evaluator

    def _fill_question_text(self, sub: Submission) -> List[Response]:
        texts = {q.id: q.text for q in self.bank.get_questions(sub.tech_stack)}
        out: List[Response] = []
        for r in sub.responses:
            if not r.question_text and r.question_id in texts:
                r = Response.from_dict({**r.to_dict(), "question_text": texts[r.question_id]})
            out.append(r)
        return out

    def finalize(self, session_id: str, result: EvaluationResult) -> Dict[str, Any]:
        """Persist a completed result and move the report to FINAL."""
        evaluation = result.to_dict()
        self.store.create_evaluation(session_id, evaluation)
        return self.store.upsert_final_report(session_id, {"long_short_evaluation": evaluation})

    def submit(self, sub: Submission) -> Dict[str, Any]:
        validate_submission(sub)
        sid = sub.session_id
        responses = self._fill_question_text(sub)
        mcq = grade_mcq(responses, self.bank.get_questions(sub.tech_stack, "mcq"))
        free_text = [r for r in responses if r.question_type in config.FREE_TEXT_TYPES]

        self.store.append_responses(sid, responses)
        self.store.upsert_final_report(sid, {
            "tech_stack": sub.tech_stack,
            "mcq_marks": mcq.marks,
            "mcq_total": mcq.total,
            "long_short_evaluation": None,
            "status": REPORT_PROCESSING,
        })
        log.info("session=%s mcq=%d/%d written=%d pro=%s", sid, mcq.marks, mcq.total, len(free_text), sub.is_pro)

        out: Dict[str, Any] = {
            "success": True,
            "session_id": sid,
            "mcq_marks": mcq.marks,
            "mcq_total": mcq.total,
            "mcq_details": [d.to_dict() for d in mcq.details],
            "queued": False,
        }

        if not free_text:
            result = mcq_only_evaluation(mcq, provisional=False)
            report = self.finalize(sid, result)
            out.update(evaluation=result.to_dict(), state=evaluation_state(report))
            return out

        if sub.is_pro:
            try:
                result = self.evaluator.evaluate(free_text, sub.tech_stack, sub.resume_text, mcq)
            except EvaluationError as e:
                log.error("session=%s synchronous evaluation failed: %s", sid, e)
                report = self.store.upsert_final_report(sid, {"status": REPORT_FAILED})
                out.update(evaluation=None, evaluation_error=EVALUATION_UNAVAILABLE, state=evaluation_state(report))
                return out
            report = self.finalize(sid, result)
            out.update(evaluation=result.to_dict(), state=evaluation_state(report))
            return out

        provisional = mcq_only_evaluation(mcq, provisional=True)
        # enqueue before the provisional write so no provisional report is left without a job
        job = self.store.enqueue(EvaluationJob(
            id="",
            session_id=sid,
            tech_stack=sub.tech_stack,
            free_text=free_text,
            mcq=mcq,
            resume_text=sub.resume_text,
        ))
        report = self.store.upsert_final_report(sid, {"long_short_evaluation": provisional.to_dict()})
        log.info("session=%s queued written-answer evaluation job=%s", sid, job.id)
        out.update(
            evaluation=provisional.to_dict(),
            queued=True,
            job_id=job.id,
            state=evaluation_state(report),
        )
        return out


__all__ = [
    "EvaluationRouter",
    "submission_from_payload",
    "validate_submission",
    "mcq_only_evaluation",
    "EVALUATION_UNAVAILABLE",
]
