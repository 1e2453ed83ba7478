from __future__ import annotations
import logging
from typing import Dict, Iterable, List

from .normalize import normalize_answer
from .types import McqDetail, McqGrade, Question, Response

log = logging.getLogger(__name__)

NOT_FOUND = "Not found"


def _score_mcq(number: int, resp: Response, question: Question | None) -> McqDetail:
    user = normalize_answer(resp.answer)
    if question is None:
        log.warning("mcq response references unknown question id=%s", resp.question_id)
        return McqDetail(
            question_number=number,
            question_id=resp.question_id,
            question_text=resp.question_text,
            user_answer=user,
            correct_answer=NOT_FOUND,
            is_correct=False,
        )
    correct = normalize_answer(question.correct_answer)
    return McqDetail(
        question_number=number,
        question_id=resp.question_id,
        question_text=question.text or resp.question_text,
        user_answer=user,
        correct_answer=correct,
        is_correct=bool(correct) and user == correct,
        options=list(question.options),
    )


def grade_mcq(responses: Iterable[Response], questions: Iterable[Question]) -> McqGrade:
    """
    Grade the mcq responses against the bank, in submission order.
    Responses to unknown questions stay in the details as incorrect.
    """
    by_id: Dict[str, Question] = {q.id: q for q in questions if q.type == "mcq"}
    details: List[McqDetail] = []
    for resp in responses:
        if resp.question_type != "mcq":
            continue
        details.append(_score_mcq(len(details) + 1, resp, by_id.get(str(resp.question_id))))
    marks = sum(1 for d in details if d.is_correct)
    return McqGrade(marks=marks, total=len(details), details=details)


__all__ = ["grade_mcq", "NOT_FOUND"]
