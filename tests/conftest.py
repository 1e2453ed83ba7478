from __future__ import annotations

import json
from typing import Any

import pytest

from interview_core.llm_bridge import Evaluator
from interview_core.question_bank import QuestionBank
from interview_core.stores import MemoryStore
from interview_core.types import Question, Response, Submission


def build_question_bank(tech_stack: str = "Python") -> list[Question]:
    """Deterministic bank mixing numeric and lettered correct answers."""

    opts = ["alpha", "beta", "gamma", "delta"]
    return [
        Question(id="q1", type="mcq", text="Pick alpha", options=opts, correct_answer="1", tech_stack=tech_stack),
        Question(id="q2", type="mcq", text="Pick gamma", options=opts, correct_answer="C", tech_stack=tech_stack),
        Question(id="q3", type="mcq", text="Pick beta", options=opts, correct_answer="option_b", tech_stack=tech_stack),
        Question(id="s1", type="short", text="Explain closures.", tech_stack=tech_stack),
        Question(id="l1", type="long", text="Design a cache.", tech_stack=tech_stack),
        Question(id="other1", type="mcq", text="Other stack", options=opts, correct_answer="A", tech_stack="Go"),
    ]


def mcq(qid: str, answer: str) -> Response:
    return Response(question_id=qid, question_type="mcq", answer=answer, time_spent=10)


def written(qid: str, answer: str, qtype: str = "long") -> Response:
    return Response(question_id=qid, question_type=qtype, answer=answer, time_spent=95)  # type: ignore[arg-type]


def make_submission(responses: list[Response], *, is_pro: bool = False, session_id: str = "sess-1",
                    resume_text: str | None = None) -> Submission:
    return Submission(session_id=session_id, tech_stack="Python", responses=responses,
                      resume_text=resume_text, is_pro=is_pro)


def model_reply(overall: float = 72, written_score: float = 7, pass_fail: str = "PASS", **extra: Any) -> str:
    body: dict[str, Any] = {
        "overallScore": overall,
        "mcqScore": 12,
        "writtenAnswerScore": written_score,
        "technicalRating": 7,
        "mcqAnalysis": [
            {"questionNumber": 1, "question": "Pick alpha", "userAnswer": "A", "correctAnswer": "A",
             "isCorrect": True, "explanation": "alpha is first"},
        ],
        "writtenAnalysis": [
            {"questionNumber": 1, "question": "Design a cache.", "whatIsCorrect": "eviction policy",
             "whatIsMissing": "invalidation", "modelAnswer": "LRU with TTL", "score": written_score,
             "feedback": "discuss invalidation"},
        ],
        "strengths": ["clear structure"],
        "weaknesses": ["shallow on invalidation"],
        "recommendations": ["study cache coherence"],
        "summary": "Solid candidate.",
        "passFail": pass_fail,
    }
    body.update(extra)
    return json.dumps(body)


class ScriptedCompletion:
    """Completion stub: returns or raises the scripted items in order."""

    def __init__(self, *script: Any):
        self.script = list(script)
        self.calls: list[tuple[str, str]] = []

    def __call__(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        if not self.script:
            raise AssertionError("completion called more times than scripted")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def make_evaluator(*script: Any, retries: int = 3, sleeps: list[float] | None = None) -> Evaluator:
    record = sleeps if sleeps is not None else []
    return Evaluator(ScriptedCompletion(*script), retries=retries, base_delay=1.0, sleep=record.append)


@pytest.fixture
def bank() -> QuestionBank:
    return QuestionBank(build_question_bank())


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
