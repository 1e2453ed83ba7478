from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional

QuestionType = Literal["mcq", "short", "long"]
JobStatus = Literal["pending", "processing", "done", "error"]
EvaluationState = Literal["NO_EVALUATION", "MCQ_ONLY_PROVISIONAL", "FINAL"]

REPORT_PROCESSING = "mcq_complete_processing_written"
REPORT_COMPLETE = "complete"
REPORT_FAILED = "evaluation_failed"


@dataclass(frozen=True)
class Question:
    id: str; type: QuestionType; text: str
    options: List[str] = field(default_factory=list)
    correct_answer: Optional[str] = None
    difficulty: str = "medium"
    tech_stack: str = ""
    topic: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Question":
        """Build from a bank row laid out like the technical_questions table."""
        options = row.get("options")
        if options is None:
            options = [row.get(f"option_{k}") for k in "abcd"]
        return cls(
            id=str(row["id"]),
            type=str(row.get("question_type") or row.get("type") or "mcq").lower(),  # type: ignore[arg-type]
            text=str(row.get("question_text") or row.get("text") or ""),
            options=[str(o) for o in options if o],
            correct_answer=None if row.get("correct_answer") is None else str(row["correct_answer"]),
            difficulty=str(row.get("difficulty_level") or row.get("difficulty") or "medium"),
            tech_stack=str(row.get("tech_stack") or ""),
            topic=str(row.get("topic") or ""),
        )


@dataclass
class Response:
    question_id: str; question_type: QuestionType; answer: str
    time_spent: float = 0.0
    question_text: str = ""
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Response":
        return cls(
            question_id=str(d["question_id"]),
            question_type=d["question_type"],
            answer="" if d.get("answer") is None else str(d["answer"]),
            time_spent=float(d.get("time_spent") or 0.0),
            question_text=str(d.get("question_text") or ""),
            created_at=str(d.get("created_at") or ""),
        )


@dataclass
class McqDetail:
    question_number: int
    question_id: str
    question_text: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    options: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionNumber": self.question_number,
            "questionId": self.question_id,
            "questionText": self.question_text,
            "userAnswer": self.user_answer,
            "correctAnswer": self.correct_answer,
            "isCorrect": self.is_correct,
            "options": list(self.options),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "McqDetail":
        return cls(
            question_number=int(d["questionNumber"]),
            question_id=str(d.get("questionId", "")),
            question_text=str(d.get("questionText", "")),
            user_answer=str(d.get("userAnswer", "")),
            correct_answer=str(d.get("correctAnswer", "")),
            is_correct=bool(d.get("isCorrect", False)),
            options=list(d.get("options") or []),
        )


@dataclass
class McqGrade:
    marks: int
    total: int
    details: List[McqDetail] = field(default_factory=list)

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return round(self.marks / self.total * 100.0, 1)


@dataclass
class Submission:
    session_id: str
    tech_stack: Optional[str]
    responses: List[Response]
    resume_text: Optional[str] = None
    is_pro: bool = False


@dataclass
class EvaluationJob:
    id: str
    session_id: str
    tech_stack: Optional[str]
    free_text: List[Response]
    mcq: McqGrade
    resume_text: Optional[str] = None
    status: JobStatus = "pending"
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "tech_stack": self.tech_stack,
            "long_short_answers": [r.to_dict() for r in self.free_text],
            "mcq_marks": self.mcq.marks,
            "mcq_total": self.mcq.total,
            "mcq_details": [d.to_dict() for d in self.mcq.details],
            "resume_text": self.resume_text,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EvaluationJob":
        mcq = McqGrade(
            marks=int(d.get("mcq_marks") or 0),
            total=int(d.get("mcq_total") or 0),
            details=[McqDetail.from_dict(x) for x in d.get("mcq_details") or []],
        )
        return cls(
            id=str(d["id"]),
            session_id=str(d["session_id"]),
            tech_stack=d.get("tech_stack"),
            free_text=[Response.from_dict(x) for x in d.get("long_short_answers") or []],
            mcq=mcq,
            resume_text=d.get("resume_text"),
            status=d.get("status", "pending"),
            created_at=str(d.get("created_at") or ""),
            updated_at=str(d.get("updated_at") or ""),
        )
