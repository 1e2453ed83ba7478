"""Validated shape of an evaluation result.

Field aliases are the camelCase names the grading prompt asks the model to
emit; `model_dump(by_alias=True)` gives back the stored/wire form.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from . import config
from .errors import ParseError

log = logging.getLogger(__name__)


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class McqAnalysis(_Model):
    question_number: int = Field(alias="questionNumber")
    question: str = ""
    user_answer: str = Field("", alias="userAnswer")
    correct_answer: str = Field("", alias="correctAnswer")
    is_correct: bool = Field(False, alias="isCorrect")
    explanation: str = ""


class WrittenAnalysis(_Model):
    question_number: int = Field(alias="questionNumber")
    question: str = ""
    what_is_correct: str = Field("", alias="whatIsCorrect")
    what_is_missing: str = Field("", alias="whatIsMissing")
    model_answer: str = Field("", alias="modelAnswer")
    score: float = Field(ge=0, le=10)
    feedback: str = ""


class EvaluationResult(_Model):
    overall_score: float = Field(alias="overallScore", ge=0, le=100)
    mcq_score: float = Field(0.0, alias="mcqScore", ge=0, le=100)
    written_answer_score: float = Field(alias="writtenAnswerScore", ge=0, le=10)
    technical_rating: Optional[float] = Field(None, alias="technicalRating", ge=1, le=10)
    mcq_analysis: List[McqAnalysis] = Field(default_factory=list, alias="mcqAnalysis")
    written_analysis: List[WrittenAnalysis] = Field(default_factory=list, alias="writtenAnalysis")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    summary: str = ""
    pass_fail: Literal["PASS", "FAIL"] = Field("FAIL", alias="passFail")
    provisional: bool = False
    status_message: Optional[str] = Field(None, alias="statusMessage")

    @property
    def passed(self) -> bool:
        return self.pass_fail == "PASS"

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_model_output(cls, data: Dict[str, Any], *, mcq_percent: float) -> "EvaluationResult":
        """Validate parsed model JSON and pin the locally known figures.

        mcqScore is always replaced by `mcq_percent`; passFail is re-derived
        from overallScore.
        """
        raw = dict(data)
        claimed = str(raw.get("passFail", "")).strip().upper()
        if claimed in ("PASS", "FAIL"):
            raw["passFail"] = claimed
        else:
            raw.pop("passFail", None)
        raw["mcqScore"] = mcq_percent
        raw["provisional"] = False
        raw.pop("statusMessage", None)
        try:
            result = cls.model_validate(raw)
        except PydanticValidationError as e:
            raise ParseError(f"model output failed schema validation: {e.error_count()} error(s)") from e
        expected = pass_fail_for(result.overall_score)
        if claimed and claimed != expected:
            log.warning("model passFail=%s disagrees with overallScore=%.1f; using %s",
                        claimed, result.overall_score, expected)
        return result.model_copy(update={"pass_fail": expected})


def pass_fail_for(overall_score: float) -> Literal["PASS", "FAIL"]:
    return "PASS" if overall_score >= config.PASS_THRESHOLD else "FAIL"


__all__ = ["EvaluationResult", "McqAnalysis", "WrittenAnalysis", "pass_fail_for"]
