# interview_core/prompts.py
from __future__ import annotations
import json
from typing import List, Optional, Sequence

from . import config
from .types import McqGrade, Response

SYSTEM_PROMPT = (
    "You are an expert technical interviewer and strict, consistent evaluator. "
    "Grade the candidate's answers against the rubric you are given. "
    "Return ONLY one JSON object that matches the requested schema exactly. "
    "No markdown, no commentary, no extra keys."
)

_OUTPUT_SCHEMA = {
    "overallScore": "<number 0-100, weighted overall interview score>",
    "mcqScore": "<number, copy the MCQ percentage given above exactly>",
    "writtenAnswerScore": "<number 0-10, average quality of the written answers>",
    "technicalRating": "<number 1-10, depth of technical knowledge shown>",
    "mcqAnalysis": [
        {
            "questionNumber": "<int>",
            "question": "<question text>",
            "userAnswer": "<letter>",
            "correctAnswer": "<letter>",
            "isCorrect": "<true|false, copy from the MCQ results above>",
            "explanation": "<one or two sentences on why the correct option is right>",
        }
    ],
    "writtenAnalysis": [
        {
            "questionNumber": "<int>",
            "question": "<question text>",
            "whatIsCorrect": "<what the candidate got right>",
            "whatIsMissing": "<what is missing or wrong>",
            "modelAnswer": "<a concise ideal answer>",
            "score": "<number 0-10>",
            "feedback": "<actionable feedback>",
        }
    ],
    "strengths": ["<string>", "..."],
    "weaknesses": ["<string>", "..."],
    "recommendations": ["<string>", "..."],
    "summary": "<two or three sentence overall assessment>",
    "passFail": "<PASS if overallScore >= {threshold:g} else FAIL>",
}


def _resume_block(resume_text: Optional[str]) -> str:
    text = (resume_text or "").strip()
    if not text:
        return "No resume provided."
    limit = max(0, config.RESUME_CONTEXT_CHARS)
    if len(text) > limit:
        text = text[:limit] + "..."
    return f"Resume Context:\n{text}"


def _written_block(free_text: Sequence[Response]) -> str:
    if not free_text:
        return "No written answers."
    parts: List[str] = []
    for idx, resp in enumerate(free_text, start=1):
        parts.append(
            f"Question {idx} ({resp.question_type}):\n"
            f"Question: {resp.question_text or '(question text unavailable)'}\n"
            f"Answer: {(resp.answer or '').strip() or '(no answer)'}\n"
            f"Time Spent: {resp.time_spent:g} seconds"
        )
    return "\n\n".join(parts)


def _mcq_block(mcq: McqGrade) -> str:
    if not mcq.details:
        return "No multiple-choice questions were answered."
    lines: List[str] = []
    for d in mcq.details:
        mark = "CORRECT" if d.is_correct else "INCORRECT"
        lines.append(
            f"MCQ {d.question_number}: {d.question_text or '(question text unavailable)'}\n"
            f"  Options: {' | '.join(f'{sym}) {opt}' for sym, opt in zip(config.OPTION_SYMBOLS, d.options)) or 'n/a'}\n"
            f"  Candidate answer: {d.user_answer or '(blank)'} | Correct answer: {d.correct_answer} -> {mark}"
        )
    return "\n".join(lines)


def output_schema() -> str:
    schema = dict(_OUTPUT_SCHEMA)
    schema["passFail"] = schema["passFail"].format(threshold=config.PASS_THRESHOLD)
    return json.dumps(schema, indent=2)


def build_evaluation_prompt(
    free_text: Sequence[Response],
    tech_stack: Optional[str],
    resume_text: Optional[str],
    mcq: McqGrade,
) -> str:
    """
    Render the grading prompt. Deterministic for identical inputs.
    MCQ figures are computed here so the model only grades written answers.
    """
    stack = (tech_stack or "").strip() or "general software engineering"
    return "\n\n".join([
        f"Evaluate this technical interview for a {stack} position.",
        _resume_block(resume_text),
        "Written Answers:\n" + _written_block(free_text),
        "Multiple-Choice Results (already graded, do not re-grade):\n" + _mcq_block(mcq),
        f"MCQ Summary: {mcq.marks}/{mcq.total} correct = {mcq.percent:g}%",
        "Scoring rules:\n"
        "- Score each written answer 0-10 on correctness, completeness and clarity.\n"
        "- writtenAnswerScore is the mean of the per-answer scores.\n"
        "- overallScore blends the MCQ percentage with writtenAnswerScore scaled to 100, "
        "weighted by the number of questions of each kind.\n"
        f"- passFail is PASS only if overallScore >= {config.PASS_THRESHOLD:g}.\n"
        "- Provide one mcqAnalysis entry per MCQ and one writtenAnalysis entry per written answer, in order.\n"
        "- strengths, weaknesses and recommendations must each contain at least one item.",
        "Respond with JSON exactly in this shape:\n" + output_schema(),
    ])


__all__ = ["SYSTEM_PROMPT", "build_evaluation_prompt", "output_schema"]
