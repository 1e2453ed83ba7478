from __future__ import annotations
import json, pathlib
from typing import Iterable, List, Optional
from . import config
from .errors import StoreError
from .types import Question


def load_bank(path: str | None = None) -> List[Question]:
    """Rows from QUESTION_BANK_PATH if set, else the bundled data/bank.json."""
    src = path or config.QUESTION_BANK_PATH
    try:
        if src:
            data = pathlib.Path(src).read_text(encoding="utf-8")
        else:
            data = pathlib.Path(__file__).with_name("data").joinpath("bank.json").read_text(encoding="utf-8")
        raw = json.loads(data)
        return [Question.from_row(r) for r in raw]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise StoreError(f"question bank could not be loaded: {e}") from e


class QuestionBank:
    """Read-only question lookup scoped by tech stack and type."""

    def __init__(self, questions: Iterable[Question]):
        self._questions = list(questions)

    @classmethod
    def from_file(cls, path: str | None = None) -> "QuestionBank":
        return cls(load_bank(path))

    def get_questions(self, tech_stack: Optional[str] = None, qtype: Optional[str] = None) -> List[Question]:
        out = self._questions
        if tech_stack:
            out = [q for q in out if q.tech_stack == tech_stack]
        if qtype:
            out = [q for q in out if q.type == qtype]
        return list(out)

    def tech_stacks(self) -> List[str]:
        seen: List[str] = []
        for q in self._questions:
            if q.tech_stack and q.tech_stack not in seen:
                seen.append(q.tech_stack)
        return seen
