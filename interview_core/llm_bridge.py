from __future__ import annotations
import json, logging, time
from typing import Any, Callable, Dict, Optional, Sequence

from . import config
from .errors import EvaluationError
from .llm_cfg import backend_in_use, client as llm_client, settings as llm_settings
from .parsing import parse_evaluation
from .prompts import SYSTEM_PROMPT, build_evaluation_prompt
from .schema import EvaluationResult
from .types import McqGrade, Response

log = logging.getLogger(__name__)

Completion = Callable[[str, str], str]


def complete_chat(system: str, user: str) -> str:
    s = llm_settings(); cli = llm_client(s)
    resp = cli.chat.completions.create(
        model=s.model, messages=[{"role":"system","content":system},{"role":"user","content":user}],
        temperature=config.LLM_TEMPERATURE, max_tokens=config.LLM_MAX_TOKENS, top_p=1.0,
    )
    return resp.choices[0].message.content or ""


def _log_call(record: Dict[str, Any]) -> None:
    if not (config.LLM_LOG_ENABLED and config.LLM_LOG_PATH):
        return
    try:
        with open(config.LLM_LOG_PATH, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as e:
        log.warning("could not append to llm log %s: %s", config.LLM_LOG_PATH, e)


class Evaluator:
    """
    Grades free-text answers with the configured model.
    Shared by the synchronous router path and the queue worker so both use
    one prompt and one parser.
    """

    def __init__(
        self,
        complete: Optional[Completion] = None,
        *,
        retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.complete = complete or complete_chat
        self.retries = config.LLM_RETRIES if retries is None else max(0, int(retries))
        self.base_delay = config.LLM_RETRY_BASE_DELAY if base_delay is None else float(base_delay)
        self.sleep = sleep

    @property
    def available(self) -> bool:
        return self.complete is not complete_chat or backend_in_use() != "none"

    def evaluate(
        self,
        free_text: Sequence[Response],
        tech_stack: Optional[str],
        resume_text: Optional[str],
        mcq: McqGrade,
    ) -> EvaluationResult:
        if not self.available:
            raise EvaluationError("no LLM backend configured", attempts=0)
        prompt = build_evaluation_prompt(free_text, tech_stack, resume_text, mcq)
        attempts = self.retries + 1
        last_exc: Optional[BaseException] = None
        for attempt in range(1, attempts + 1):
            t0 = time.time()
            raw: Optional[str] = None
            try:
                raw = self.complete(SYSTEM_PROMPT, prompt)
                result = EvaluationResult.from_model_output(parse_evaluation(raw), mcq_percent=mcq.percent)
            except Exception as e:
                last_exc = e
                log.warning("evaluation attempt %d/%d failed: %s: %s", attempt, attempts, type(e).__name__, e)
                _log_call(self._record(tech_stack, attempt, raw, t0, error=f"{type(e).__name__}: {e}"))
                if attempt < attempts:
                    self.sleep(attempt * self.base_delay)
                continue
            _log_call(self._record(tech_stack, attempt, raw, t0, score=result.overall_score))
            return result
        raise EvaluationError(f"evaluation failed after {attempts} attempts", attempts=attempts) from last_exc

    @staticmethod
    def _record(tech_stack, attempt, raw, t0, **extra) -> Dict[str, Any]:
        rec: Dict[str, Any] = {
            "ts": round(time.time(), 3),
            "tech_stack": tech_stack or "",
            "attempt": attempt,
            "raw": (raw or "")[:1200],
            "rt_ms": int((time.time() - t0) * 1000),
        }
        rec.update(extra)
        return rec


__all__ = ["Evaluator", "complete_chat", "Completion"]
