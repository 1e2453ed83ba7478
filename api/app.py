from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Query
from fastapi.middleware.cors import CORSMiddleware
import logging, os, typing as t

# ---- Core imports ----
from interview_core.errors import StoreError, ValidationError
from interview_core.llm_bridge import Evaluator
from interview_core.llm_cfg import backend_in_use
from interview_core.question_bank import QuestionBank
from interview_core.reporting import report_view
from interview_core.router import EvaluationRouter, submission_from_payload
from interview_core.types import Question
from .storage import FileStore

log = logging.getLogger(__name__)

BANK = QuestionBank.from_file()
STORE = FileStore()
EVALUATOR = Evaluator()
ROUTER = EvaluationRouter(BANK, STORE, EVALUATOR)

app = FastAPI(title="Interview Evaluation API")

ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,  # keep False unless you use cookies
)


@app.get("/")
def root():
    return {"status": "ok", "service": "interview-eval-api"}


# ---- Helpers ----
def _serialize_question(q: Question) -> dict[str, t.Any]:
    # correct answers never leave the server
    out: dict[str, t.Any] = {
        "id": q.id,
        "tech_stack": q.tech_stack,
        "question_type": q.type,
        "question_text": q.text,
        "difficulty_level": q.difficulty,
        "topic": q.topic,
    }
    if q.type == "mcq":
        for key, opt in zip(("option_a", "option_b", "option_c", "option_d"), q.options):
            out[key] = opt
    return out


# ---- Health ----
@app.get("/health")
def health():
    return {
        "llm_backend": backend_in_use(),
        "llm_available": ROUTER.evaluator.available,
        "question_count": len(BANK.get_questions()),
    }


# ---- Questions ----
@app.get("/api/questions")
def list_questions(
    tech_stack: str | None = Query(None, alias="techStack"),
    qtype: str | None = Query(None, alias="type"),
    list_tech_stacks: bool = Query(False, alias="listTechStacks"),
):
    if list_tech_stacks:
        return BANK.tech_stacks()
    return [_serialize_question(q) for q in BANK.get_questions(tech_stack, qtype)]


# ---- Responses / submission ----
@app.post("/api/responses")
def submit_responses(payload: dict[str, t.Any] = Body(...)):
    try:
        sub = submission_from_payload(payload)
        return ROUTER.submit(sub)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except StoreError as e:
        log.error("submission store failure: %s", e)
        raise HTTPException(500, "Failed to record interview responses. Please retry.")


@app.get("/api/responses")
def get_responses(session_id: str | None = Query(None, alias="sessionId")):
    if not session_id:
        raise HTTPException(400, "Session ID is required")
    try:
        rows = ROUTER.store.list_responses(session_id)
    except StoreError as e:
        log.error("response listing failed: %s", e)
        raise HTTPException(500, "Failed to load interview responses.")
    return [r.to_dict() for r in rows]


# ---- Reports ----
@app.get("/reports/{session_id}")
def get_report(session_id: str):
    try:
        report = ROUTER.store.get_final_report(session_id)
    except StoreError as e:
        log.error("report lookup failed: %s", e)
        raise HTTPException(500, "Failed to load report.")
    if not report:
        raise HTTPException(404, "report not found")
    return report_view(report)
