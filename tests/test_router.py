from __future__ import annotations

import pytest

from interview_core.errors import StoreError, ValidationError
from interview_core.router import EVALUATION_UNAVAILABLE, EvaluationRouter, submission_from_payload
from interview_core.stores import MemoryStore
from interview_core.types import REPORT_COMPLETE, REPORT_FAILED, REPORT_PROCESSING
from tests.conftest import make_evaluator, make_submission, mcq, model_reply, written


@pytest.mark.parametrize("is_pro", [False, True])
def test_mcq_only_submission_is_final_for_any_tier(bank, store, is_pro):
    router = EvaluationRouter(bank, store, make_evaluator())  # empty script: any model call fails the test
    out = router.submit(make_submission([mcq("q1", "A"), mcq("q2", "B")], is_pro=is_pro))

    assert out["state"] == "FINAL"
    assert out["queued"] is False
    assert out["mcq_marks"] == 1
    assert out["evaluation"]["writtenAnswerScore"] == 0
    assert out["evaluation"]["overallScore"] == 50.0
    assert out["evaluation"]["provisional"] is False
    report = store.get_final_report("sess-1")
    assert report["status"] == REPORT_COMPLETE
    assert len(store.list_evaluations("sess-1")) == 1
    assert store.list_jobs() == []


def test_standard_tier_with_written_answers_queues_one_job(bank, store):
    router = EvaluationRouter(bank, store, make_evaluator())
    out = router.submit(make_submission([mcq("q1", "A"), written("l1", "LRU cache")]))

    assert out["queued"] is True
    assert out["state"] == "MCQ_ONLY_PROVISIONAL"
    assert out["evaluation"]["provisional"] is True
    assert out["evaluation"]["writtenAnswerScore"] == 0
    assert out["evaluation"]["overallScore"] == 100.0
    assert out["evaluation"]["statusMessage"]

    jobs = store.list_jobs()
    assert len(jobs) == 1
    assert jobs[0].status == "pending"
    assert jobs[0].id == out["job_id"]
    assert [r.question_id for r in jobs[0].free_text] == ["l1"]
    assert jobs[0].mcq.marks == 1

    report = store.get_final_report("sess-1")
    assert report["long_short_evaluation"]["provisional"] is True
    assert report["status"] == REPORT_PROCESSING
    assert store.list_evaluations("sess-1") == []


def test_privileged_tier_grades_synchronously_and_never_enqueues(bank, store):
    router = EvaluationRouter(bank, store, make_evaluator(model_reply(overall=77, written_score=8)))
    out = router.submit(make_submission([mcq("q1", "A"), written("l1", "LRU cache")], is_pro=True))

    assert out["queued"] is False
    assert out["state"] == "FINAL"
    assert out["evaluation"]["writtenAnswerScore"] == 8
    assert out["evaluation"]["mcqScore"] == 100.0
    assert store.list_jobs() == []
    assert store.get_final_report("sess-1")["status"] == REPORT_COMPLETE
    assert len(store.list_evaluations("sess-1")) == 1


def test_privileged_failure_returns_mcq_results_and_explicit_error(bank, store):
    failures = [RuntimeError("upstream 500: secret body")] * 4
    router = EvaluationRouter(bank, store, make_evaluator(*failures))
    out = router.submit(make_submission([mcq("q1", "A"), written("l1", "LRU cache")], is_pro=True))

    assert out["success"] is True
    assert out["mcq_marks"] == 1
    assert out["evaluation"] is None
    assert out["evaluation_error"] == EVALUATION_UNAVAILABLE
    assert "secret" not in str(out)
    assert out["state"] == "NO_EVALUATION"
    report = store.get_final_report("sess-1")
    assert report["long_short_evaluation"] is None
    assert report["status"] == REPORT_FAILED
    assert store.list_jobs() == []


def test_question_text_is_filled_from_bank(bank, store):
    router = EvaluationRouter(bank, store, make_evaluator())
    router.submit(make_submission([written("l1", "LRU cache")]))
    assert store.list_jobs()[0].free_text[0].question_text == "Design a cache."
    assert store.list_responses("sess-1")[0].question_text == "Design a cache."


@pytest.mark.parametrize("payload", [
    {"responses": [{"questionId": "q1", "questionType": "mcq", "answer": "A"}]},
    {"sessionId": "s", "responses": []},
    {"sessionId": "s"},
    {"sessionId": "s", "responses": "nope"},
    {"sessionId": "s", "responses": [{"questionId": "q1", "questionType": "essay", "answer": "A"}]},
    {"sessionId": "s", "responses": [{"questionType": "mcq", "answer": "A"}]},
    {"sessionId": "s", "responses": [{"questionId": "q1", "questionType": "mcq", "timeSpent": "soon"}]},
])
def test_invalid_payloads_are_rejected(payload):
    with pytest.raises(ValidationError):
        submission_from_payload(payload)


def test_payload_is_parsed_from_camel_case():
    sub = submission_from_payload({
        "sessionId": " s-9 ",
        "techStack": "Python",
        "isPro": True,
        "resumeText": "cv",
        "responses": [{"questionId": 7, "questionType": "MCQ", "answer": 2, "timeSpent": "12.5"}],
    })
    assert sub.session_id == "s-9"
    assert sub.is_pro is True
    assert sub.responses[0].question_id == "7"
    assert sub.responses[0].question_type == "mcq"
    assert sub.responses[0].answer == "2"
    assert sub.responses[0].time_spent == 12.5


class _BrokenStore(MemoryStore):
    def append_responses(self, session_id, responses):
        raise StoreError("disk full")


def test_store_failure_aborts_submission(bank):
    store = _BrokenStore()
    router = EvaluationRouter(bank, store, make_evaluator())
    with pytest.raises(StoreError):
        router.submit(make_submission([mcq("q1", "A")]))
    assert store.get_final_report("sess-1") is None


class _NoQueueStore(MemoryStore):
    def enqueue(self, job):
        raise StoreError("jobs table unavailable")


def test_enqueue_failure_leaves_no_orphaned_provisional_report(bank):
    store = _NoQueueStore()
    router = EvaluationRouter(bank, store, make_evaluator())
    with pytest.raises(StoreError):
        router.submit(make_submission([mcq("q1", "A"), written("l1", "LRU cache")]))

    report = store.get_final_report("sess-1")
    assert report["long_short_evaluation"] is None
    assert report["status"] == REPORT_PROCESSING


@pytest.mark.parametrize("raw,expected", [
    (False, False), (True, True), ("false", False), ("False", False), ("0", False),
    ("true", True), ("yes", True), (1, True), (0, False), (None, False),
])
def test_is_pro_flag_is_parsed_not_truth_tested(raw, expected):
    sub = submission_from_payload({
        "sessionId": "s", "isPro": raw,
        "responses": [{"questionId": "q1", "questionType": "mcq", "answer": "A"}],
    })
    assert sub.is_pro is expected


@pytest.mark.parametrize("raw", ["maybe", ["true"], {"on": 1}])
def test_unrecognized_is_pro_is_rejected(raw):
    with pytest.raises(ValidationError):
        submission_from_payload({
            "sessionId": "s", "isPro": raw,
            "responses": [{"questionId": "q1", "questionType": "mcq", "answer": "A"}],
        })
