from __future__ import annotations

import json

import pytest

from interview_core.errors import ParseError
from interview_core.parsing import parse_evaluation
from interview_core.schema import EvaluationResult
from tests.conftest import model_reply


def test_fenced_object_parses_to_identical_dict():
    obj = {"overallScore": 81, "strengths": ["a", "b"], "nested": {"k": [1, 2, 3]}}
    raw = "```json\n" + json.dumps(obj, indent=2) + "\n```"
    assert parse_evaluation(raw) == obj


def test_prose_around_object_is_discarded():
    raw = 'Sure! Here is the evaluation:\n{"overallScore": 64}\nLet me know if you need more.'
    assert parse_evaluation(raw) == {"overallScore": 64}


def test_trailing_commas_single_quotes_and_bare_keys_are_repaired():
    raw = "{'overallScore': 70, 'strengths': ['clear', 'concise',], writtenAnswerScore: 6,}"
    assert parse_evaluation(raw) == {
        "overallScore": 70,
        "strengths": ["clear", "concise"],
        "writtenAnswerScore": 6,
    }


def test_tabs_and_blank_lines_inside_span_are_repaired():
    raw = '{\n"summary": "line\tone",\n\n\n"overallScore": 50,\n}'
    assert parse_evaluation(raw) == {"summary": "line  one", "overallScore": 50}


def test_apostrophes_in_valid_json_are_left_alone():
    raw = '{"summary": "candidate\'s answer, \'mostly\' right"}'
    assert parse_evaluation(raw) == {"summary": "candidate's answer, 'mostly' right"}


def test_repair_leaves_text_inside_string_values_alone():
    raw = '{"summary": "Good grasp of caching, however: invalidation was skipped", "overallScore": 70,}'
    assert parse_evaluation(raw) == {
        "summary": "Good grasp of caching, however: invalidation was skipped",
        "overallScore": 70,
    }


def test_requoted_values_are_not_rewritten_as_keys():
    raw = "{'summary': 'solid, note: missed edge cases', overallScore: 65, strengths: ['a, b',],}"
    assert parse_evaluation(raw) == {
        "summary": "solid, note: missed edge cases",
        "overallScore": 65,
        "strengths": ["a, b"],
    }


@pytest.mark.parametrize("raw", ["", "   ", "no json here", "[1, 2, 3]", "} backwards {", "{not json at all}"])
def test_unparseable_output_raises_parse_error(raw):
    with pytest.raises(ParseError):
        parse_evaluation(raw)


def test_result_pins_mcq_score_and_rederives_pass_fail():
    data = json.loads(model_reply(overall=55, pass_fail="PASS"))
    result = EvaluationResult.from_model_output(data, mcq_percent=66.7)

    assert result.mcq_score == 66.7
    assert result.pass_fail == "FAIL"
    assert result.provisional is False
    out = result.to_dict()
    assert out["writtenAnswerScore"] == 7
    assert out["writtenAnalysis"][0]["modelAnswer"] == "LRU with TTL"


def test_pass_threshold_is_inclusive():
    data = json.loads(model_reply(overall=60, pass_fail="FAIL"))
    assert EvaluationResult.from_model_output(data, mcq_percent=0).pass_fail == "PASS"


@pytest.mark.parametrize("patch", [
    {"overallScore": 140},
    {"writtenAnswerScore": -1},
    {"writtenAnswerScore": None},
    {"technicalRating": 11},
])
def test_out_of_range_or_missing_fields_are_parse_errors(patch):
    data = json.loads(model_reply())
    data.update(patch)
    if patch.get("writtenAnswerScore", 0) is None:
        data.pop("writtenAnswerScore")
    with pytest.raises(ParseError):
        EvaluationResult.from_model_output(data, mcq_percent=50)
