"""Extract and repair the JSON object in a grading model's reply.

Models wrap JSON in markdown fences, add prose around it, or emit
JavaScript-ish objects. Repairs are best effort and only ever touch the
located `{...}` span; anything still unparseable is a `ParseError`, which
the evaluator treats as a failed attempt.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict

from .errors import ParseError

_FENCE_OPEN_RX = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n?")
_FENCE_CLOSE_RX = re.compile(r"\n?\s*```\s*$")
_TRAILING_COMMA_RX = re.compile(r",\s*([}\]])")
_BARE_KEY_RX = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_SINGLE_QUOTED_RX = re.compile(r"([{\[,:]\s*)'([^'\\\n]*(?:\\.[^'\\\n]*)*)'(?=\s*[,:}\]])")
_BLANK_LINES_RX = re.compile(r"\n\s*\n+")
_DQ_STRING_RX = re.compile(r'"(?:[^"\\]|\\.)*"')


def strip_fence(text: str) -> str:
    out = _FENCE_OPEN_RX.sub("", text, count=1)
    return _FENCE_CLOSE_RX.sub("", out, count=1)


def extract_object(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise ParseError("no JSON object found in model output")
    return text[start:end + 1]


def _requote(m: re.Match) -> str:
    inner = m.group(2).replace("\\'", "'").replace('"', '\\"')
    return f'{m.group(1)}"{inner}"'


def _outside_strings(s: str, fix) -> str:
    """Apply `fix` to the text between double-quoted string literals only."""
    out, pos = [], 0
    for m in _DQ_STRING_RX.finditer(s):
        out.append(fix(s[pos:m.start()]))
        out.append(m.group(0))
        pos = m.end()
    out.append(fix(s[pos:]))
    return "".join(out)


def _fix_structure(gap: str) -> str:
    gap = _TRAILING_COMMA_RX.sub(r"\1", gap)
    return _BARE_KEY_RX.sub(r'\1"\2"\3', gap)


def repair_json(span: str) -> str:
    s = span.replace("\t", "  ")
    s = _BLANK_LINES_RX.sub("\n", s)
    s = _outside_strings(s, lambda gap: _SINGLE_QUOTED_RX.sub(_requote, gap))
    # second pass sees the requoted strings as literals
    return _outside_strings(s, _fix_structure)


def parse_evaluation(raw: str | None) -> Dict[str, Any]:
    """Return the JSON object embedded in `raw`, repairing it if needed."""
    if not raw or not raw.strip():
        raise ParseError("empty model output")
    span = extract_object(strip_fence(raw))
    try:
        data: Any = json.loads(span)
    except json.JSONDecodeError:
        fixed = repair_json(span)
        try:
            data = json.loads(fixed, strict=False)
        except json.JSONDecodeError as e:
            raise ParseError(f"model output is not valid JSON after repair: {e.msg} at pos {e.pos}") from e
    if not isinstance(data, dict):
        raise ParseError("model output JSON is not an object")
    return data


__all__ = ["parse_evaluation", "repair_json", "extract_object", "strip_fence"]
