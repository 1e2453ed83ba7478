# interview_core/normalize.py
from __future__ import annotations
import re
from typing import Any

from .config import OPTION_SYMBOLS

_OPTION_PREFIX_RX = re.compile(r"^option[_\-\s]+", re.I)


def normalize_answer(raw: Any) -> str:
    """
    Canonicalize an MCQ answer token to one of A-D.
    Order: digit index 1-4, "option_x" prefix, single letter a-d, then the
    trimmed uppercased input. Never raises.
    """
    if raw is None:
        return ""
    s = str(raw).strip()
    if s.isascii() and s.isdigit():
        idx = int(s)
        if 1 <= idx <= len(OPTION_SYMBOLS):
            return OPTION_SYMBOLS[idx - 1]
    m = _OPTION_PREFIX_RX.match(s)
    if m:
        return s[m.end():].strip().upper()
    if len(s) == 1 and s.upper() in OPTION_SYMBOLS:
        return s.upper()
    return s.upper()


__all__ = ["normalize_answer"]
