from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


OPTION_SYMBOLS: tuple[str, ...] = ("A", "B", "C", "D")
QUESTION_TYPES: tuple[str, ...] = ("mcq", "short", "long")
FREE_TEXT_TYPES: tuple[str, ...] = ("short", "long")

LLM_TEMPERATURE: float = 0.2
LLM_MAX_TOKENS: int = 2000
LLM_RETRIES: int = 3
LLM_RETRY_BASE_DELAY: float = 1.0

QUEUE_BATCH_LIMIT: int = 5

PASS_THRESHOLD: float = 60.0
RESUME_CONTEXT_CHARS: int = 1000

QUESTION_BANK_PATH: str = ""
LLM_LOG_PATH: str = ""
STORE_LOCK_TIMEOUT: float = 10.0
PROVISIONAL_MESSAGE: str = "Written answers are being evaluated. Check back shortly for the full report."

# // env overrides for staging/ops; defaults remain conservative.
LLM_TEMPERATURE = _env_float("LLM_TEMPERATURE", LLM_TEMPERATURE)
LLM_MAX_TOKENS = _env_int("LLM_MAX_TOKENS", LLM_MAX_TOKENS)
LLM_RETRIES = max(0, _env_int("LLM_RETRIES", LLM_RETRIES))
LLM_RETRY_BASE_DELAY = _env_float("LLM_RETRY_BASE_DELAY", LLM_RETRY_BASE_DELAY)
QUEUE_BATCH_LIMIT = max(1, _env_int("QUEUE_BATCH_LIMIT", QUEUE_BATCH_LIMIT))
PASS_THRESHOLD = _env_float("PASS_THRESHOLD", PASS_THRESHOLD)
RESUME_CONTEXT_CHARS = _env_int("RESUME_CONTEXT_CHARS", RESUME_CONTEXT_CHARS)
QUESTION_BANK_PATH = os.getenv("QUESTION_BANK_PATH", QUESTION_BANK_PATH)
LLM_LOG_PATH = os.getenv("LLM_LOG_PATH", LLM_LOG_PATH)
STORE_LOCK_TIMEOUT = _env_float("STORE_LOCK_TIMEOUT", STORE_LOCK_TIMEOUT)
LLM_LOG_ENABLED: bool = _env_bool("LLM_LOG_ENABLED", bool(LLM_LOG_PATH))
