# interview_core/llm_cfg.py
from __future__ import annotations
import os, json, pathlib
from dataclasses import dataclass
from typing import Union
from openai import AzureOpenAI, OpenAI

BACKENDS = ("azure", "openai")


@dataclass(frozen=True)
class LLMSettings:
    backend: str
    model: str
    api_key: str
    endpoint: str = ""
    api_version: str = ""


def backend_in_use() -> str:
    b = (os.getenv("LLM_BACKEND") or "").lower().strip()
    return b if b in BACKENDS else "none"


def _from_env(backend: str) -> dict[str, str]:
    if backend == "azure":
        return {
            "endpoint":   os.getenv("AZURE_OPENAI_ENDPOINT", ""),
            "api_key":    os.getenv("AZURE_OPENAI_API_KEY", ""),
            "api_version":os.getenv("AZURE_OPENAI_API_VERSION", ""),
            "model":      os.getenv("AZURE_OPENAI_DEPLOYMENT", ""),
        }
    return {
        "api_key": os.getenv("OPENAI_API_KEY", ""),
        "model":   os.getenv("OPENAI_MODEL", ""),
    }


def _from_json(path: str = ".llm_config.json") -> dict[str, str]:
    p = pathlib.Path(path)
    if not p.exists(): return {}
    try:
        j = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return {k: str(j.get(k, "")) for k in ("endpoint", "api_key", "api_version", "model") if j.get(k)}


def settings() -> LLMSettings:
    backend = backend_in_use()
    if backend == "none":
        raise RuntimeError("LLM backend not configured. Set LLM_BACKEND to one of: " + ", ".join(BACKENDS))
    cfg = _from_env(backend)
    if not all(cfg.values()):
        for k, v in _from_json().items():
            if not cfg.get(k): cfg[k] = v
    missing = [k for k, v in cfg.items() if not v]
    if missing:
        raise RuntimeError(f"{backend} LLM backend not configured. Missing: {', '.join(missing)}")
    return LLMSettings(
        backend=backend,
        model=cfg["model"],
        api_key=cfg["api_key"],
        endpoint=cfg.get("endpoint") or os.getenv("OPENAI_BASE_URL", ""),
        api_version=cfg.get("api_version", ""),
    )


def client(s: LLMSettings | None = None) -> Union[AzureOpenAI, OpenAI]:
    s = s or settings()
    if s.backend == "azure":
        return AzureOpenAI(
            azure_endpoint=s.endpoint,
            api_key=s.api_key,
            api_version=s.api_version,
        )
    # OPENAI_BASE_URL lets this point at any OpenAI-compatible endpoint (e.g. Mistral)
    return OpenAI(api_key=s.api_key, base_url=s.endpoint or None)
