# peerlink/config.py
from __future__ import annotations

import os
from pathlib import Path

# --- Matching guardrails ---

# Profiles fetched per request; also bounds concurrent LLM calls.
CANDIDATE_POOL_LIMIT_DEFAULT = 20
MAX_RECOMMENDATIONS_DEFAULT = 10
MAX_REASONS = 4

# Store read windows (newest first)
PROFILE_SYMPTOM_ENTRIES = 50
PROFILE_JOURNAL_ENTRIES = 30
CONTEXT_SYMPTOM_ENTRIES = 10
CONTEXT_JOURNAL_ENTRIES = 5


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


CANDIDATE_POOL_LIMIT: int = _env_int("PEERLINK_CANDIDATE_LIMIT", CANDIDATE_POOL_LIMIT_DEFAULT)
MAX_RECOMMENDATIONS: int = _env_int("PEERLINK_MAX_RECOMMENDATIONS", MAX_RECOMMENDATIONS_DEFAULT)

# --- Storage ---

PEERLINK_DATA_DIR: Path = Path(os.environ.get("PEERLINK_DATA_DIR", "").strip() or ".peerlink")

# --- Logging / web ---

PEERLINK_LOG_LEVEL: str = os.environ.get("PEERLINK_LOG_LEVEL", "INFO").strip().upper() or "INFO"
PEERLINK_HOST: str = os.environ.get("PEERLINK_HOST", "127.0.0.1").strip() or "127.0.0.1"
PEERLINK_PORT: int = _env_int("PEERLINK_PORT", 8080)

# --- LLM compatibility insight ---

# Never logged, never included in structured output or exception messages.
PEERLINK_LLM_KEY: str | None = os.environ.get("PEERLINK_LLM_KEY") or None

# Provider selection: "anthropic" | "openai"  (default: anthropic)
PEERLINK_LLM_PROVIDER: str = os.environ.get("PEERLINK_LLM_PROVIDER", "anthropic").strip().lower()

_DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-6",
    "openai": "gpt-4o-mini",
}
PEERLINK_LLM_MODEL: str = (
        os.environ.get("PEERLINK_LLM_MODEL", "").strip()
        or _DEFAULT_MODELS.get(PEERLINK_LLM_PROVIDER, "claude-sonnet-4-6")
)

# One attempt per candidate; a timeout falls back to the neutral adjustment.
LLM_TIMEOUT_SECONDS: float = _env_float("PEERLINK_LLM_TIMEOUT_SECONDS", 10.0)


def llm_configured() -> bool:
    return bool(
        os.getenv("PEERLINK_LLM_KEY")
        or os.getenv("OPENAI_API_KEY")
        or os.getenv("ANTHROPIC_API_KEY")
    )


def resolve_llm_key(provider: str) -> str | None:
    """PEERLINK_LLM_KEY wins; otherwise the provider's own env var."""
    explicit = os.getenv("PEERLINK_LLM_KEY")
    if explicit:
        return explicit
    if provider == "openai":
        return os.getenv("OPENAI_API_KEY") or None
    if provider == "anthropic":
        return os.getenv("ANTHROPIC_API_KEY") or None
    return None
