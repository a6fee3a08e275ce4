"""
peerlink/llm/insight.py

Compatibility insight from a generative model, used to nudge the
deterministic score of one candidate.

Design principles:
- One call per candidate, no retries
- Hard timeout per call (config.LLM_TIMEOUT_SECONDS)
- Response decoded against a strict schema; any violation is a parse failure
- Raises InsightError / InsightParseError; the orchestrator owns the fallback
- API key MUST NOT appear in any log, exception message or structured output
"""
from __future__ import annotations

import re
from typing import Optional, Protocol

import anthropic
import openai
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from peerlink import config as _config
from peerlink.llm.prompt import _SYSTEM_PROMPT, build_insight_prompt
from peerlink.models import RecommendationContext, UserProfile

MIN_ADJUSTMENT = 0.8
MAX_ADJUSTMENT = 1.2
NEUTRAL_ADJUSTMENT = 1.0

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class InsightError(Exception):
    """Raised when the model call fails (timeout, API error, empty output)."""


class InsightParseError(InsightError):
    """Raised when the model answered but the answer does not fit the schema."""


class AIInsight(BaseModel):
    # strict: "1.1" or true are schema violations, not numbers
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, frozen=True, strict=True)

    insight: str = Field(min_length=1)
    adjustment_factor: float = Field(alias="adjustmentFactor", ge=MIN_ADJUSTMENT, le=MAX_ADJUSTMENT)
    confidence: float = Field(ge=0, le=100)


# Model answered with something we could not use.
PARSE_FALLBACK = AIInsight(
    insight="AI analysis suggests potential compatibility based on shared health journey",
    adjustment_factor=NEUTRAL_ADJUSTMENT,
    confidence=70,
)

# Model was unreachable, too slow, or not configured.
CALL_FALLBACK = AIInsight(
    insight="Compatible based on shared experiences and support preferences",
    adjustment_factor=NEUTRAL_ADJUSTMENT,
    confidence=60,
)


def decode_insight(raw: Optional[str]) -> AIInsight:
    """
    Parse model output into an AIInsight. A single surrounding markdown code
    fence is tolerated; anything else must be exactly one JSON object.
    """
    text = (raw or "").strip()
    if not text:
        raise InsightParseError("Model returned an empty response.")

    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        return AIInsight.model_validate_json(text)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in e["loc"]) or "<root>" for e in exc.errors()})
        raise InsightParseError(f"Model response failed validation: {', '.join(fields)}") from None


class InsightProvider(Protocol):
    async def generate(
            self,
            *,
            user: UserProfile,
            match: UserProfile,
            context: RecommendationContext,
    ) -> AIInsight:
        ...


class LLMInsightClient:
    """
    Calls an LLM (Anthropic or OpenAI) for a compatibility insight.

    One instance is shared by every candidate of a request; the underlying
    async SDK client is created on first use.
    """

    _MAX_TOKENS = 300

    def __init__(
            self,
            *,
            api_key: str,
            model: Optional[str] = None,
            provider: str = "anthropic",
            timeout_seconds: Optional[float] = None,
    ) -> None:
        if not api_key:
            raise InsightError("LLM API key must not be empty.")
        self._api_key = api_key
        self._model = (model or _config.PEERLINK_LLM_MODEL).strip()
        self._provider = provider.strip().lower()
        self._timeout = timeout_seconds or _config.LLM_TIMEOUT_SECONDS
        self._client = None

        if self._provider not in ("anthropic", "openai"):
            raise InsightError(
                f"Unsupported provider '{self._provider}'. Use 'anthropic' or 'openai'."
            )

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    async def aclose(self) -> None:
        """Release the SDK client's connection pool. Safe to call twice."""
        if self._client is None:
            return
        client, self._client = self._client, None
        await client.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
            self,
            *,
            user: UserProfile,
            match: UserProfile,
            context: RecommendationContext,
    ) -> AIInsight:
        """
        Return the decoded insight for one candidate.
        Raises InsightParseError on unusable output and InsightError on any other failure.
        The API key is never included in the exception message.
        """
        prompt = build_insight_prompt(user=user, match=match, context=context)
        try:
            if self._provider == "anthropic":
                raw = await self._call_anthropic(prompt)
            else:
                raw = await self._call_openai(prompt)
        except InsightError:
            raise
        except Exception as exc:
            # Sanitize: never let the key propagate through exception messages
            raise InsightError(f"LLM call failed: {type(exc).__name__}") from None

        return decode_insight(raw)

    # ------------------------------------------------------------------
    # Provider implementations
    # ------------------------------------------------------------------

    async def _call_anthropic(self, prompt: str) -> str:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        try:
            message = await self._client.messages.create(
                model=self._model,
                max_tokens=self._MAX_TOKENS,
                system=_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError:
            raise InsightError(f"Anthropic API timed out after {self._timeout:g} seconds.")
        except anthropic.APIError as exc:
            raise InsightError(f"Anthropic API error: {type(exc).__name__}") from None

        for block in message.content:
            if block.type == "text":
                return block.text
        raise InsightError("Anthropic returned no text content.")

    async def _call_openai(self, prompt: str) -> str:
        if self._client is None:
            self._client = openai.AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._MAX_TOKENS,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": _SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.APITimeoutError:
            raise InsightError(f"OpenAI API timed out after {self._timeout:g} seconds.")
        except openai.APIError as exc:
            raise InsightError(f"OpenAI API error: {type(exc).__name__}") from None

        content = response.choices[0].message.content
        if not content:
            raise InsightError("OpenAI returned empty content.")
        return content


def insight_client_from_config() -> Optional[LLMInsightClient]:
    """
    Client for the configured provider, or None when no key is available
    (every candidate then gets the neutral adjustment).
    """
    provider = _config.PEERLINK_LLM_PROVIDER
    api_key = _config.resolve_llm_key(provider)
    if not api_key:
        return None
    return LLMInsightClient(
        api_key=api_key,
        provider=provider,
        model=_config.PEERLINK_LLM_MODEL,
        timeout_seconds=_config.LLM_TIMEOUT_SECONDS,
    )
