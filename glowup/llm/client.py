"""LLM client wrapper for reply drafting.

Provides a tier-aware interface to the Anthropic API: the ``fast`` tier
drafts routine replies on a small model, the ``deep`` tier drafts sensitive
or complex ones on a larger model.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Sequence

import anthropic

from glowup.errors import GenerationError
from glowup.models import Message, Role
from glowup.triage.routing import Tier

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pricing table (USD per 1 M tokens)
# ---------------------------------------------------------------------------

MODEL_PRICING: dict[str, dict[str, float]] = {
    "claude-sonnet-4-5-20250929": {"input": 3.0, "output": 15.0},
    "claude-sonnet-4-20250514": {"input": 3.0, "output": 15.0},
    "claude-3-5-haiku-20241022": {"input": 0.80, "output": 4.0},
    "claude-opus-4-20250514": {"input": 15.0, "output": 75.0},
}

FAST_MODEL = "claude-3-5-haiku-20241022"
DEEP_MODEL = "claude-sonnet-4-5-20250929"

_NOT_CONFIGURED_MSG = "LLM not configured. Set ANTHROPIC_API_KEY."

# Placeholder user turn when the log opens with the persona's greeting.
_SESSION_OPENER = "(session started)"


# ---------------------------------------------------------------------------
# Response dataclass
# ---------------------------------------------------------------------------


@dataclass
class LLMResponse:
    """Structured response from a drafting call."""

    content: str
    model: str = ""
    tier: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    latency_ms: int = 0
    cost_estimate: float = 0.0


def build_messages(history: Sequence[Message]) -> list[dict[str, str]]:
    """Map the conversation log onto Anthropic chat turns.

    ``system`` messages (operator context) ride on the user side so the model
    sees them as input.  Consecutive turns from the same side are merged, and
    a placeholder user turn is prepended when the log opens with an assistant
    message.
    """
    turns: list[dict[str, str]] = []
    for msg in history:
        role = "assistant" if msg.role == Role.assistant else "user"
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += "\n\n" + msg.content
        else:
            turns.append({"role": role, "content": msg.content})
    if turns and turns[0]["role"] == "assistant":
        turns.insert(0, {"role": "user", "content": _SESSION_OPENER})
    return turns


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class LLMClient:
    """Thin wrapper around the Anthropic Python SDK.

    Parameters
    ----------
    fast_model, deep_model : str
        Model identifiers used for each generation tier.
    api_key : str | None
        Anthropic API key.  Falls back to the ``ANTHROPIC_API_KEY``
        environment variable when *None*.
    """

    def __init__(
        self,
        fast_model: str = FAST_MODEL,
        deep_model: str = DEEP_MODEL,
        api_key: str | None = None,
        max_tokens: int = 1024,
    ) -> None:
        self.models = {Tier.fast: fast_model, Tier.deep: deep_model}
        self.max_tokens = max_tokens
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self._configured = bool(self.api_key)

        if self._configured:
            self._async_client = anthropic.AsyncAnthropic(api_key=self.api_key)
        else:
            self._async_client = None  # type: ignore[assignment]

    # -- properties ----------------------------------------------------------

    @property
    def configured(self) -> bool:
        """Return *True* if an API key is available."""
        return self._configured

    def model_for(self, tier: Tier) -> str:
        return self.models[Tier(tier)]

    # -- cost helpers --------------------------------------------------------

    @staticmethod
    def _estimate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
        pricing = MODEL_PRICING.get(model, MODEL_PRICING[DEEP_MODEL])
        input_cost = (input_tokens / 1_000_000) * pricing["input"]
        output_cost = (output_tokens / 1_000_000) * pricing["output"]
        return round(input_cost + output_cost, 6)

    # -- drafting ------------------------------------------------------------

    async def generate(
        self,
        history: Sequence[Message],
        system_instruction: str,
        temperature: float,
        tier: Tier,
    ) -> LLMResponse:
        """Draft the next assistant reply for *history*.

        Raises :class:`GenerationError` when the client is not configured or
        the API call fails.
        """
        if not self._configured:
            raise GenerationError(_NOT_CONFIGURED_MSG, retryable=False)

        tier = Tier(tier)
        model = self.model_for(tier)
        kwargs: dict = {
            "model": model,
            "max_tokens": self.max_tokens,
            "temperature": temperature,
            "messages": build_messages(history),
        }
        if system_instruction:
            kwargs["system"] = system_instruction

        start = time.monotonic()
        try:
            response = await self._async_client.messages.create(**kwargs)
        except anthropic.APIStatusError as exc:
            logger.warning("Drafting call failed (%s tier, HTTP %s)", tier.value, exc.status_code)
            retryable = exc.status_code == 429 or exc.status_code >= 500
            raise GenerationError(f"Model returned HTTP {exc.status_code}", retryable=retryable) from exc
        except anthropic.APIError as exc:
            logger.warning("Drafting call failed (%s tier): %s", tier.value, exc.__class__.__name__)
            raise GenerationError("Could not reach the drafting model") from exc
        latency_ms = int((time.monotonic() - start) * 1000)

        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens
        content = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )

        return LLMResponse(
            content=content,
            model=model,
            tier=tier.value,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
            latency_ms=latency_ms,
            cost_estimate=self._estimate_cost(model, input_tokens, output_tokens),
        )
