"""GlowUp LLM integration module.

Provides a tier-aware wrapper around the Anthropic API, per-tier usage
tracking, and the Sage persona prompt.
"""

from glowup.llm.client import LLMClient, LLMResponse, build_messages
from glowup.llm.usage_tracker import UsageRecord, UsageTracker

__all__ = [
    "LLMClient",
    "LLMResponse",
    "build_messages",
    "UsageRecord",
    "UsageTracker",
]
