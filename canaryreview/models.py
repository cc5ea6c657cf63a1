"""Model choices offered for each provider during setup."""

from __future__ import annotations

_REVIEW_MODELS: dict[str, tuple[str, ...]] = {
    "anthropic": ("claude-sonnet-4-6", "claude-opus-4-6", "claude-haiku-4-5-20251001"),
    "openai": ("gpt-5.4", "gpt-5.4-mini"),
    "grok": (
        "grok-4.20-0309-non-reasoning",
        "grok-4.20-0309-reasoning",
        "grok-4-1-fast-non-reasoning",
        "grok-4-1-fast-reasoning",
    ),
    "openrouter": (
        "anthropic/claude-sonnet-4-6",
        "anthropic/claude-opus-4-6",
        "openai/gpt-5.4",
    ),
    "claude": ("sonnet", "opus", "haiku"),
}

_TRIAGE_MODELS: dict[str, tuple[str, ...]] = {
    "anthropic": ("claude-haiku-4-5-20251001", "claude-sonnet-4-6", "claude-opus-4-6"),
    "openai": ("gpt-5.4-mini", "gpt-5.4"),
    "grok": (
        "grok-4-1-fast-non-reasoning",
        "grok-4-1-fast-reasoning",
        "grok-4.20-0309-non-reasoning",
        "grok-4.20-0309-reasoning",
    ),
    "openrouter": (
        "anthropic/claude-haiku-4-5-20251001",
        "anthropic/claude-sonnet-4-6",
        "openai/gpt-5.4-mini",
        "openai/gpt-5.4",
    ),
    "claude": ("haiku", "sonnet", "opus"),
}


def model_options(provider: str) -> list[str]:
    """Return the review models offered for a provider, or an empty list if unknown."""
    return list(_REVIEW_MODELS.get(provider, ()))


def triage_model_options(provider: str) -> list[str]:
    """Return the triage models offered for a provider, or an empty list if unknown."""
    return list(_TRIAGE_MODELS.get(provider, ()))