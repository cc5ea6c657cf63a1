"""Human-readable setup guidance."""

from __future__ import annotations

TELEMETRY_OPT_OUT_MESSAGE = "\nAnonymous telemetry is on. Opt out: CODECANARY_NO_TELEMETRY=1\n"

_PROVIDER_GUIDANCE = {
    "anthropic": "Get your API key at console.anthropic.com",
    "openai": "Get your API key at platform.openai.com",
    "grok": "Get your API key at console.x.ai",
    "openrouter": "Get your API key at openrouter.ai",
    "claude": (
        "CodeCanary will use your Claude CLI's authentication.\n"
        "Make sure you're logged in by running: claude"
    ),
}


def provider_guidance(provider: str) -> str:
    """Return where to get credentials for a provider, or "" if unknown."""
    return _PROVIDER_GUIDANCE.get(provider, "")


def github_permissions_guidance() -> str:
    """Explain the GitHub Actions permissions the workflow needs."""
    return (
        "The workflow requires these GitHub Actions permissions:\n"
        "  contents: read         — read repository code\n"
        "  pull-requests: write   — post review comments on PRs\n"
        "  id-token: write        — OIDC token for secure authentication"
    )