"""Checks that provider credentials and the Claude CLI are usable."""

from __future__ import annotations

import json
import shutil
import urllib.error
import urllib.request

_TIMEOUT_SECONDS = 15


class ValidationError(Exception):
    """Raised when a credential or tool cannot be validated."""


def _send(request: urllib.request.Request) -> int:
    """Send a validation request, returning the HTTP status; a 401 is an error."""
    try:
        with urllib.request.urlopen(request, timeout=_TIMEOUT_SECONDS) as resp:
            status = int(resp.status)
            resp.read()
    except urllib.error.HTTPError as exc:
        status = int(exc.code)
    except (urllib.error.URLError, OSError) as exc:
        raise ValidationError(f"connection failed: {exc}") from exc
    if status == 401:
        raise ValidationError("invalid API key (401 Unauthorized)")
    return status


def _validate_anthropic(api_key: str) -> int:
    body = {
        "model": "claude-haiku-4-5-20251001",
        "max_tokens": 1,
        "messages": [{"role": "user", "content": "hi"}],
    }
    request = urllib.request.Request(
        "https://api.anthropic.com/v1/messages",
        data=json.dumps(body).encode(),
        method="POST",
        headers={
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": "2023-06-01",
        },
    )
    status = _send(request)
    if status == 403:
        raise ValidationError("API key does not have permission (403 Forbidden)")
    if 200 <= status < 500:
        return status
    raise ValidationError(f"unexpected status {status} from Anthropic API")


def _validate_openai(api_key: str) -> int:
    body = {
        "model": "gpt-4o-mini",
        "max_tokens": 1,
        "messages": [{"role": "user", "content": "hi"}],
    }
    request = urllib.request.Request(
        "https://api.openai.com/v1/chat/completions",
        data=json.dumps(body).encode(),
        method="POST",
        headers={"Content-Type": "application/json", "Authorization": f"Bearer {api_key}"},
    )
    status = _send(request)
    if 200 <= status < 500:
        return status
    raise ValidationError(f"unexpected status {status} from OpenAI API")


def _validate_grok(api_key: str) -> int:
    request = urllib.request.Request(
        "https://api.x.ai/v1/models",
        method="GET",
        headers={"Authorization": f"Bearer {api_key}"},
    )
    status = _send(request)
    if status == 403:
        raise ValidationError("API key does not have permission (403 Forbidden)")
    if 200 <= status < 500:
        return status
    raise ValidationError(f"unexpected status {status} from xAI API")


def _validate_openrouter(api_key: str) -> int:
    # This endpoint validates the key without making a model call.
    request = urllib.request.Request(
        "https://openrouter.ai/api/v1/auth/key",
        method="GET",
        headers={"Authorization": f"Bearer {api_key}"},
    )
    status = _send(request)
    if status != 200:
        raise ValidationError(f"unexpected status {status} from OpenRouter API")
    return status


_VALIDATORS = {
    "anthropic": _validate_anthropic,
    "openai": _validate_openai,
    "grok": _validate_grok,
    "openrouter": _validate_openrouter,
}


def validate_api_key(provider: str, api_key: str) -> int | None:
    """Make a lightweight call to check the key works; return the HTTP status seen.

    The Claude CLI uses its own authentication, so nothing is checked and None is
    returned for it. Raises ValidationError when the key is rejected.
    """
    if provider == "claude":
        return None
    validator = _VALIDATORS.get(provider)
    if validator is None:
        raise ValidationError(f"unknown provider: {provider}")
    return validator(api_key)


def check_claude_cli() -> str:
    """Return the path of the claude binary, raising ValidationError if it is not on PATH."""
    path = shutil.which("claude")
    if path is None:
        raise ValidationError(
            "claude CLI not found in PATH — install it from "
            "https://docs.anthropic.com/en/docs/claude-code/overview"
        )
    return path