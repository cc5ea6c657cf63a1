"""Interactive terminal prompts used by the setup flow."""

from __future__ import annotations

import getpass
import sys
from collections.abc import Callable, Sequence

from canaryreview.guidance import provider_guidance
from canaryreview.models import model_options, triage_model_options

InputFn = Callable[[str], str]

_SETUP_MODES = [
    ("Local development (review changes on this machine)", "local"),
    ("GitHub Actions (automated PR reviews)", "github"),
]

_PROVIDERS = [
    ("Anthropic", "anthropic"),
    ("OpenAI", "openai"),
    ("Grok (xAI)", "grok"),
    ("OpenRouter", "openrouter"),
    ("Claude CLI", "claude"),
]


def choose(
    title: str,
    options: Sequence[tuple[str, str]],
    default: str | None = None,
    input_fn: InputFn = input,
) -> str:
    """Show numbered (label, value) options and return the chosen value.

    An empty answer picks the default (the first option when none is given);
    an answer may be an option number or a value.
    """
    if not options:
        raise ValueError("no options to choose from")
    values = [value for _, value in options]
    if default is None or default not in values:
        default = values[0]
    print(title, file=sys.stderr)
    for number, (label, value) in enumerate(options, start=1):
        mark = "*" if value == default else " "
        print(f" {mark} {number}) {label}", file=sys.stderr)
    default_number = values.index(default) + 1
    while True:
        answer = input_fn(f"Choice [{default_number}]: ").strip()
        if not answer:
            return default
        if answer.isdigit() and 1 <= int(answer) <= len(values):
            return values[int(answer) - 1]
        if answer in values:
            return answer
        print(f"Please enter a number between 1 and {len(values)}.", file=sys.stderr)


def select_setup_mode(input_fn: InputFn = input) -> str:
    """Ask whether to set up local reviews or GitHub Actions."""
    return choose("How do you want to set up CodeCanary?", _SETUP_MODES, input_fn=input_fn)


def select_provider(input_fn: InputFn = input) -> str:
    """Ask which model provider to use."""
    return choose("Which AI provider do you want to use?", _PROVIDERS, input_fn=input_fn)


def _select_from(
    title: str, description: str, models: list[str], input_fn: InputFn
) -> str:
    if not models:
        return ""
    print(description, file=sys.stderr)
    return choose(title, [(m, m) for m in models], models[0], input_fn)


def select_model(provider: str, input_fn: InputFn = input) -> str:
    """Ask for the review model; "" when the provider offers no choices."""
    return _select_from(
        "Review model", "Used for the main code review", model_options(provider), input_fn
    )


def select_triage_model(provider: str, input_fn: InputFn = input) -> str:
    """Ask for the triage model; "" when the provider offers no choices."""
    return _select_from(
        "Triage model",
        "Cheaper/faster model used to re-evaluate threads on incremental reviews",
        triage_model_options(provider),
        input_fn,
    )


def input_api_key(provider: str, input_fn: InputFn = getpass.getpass) -> str:
    """Ask for the provider's API key until a non-blank one is given."""
    if not provider:
        raise ValueError("provider must not be empty")
    print(f"{provider[:1].upper()}{provider[1:]} API Key", file=sys.stderr)
    guidance = provider_guidance(provider)
    if guidance:
        print(guidance, file=sys.stderr)
    while True:
        key = input_fn("API Key: ").strip()
        if key:
            return key
        print("API key cannot be empty", file=sys.stderr)


def confirm_yes_no(title: str, input_fn: InputFn = input) -> bool:
    """Ask a yes/no question; an empty answer means no."""
    while True:
        answer = input_fn(f"{title} [y/N]: ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("", "n", "no"):
            return False
        print("Please answer yes or no.", file=sys.stderr)