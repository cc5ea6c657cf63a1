"""Generating the GitHub Actions workflow from its canonical template."""

from __future__ import annotations

import re

SENTINEL_ACTION_REF = "alansikora/codecanary@canary"
SENTINEL_SECRET_REF = "secrets.CODECANARY_PROVIDER_SECRET"

_VALID_SECRET_NAME = re.compile(r"[A-Z][A-Z0-9_]*")
_VALID_ACTION_REF = re.compile(r"[a-zA-Z0-9._-]+")


def generate_workflow(secret_name: str, action_ref: str, template: str) -> str:
    """Fill the workflow template with a secret name and an action version tag.

    Raises ValueError for an invalid secret name or action ref, or when the
    template lacks one of the placeholders.
    """
    if not _VALID_SECRET_NAME.fullmatch(secret_name):
        raise ValueError(
            f"invalid secret name {secret_name!r} — must match [A-Z][A-Z0-9_]*"
        )
    if not _VALID_ACTION_REF.fullmatch(action_ref):
        raise ValueError(
            f"invalid action ref {action_ref!r} — must match [a-zA-Z0-9._-]+"
        )

    for sentinel in (SENTINEL_ACTION_REF, SENTINEL_SECRET_REF):
        if sentinel not in template:
            raise ValueError(
                f"workflow template is missing expected sentinel {sentinel!r} — "
                "the template may have been modified incorrectly"
            )

    result = template.replace(SENTINEL_ACTION_REF, "alansikora/codecanary@" + action_ref, 1)
    return result.replace(SENTINEL_SECRET_REF, "secrets." + secret_name, 1)