"""Submission data contract and inbound form-field parsing.

Inbound field set (all strings, as posted by the form page):
    `prompt`, `enhance` ("true"/"false"), `model`, `size`, `numSteps`.

Parsing rules:
    - `enhance` is true only for the exact string "true".
    - `numSteps` that is not a base-10 integer parses to `None`; the handler
      rejects it after the prompt and model checks, so a missing prompt is
      always reported first.
    - Missing fields become empty strings so the handler can report them.
"""

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class Submission:
    """One user form post, consumed once by the handler."""

    prompt: str
    enhance: bool
    model_id: str
    size: str
    num_steps: int | None


def parse_steps(raw: str | None) -> int | None:
    try:
        return int((raw or "").strip(), 10)
    except ValueError:
        return None


def parse_submission(fields: Mapping[str, str | None]) -> Submission:
    """Build a `Submission` from raw form fields without validating it."""
    return Submission(
        prompt=fields.get("prompt") or "",
        enhance=fields.get("enhance") == "true",
        model_id=fields.get("model") or "",
        size=fields.get("size") or "",
        num_steps=parse_steps(fields.get("numSteps")),
    )
