"""Generation result contracts returned by `imageform.core.handler`.

Architectural role:
    Defines the tagged outcome of one submission. Adapters (HTTP, CLI) branch
    on `ErrorResult.kind` / `status` instead of inspecting exception types.

Wire mapping:
    - `ImageResult` -> `{"image": <base64>}` with status 200.
    - `ErrorResult` -> `{"error": <message>}` with `status`.
"""

from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed submission."""

    VALIDATION = "validation"
    DOWNSTREAM = "downstream"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ImageResult:
    """Successful generation.

    Attributes:
        image: Base64-encoded image bytes exactly as returned downstream.
    """

    image: str
    status: int = field(default=200, init=False)
    ok: bool = field(default=True, init=False)

    def to_body(self) -> dict:
        return {"image": self.image}


@dataclass(frozen=True)
class ErrorResult:
    """Failed generation with a localized message and HTTP-like status."""

    kind: ErrorKind
    message: str
    status: int
    ok: bool = field(default=False, init=False)

    def to_body(self) -> dict:
        return {"error": self.message}


GenerationResult = ImageResult | ErrorResult
