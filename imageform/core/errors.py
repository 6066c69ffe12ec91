"""Exception types shared by configuration, handler, and provider layers.

Error taxonomy:
    - `AppError`: recognized application failure carrying an HTTP-like status.
      Raised by the image client for upstream failures.
    - `ValidationError`: submission rejected before any downstream call
      (always status 400).
    - `ConfigError`: startup configuration precondition violated.

Any exception outside this hierarchy is treated as unknown by
`imageform.core.handler` and normalized to status 500.
"""


class AppError(Exception):
    """Application failure with a user-facing message and status code."""

    def __init__(self, message: str, status: int | None = 500):
        super().__init__(message)
        self.message = message
        self.status = status


class ValidationError(AppError):
    """Submission field set failed validation."""

    def __init__(self, message: str):
        super().__init__(message, status=400)


class ConfigError(Exception):
    """Configuration could not be loaded or violates a startup precondition."""
