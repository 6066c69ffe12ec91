"""Submission handling: validate, adapt, delegate, normalize.

Control-flow model:
    1. Validate the submission against the configured registry and bounds.
    2. Prefix the prompt with the enhancement marker when requested.
    3. Call the image-generation capability once.
    4. Return an `ImageResult` or a tagged `ErrorResult`.

Error handling strategy:
    - `ValidationError` -> `ErrorKind.VALIDATION`, status 400, no downstream call.
    - `AppError` from the capability -> `ErrorKind.DOWNSTREAM`, its status
      (500 when the error carries none), message wrapped for display.
    - Any other exception -> `ErrorKind.UNKNOWN`, status 500, generic message.
      The traceback is logged here and goes no further.

No retries and no partial results.
"""

import base64
import logging
from typing import Callable, Mapping

from imageform.config.settings import AppConfig
from imageform.core import messages
from imageform.core.errors import AppError, ValidationError
from imageform.core.result_types import ErrorKind, ErrorResult, GenerationResult, ImageResult
from imageform.core.submission import Submission, parse_submission


logger = logging.getLogger(__name__)

ENHANCE_MARKER = "---tl"

ImageGenerator = Callable[[str, str, str, int], bytes]


def adapt_prompt(prompt: str, enhance: bool) -> str:
    """Return the prompt forwarded downstream."""
    if enhance:
        return f"{ENHANCE_MARKER} {prompt}"
    return prompt


class SubmissionHandler:
    """Request/response adapter between the form and the image capability.

    Args:
        config: Immutable application configuration.
        generate_image: Callable `(prompt, model_path, size, num_steps) -> bytes`
            that may raise `AppError`.
    """

    def __init__(self, config: AppConfig, generate_image: ImageGenerator):
        self.config = config
        self.generate_image = generate_image

    def validate(self, submission: Submission) -> str:
        """Check a submission and return its resolved model path.

        Raises:
            ValidationError: empty prompt, unknown model, unsupported size, or
                step count missing or outside the configured bounds.
        """
        if not submission.prompt:
            raise ValidationError(messages.MISSING_PROMPT)

        model_path = self.config.resolve_model(submission.model_id)
        if not model_path:
            raise ValidationError(messages.INVALID_MODEL)

        if submission.size not in self.config.sizes:
            raise ValidationError(messages.INVALID_SIZE)

        steps = submission.num_steps
        if steps is None or not self.config.min_steps <= steps <= self.config.max_steps:
            raise ValidationError(messages.INVALID_STEPS)

        return model_path

    def handle_fields(self, fields: Mapping[str, str | None]) -> GenerationResult:
        """Parse raw form fields and handle the resulting submission."""
        return self.handle(parse_submission(fields))

    def handle(self, submission: Submission) -> GenerationResult:
        try:
            model_path = self.validate(submission)
        except ValidationError as exc:
            logger.info("Rejected submission: %s", exc.message)
            return ErrorResult(ErrorKind.VALIDATION, exc.message, 400)

        prompt = adapt_prompt(submission.prompt, submission.enhance)

        try:
            image_bytes = self.generate_image(prompt, model_path, submission.size, submission.num_steps)
        except AppError as exc:
            logger.warning("Image generation failed (%s): %s", exc.status, exc.message)
            return ErrorResult(
                ErrorKind.DOWNSTREAM,
                messages.GENERATION_FAILED.format(detail=exc.message),
                exc.status or 500,
            )
        except Exception:
            logger.exception("Image generation failed with an unexpected error")
            return ErrorResult(
                ErrorKind.UNKNOWN,
                messages.GENERATION_FAILED.format(detail=messages.UNKNOWN_FAILURE),
                500,
            )

        logger.info(
            "Generated image with %s (%s, %d steps, %d bytes)",
            submission.model_id, submission.size, submission.num_steps, len(image_bytes),
        )
        return ImageResult(base64.b64encode(image_bytes).decode("ascii"))
