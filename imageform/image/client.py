"""Cloudflare Workers AI text-to-image client.

Processing flow:
    1. Check that account id and API token are configured.
    2. Split `WxH` size into width/height.
    3. POST JSON payload to `{base}/accounts/{account}/ai/run/{model_path}`.
    4. Return raw image bytes, decoding Base64 when the model answers in JSON.

Response shapes:
    - FLUX models answer `{"result": {"image": "<base64>"}, "success": true}`.
    - SDXL / DreamShaper models answer with a binary `image/png` body.

Error handling strategy:
    - Missing credentials -> `AppError` with status 500.
    - Non-2xx HTTP responses -> `AppError` carrying the upstream status and the
      first error message from the Cloudflare envelope when present.
    - JSON answer without an image -> `AppError` with status 502.
    - Transport failures (`requests.RequestException`) propagate unchanged;
      the handler reports them as unknown failures.

Security considerations:
    - The API token is only sent as a bearer header and never logged.
"""

import base64
import binascii
import logging

import requests

from imageform.config.settings import AppConfig
from imageform.core.errors import AppError


logger = logging.getLogger(__name__)


def split_size(size: str) -> tuple[int, int]:
    """Split a `WxH` string into integer width and height."""
    width, _, height = size.partition("x")
    return int(width), int(height)


def _upstream_error_message(response: requests.Response) -> str:
    """Extract a readable error message from a failed Workers AI response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}"

    errors = body.get("errors") if isinstance(body, dict) else None
    first = errors[0] if isinstance(errors, list) and errors else None
    if isinstance(first, dict) and first.get("message"):
        return str(first["message"])
    return f"HTTP {response.status_code}"


class CloudflareImageClient:
    """Image generation capability backed by Workers AI.

    A new session is opened per call; FastAPI may run `generate_image` on
    several threadpool workers at once.
    """

    def __init__(self, config: AppConfig, session_factory=requests.Session):
        self.config = config
        self.session_factory = session_factory

    def run_url(self, model_path: str) -> str:
        return f"{self.config.api_base_url}/accounts/{self.config.account_id}/ai/run/{model_path}"

    def generate_image(self, prompt: str, model_path: str, size: str, num_steps: int) -> bytes:
        """Generate one image and return its raw bytes.

        Args:
            prompt: Prompt text, already adapted by the handler.
            model_path: Workers AI model path resolved from the registry.
            size: `WxH` size string.
            num_steps: Diffusion step count.

        Raises:
            AppError: missing credentials, upstream HTTP failure, or an
                upstream answer without image data.
        """
        if not self.config.account_id or not self.config.api_token:
            raise AppError("Cloudflare account id or API token is not configured", status=500)

        width, height = split_size(size)
        payload = {
            "prompt": prompt,
            "num_steps": num_steps,
            "width": width,
            "height": height,
        }
        headers = {"Authorization": f"Bearer {self.config.api_token}"}

        with self.session_factory() as session:
            response = session.post(
                self.run_url(model_path),
                json=payload,
                headers=headers,
                timeout=self.config.request_timeout,
            )

        if not 200 <= response.status_code < 300:
            message = _upstream_error_message(response)
            logger.warning(
                "Image request to %s failed with status %s: %s",
                model_path, response.status_code, message,
            )
            raise AppError(message, status=response.status_code)

        content_type = response.headers.get("Content-Type", "")
        if not content_type.startswith("application/json"):
            return response.content

        body = response.json()
        result = body.get("result") if isinstance(body, dict) else None
        image_b64 = result.get("image") if isinstance(result, dict) else None
        if not image_b64:
            raise AppError("Upstream response did not contain an image", status=502)

        try:
            return base64.b64decode(image_b64, validate=True)
        except binascii.Error as exc:
            raise AppError("Upstream returned malformed image data", status=502) from exc
