"""Runtime configuration for the form service.

Architectural role:
    Builds the single immutable `AppConfig` consumed by the submission handler,
    the image client, the form renderer, and the API adapters. Nothing else in
    the package reads the environment.

Resolution:
    1. `load_dotenv()` merges a local `.env` into the process environment
       (existing variables win).
    2. `load_config` reads the variables listed below from the supplied
       mapping (defaults to `os.environ`).

Environment variables:
    - `CUSTOMER_MODEL_MAP`: JSON object of model id -> Workers AI model path.
    - `DEFAULT_MODEL_ID`: model preselected by the form and restored on reset.
    - `DEFAULT_SIZE`: preselected image size.
    - `FLUX_NUM_STEPS`: preselected step count.
    - `CF_ACCOUNT_ID`, `CF_API_TOKEN`: Cloudflare credentials. The token can
      also be read from `config/cloudflare.key`.
    - `CF_API_BASE_URL`, `REQUEST_TIMEOUT`: transport settings.

Failure behavior:
    Every precondition violation raises `ConfigError` at startup. In particular
    the default model must be present in the registry; there is no fallback.
"""

import json
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from dotenv import load_dotenv

from imageform.core.errors import ConfigError


DEFAULT_MODEL_MAP = {
    "FLUX.1-Schnell-CF": "@cf/black-forest-labs/flux-1-schnell",
    "SDXL-Base-CF": "@cf/stabilityai/stable-diffusion-xl-base-1.0",
    "SDXL-Lightning-CF": "@cf/bytedance/stable-diffusion-xl-lightning",
    "DreamShaper-8-LCM-CF": "@cf/lykon/dreamshaper-8-lcm",
}

DEFAULT_MODEL_ID = "FLUX.1-Schnell-CF"
DEFAULT_SIZE = "1024x1024"
DEFAULT_NUM_STEPS = 4

IMAGE_SIZES = ("512x512", "768x768", "1024x1024")
MIN_STEPS = 4
MAX_STEPS = 8

CF_API_BASE_URL = "https://api.cloudflare.com/client/v4"
CF_KEY_FILE = "config/cloudflare.key"
REQUEST_TIMEOUT = 120.0


@dataclass(frozen=True)
class AppConfig:
    """Immutable application configuration.

    Attributes:
        models: Read-only registry of model id -> downstream model path.
        default_model_id: Registry key selected on load and reset.
        default_size: One of `sizes`.
        default_num_steps: Within [`min_steps`, `max_steps`].
        sizes: Selectable `WxH` sizes.
        min_steps: Lowest accepted step count.
        max_steps: Highest accepted step count.
        account_id: Cloudflare account id, `None` when not configured.
        api_token: Cloudflare API token, `None` when not configured.
        api_base_url: Cloudflare API root.
        request_timeout: Seconds before the downstream call is abandoned.
    """

    models: Mapping[str, str]
    default_model_id: str = DEFAULT_MODEL_ID
    default_size: str = DEFAULT_SIZE
    default_num_steps: int = DEFAULT_NUM_STEPS
    sizes: tuple = IMAGE_SIZES
    min_steps: int = MIN_STEPS
    max_steps: int = MAX_STEPS
    account_id: str | None = None
    api_token: str | None = None
    api_base_url: str = CF_API_BASE_URL
    request_timeout: float = REQUEST_TIMEOUT

    def resolve_model(self, model_id: str) -> str | None:
        """Return the downstream path for `model_id`, or `None` if unknown."""
        return self.models.get(model_id)


def load_key(path, environ=None, read_file=True):
    """Load an API key from environment override or key file.

    Resolution order mirrors the other provider settings: an environment
    variable named after the file stem (`config/cloudflare.key` ->
    `CLOUDFLARE_API_KEY`) first, then the raw file contents.

    Edge cases:
        - `None` path returns `None`.
        - Missing file returns `None`.
        - `read_file=False` consults only `environ`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = (os.environ if environ is None else environ).get(key_name)
    if env_value:
        return env_value
    if not read_file or not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def _parse_model_map(raw: str | None) -> dict:
    if not raw:
        return dict(DEFAULT_MODEL_MAP)
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"CUSTOMER_MODEL_MAP is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ConfigError("CUSTOMER_MODEL_MAP must be a JSON object")
    for model_id, path in parsed.items():
        if not isinstance(path, str) or not path:
            raise ConfigError(f"Model path for {model_id!r} must be a non-empty string")
    return parsed


def _parse_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build and validate the application configuration.

    Args:
        environ: Variable mapping to read. `None` loads `.env` and uses
            `os.environ`. Only the `None` form reads the key file;
            an explicit mapping is the sole source of every value.

    Returns:
        Frozen `AppConfig`.

    Raises:
        ConfigError: malformed values or violated preconditions.
    """
    read_key_file = environ is None
    if environ is None:
        load_dotenv()
        environ = os.environ

    models = _parse_model_map(environ.get("CUSTOMER_MODEL_MAP"))
    if not models:
        raise ConfigError("Model registry is empty")

    default_model_id = environ.get("DEFAULT_MODEL_ID") or DEFAULT_MODEL_ID
    if default_model_id not in models:
        raise ConfigError(f"Default model {default_model_id!r} is not in the model registry")

    default_size = environ.get("DEFAULT_SIZE") or DEFAULT_SIZE
    if default_size not in IMAGE_SIZES:
        raise ConfigError(f"DEFAULT_SIZE must be one of {', '.join(IMAGE_SIZES)}")

    default_num_steps = _parse_number(environ, "FLUX_NUM_STEPS", DEFAULT_NUM_STEPS, int)
    if not MIN_STEPS <= default_num_steps <= MAX_STEPS:
        raise ConfigError(f"FLUX_NUM_STEPS must be between {MIN_STEPS} and {MAX_STEPS}")

    api_token = environ.get("CF_API_TOKEN") or load_key(CF_KEY_FILE, environ, read_file=read_key_file)

    return AppConfig(
        models=MappingProxyType(dict(models)),
        default_model_id=default_model_id,
        default_size=default_size,
        default_num_steps=default_num_steps,
        account_id=environ.get("CF_ACCOUNT_ID") or None,
        api_token=api_token,
        api_base_url=(environ.get("CF_API_BASE_URL") or CF_API_BASE_URL).rstrip("/"),
        request_timeout=_parse_number(environ, "REQUEST_TIMEOUT", REQUEST_TIMEOUT, float),
    )
