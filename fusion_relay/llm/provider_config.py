"""Provider/runtime configuration for the fusion relay.

Architectural role:
    Centralizes endpoint selection, model names, retry tunables and credential
    lookup for `fusion_relay.llm.client`, `fusion_relay.image.client` and
    `fusion_relay.core.engine`.

Model call flow integration:
    - `engine.generate_fusion` resolves the credential via `load_key()` and the
      tunables via `load_relay_config()` at call time.
    - `text_model_url` / `image_model_url` build the two outbound endpoints.

Determinism:
    Endpoint constants are resolved at import time. The credential and the
    `RelayConfig` tunables are re-read from the process environment on every
    call, so a missing key is detected per request.

Failure behavior:
    Missing key material is represented as `None` and converted by the engine
    into a `ConfigurationError` before any outbound request.
"""

import os
from dataclasses import dataclass
from urllib.parse import quote

from dotenv import load_dotenv

from fusion_relay.core.errors import ConfigurationError

load_dotenv()

# Environment variable holding the Google Generative Language API key.
API_KEY_ENV = "GOOGLE_API_KEY"

# Optional key file consulted when the environment variable is unset.
DEFAULT_KEY_FILE = "config/google.key"

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
).rstrip("/")

TEXT_MODEL_NAME = os.getenv("TEXT_MODEL_NAME", "gemini-2.5-flash-preview-09-2025")
IMAGE_MODEL_NAME = os.getenv("IMAGE_MODEL_NAME", "imagen-4.0-generate-001")

TEXT_URL_TEMPLATE = "{base}/models/{model}:generateContent?key={key}"
IMAGE_URL_TEMPLATE = "{base}/models/{model}:predict?key={key}"


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name, default, cast):
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from None


def _env_optional_float(name):
    seconds = _env_number(name, None, float)
    if seconds is None:
        return None
    return seconds if seconds > 0 else None


@dataclass(frozen=True)
class RelayConfig:
    """Runtime tunables for one relay invocation.

    Relevant environment variables:
        - `FUSION_MAX_RETRIES`
        - `FUSION_RETRY_BASE_DELAY`
        - `FUSION_HTTP_TIMEOUT_SECONDS`
        - `FUSION_DEADLINE_SECONDS`
        - `FUSION_RETRY_CLIENT_ERRORS`
    """

    max_retries: int = 3
    base_delay: float = 1.0
    timeout_seconds: float = 60.0
    deadline_seconds: float | None = None
    retry_client_errors: bool = True


def load_relay_config() -> RelayConfig:
    """Build a `RelayConfig` from the current process environment.

    Raises:
        ConfigurationError: A numeric `FUSION_*` value does not parse.
    """
    return RelayConfig(
        max_retries=_env_number("FUSION_MAX_RETRIES", 3, int),
        base_delay=_env_number("FUSION_RETRY_BASE_DELAY", 1.0, float),
        timeout_seconds=_env_number("FUSION_HTTP_TIMEOUT_SECONDS", 60.0, float),
        deadline_seconds=_env_optional_float("FUSION_DEADLINE_SECONDS"),
        retry_client_errors=_env_bool("FUSION_RETRY_CLIENT_ERRORS", True),
    )


def load_key(path=None):
    """Load the API key from the environment or a key file.

    Resolution order:
        1. `GOOGLE_API_KEY` environment variable.
        2. Raw contents of `path`, or of `FUSION_KEY_FILE` /
           `config/google.key` when `path` is omitted.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - Whitespace-only values count as missing.
        - Missing file returns `None`.
    """
    env_value = os.getenv(API_KEY_ENV, "").strip()
    if env_value:
        return env_value

    key_file = path or os.getenv("FUSION_KEY_FILE", DEFAULT_KEY_FILE)
    if not key_file or not os.path.exists(key_file):
        return None
    with open(key_file, "r") as f:
        return f.read().strip() or None


def text_model_url(api_key: str, model: str = TEXT_MODEL_NAME) -> str:
    """Return the `generateContent` endpoint for the text model."""
    return TEXT_URL_TEMPLATE.format(
        base=GEMINI_BASE_URL, model=model, key=quote(api_key, safe="")
    )


def image_model_url(api_key: str, model: str = IMAGE_MODEL_NAME) -> str:
    """Return the `predict` endpoint for the image model."""
    return IMAGE_URL_TEMPLATE.format(
        base=GEMINI_BASE_URL, model=model, key=quote(api_key, safe="")
    )
