"""Transport client for the text-generation (Gemini) endpoint.

Architectural role:
    Executes one `generateContent` POST and converts the response into either
    parsed JSON or a typed `UpstreamTextError`. Also extracts the structured
    idea (name, translation, image prompt) from the model's JSON text.

Model invocation flow:
    `engine.generate_fusion` -> `with_retry(send_text_request)` ->
    `parse_structured_idea(extract_candidate_text(result))`.

Retry behavior:
    None here. A non-2xx status is raised as an exception so that the
    caller's retry wrapper treats it like any other failure.

Failure handling model:
    - Non-2xx -> `UpstreamTextError` with the upstream `error.message`.
    - Transport failures propagate as `httpx.RequestError`.
    - Unparsable model text is NOT an error: `parse_structured_idea` falls
      back to fixed values and logs a warning.
"""

import json
import logging

import httpx

from fusion_relay.core.errors import UpstreamTextError
from fusion_relay.core.types import (
    FALLBACK_IMAGE_PROMPT,
    FALLBACK_NAME,
    FALLBACK_TRANSLATION,
    StructuredIdea,
)

logger = logging.getLogger(__name__)


def extract_upstream_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an upstream error response.

    Google APIs answer errors as `{"error": {"message": ...}}`. Other shapes
    fall back to the raw body, then to the status line.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error

    text = response.text.strip()
    if text:
        return text
    return f"HTTP {response.status_code}"


async def send_text_request(
    client: httpx.AsyncClient, url: str, payload: dict
) -> dict:
    """POST `payload` unchanged to the text endpoint and return parsed JSON.

    Raises:
        UpstreamTextError: On any non-2xx status or a non-JSON body.
        httpx.RequestError: On transport failures.
    """
    response = await client.post(url, json=payload)

    if not response.is_success:
        raise UpstreamTextError(response.status_code, extract_upstream_message(response))

    try:
        return response.json()
    except ValueError:
        raise UpstreamTextError(response.status_code, "Text model returned invalid JSON.")


def extract_candidate_text(result) -> str | None:
    """Return `candidates[0].content.parts[0].text`, or None when absent."""
    try:
        text = result["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


def _field(parsed: dict, key: str, fallback: str) -> str:
    value = parsed.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return fallback


def parse_structured_idea(text: str | None) -> StructuredIdea:
    """Parse the model's JSON text into a fully populated `StructuredIdea`.

    Expected keys are `italianName`, `englishTranslation` and `imagePrompt`.
    Missing or blank keys fall back individually; absent or invalid JSON
    falls back entirely.
    """
    if not text:
        logger.warning("Text model returned no candidate text, using fallback.")
        return StructuredIdea()

    try:
        parsed = json.loads(text)
    except ValueError:
        logger.warning("Failed to parse text model JSON, using fallback.")
        return StructuredIdea()

    if not isinstance(parsed, dict):
        logger.warning("Text model JSON is not an object, using fallback.")
        return StructuredIdea()

    return StructuredIdea(
        name=_field(parsed, "italianName", FALLBACK_NAME),
        translation=_field(parsed, "englishTranslation", FALLBACK_TRANSLATION),
        image_prompt=_field(parsed, "imagePrompt", FALLBACK_IMAGE_PROMPT),
    )
