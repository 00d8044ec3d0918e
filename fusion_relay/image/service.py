"""Image request construction for stage 2 of the relay.

Role in pipeline:
    - Receives the `image_prompt` chosen in stage 1 (parsed or fallback).
    - Wraps it in the fixed cinematic/baroque style framing.
    - Produces the single-sample Imagen `predict` payload.

Determinism:
    Payload construction is deterministic for a given prompt.
"""

STYLE_PREFIX = "Highly cinematic, detailed, and artistic illustration of: "
STYLE_SUFFIX = ". Baroque style, golden ratio, dramatic lighting."

PNG_DATA_URI_PREFIX = "data:image/png;base64,"


def style_prompt(image_prompt: str) -> str:
    return f"{STYLE_PREFIX}{image_prompt}{STYLE_SUFFIX}"


def build_image_payload(image_prompt: str, sample_count: int = 1) -> dict:
    """Return the Imagen request body for `image_prompt`.

    Args:
        image_prompt: Visual description from the text model.
        sample_count: Number of images requested (the relay always uses 1).
    """
    return {
        "instances": {"prompt": style_prompt(image_prompt)},
        "parameters": {"sampleCount": sample_count},
    }


def to_data_uri(base64_payload: str) -> str:
    """Return a self-contained PNG data URI for a base64 payload."""
    return PNG_DATA_URI_PREFIX + base64_payload
