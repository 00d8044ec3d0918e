"""Text-model payload construction for fusion requests.

Architectural role:
    Turns one or two user concepts (words or images) into the opaque
    `generateContent` payload that the relay forwards verbatim. Used by the
    CLI adapter; HTTP callers may build the same payload themselves.

Prompt structure:
    - `systemInstruction`: fixed fusion-bot persona (`SYSTEM_PROMPT`).
    - `contents[0].parts`: optional image parts followed by one text query.
    - `generationConfig`: JSON response with `RESPONSE_SCHEMA`.

Modes:
    - Pair mode (`build_fusion_payload`): hybrid of two given subjects.
    - Random mode (`build_random_payload`): hybrid of one subject and a
      randomly chosen, dramatically different object picked by the model.

Input limits:
    Image inputs are PNG base64 and limited to `MAX_IMAGE_BYTES` of raw data.
"""

import base64
import os
from dataclasses import dataclass

MAX_IMAGE_BYTES = 2 * 1024 * 1024
IMAGE_MIME_TYPE = "image/png"

SYSTEM_PROMPT = (
    "You are a creative fusion bot. Your task is to generate a single, highly "
    "creative and dramatic Italian-sounding name for a hybrid creature/object, "
    "its direct English translation, and a detailed visual prompt for an AI "
    "image generator. The visual prompt should describe a surreal, beautiful, "
    "high-quality image of the hybrid creature, suitable for an illustration "
    "style. Respond with only a single JSON object."
)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "italianName": {"type": "STRING"},
        "englishTranslation": {"type": "STRING"},
        "imagePrompt": {"type": "STRING"},
    },
    "propertyOrdering": ["italianName", "englishTranslation", "imagePrompt"],
}

EMPTY_INPUT_MESSAGE = "Please provide at least one word or image to start the fusion."


class InputTooLargeError(ValueError):
    """Image input exceeds `MAX_IMAGE_BYTES`."""


@dataclass(frozen=True)
class FusionInput:
    """One side of a fusion: a word/phrase or a base64 PNG image.

    When both are present the image is used as the subject and the text is
    only used as a label in the query.
    """

    text: str = ""
    image_base64: str | None = None

    @classmethod
    def from_text(cls, text):
        return cls(text=(text or "").strip())

    @classmethod
    def from_file(cls, path, text=""):
        """Load an image file as base64, enforcing the size limit."""
        size = os.path.getsize(path)
        if size > MAX_IMAGE_BYTES:
            raise InputTooLargeError(
                f"Image file is too large. Max {MAX_IMAGE_BYTES // (1024 * 1024)}MB."
            )
        with open(path, "rb") as f:
            data = base64.b64encode(f.read()).decode("ascii")
        return cls(text=(text or "").strip(), image_base64=data)

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.image_base64


def _inline_image(data: str) -> dict:
    return {"mimeType": IMAGE_MIME_TYPE, "data": data}


def _wrap_payload(parts: list) -> dict:
    return {
        "contents": [{"parts": parts}],
        "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def build_fusion_payload(first: FusionInput, second: FusionInput) -> dict:
    """Build the pair-mode payload fusing `first` and `second`.

    Raises:
        ValueError: Both inputs are empty.
    """
    if first.is_empty and second.is_empty:
        raise ValueError(EMPTY_INPUT_MESSAGE)

    parts = []
    for index, subject in enumerate((first, second), start=1):
        if subject.image_base64:
            parts.append({
                "text": f"Subject {index}:",
                "inlineData": _inline_image(subject.image_base64),
            })

    first_label = first.text or "the first subject/image"
    second_label = second.text or "the second subject/image"
    parts.append({
        "text": (
            "Generate an Italian-sounding merged name, its English translation, "
            "and a visual description for an artistic hybrid of "
            f"**{first_label}** and **{second_label}**."
        )
    })
    return _wrap_payload(parts)


def build_random_payload(primary: FusionInput | None = None) -> dict:
    """Build the random-mode payload for `primary` and a model-chosen object."""
    primary = primary or FusionInput()
    parts = []

    if primary.image_base64:
        parts.append({"text": "The primary subject to fuse is in the image provided below."})
        parts.append({"inlineData": _inline_image(primary.image_base64)})
        query = (
            "Identify the main subject in the image. Generate an Italian-sounding "
            "merged name, its English translation, and a visual description for an "
            "artistic hybrid of the identified subject and a **randomly chosen, "
            "dramatically different object**."
        )
    else:
        subject = primary.text or "a mystery object"
        query = (
            "Generate an Italian-sounding merged name, its English translation, "
            "and a visual description for an artistic hybrid of a "
            f"**{subject}** and a **randomly chosen, dramatically different object**."
        )

    parts.append({"text": query})
    return _wrap_payload(parts)
