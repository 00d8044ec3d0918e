"""Data contracts passed between relay stages.

`StructuredIdea` is the stage-1 output consumed by stage 2; `FusionResult`
is the final value handed back to adapters.
"""

from dataclasses import dataclass

FALLBACK_NAME = "Unnamed Creation"
FALLBACK_TRANSLATION = "The Unnamed Creation"
FALLBACK_IMAGE_PROMPT = (
    "A surreal hybrid creature, vibrant colors, baroque illustration, octane render."
)


@dataclass(frozen=True)
class StructuredIdea:
    """Parsed name, translation and image prompt from the text model.

    Always fully populated: missing fields carry the fallback values.
    """

    name: str = FALLBACK_NAME
    translation: str = FALLBACK_TRANSLATION
    image_prompt: str = FALLBACK_IMAGE_PROMPT


@dataclass(frozen=True)
class FusionResult:
    name: str
    translation: str
    image_data_uri: str

    def to_response(self) -> dict:
        """Serialize to the inbound HTTP response shape."""
        return {
            "name": self.name,
            "translation": self.translation,
            "imageUrl": self.image_data_uri,
        }
