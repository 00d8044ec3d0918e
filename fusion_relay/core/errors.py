"""Typed relay failures.

Every failure surfaced by `fusion_relay.core.engine.generate_fusion` derives
from `RelayError`. Adapters map these to transport responses; the engine and
clients only raise them.

Stage-1 JSON parse failures are not represented here: they are recovered
locally with fallback values and never reach the caller.
"""


class RelayError(RuntimeError):
    """Base class for all fusion relay failures."""

    http_status = 500


class ConfigurationError(RelayError):
    """Required credential or setting is missing; no request was sent."""


class UpstreamError(RelayError):
    """Non-2xx response from a generation endpoint.

    Attributes:
        status_code: Upstream HTTP status.
        upstream_message: Message extracted from the upstream error body.
    """

    label = "Upstream API"

    def __init__(self, status_code: int, upstream_message: str):
        self.status_code = status_code
        self.upstream_message = upstream_message
        super().__init__(f"{self.label} Error: {upstream_message}")


class UpstreamTextError(UpstreamError):
    label = "Gemini API"


class UpstreamImageError(UpstreamError):
    label = "Imagen API"


class EmptyImageError(RelayError):
    """Image endpoint answered 2xx without an image payload."""

    def __init__(self, message: str = "Image generation failed to return data."):
        super().__init__(message)


class RelayTimeoutError(RelayError):
    """Overall deadline for both stages elapsed."""

    http_status = 504

    def __init__(self, deadline_seconds: float):
        self.deadline_seconds = deadline_seconds
        super().__init__(f"Fusion generation exceeded {deadline_seconds:g}s deadline.")
