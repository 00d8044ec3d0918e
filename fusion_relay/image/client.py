"""Transport client for the image-generation (Imagen) endpoint.

Processing flow:
    1. Submit the `predict` payload built by `fusion_relay.image.service`.
    2. Return parsed JSON or raise on non-2xx status.
    3. `extract_image_payload` pulls the first prediction's base64 bytes.

Base64:
    The payload is passed through as returned; it is never decoded here.

Error handling strategy:
    - Non-2xx -> `UpstreamImageError` (retryable by the caller's policy).
    - Missing payload is reported as `None`; the engine turns it into a
      terminal `EmptyImageError` outside the retry wrapper.
"""

import httpx

from fusion_relay.core.errors import UpstreamImageError
from fusion_relay.llm.client import extract_upstream_message


async def send_image_request(
    client: httpx.AsyncClient, url: str, payload: dict
) -> dict:
    """POST an image-generation payload and return parsed JSON.

    Raises:
        UpstreamImageError: On any non-2xx status or a non-JSON body.
        httpx.RequestError: On transport failures.
    """
    response = await client.post(url, json=payload)

    if not response.is_success:
        raise UpstreamImageError(response.status_code, extract_upstream_message(response))

    try:
        return response.json()
    except ValueError:
        raise UpstreamImageError(response.status_code, "Image model returned invalid JSON.")


def extract_image_payload(result) -> str | None:
    try:
        data = result["predictions"][0]["bytesBase64Encoded"]
    except (KeyError, IndexError, TypeError):
        return None
    return data if isinstance(data, str) and data else None
