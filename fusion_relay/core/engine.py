"""Two-stage fusion orchestration.

Architectural role:
    Sits between the API adapters (HTTP, CLI) and the transport clients. Owns
    the request lifecycle for a single fusion: credential check, stage 1
    (structured idea from the text model), stage 2 (illustration from the
    image model) and result assembly.

Request lifecycle:
    1. Resolve the API key at call time; missing -> `ConfigurationError`
       before any outbound call.
    2. Stage 1: POST the caller's payload verbatim under `with_retry`. Parse
       the candidate text into a `StructuredIdea`, falling back to fixed
       values when the text is missing or not JSON.
    3. Stage 2: POST the styled image prompt under `with_retry`.
    4. Missing image bytes after a 2xx -> `EmptyImageError` (terminal; it is
       raised outside the retried call).
    5. Return `FusionResult` with a `data:image/png;base64,...` URI.

Failure model:
    All-or-nothing. Only the stage-1 parse failure is recovered locally; every
    other failure propagates to the adapter after retries are exhausted.

Concurrency:
    Stateless between invocations. Each call owns its `httpx.AsyncClient`
    unless one is injected. An optional overall deadline wraps both stages.
"""

import asyncio
import logging

import httpx

from fusion_relay.core.errors import ConfigurationError, EmptyImageError, RelayTimeoutError
from fusion_relay.core.retry import retry_any, retry_transient, with_retry
from fusion_relay.core.types import FusionResult, StructuredIdea
from fusion_relay.image.client import extract_image_payload, send_image_request
from fusion_relay.image.service import build_image_payload, to_data_uri
from fusion_relay.llm.client import (
    extract_candidate_text,
    parse_structured_idea,
    send_text_request,
)
from fusion_relay.llm.provider_config import (
    RelayConfig,
    image_model_url,
    load_key,
    load_relay_config,
    text_model_url,
)

logger = logging.getLogger(__name__)


def require_api_key() -> str:
    """Return the configured API key or raise `ConfigurationError`."""
    api_key = load_key()
    if not api_key:
        raise ConfigurationError("API key not configured.")
    return api_key


async def generate_structured_idea(
    client: httpx.AsyncClient,
    api_key: str,
    request: dict,
    config: RelayConfig,
    sleep=asyncio.sleep,
) -> StructuredIdea:
    """Stage 1: forward `request` to the text model and parse its idea."""
    url = text_model_url(api_key)
    result = await with_retry(
        lambda: send_text_request(client, url, request),
        max_retries=config.max_retries,
        base_delay=config.base_delay,
        should_retry=_classifier(config),
        sleep=sleep,
    )
    idea = parse_structured_idea(extract_candidate_text(result))
    logger.info("Stage 1 complete: name=%r", idea.name)
    return idea


async def generate_image_data(
    client: httpx.AsyncClient,
    api_key: str,
    image_prompt: str,
    config: RelayConfig,
    sleep=asyncio.sleep,
) -> str:
    """Stage 2: render `image_prompt` and return the base64 PNG payload."""
    url = image_model_url(api_key)
    payload = build_image_payload(image_prompt)
    result = await with_retry(
        lambda: send_image_request(client, url, payload),
        max_retries=config.max_retries,
        base_delay=config.base_delay,
        should_retry=_classifier(config),
        sleep=sleep,
    )

    image_data = extract_image_payload(result)
    if not image_data:
        raise EmptyImageError()

    logger.info("Stage 2 complete: %d base64 chars", len(image_data))
    return image_data


async def generate_fusion(
    request: dict,
    client: httpx.AsyncClient | None = None,
    config: RelayConfig | None = None,
    sleep=asyncio.sleep,
) -> FusionResult:
    """Run both relay stages for one caller payload.

    Args:
        request: Text-model payload, forwarded verbatim.
        client: Optional shared HTTP client; a private one is created when
            omitted.
        config: Tunables; read from the environment when omitted.
        sleep: Backoff sleep, injectable for tests.

    Raises:
        ConfigurationError: Credential missing. No request is sent.
        UpstreamTextError / UpstreamImageError: Non-2xx after retries.
        EmptyImageError: Image endpoint returned no payload.
        RelayTimeoutError: `config.deadline_seconds` elapsed.
        httpx.RequestError: Transport failure after retries.
    """
    api_key = require_api_key()
    config = config or load_relay_config()

    async def run(http_client):
        idea = await generate_structured_idea(http_client, api_key, request, config, sleep)
        image_data = await generate_image_data(
            http_client, api_key, idea.image_prompt, config, sleep
        )
        return FusionResult(
            name=idea.name,
            translation=idea.translation,
            image_data_uri=to_data_uri(image_data),
        )

    async def run_with_client():
        if client is not None:
            return await run(client)
        async with httpx.AsyncClient(timeout=config.timeout_seconds) as own_client:
            return await run(own_client)

    if config.deadline_seconds is None:
        return await run_with_client()

    try:
        return await asyncio.wait_for(run_with_client(), timeout=config.deadline_seconds)
    except asyncio.TimeoutError as exc:
        raise RelayTimeoutError(config.deadline_seconds) from exc


def _classifier(config: RelayConfig):
    return retry_any if config.retry_client_errors else retry_transient
