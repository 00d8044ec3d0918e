"""
HTTP API adapter for the fusion relay.

Architectural role:
- Expose the relay as `POST /generate` (alias `POST /api/generate`).
- Enforce adapter-level ordering: method, credential, then body validation.
- Delegate both generation stages to `fusion_relay.core.engine.generate_fusion`.
- Map typed relay failures to `{"error": message}` JSON envelopes.

API request lifecycle (`POST /generate`):
1. Resolve the API key; missing -> HTTP 500 before any outbound call.
2. Parse request JSON and read `geminiPayload`.
3. Forward the payload to the engine.
4. Return `{name, translation, imageUrl}`.

Input validation behavior:
- Non-POST methods -> HTTP 405 (via the HTTP exception handler).
- Invalid JSON body -> HTTP 400.
- Missing or non-object `geminiPayload` -> HTTP 400.

Error handling strategy:
- `RelayError` subclasses carry their own HTTP status (500, or 504 for the
  overall deadline).
- Transport failures after retries and any other exception -> HTTP 500
  with the exception message.

Side effects:
- None beyond the two outbound calls. History persistence is the caller's.
- Prints request/result debug lines to stdout only when `DEBUG == "true"`.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fusion_relay.core.engine import generate_fusion, require_api_key
from fusion_relay.core.errors import RelayError
from fusion_relay.llm.provider_config import load_key

logger = logging.getLogger(__name__)

app = FastAPI(title="Fusion Relay")
# Payload debug output is opt-in.
DEBUG = os.getenv("DEBUG") == "true"


# ============================================================
# Request / Response Schemas
# ============================================================

class GenerateRequest(BaseModel):
    """Inbound body. `geminiPayload` is forwarded to the text model as-is."""
    geminiPayload: dict


class GenerateResponse(BaseModel):
    name: str
    translation: str
    imageUrl: str


class ErrorResponse(BaseModel):
    error: str


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (404, 405, ...) in the `{error}` envelope."""
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.get("/health")
def health():
    """Report liveness and whether a credential is configured (never the key)."""
    return {"status": "ok", "credentialConfigured": bool(load_key())}


_GENERATE_ROUTE = {
    "response_model": GenerateResponse,
    "responses": {
        400: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
}


@app.post("/generate", **_GENERATE_ROUTE)
@app.post("/api/generate", **_GENERATE_ROUTE)
async def generate(request: Request):
    """
    Run the two-stage fusion for `{"geminiPayload": ...}`.

    Responses:
    - 200 `{name, translation, imageUrl}`
    - 400 invalid body
    - 500 missing credential or upstream failure
    - 504 overall deadline exceeded
    """
    try:
        require_api_key()
    except RelayError as exc:
        return error_response(exc.http_status, str(exc))

    try:
        body = await request.json()
    except ValueError:
        return error_response(400, "Request body must be valid JSON.")

    try:
        payload = GenerateRequest.model_validate(body).geminiPayload
    except ValidationError:
        return error_response(400, "No geminiPayload provided.")

    if DEBUG:
        print("Incoming geminiPayload keys:", sorted(payload))

    try:
        result = await generate_fusion(payload)
    except RelayError as exc:
        logger.exception("Fusion relay failed")
        return error_response(exc.http_status, str(exc) or "An internal server error occurred.")
    except Exception as exc:
        logger.exception("Fusion relay transport or unexpected failure")
        return error_response(500, str(exc) or "An internal server error occurred.")

    if DEBUG:
        print("Fusion result:", repr(result.name), repr(result.translation))

    return GenerateResponse(**result.to_response())
