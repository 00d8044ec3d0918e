import json

import httpx
import pytest

from fusion_relay.llm.provider_config import RelayConfig


def text_response(text):
    """Gemini `generateContent` body carrying `text` as the first part."""
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def image_response(data="AAAA"):
    return {"predictions": [{"bytesBase64Encoded": data}]}


def google_error(message, code=500):
    return {"error": {"code": code, "message": message}}


class FakeUpstream:
    """Scripted stand-in for the text and image endpoints.

    Each endpoint pops `(status, body)` pairs from its script; the last entry
    repeats once the script runs out.
    """

    def __init__(self, text_script=None, image_script=None):
        self.text_script = list(text_script or [])
        self.image_script = list(image_script or [])
        self.text_requests = []
        self.image_requests = []

    @property
    def total_calls(self):
        return len(self.text_requests) + len(self.image_requests)

    def _next(self, script):
        if len(script) > 1:
            return script.pop(0)
        return script[0]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        if ":generateContent" in request.url.path:
            self.text_requests.append(body)
            status, payload = self._next(self.text_script)
        elif ":predict" in request.url.path:
            self.image_requests.append(body)
            status, payload = self._next(self.image_script)
        else:
            return httpx.Response(404, json=google_error("unknown endpoint", 404))
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def no_api_key(monkeypatch, tmp_path):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("FUSION_KEY_FILE", str(tmp_path / "missing.key"))


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def relay_config():
    return RelayConfig(max_retries=3, base_delay=1.0, timeout_seconds=5.0)


@pytest.fixture
def gemini_payload():
    return {
        "contents": [{"parts": [{"text": "Fuse a cat and a bicycle."}]}],
        "generationConfig": {"responseMimeType": "application/json"},
    }
