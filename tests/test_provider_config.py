import pytest

from fusion_relay.core.errors import ConfigurationError
from fusion_relay.llm import provider_config
from fusion_relay.llm.provider_config import (
    RelayConfig,
    image_model_url,
    load_key,
    load_relay_config,
    text_model_url,
)


def test_load_key_prefers_environment(monkeypatch, tmp_path):
    key_file = tmp_path / "google.key"
    key_file.write_text("from-file")
    monkeypatch.setenv("GOOGLE_API_KEY", "from-env")

    assert load_key(str(key_file)) == "from-env"


def test_load_key_reads_file_when_env_missing(monkeypatch, tmp_path):
    key_file = tmp_path / "google.key"
    key_file.write_text("  from-file \n")
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    assert load_key(str(key_file)) == "from-file"


def test_load_key_missing(no_api_key):
    assert load_key() is None


def test_blank_env_key_counts_as_missing(monkeypatch, tmp_path):
    monkeypatch.setenv("GOOGLE_API_KEY", "   ")
    monkeypatch.setenv("FUSION_KEY_FILE", str(tmp_path / "missing.key"))

    assert load_key() is None


def test_relay_config_defaults(monkeypatch):
    for name in (
        "FUSION_MAX_RETRIES",
        "FUSION_RETRY_BASE_DELAY",
        "FUSION_HTTP_TIMEOUT_SECONDS",
        "FUSION_DEADLINE_SECONDS",
        "FUSION_RETRY_CLIENT_ERRORS",
    ):
        monkeypatch.delenv(name, raising=False)

    assert load_relay_config() == RelayConfig()


def test_relay_config_from_environment(monkeypatch):
    monkeypatch.setenv("FUSION_MAX_RETRIES", "5")
    monkeypatch.setenv("FUSION_RETRY_BASE_DELAY", "0.25")
    monkeypatch.setenv("FUSION_DEADLINE_SECONDS", "45")
    monkeypatch.setenv("FUSION_RETRY_CLIENT_ERRORS", "false")

    config = load_relay_config()

    assert config.max_retries == 5
    assert config.base_delay == 0.25
    assert config.deadline_seconds == 45.0
    assert config.retry_client_errors is False


def test_model_urls_carry_key():
    text_url = text_model_url("abc/123")
    image_url = image_model_url("abc")

    assert text_url.startswith(provider_config.GEMINI_BASE_URL)
    assert f"/models/{provider_config.TEXT_MODEL_NAME}:generateContent?key=abc%2F123" in text_url
    assert image_url.endswith(f"/models/{provider_config.IMAGE_MODEL_NAME}:predict?key=abc")


@pytest.mark.parametrize(
    "name, value",
    [
        ("FUSION_MAX_RETRIES", "2.5"),
        ("FUSION_RETRY_BASE_DELAY", "soon"),
        ("FUSION_HTTP_TIMEOUT_SECONDS", "1m"),
        ("FUSION_DEADLINE_SECONDS", "never"),
    ],
)
def test_malformed_tunable_raises_configuration_error(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=f"Invalid value for {name}"):
        load_relay_config()
