import base64

import pytest

import fusion_relay.api.cli as cli
from fusion_relay.core.errors import UpstreamImageError
from fusion_relay.core.types import FusionResult


@pytest.fixture
def captured_payloads(monkeypatch):
    payloads = []

    async def fake_generate(payload):
        payloads.append(payload)
        data = base64.b64encode(b"png-bytes").decode("ascii")
        return FusionResult("Gattociclo", "Cat-cycle", "data:image/png;base64," + data)

    monkeypatch.setattr(cli, "generate_fusion", fake_generate)
    return payloads


def test_generate_prints_result_and_writes_image(captured_payloads, tmp_path, capsys):
    output = tmp_path / "fusion.png"

    exit_code = cli.main(["generate", "cat", "bicycle", "--output", str(output)])

    assert exit_code == 0
    assert output.read_bytes() == b"png-bytes"
    out = capsys.readouterr().out
    assert "Gattociclo" in out
    assert "Cat-cycle" in out
    assert "**cat** and **bicycle**" in captured_payloads[0]["contents"][0]["parts"][-1]["text"]


def test_random_mode_uses_second_when_first_empty(captured_payloads):
    assert cli.main(["generate", "", "owl", "--random"]) == 0

    text = captured_payloads[0]["contents"][0]["parts"][-1]["text"]
    assert "**owl**" in text
    assert "randomly chosen" in text


def test_empty_input_exits_with_error(captured_payloads, capsys):
    assert cli.main(["generate"]) == 1
    assert "at least one word or image" in capsys.readouterr().err
    assert captured_payloads == []


def test_relay_failure_exits_with_error(monkeypatch, capsys):
    async def failing(payload):
        raise UpstreamImageError(500, "backend down")

    monkeypatch.setattr(cli, "generate_fusion", failing)

    assert cli.main(["generate", "cat", "dog"]) == 1
    assert "Imagen API Error: backend down" in capsys.readouterr().err
