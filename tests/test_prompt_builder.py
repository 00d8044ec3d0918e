import base64

import pytest

from fusion_relay.prompting.prompt_builder import (
    EMPTY_INPUT_MESSAGE,
    MAX_IMAGE_BYTES,
    RESPONSE_SCHEMA,
    SYSTEM_PROMPT,
    FusionInput,
    InputTooLargeError,
    build_fusion_payload,
    build_random_payload,
)


def test_pair_payload_text_only():
    payload = build_fusion_payload(FusionInput.from_text(" cat "), FusionInput.from_text("bicycle"))

    parts = payload["contents"][0]["parts"]
    assert len(parts) == 1
    assert "**cat** and **bicycle**" in parts[0]["text"]
    assert payload["systemInstruction"] == {"parts": [{"text": SYSTEM_PROMPT}]}
    assert payload["generationConfig"] == {
        "responseMimeType": "application/json",
        "responseSchema": RESPONSE_SCHEMA,
    }


def test_pair_payload_with_image_uses_placeholder_label():
    image = FusionInput(image_base64="iVBORw0KGgo=")
    payload = build_fusion_payload(image, FusionInput.from_text("dragon"))

    parts = payload["contents"][0]["parts"]
    assert parts[0] == {
        "text": "Subject 1:",
        "inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="},
    }
    assert "**the first subject/image** and **dragon**" in parts[-1]["text"]


def test_pair_payload_requires_some_input():
    with pytest.raises(ValueError, match=EMPTY_INPUT_MESSAGE):
        build_fusion_payload(FusionInput(), FusionInput.from_text("   "))


def test_random_payload_defaults_to_mystery_object():
    parts = build_random_payload()["contents"][0]["parts"]

    assert len(parts) == 1
    assert "**a mystery object**" in parts[0]["text"]
    assert "randomly chosen, dramatically different object" in parts[0]["text"]


def test_random_payload_with_image_asks_to_identify_subject():
    parts = build_random_payload(FusionInput(image_base64="AAAA"))["contents"][0]["parts"]

    assert parts[0]["text"].startswith("The primary subject to fuse")
    assert parts[1] == {"inlineData": {"mimeType": "image/png", "data": "AAAA"}}
    assert parts[2]["text"].startswith("Identify the main subject in the image.")


def test_from_file_encodes_image(tmp_path):
    path = tmp_path / "subject.png"
    path.write_bytes(b"\x89PNG fake")

    subject = FusionInput.from_file(path, text="owl")

    assert base64.b64decode(subject.image_base64) == b"\x89PNG fake"
    assert subject.text == "owl"


def test_from_file_rejects_large_image(tmp_path):
    path = tmp_path / "huge.png"
    path.write_bytes(b"\0" * (MAX_IMAGE_BYTES + 1))

    with pytest.raises(InputTooLargeError, match="Max 2MB"):
        FusionInput.from_file(path)

