import asyncio
import base64

import pytest

from conftest import image_part, make_response, text_part
from photostudio.errors import (
    ClientBusyError,
    CredentialError,
    GenerationMismatchError,
    MissingCredentialError,
    NoOutputError,
    TransportError,
)
from photostudio.llm.gemini import GeminiClient
from photostudio.prompts import RECOGNITION_FALLBACK_PROMPT
from photostudio.state import FeatureType

IMAGE_B64 = base64.b64encode(b"source-image").decode()


def _client(transport, **kwargs):
    kwargs.setdefault("credential_lookup", lambda: "test-key")
    kwargs.setdefault("timeout", 5)
    return GeminiClient(model_factory=transport, **kwargs)


def _run(client, feature, prompt="do it"):
    return asyncio.run(client.process(IMAGE_B64, "image/jpeg", feature, prompt))


def test_recognition_returns_text_from_text_model(transport, monkeypatch):
    monkeypatch.delenv("GEMINI_TEXT_MODEL", raising=False)
    transport.response = make_response(text_part("A cat on a sofa."))
    result = _run(_client(transport), FeatureType.RECOGNITION, "describe")

    assert (result.kind, result.content) == ("text", "A cat on a sofa.")
    call = transport.calls[0]
    assert call["model"] == "gemini-2.5-flash"
    assert call["parts"][0] == {"mime_type": "image/jpeg", "data": b"source-image"}
    assert call["parts"][1] == {"text": "describe"}
    assert call["request_options"] == {"timeout": 5}
    assert transport.api_keys == ["test-key"]


def test_recognition_empty_text_uses_placeholder(transport):
    transport.response = make_response()
    result = _run(_client(transport), FeatureType.RECOGNITION, "")
    assert result.kind == "text"
    assert result.content == "Unable to recognize content."
    assert transport.prompt_sent() == RECOGNITION_FALLBACK_PROMPT


def test_recognition_never_returns_image(transport):
    transport.response = make_response(image_part("XYZ"), text_part("a photo"))
    result = _run(_client(transport), FeatureType.RECOGNITION)
    assert result.kind == "text"
    assert result.content == "a photo"


def test_edit_returns_first_inline_image_as_data_uri(transport, monkeypatch):
    monkeypatch.delenv("GEMINI_IMAGE_EDIT_MODEL", raising=False)
    transport.response = make_response(text_part("Here you go"), image_part("FIRST"), image_part("SECOND"))
    result = _run(_client(transport), FeatureType.SMOOTH_SKIN, "Smooth it")

    assert result.kind == "image"
    assert result.content == "data:image/png;base64,FIRST"
    assert transport.calls[0]["model"] == "gemini-2.5-flash-image"
    sent = transport.prompt_sent()
    assert sent.startswith("Perform the following edit on the provided image: Smooth it.")
    assert "Maintain the original aspect ratio." in sent


def test_edit_encodes_raw_image_bytes(transport):
    transport.response = make_response(image_part(b"\x89PNG raw"))
    result = _run(_client(transport), FeatureType.FACE_SWAP)
    assert result.content == "data:image/png;base64," + base64.b64encode(b"\x89PNG raw").decode()


def test_edit_text_only_response_is_generation_mismatch(transport):
    transport.response = make_response(text_part("I cannot edit faces."))
    with pytest.raises(GenerationMismatchError) as exc:
        _run(_client(transport), FeatureType.FACE_SWAP)
    assert exc.value.text == "I cannot edit faces."
    assert "I cannot edit faces." in str(exc.value)


def test_edit_empty_response_is_no_output(transport):
    transport.response = make_response(image_part(""))
    with pytest.raises(NoOutputError):
        _run(_client(transport), FeatureType.CHANGE_CLOTHES)


def test_missing_credential_fails_before_any_call(transport, no_credentials):
    client = GeminiClient(model_factory=transport)
    with pytest.raises(MissingCredentialError) as exc:
        _run(client, FeatureType.CHANGE_BACKGROUND)
    assert "VITE_API_KEY" in str(exc.value)
    assert "API_KEY" in str(exc.value)
    assert transport.calls == []
    assert transport.api_keys == []
    assert not client.busy


def test_vendor_key_rejection_keeps_message_verbatim(transport):
    transport.error = RuntimeError("400 API key not valid. Please pass a valid API key.")
    with pytest.raises(CredentialError) as exc:
        _run(_client(transport), FeatureType.SMOOTH_SKIN)
    assert str(exc.value) == "400 API key not valid. Please pass a valid API key."


def test_vendor_error_message_is_preserved(transport):
    transport.error = RuntimeError("429 Resource has been exhausted")
    with pytest.raises(TransportError, match="429 Resource has been exhausted"):
        _run(_client(transport), FeatureType.SMOOTH_SKIN)


def test_vendor_error_without_message_gets_friendly_text(transport):
    transport.error = RuntimeError()
    with pytest.raises(TransportError, match="temporarily unavailable"):
        _run(_client(transport), FeatureType.SMOOTH_SKIN)


def test_slow_call_times_out(transport):
    transport.delay = 1.0
    client = _client(transport, timeout=0.01)
    with pytest.raises(TransportError, match="did not respond"):
        _run(client, FeatureType.SMOOTH_SKIN)
    assert not client.busy


def test_second_call_while_in_flight_is_rejected(transport):
    transport.response = make_response(image_part("DONE"))

    async def scenario():
        transport.gate = asyncio.Event()
        client = _client(transport)
        first = asyncio.ensure_future(client.process(IMAGE_B64, "image/png", FeatureType.FACE_SWAP, "a"))
        await asyncio.sleep(0)
        assert client.busy
        with pytest.raises(ClientBusyError):
            await client.process(IMAGE_B64, "image/png", FeatureType.FACE_SWAP, "b")
        transport.gate.set()
        result = await first
        assert not client.busy
        return result

    result = asyncio.run(scenario())
    assert result.content == "data:image/png;base64,DONE"
    assert len(transport.calls) == 1


def test_recognition_prose_that_looks_like_a_data_uri_stays_text(transport):
    transport.response = make_response(text_part("data:image/png;base64 is how the string starts"))
    result = _run(_client(transport), FeatureType.RECOGNITION)
    assert result.kind == "text"
    assert result.content == "data:image/png;base64 is how the string starts"
