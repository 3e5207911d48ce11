from __future__ import annotations

import json

import pytest
import requests

from teamdraw.config import Settings
from teamdraw.core.errors import ExternalCallFailure, MalformedResponse
from teamdraw.naming import GeminiClient, OfflineNaming, build_naming, generate_group_names


def _response(body, *, status_code: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    response.url = "https://example.test/v1beta/models/gemini-test:generateContent"
    return response


class DummySession:
    def __init__(self, response=None, *, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _answer(value) -> dict:
    text = value if isinstance(value, str) else json.dumps(value)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(session: DummySession) -> GeminiClient:
    return GeminiClient("k-123", model="gemini-test", endpoint="https://example.test/v1beta/", session=session)


def test_generate_names_posts_structured_request():
    session = DummySession(_response(_answer(["Otters", "Owls"])))
    names = _client(session).generate_names(2, "Animals")

    assert names == ["Otters", "Owls"]
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://example.test/v1beta/models/gemini-test:generateContent"
    assert call["headers"]["x-goog-api-key"] == "k-123"
    config = call["json"]["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert config["responseSchema"] == {"type": "ARRAY", "items": {"type": "STRING"}}
    assert "Animals" in call["json"]["contents"][0]["parts"][0]["text"]


def test_extract_names_joins_split_parts():
    payload = {"candidates": [{"content": {"parts": [{"text": '["Ann", '}, {"text": '"Bo"]'}]}}]}
    session = DummySession(_response(payload))
    assert _client(session).extract_names("Ann met Bo") == ["Ann", "Bo"]
    assert "Ann met Bo" in session.calls[0]["json"]["contents"][0]["parts"][0]["text"]


def test_transport_and_http_errors_raise_external_failure():
    with pytest.raises(ExternalCallFailure):
        _client(DummySession(error=requests.ConnectionError("down"))).extract_names("x")
    with pytest.raises(ExternalCallFailure):
        _client(DummySession(_response({}, status_code=500))).extract_names("x")


@pytest.mark.parametrize(
    "response",
    [
        _response(b"<html>oops</html>"),
        _response({"candidates": []}),
        _response(_answer("")),
        _response(_answer("not json at all")),
    ],
)
def test_bad_payloads_raise_malformed_response(response):
    with pytest.raises(MalformedResponse):
        _client(DummySession(response)).extract_names("x")


def test_naming_through_client_falls_back_on_failure():
    client = _client(DummySession(error=requests.Timeout("slow")))
    assert generate_group_names(client, 3, "Space") == ["Group 1", "Group 2", "Group 3"]


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        GeminiClient("", model="m", endpoint="https://example.test")
    with pytest.raises(ValueError):
        GeminiClient.from_settings(Settings())


def test_build_naming_picks_backend_from_settings():
    assert isinstance(build_naming(Settings()), OfflineNaming)
    client = build_naming(Settings(gemini_api_key="abc", gemini_model="m", http_timeout=5.0))
    assert isinstance(client, GeminiClient)
    assert client.model == "m"
    assert client.timeout == 5.0


def test_html_body_is_malformed_but_http_error_is_not():
    with pytest.raises(MalformedResponse, match="non-JSON"):
        _client(DummySession(_response(b"<html>oops</html>"))).generate_names(2, "x")
    with pytest.raises(ExternalCallFailure) as excinfo:
        _client(DummySession(_response(b"<html>down</html>", status_code=503))).generate_names(2, "x")
    assert not isinstance(excinfo.value, MalformedResponse)
