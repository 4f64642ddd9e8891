from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any

import pytest

from vpatflow.ai.providers import (
    GeminiProvider,
    OpenAICompatibleProvider,
    ProviderCredentials,
    ProviderKind,
    build_provider,
)
from vpatflow.config import ProcessorSettings
from vpatflow.errors import ProviderRequestError


def _completion(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@dataclass
class _HttpError(Exception):
    status_code: int
    detail: str

    def __str__(self) -> str:
        return self.detail


class _FakeCompletionsAPI:
    def __init__(self, responses: list[object]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> object:
        self.calls.append(kwargs)
        if not self._responses:
            raise RuntimeError("No fake response configured")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class _FakeClient:
    def __init__(self, responses: list[object]) -> None:
        self.chat = SimpleNamespace(completions=_FakeCompletionsAPI(responses))


class _FakeResponse:
    def __init__(self, status_code: int, payload: object = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> object:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, responses: list[_FakeResponse]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"url": url, **kwargs})
        return self._responses.pop(0)


def _openai(client: _FakeClient, **kwargs: Any) -> OpenAICompatibleProvider:
    return OpenAICompatibleProvider(
        api_key="sk-test",
        model="gpt-4o-mini",
        base_url="https://api.openai.com/v1",
        client=client,
        **kwargs,
    )


def test_openai_provider_sends_system_and_user_messages() -> None:
    client = _FakeClient([_completion('[{"rowNumber": 2}]')])

    text = _openai(client, max_tokens=512).complete("system rules", "user batch")

    assert text == '[{"rowNumber": 2}]'
    call = client.chat.completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["max_tokens"] == 512
    assert call["messages"] == [
        {"role": "system", "content": "system rules"},
        {"role": "user", "content": "user batch"},
    ]


def test_openai_provider_does_not_retry_by_default() -> None:
    client = _FakeClient([_HttpError(status_code=429, detail="rate limited"), _completion("[]")])

    with pytest.raises(ProviderRequestError, match="after 1 attempt"):
        _openai(client).complete("system", "user")

    assert len(client.chat.completions.calls) == 1


def test_openai_provider_retries_transient_errors_when_enabled() -> None:
    delays: list[float] = []
    client = _FakeClient([_HttpError(status_code=503, detail="unavailable"), _completion("[]")])

    text = _openai(client, max_retries=2, retry_base_seconds=0.5, sleep=delays.append).complete("s", "u")

    assert text == "[]"
    assert delays == [0.5]


def test_openai_provider_rejects_missing_choices() -> None:
    client = _FakeClient([SimpleNamespace(choices=[])])

    with pytest.raises(ProviderRequestError, match="missing choices") as exc_info:
        _openai(client).complete("s", "u")

    assert exc_info.value.provider == "openai"


def test_gemini_provider_posts_generate_content_payload() -> None:
    session = _FakeSession(
        [_FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": '[{"reqId": "E-01"}]'}]}}]})]
    )
    provider = GeminiProvider(
        api_key="g-key",
        model="gemini-2.5-flash",
        base_url="https://generativelanguage.googleapis.com/v1beta/",
        max_output_tokens=4096,
        session=session,
    )

    assert provider.complete("system", "question") == '[{"reqId": "E-01"}]'

    call = session.calls[0]
    assert call["url"] == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
    assert call["params"] == {"key": "g-key"}
    assert call["json"]["contents"][0]["parts"][0]["text"] == "system\n\nquestion"
    assert call["json"]["generationConfig"] == {"temperature": 0.2, "maxOutputTokens": 4096}


def test_gemini_provider_reports_http_errors() -> None:
    session = _FakeSession([_FakeResponse(400, text='{"error": {"message": "bad key"}}')])
    provider = GeminiProvider(api_key="g", model="gemini-2.5-flash", base_url="https://example.com", session=session)

    with pytest.raises(ProviderRequestError) as exc_info:
        provider.complete("s", "u")

    assert exc_info.value.status_code == 400
    assert "bad key" in str(exc_info.value)


def test_gemini_provider_rejects_malformed_envelope() -> None:
    session = _FakeSession([_FakeResponse(200, {"candidates": []}, text='{"candidates": []}')])
    provider = GeminiProvider(api_key="g", model="gemini-2.5-flash", base_url="https://example.com", session=session)

    with pytest.raises(ProviderRequestError, match="Invalid Gemini response structure"):
        provider.complete("s", "u")


def test_build_provider_selects_protocol() -> None:
    settings = ProcessorSettings()

    gemini = build_provider(ProviderCredentials(ProviderKind.GEMINI, "g"), settings, session=_FakeSession([]))
    openai = build_provider(ProviderCredentials(ProviderKind.OPENAI, "o"), settings, client=_FakeClient([]))

    assert gemini.name == "gemini"
    assert gemini.model == settings.gemini_model
    assert openai.name == "openai"
    assert openai.model == settings.openai_model


def test_provider_kind_parse_defaults_to_openai() -> None:
    assert ProviderKind.parse("GEMINI") is ProviderKind.GEMINI
    assert ProviderKind.parse(" open ai ") is ProviderKind.OPENAI
    assert ProviderKind.parse("claude") is ProviderKind.OPENAI
