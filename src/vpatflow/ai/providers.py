"""Chat providers used for interpretation and quality analysis batches."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import logging
import time
from typing import Any, Callable, Protocol

import requests

from vpatflow.config import ProcessorSettings
from vpatflow.errors import ProviderRequestError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class ProviderKind(str, Enum):
    OPENAI = "OPENAI"
    GEMINI = "GEMINI"

    @classmethod
    def parse(cls, value: object) -> "ProviderKind":
        """Map a provider cell value to a protocol; unknown values use OpenAI."""

        text = str(value or "").strip().upper()
        if text in {"OPENAI", "OPEN AI"}:
            return cls.OPENAI
        if text == "GEMINI":
            return cls.GEMINI
        logger.warning("Unknown provider %r, defaulting to OpenAI", value)
        return cls.OPENAI


@dataclass(frozen=True, slots=True)
class ProviderCredentials:
    kind: ProviderKind
    api_key: str

    def __repr__(self) -> str:
        return f"ProviderCredentials(kind={self.kind.value}, api_key='***')"


class ChatProvider(Protocol):
    @property
    def name(self) -> str:
        ...

    @property
    def model(self) -> str:
        ...

    def complete(self, system_prompt: str, user_message: str) -> str:
        ...


def _is_retryable(exc: Exception) -> bool:
    status_code = getattr(exc, "status_code", None)
    if status_code in _RETRYABLE_STATUS_CODES:
        return True

    if isinstance(exc, (TimeoutError, ConnectionError, requests.Timeout, requests.ConnectionError)):
        return True

    return type(exc).__name__ in {
        "RateLimitError",
        "APITimeoutError",
        "APIConnectionError",
        "InternalServerError",
    }


def _format_error_body(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2)
    except ValueError:
        return text


class _RetryingProvider:
    """Shared retry loop; subclasses implement ``_request``."""

    provider_name = "provider"

    def __init__(
        self,
        *,
        model: str,
        max_retries: int = 0,
        retry_base_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if retry_base_seconds < 0:
            raise ValueError("retry_base_seconds cannot be negative")
        if not model.strip():
            raise ValueError("model cannot be empty")

        self._model = model.strip()
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep

    @property
    def name(self) -> str:
        return self.provider_name

    @property
    def model(self) -> str:
        return self._model

    def complete(self, system_prompt: str, user_message: str) -> str:
        if not user_message.strip():
            raise ValueError("user_message cannot be empty")

        attempts = self._max_retries + 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                return self._request(system_prompt, user_message)
            except Exception as exc:
                last_error = exc
                should_retry = attempt < self._max_retries and _is_retryable(exc)
                if not should_retry:
                    break
                delay = self._retry_base_seconds * (2**attempt)
                logger.warning(
                    "%s request failed (attempt %d/%d), retrying in %.2fs: %s",
                    self.provider_name,
                    attempt + 1,
                    attempts,
                    delay,
                    exc,
                )
                self._sleep(delay)

        if isinstance(last_error, ProviderRequestError):
            raise last_error

        detail = str(last_error) if last_error is not None else f"unknown {self.provider_name} error"
        raise ProviderRequestError(
            provider=self.provider_name,
            model=self._model,
            message=f"Request failed after {attempts} attempt(s): {detail}",
        ) from last_error

    def _request(self, system_prompt: str, user_message: str) -> str:
        raise NotImplementedError


def _build_openai_client(api_key: str, base_url: str, timeout_seconds: float) -> Any:
    from openai import OpenAI

    # Retries are owned by the provider, not the SDK.
    return OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds, max_retries=0)


class OpenAICompatibleProvider(_RetryingProvider):
    """Chat-completions provider for OpenAI and compatible gateways."""

    provider_name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        max_tokens: int = 4096,
        timeout_seconds: float = 120.0,
        client: Any | None = None,
        max_retries: int = 0,
        retry_base_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(model=model, max_retries=max_retries, retry_base_seconds=retry_base_seconds, sleep=sleep)
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        self._max_tokens = max_tokens
        self._client = client or _build_openai_client(api_key, base_url, timeout_seconds)

    def _request(self, system_prompt: str, user_message: str) -> str:
        logger.info("Calling OpenAI-compatible API (model=%s)", self._model)
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            max_tokens=self._max_tokens,
        )

        choices = getattr(response, "choices", None)
        if not isinstance(choices, list) or not choices:
            raise ProviderRequestError(
                provider=self.provider_name,
                model=self._model,
                message="Invalid response structure: missing choices",
            )

        first = choices[0]
        message = getattr(first, "message", None)
        content = getattr(message, "content", None) if message is not None else None
        if content is None and isinstance(first, dict):
            message_dict = first.get("message", {})
            if isinstance(message_dict, dict):
                content = message_dict.get("content")

        if isinstance(content, list):
            content = "".join(str(part.get("text", "")) for part in content if isinstance(part, dict))

        if content is None:
            raise ProviderRequestError(
                provider=self.provider_name,
                model=self._model,
                message="Invalid response structure: missing message content",
            )

        text = str(content)
        logger.debug("AI response: %s", text)
        return text


class GeminiProvider(_RetryingProvider):
    """generateContent provider for the Gemini REST API."""

    provider_name = "gemini"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        max_output_tokens: int = 4096,
        temperature: float = 0.2,
        timeout_seconds: float = 120.0,
        session: Any | None = None,
        max_retries: int = 0,
        retry_base_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(model=model, max_retries=max_retries, retry_base_seconds=retry_base_seconds, sleep=sleep)
        if not api_key.strip():
            raise ValueError("api_key cannot be empty")
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._max_output_tokens = max_output_tokens
        self._temperature = temperature
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def _request(self, system_prompt: str, user_message: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": f"{system_prompt}\n\n{user_message}"}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "maxOutputTokens": self._max_output_tokens,
            },
        }
        logger.info("Calling Gemini API (model=%s, payload=%d bytes)", self._model, len(json.dumps(payload)))

        response = self._session.post(
            self.url,
            params={"key": self._api_key},
            json=payload,
            timeout=self._timeout_seconds,
        )
        if response.status_code != 200:
            raise ProviderRequestError(
                provider=self.provider_name,
                model=self._model,
                message=f"Gemini API returned {response.status_code}. Details: {_format_error_body(response.text)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderRequestError(
                provider=self.provider_name,
                model=self._model,
                message=f"Invalid Gemini response structure: {response.text[:500]}",
            ) from exc

        text = str(text)
        logger.debug("Gemini response length: %d characters", len(text))
        return text


def build_provider(
    credentials: ProviderCredentials,
    settings: ProcessorSettings,
    *,
    client: Any | None = None,
    session: Any | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ChatProvider:
    """Return the provider for the configured protocol."""

    if credentials.kind is ProviderKind.GEMINI:
        logger.info("Using Gemini provider")
        return GeminiProvider(
            api_key=credentials.api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            max_output_tokens=settings.max_output_tokens,
            timeout_seconds=settings.request_timeout_seconds,
            session=session,
            max_retries=settings.ai_max_retries,
            sleep=sleep,
        )

    logger.info("Using OpenAI provider")
    return OpenAICompatibleProvider(
        api_key=credentials.api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        max_tokens=settings.max_output_tokens,
        timeout_seconds=settings.request_timeout_seconds,
        client=client,
        max_retries=settings.ai_max_retries,
        sleep=sleep,
    )
