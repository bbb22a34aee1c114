from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable

from core.errors import BackendError, ConfigurationError
from model import LLMRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_API_KEY_ENV_VAR = "OPENAI_API_KEY"
DEFAULT_BASE_URL_ENV_VAR = "OPENAI_BASE_URL"
DEFAULT_MODEL_ENV_VAR = "OPENAI_MODEL"


@dataclass(frozen=True)
class OpenAIBackendConfig:
    api_key: str | None = None
    api_key_env_var: str = DEFAULT_API_KEY_ENV_VAR
    # None means the SDK default endpoint unless OPENAI_BASE_URL is set
    base_url: str | None = None
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_new_tokens: int | None = None
    request_timeout_seconds: float = 30.0
    max_retries: int = 2
    retry_base_delay: float = 1.0
    retry_max_delay: float = 8.0


def _default_client_factory(api_key: str, base_url: str | None) -> Any:
    from openai import OpenAI

    # retries are owned by _generate_with_retry; the SDK would also retry 429
    return OpenAI(api_key=api_key, base_url=base_url, max_retries=0)


def _extract_text_content(raw_content: Any) -> str:
    if isinstance(raw_content, str):
        return raw_content
    if isinstance(raw_content, list):
        parts: list[str] = []
        for item in raw_content:
            if isinstance(item, dict) and item.get("type") == "text":
                text = item.get("text", "")
            else:
                text = getattr(item, "text", "")
            if isinstance(text, str):
                parts.append(text)
        return "".join(parts)
    return ""


def _status_code_of(exc: Exception) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


class OpenAILLMModel:
    name = "openai"

    def __init__(
        self,
        config: OpenAIBackendConfig | None = None,
        client: Any | None = None,
        client_factory: Callable[[str, str | None], Any] | None = None,
    ) -> None:
        self._config = config or OpenAIBackendConfig()
        self._base_url = self._resolve_base_url(self._config)
        self._model = self._resolve_model(self._config)
        if client is not None:
            self._client = client
            return

        api_key = self._resolve_api_key(self._config)
        factory = client_factory or _default_client_factory
        self._client = factory(api_key, self._base_url)

    @property
    def model(self) -> str:
        return self._model

    def generate(self, request: LLMRequest) -> str:
        create_kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": self._config.temperature,
            "timeout": self._config.request_timeout_seconds,
        }
        if self._config.max_new_tokens is not None:
            create_kwargs["max_tokens"] = self._config.max_new_tokens
        if request.expect_json:
            create_kwargs["response_format"] = {"type": "json_object"}

        return self._generate_with_retry(create_kwargs, request)

    def _generate_with_retry(self, create_kwargs: dict[str, Any], request: LLMRequest) -> str:
        """Call the completions API, retrying only 5xx and timeout failures.

        Retry policy:
        - 429: raised at once so the caller can fail over and cool this backend down
        - 5xx and timeouts: bounded exponential backoff
        - other 4xx: fail fast with a readable message
        """
        max_retries = max(self._config.max_retries, 1)
        logger.info(f"[LLM] [{self.name}] [{request.task}] Request: prompt_len={len(request.prompt)} chars")

        for attempt in range(max_retries):
            try:
                start_time = time.time()
                response = self._client.chat.completions.create(**create_kwargs)
                elapsed = time.time() - start_time

                message = response.choices[0].message
                result = _extract_text_content(getattr(message, "content", None)).strip()

                logger.info(f"[LLM] [{self.name}] [{request.task}] Response: len={len(result)} chars, time={elapsed:.2f}s")
                logger.debug(f"[LLM] [{self.name}] [{request.task}] Raw output:\n{result[:500]}{'...' if len(result) > 500 else ''}")
                return result

            except Exception as exc:
                status = _status_code_of(exc)
                exc_str = str(exc)
                is_last_attempt = attempt >= max_retries - 1

                if status == 429 or type(exc).__name__ == "RateLimitError":
                    raise BackendError(
                        self._format_client_error(429, exc, request.task),
                        backend=self.name,
                        status_code=429,
                    ) from exc

                is_timeout = type(exc).__name__ == "APITimeoutError" or "timeout" in exc_str.lower()
                is_server_error = status is not None and status >= 500
                if is_timeout or is_server_error:
                    if not is_last_attempt:
                        delay = min(self._config.retry_base_delay * (2 ** attempt), self._config.retry_max_delay)
                        logger.warning(f"[LLM] [{self.name}] {status or 'Timeout'} (attempt {attempt + 1}/{max_retries}). Retrying in {delay:.1f}s...")
                        time.sleep(delay)
                        continue
                    if is_timeout and status is None:
                        raise BackendError(
                            f"[{request.task}] Request timeout after {max_retries} attempts",
                            backend=self.name,
                        ) from exc

                if status is not None:
                    raise BackendError(
                        self._format_client_error(status, exc, request.task),
                        backend=self.name,
                        status_code=status,
                    ) from exc

                raise BackendError(f"[{request.task}] {exc_str[:200]}", backend=self.name) from exc

        raise BackendError(f"[{request.task}] Max retries exceeded", backend=self.name)

    def _format_client_error(self, status: int, exc: Exception, task: str) -> str:
        error_map = {
            400: "Bad request (400)",
            401: f"Unauthorized (401): API key is invalid or expired, check {self._config.api_key_env_var}",
            403: "Forbidden (403): no access to this model",
            404: f"Not found (404): model '{self._model}' does not exist, check {DEFAULT_MODEL_ENV_VAR}",
            422: "Unprocessable entity (422)",
            429: "Rate limited (429): quota exceeded or too many requests",
            500: "Internal server error (500)",
            502: "Bad gateway (502)",
            503: "Service unavailable (503)",
            504: "Gateway timeout (504)",
        }
        desc = error_map.get(status, f"HTTP {status} error")
        return f"[{task}] {desc}. Detail: {str(exc)[:200]}"

    @staticmethod
    def _resolve_api_key(config: OpenAIBackendConfig) -> str:
        if config.api_key:
            return config.api_key
        env_value = os.getenv(config.api_key_env_var, "").strip()
        if env_value:
            return env_value
        raise ConfigurationError(
            f"Missing API key. Set {config.api_key_env_var} or pass api_key in OpenAIBackendConfig."
        )

    @staticmethod
    def _resolve_base_url(config: OpenAIBackendConfig) -> str | None:
        if config.base_url:
            return config.base_url
        return os.getenv(DEFAULT_BASE_URL_ENV_VAR, "").strip() or None

    @staticmethod
    def _resolve_model(config: OpenAIBackendConfig) -> str:
        env_model = os.getenv(DEFAULT_MODEL_ENV_VAR, "").strip()
        if env_model and config.model == DEFAULT_MODEL:
            return env_model
        return config.model


__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_API_KEY_ENV_VAR",
    "DEFAULT_BASE_URL_ENV_VAR",
    "DEFAULT_MODEL_ENV_VAR",
    "OpenAIBackendConfig",
    "OpenAILLMModel",
]
