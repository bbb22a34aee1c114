from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable

from core.errors import BackendError, ConfigurationError
from model import LLMRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_API_KEY_ENV_VAR = "GEMINI_API_KEY"
DEFAULT_MODEL_ENV_VAR = "GEMINI_MODEL"


@dataclass(frozen=True)
class GeminiBackendConfig:
    api_key: str | None = None
    api_key_env_var: str = DEFAULT_API_KEY_ENV_VAR
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_new_tokens: int | None = None
    request_timeout_seconds: float = 30.0
    max_retries: int = 2
    retry_base_delay: float = 1.0
    retry_max_delay: float = 8.0


def _default_client_factory(api_key: str, model: str) -> Any:
    import google.generativeai as genai

    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name=model)


def _extract_response_text(response: Any) -> str:
    # response.text raises when the candidate was blocked or has no parts
    try:
        text = response.text
    except (ValueError, AttributeError):
        text = None
    if isinstance(text, str):
        return text
    parts = getattr(response, "parts", None) or []
    return "".join(getattr(part, "text", "") or "" for part in parts)


def _status_code_of(exc: Exception) -> int | None:
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return int(value)
    return None


class GeminiLLMModel:
    name = "gemini"

    def __init__(
        self,
        config: GeminiBackendConfig | None = None,
        client: Any | None = None,
        client_factory: Callable[[str, str], Any] | None = None,
    ) -> None:
        self._config = config or GeminiBackendConfig()
        self._model = self._resolve_model(self._config)
        if client is not None:
            self._client = client
            return

        api_key = self._resolve_api_key(self._config)
        factory = client_factory or _default_client_factory
        self._client = factory(api_key, self._model)

    @property
    def model(self) -> str:
        return self._model

    def generate(self, request: LLMRequest) -> str:
        generation_config: dict[str, Any] = {"temperature": self._config.temperature}
        if self._config.max_new_tokens is not None:
            generation_config["max_output_tokens"] = self._config.max_new_tokens
        if request.expect_json:
            generation_config["response_mime_type"] = "application/json"

        max_retries = max(self._config.max_retries, 1)
        logger.info(f"[LLM] [{self.name}] [{request.task}] Request: prompt_len={len(request.prompt)} chars")

        for attempt in range(max_retries):
            try:
                start_time = time.time()
                response = self._client.generate_content(
                    request.prompt,
                    generation_config=generation_config,
                    request_options={"timeout": self._config.request_timeout_seconds},
                )
                elapsed = time.time() - start_time
                result = _extract_response_text(response).strip()

                logger.info(f"[LLM] [{self.name}] [{request.task}] Response: len={len(result)} chars, time={elapsed:.2f}s")
                logger.debug(f"[LLM] [{self.name}] [{request.task}] Raw output:\n{result[:500]}{'...' if len(result) > 500 else ''}")
                return result

            except Exception as exc:
                status = _status_code_of(exc)
                retryable = (status is not None and status >= 500) or type(exc).__name__ == "DeadlineExceeded"
                if retryable and attempt < max_retries - 1:
                    delay = min(self._config.retry_base_delay * (2 ** attempt), self._config.retry_max_delay)
                    logger.warning(f"[LLM] [{self.name}] {status or 'Timeout'} (attempt {attempt + 1}/{max_retries}). Retrying in {delay:.1f}s...")
                    time.sleep(delay)
                    continue
                raise BackendError(
                    f"[{request.task}] {type(exc).__name__}: {str(exc)[:200]}",
                    backend=self.name,
                    status_code=status,
                ) from exc

        raise BackendError(f"[{request.task}] Max retries exceeded", backend=self.name)

    @staticmethod
    def _resolve_api_key(config: GeminiBackendConfig) -> str:
        if config.api_key:
            return config.api_key
        env_value = os.getenv(config.api_key_env_var, "").strip()
        if env_value:
            return env_value
        raise ConfigurationError(
            f"Missing API key. Set {config.api_key_env_var} or pass api_key in GeminiBackendConfig."
        )

    @staticmethod
    def _resolve_model(config: GeminiBackendConfig) -> str:
        env_model = os.getenv(DEFAULT_MODEL_ENV_VAR, "").strip()
        if env_model and config.model == DEFAULT_MODEL:
            return env_model
        return config.model


__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_API_KEY_ENV_VAR",
    "DEFAULT_MODEL_ENV_VAR",
    "GeminiBackendConfig",
    "GeminiLLMModel",
]
