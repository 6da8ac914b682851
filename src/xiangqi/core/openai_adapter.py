"""OpenAI-compatible adapter.

Works with the OpenAI API and any OpenAI-compatible endpoint
(OpenRouter, local servers) via base_url override. Requests JSON output
mode where the endpoint supports it; a single request is made per query.
"""

import time
from typing import Any

from xiangqi.core.adapter import AdapterError, AdapterResponse, ModelAdapter

try:
    from openai import OpenAI
    import openai as _openai_module
except ImportError:
    OpenAI = None
    _openai_module = None

# Reasoning models take max_completion_tokens and a fixed temperature
_REASONING_PREFIXES = ("gpt-5", "o1", "o3", "o4")


class OpenAIAdapter(ModelAdapter):
    """Adapter for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model_id: str,
        api_key: str,
        base_url: str | None = None,
        temperature: float = 0.0,
        json_mode: bool = True,
        extra_headers: dict[str, str] | None = None,
    ):
        if OpenAI is None:
            raise ImportError(
                "openai package required: pip install xiangqi-core[live]"
            )
        self._model_id = model_id
        self._temperature = temperature
        self._json_mode = json_mode

        client_kwargs: dict[str, Any] = {"api_key": api_key}
        if base_url:
            client_kwargs["base_url"] = base_url
        if extra_headers:
            client_kwargs["default_headers"] = extra_headers
        self._client = OpenAI(**client_kwargs)

    @property
    def _is_reasoning_model(self) -> bool:
        return any(p in self._model_id for p in _REASONING_PREFIXES)

    def query(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        timeout_s: float,
        context: dict[str, Any] | None = None,
    ) -> AdapterResponse:
        start = time.monotonic()
        completion = self._call_api(messages, max_tokens, timeout_s)
        elapsed_ms = (time.monotonic() - start) * 1000

        if not completion.choices:
            raise AdapterError(
                "empty_response", self._model_id, "API returned no choices"
            )

        message = completion.choices[0].message
        usage = completion.usage
        return AdapterResponse(
            raw_text=message.content or "",
            reasoning_text=getattr(message, "reasoning_content", None),
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            latency_ms=elapsed_ms,
            model_id=self._model_id,
            model_version=completion.model or self._model_id,
        )

    def _call_api(self, messages, max_tokens, timeout_s):
        token_param = (
            "max_completion_tokens" if self._is_reasoning_model else "max_tokens"
        )
        kwargs: dict[str, Any] = {
            "model": self._model_id,
            "messages": messages,
            token_param: max_tokens,
            "timeout": timeout_s,
        }
        if not self._is_reasoning_model:
            kwargs["temperature"] = self._temperature
        if self._json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            return self._client.chat.completions.create(**kwargs)
        except _openai_module.APITimeoutError as e:
            raise AdapterError("timeout", self._model_id, str(e)) from e
        except _openai_module.RateLimitError as e:
            raise AdapterError("rate_limit", self._model_id, str(e)) from e
        except Exception as e:
            raise AdapterError("api_error", self._model_id, str(e)) from e
