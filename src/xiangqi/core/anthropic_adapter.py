"""Anthropic API adapter.

System messages are passed through the Messages API ``system`` parameter.
Extended thinking blocks become reasoning_text, text blocks raw_text.
"""

import time
from typing import Any

from xiangqi.core.adapter import (
    AdapterError,
    AdapterResponse,
    ModelAdapter,
    split_system,
)

try:
    from anthropic import Anthropic
    import anthropic as _anthropic_module
except ImportError:
    Anthropic = None
    _anthropic_module = None


class AnthropicAdapter(ModelAdapter):
    """Adapter for the Anthropic Messages API."""

    def __init__(
        self,
        model_id: str,
        api_key: str,
        temperature: float = 0.0,
    ):
        if Anthropic is None:
            raise ImportError(
                "anthropic package required: pip install xiangqi-core[live]"
            )
        self._model_id = model_id
        self._temperature = temperature
        self._client = Anthropic(api_key=api_key)

    def query(
        self,
        messages: list[dict[str, str]],
        max_tokens: int,
        timeout_s: float,
        context: dict[str, Any] | None = None,
    ) -> AdapterResponse:
        start = time.monotonic()
        msg = self._call_api(messages, max_tokens, timeout_s)
        elapsed_ms = (time.monotonic() - start) * 1000

        raw_text = ""
        reasoning_text = None
        for block in msg.content:
            if block.type == "thinking":
                reasoning_text = block.thinking
            elif block.type == "text":
                raw_text += block.text

        return AdapterResponse(
            raw_text=raw_text,
            reasoning_text=reasoning_text,
            input_tokens=msg.usage.input_tokens,
            output_tokens=msg.usage.output_tokens,
            latency_ms=elapsed_ms,
            model_id=self._model_id,
            model_version=msg.model,
        )

    def _call_api(self, messages, max_tokens, timeout_s):
        system, turns = split_system(messages)
        kwargs: dict[str, Any] = {
            "model": self._model_id,
            "messages": turns,
            "max_tokens": max_tokens,
            "temperature": self._temperature,
            "timeout": timeout_s,
        }
        if system:
            kwargs["system"] = system
        try:
            return self._client.messages.create(**kwargs)
        except _anthropic_module.APITimeoutError as e:
            raise AdapterError("timeout", self._model_id, str(e)) from e
        except _anthropic_module.RateLimitError as e:
            raise AdapterError("rate_limit", self._model_id, str(e)) from e
        except Exception as e:
            raise AdapterError("api_error", self._model_id, str(e)) from e
