"""Tests for AnthropicAdapter -- uses mocked SDK, no live API calls."""

from unittest.mock import MagicMock, patch

import pytest

from xiangqi.core.adapter import AdapterError, AdapterResponse
from xiangqi.core.anthropic_adapter import AnthropicAdapter

MODEL = "claude-sonnet-4-20250514"
MOVE = '{"from": {"x": 1, "y": 0}, "to": {"x": 2, "y": 2}}'
MESSAGES = [
    {"role": "system", "content": "You are playing as BLACK."},
    {"role": "user", "content": "Your move"},
]


def _mock_message(
    text="",
    model=MODEL,
    input_tokens=10,
    output_tokens=5,
    thinking_text=None,
):
    """Build a mock Anthropic Message response."""
    content_blocks = []
    if thinking_text:
        thinking_block = MagicMock()
        thinking_block.type = "thinking"
        thinking_block.thinking = thinking_text
        content_blocks.append(thinking_block)

    text_block = MagicMock()
    text_block.type = "text"
    text_block.text = text
    content_blocks.append(text_block)

    usage = MagicMock()
    usage.input_tokens = input_tokens
    usage.output_tokens = output_tokens

    msg = MagicMock()
    msg.content = content_blocks
    msg.model = model
    msg.usage = usage
    return msg


def _query(adapter, timeout_s=30.0):
    return adapter.query(messages=MESSAGES, max_tokens=256, timeout_s=timeout_s)


class TestAnthropicAdapterSuccess:
    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_basic_query(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(
            text=MOVE,
            input_tokens=50,
            output_tokens=8,
        )

        resp = _query(AnthropicAdapter(model_id=MODEL, api_key="test-key"))

        assert resp.raw_text == MOVE
        assert resp.model_id == MODEL
        assert resp.model_version == MODEL
        assert resp.input_tokens == 50
        assert resp.output_tokens == 8
        assert resp.reasoning_text is None
        assert isinstance(resp, AdapterResponse)

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_system_prompt_moved_to_kwarg(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(text=MOVE)

        _query(AnthropicAdapter(model_id=MODEL, api_key="test-key"))

        create_kwargs = client.messages.create.call_args[1]
        assert create_kwargs["system"] == "You are playing as BLACK."
        assert create_kwargs["messages"] == [{"role": "user", "content": "Your move"}]

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_no_system_kwarg_without_system_message(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(text=MOVE)

        adapter = AnthropicAdapter(model_id=MODEL, api_key="test-key")
        adapter.query([{"role": "user", "content": "go"}], max_tokens=64, timeout_s=5.0)

        create_kwargs = client.messages.create.call_args[1]
        assert "system" not in create_kwargs
        assert create_kwargs["max_tokens"] == 64

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_thinking_text_extracted(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(
            text=MOVE,
            thinking_text="The horse leg at 1,1 is open...",
        )

        resp = _query(AnthropicAdapter(model_id="claude-opus-4-1", api_key="test-key"))

        assert resp.reasoning_text == "The horse leg at 1,1 is open..."
        assert resp.raw_text == MOVE

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_passes_temperature(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.return_value = _mock_message(text=MOVE)

        _query(AnthropicAdapter(model_id=MODEL, api_key="test-key", temperature=0.7))

        create_kwargs = client.messages.create.call_args[1]
        assert create_kwargs["temperature"] == 0.7


class TestAnthropicAdapterErrors:
    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_timeout_raises_adapter_error(self, MockAnthropic):
        import anthropic

        client = MockAnthropic.return_value
        client.messages.create.side_effect = anthropic.APITimeoutError(
            request=MagicMock()
        )

        adapter = AnthropicAdapter(model_id=MODEL, api_key="test-key")
        with pytest.raises(AdapterError) as exc_info:
            _query(adapter, timeout_s=5.0)
        assert exc_info.value.error_type == "timeout"

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_rate_limit_not_retried(self, MockAnthropic):
        import anthropic

        client = MockAnthropic.return_value
        resp_mock = MagicMock()
        resp_mock.status_code = 429
        resp_mock.headers = {}
        client.messages.create.side_effect = anthropic.RateLimitError(
            message="rate limited",
            response=resp_mock,
            body=None,
        )

        adapter = AnthropicAdapter(model_id=MODEL, api_key="test-key")
        with pytest.raises(AdapterError) as exc_info:
            _query(adapter)
        assert exc_info.value.error_type == "rate_limit"
        assert client.messages.create.call_count == 1

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_generic_api_error_raises_adapter_error(self, MockAnthropic):
        import anthropic

        client = MockAnthropic.return_value
        client.messages.create.side_effect = anthropic.APIError(
            message="server error",
            request=MagicMock(),
            body=None,
        )

        adapter = AnthropicAdapter(model_id=MODEL, api_key="test-key")
        with pytest.raises(AdapterError) as exc_info:
            _query(adapter)
        assert exc_info.value.error_type == "api_error"

    @patch("xiangqi.core.anthropic_adapter.Anthropic")
    def test_no_raw_sdk_exception_propagates(self, MockAnthropic):
        client = MockAnthropic.return_value
        client.messages.create.side_effect = ConnectionError("network down")

        adapter = AnthropicAdapter(model_id=MODEL, api_key="test-key")
        with pytest.raises(AdapterError) as exc_info:
            _query(adapter)
        assert exc_info.value.error_type == "api_error"
