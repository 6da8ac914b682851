"""Build adapters and agents from AgentConfig."""

from __future__ import annotations

import os

from xiangqi.agents.llm import LLMAgent
from xiangqi.agents.strategies import STRATEGY_REGISTRY
from xiangqi.config import AgentConfig
from xiangqi.core.adapter import MockAdapter, ModelAdapter

_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def _api_key(cfg: AgentConfig) -> str:
    if not cfg.api_key_env:
        raise ValueError(f"Agent {cfg.name!r}: api_key_env is required for {cfg.provider}")
    key = os.environ.get(cfg.api_key_env)
    if not key:
        raise ValueError(
            f"Agent {cfg.name!r}: environment variable {cfg.api_key_env} is not set"
        )
    return key


def build_adapter(cfg: AgentConfig) -> ModelAdapter:
    """Map an agent config to a concrete adapter instance."""
    if cfg.provider == "mock":
        strategy_fn = STRATEGY_REGISTRY.get(cfg.strategy or "")
        if strategy_fn is None:
            raise ValueError(
                f"Unknown mock strategy: {cfg.strategy!r}. "
                f"Available: {list(STRATEGY_REGISTRY)}"
            )
        return MockAdapter(model_id=cfg.name, strategy=strategy_fn)

    if cfg.provider in ("openai", "openrouter"):
        from xiangqi.core.openai_adapter import OpenAIAdapter

        base_url = cfg.base_url
        headers = None
        if cfg.provider == "openrouter":
            base_url = base_url or _OPENROUTER_BASE_URL
            headers = {}
            if cfg.site_url:
                headers["HTTP-Referer"] = cfg.site_url
            if cfg.app_name:
                headers["X-Title"] = cfg.app_name
        return OpenAIAdapter(
            model_id=cfg.model_id or cfg.name,
            api_key=_api_key(cfg),
            base_url=base_url,
            temperature=cfg.temperature,
            # Not every OpenRouter model honours response_format
            json_mode=cfg.provider == "openai",
            extra_headers=headers or None,
        )

    if cfg.provider == "anthropic":
        from xiangqi.core.anthropic_adapter import AnthropicAdapter

        return AnthropicAdapter(
            model_id=cfg.model_id or cfg.name,
            api_key=_api_key(cfg),
            temperature=cfg.temperature,
        )

    raise ValueError(f"Unsupported provider: {cfg.provider!r}")


def build_agent(cfg: AgentConfig) -> LLMAgent:
    return LLMAgent(
        adapter=build_adapter(cfg),
        name=cfg.name,
        max_tokens=cfg.max_output_tokens,
        timeout_s=cfg.timeout_s,
        seed=cfg.seed,
    )
