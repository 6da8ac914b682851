"""Game configuration loader."""

import yaml
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AgentConfig:
    name: str = "mock-agent"
    provider: str = "mock"  # "mock", "openai", "anthropic", "openrouter"
    model_id: str | None = None
    strategy: str | None = "first_legal"  # for mock provider
    api_key_env: str | None = None      # env var name for API key
    base_url: str | None = None         # custom API base URL
    site_url: str | None = None         # OpenRouter attribution
    app_name: str | None = None         # OpenRouter attribution
    temperature: float = 0.0
    max_output_tokens: int = 256
    timeout_s: float = 30.0
    seed: int | None = None             # mock "random" strategy


@dataclass
class FeedbackConfig:
    notation: bool = True  # announce moves in traditional notation
    log_moves: bool = False


@dataclass
class GameConfig:
    mode: str = "local_pvp"  # "local_pvp" or "vs_agent"
    agent_color: str = "black"
    agent_delay_ms: int = 500
    illegal_move_retries: int = 0  # 0 = skip the agent's turn at once
    agent: AgentConfig = field(default_factory=AgentConfig)
    feedback: FeedbackConfig = field(default_factory=FeedbackConfig)


_MODES = ("local_pvp", "vs_agent")
_COLORS = ("red", "black")


def _section(raw: dict, name: str) -> dict:
    # "game:" with nothing under it loads as None
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section {name!r} must be a mapping")
    return section


def _non_negative_int(section: dict, key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
    return value


def parse_config(raw: dict | None) -> GameConfig:
    """Build a GameConfig from an already-loaded mapping."""
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping with game/agent/feedback sections")
    g = _section(raw, "game")
    a = _section(raw, "agent")
    fb = _section(raw, "feedback")

    mode = g.get("mode", "local_pvp")
    if mode not in _MODES:
        raise ValueError(f"Unknown game mode: {mode!r}. Use one of {_MODES}")
    agent_color = g.get("agent_color", "black")
    if agent_color not in _COLORS:
        raise ValueError(f"Unknown agent color: {agent_color!r}")
    retries = _non_negative_int(g, "illegal_move_retries", 0)
    delay_ms = _non_negative_int(g, "agent_delay_ms", 500)

    agent = AgentConfig(
        name=a.get("name", "mock-agent"),
        provider=a.get("provider", "mock"),
        model_id=a.get("model_id"),
        strategy=a.get("strategy", "first_legal"),
        api_key_env=a.get("api_key_env"),
        base_url=a.get("base_url"),
        site_url=a.get("site_url"),
        app_name=a.get("app_name"),
        temperature=a.get("temperature", 0.0),
        max_output_tokens=a.get("max_output_tokens", 256),
        timeout_s=a.get("timeout_s", 30.0),
        seed=a.get("seed"),
    )

    return GameConfig(
        mode=mode,
        agent_color=agent_color,
        agent_delay_ms=delay_ms,
        illegal_move_retries=retries,
        agent=agent,
        feedback=FeedbackConfig(
            notation=fb.get("notation", True),
            log_moves=fb.get("log_moves", False),
        ),
    )


def load_config(path: Path) -> GameConfig:
    """Load game config from YAML file."""
    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    return parse_config(raw)
