"""Mock agent strategies for offline play and testing.

Each strategy matches the MockAdapter signature:
    (messages: list[dict], context: dict) -> str

``context`` is filled in by LLMAgent with ``position``, ``color`` and
``legal_moves``.

Strategies:
- first_legal_strategy: The first legal move in board order.
- capture_first_strategy: Takes the general if possible, else any capture, else first legal.
- random_strategy: A seeded random legal move.
- illegal_strategy: Always proposes an off-board move (adversarial testing).
- garbage_strategy: Returns non-JSON text (adversarial testing).
"""

from __future__ import annotations

import json
import random
from typing import Any

from xiangqi.rules.board import Move, PieceType


def _move_json(move: Move, reasoning: str) -> str:
    return json.dumps({
        "from": {"x": move.fr.x, "y": move.fr.y},
        "to": {"x": move.to.x, "y": move.to.y},
        "reasoning": reasoning,
    })


def _no_move() -> str:
    return "I have no legal moves."


def first_legal_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    moves = context.get("legal_moves") or []
    if not moves:
        return _no_move()
    return _move_json(moves[0], "first legal move")


def capture_first_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    """Prefer capturing the general, then any capture."""
    moves = context.get("legal_moves") or []
    if not moves:
        return _no_move()
    position = context.get("position") or {}

    captures = [m for m in moves if m.to in position]
    for m in captures:
        if position[m.to].type is PieceType.GENERAL:
            return _move_json(m, "capture the general")
    if captures:
        return _move_json(captures[0], "capture")
    return _move_json(moves[0], "no capture available")


def random_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    """Uses context["seed"] for deterministic RNG so tests are reproducible."""
    moves = context.get("legal_moves") or []
    if not moves:
        return _no_move()
    rng = random.Random(context.get("seed"))
    return _move_json(rng.choice(moves), "random")


def illegal_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    return json.dumps({
        "from": {"x": 4, "y": 0},
        "to": {"x": 4, "y": 12},
        "reasoning": "the general goes for a walk",
    })


def garbage_strategy(
    messages: list[dict[str, str]], context: dict[str, Any]
) -> str:
    return "The horse dreams of electric rivers. No JSON today."


STRATEGY_REGISTRY = {
    "first_legal": first_legal_strategy,
    "capture_first": capture_first_strategy,
    "random": random_strategy,
    "illegal": illegal_strategy,
    "garbage": garbage_strategy,
}
