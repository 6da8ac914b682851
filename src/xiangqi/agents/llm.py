"""LLMAgent — asks a model for a move through a ModelAdapter.

Builds a rules briefing plus the current board, queries the adapter once,
and parses the reply. Every failure mode (adapter error, empty text,
unparseable JSON) comes back as ``None``; deciding what happens next is
the orchestrator's job.
"""

from __future__ import annotations

import logging

from xiangqi.agents.base import ExternalAgent
from xiangqi.core.adapter import AdapterError, ModelAdapter
from xiangqi.core.parser import MoveParser
from xiangqi.rules.board import Color, Move, Position, render_board
from xiangqi.rules.legality import legal_moves

logger = logging.getLogger(__name__)


def _format_move(m: Move) -> str:
    return f"[{m.fr.x},{m.fr.y}]->[{m.to.x},{m.to.y}]"


def build_messages(
    position: Position, color: Color, moves: list[Move]
) -> list[dict[str, str]]:
    """Return the system briefing and the move request for *color*."""
    side = color.value.upper()
    system = "\n".join([
        "You are a grandmaster Chinese Chess (Xiangqi) engine.",
        f"You are playing as {side}.",
        "The board is 9 files (x 0-8) by 10 ranks (y 0-9).",
        "Red starts at the bottom (y=9) and moves UP; "
        "black starts at the top (y=0) and moves DOWN.",
        "Codes: first letter R=Red, B=Black; second letter G=General, "
        "A=Advisor, E=Elephant, H=Horse, C=Chariot, N=Cannon, S=Soldier.",
        "",
        "The game is won by capturing the opposing general.",
        "Look for captures, threats and undefended pieces, "
        "then choose the best legal move.",
    ])

    moves_str = "  ".join(_format_move(m) for m in moves)
    user = "\n".join([
        "Board:",
        render_board(position),
        "",
        f"{side} to move.",
        "Legal moves:",
        f"  {moves_str}",
        "",
        "Respond with a JSON object:",
        '  {"from": {"x": 0, "y": 0}, "to": {"x": 0, "y": 0}, "reasoning": "..."}',
        "",
        "IMPORTANT: Respond with ONLY a single JSON object. "
        "No markdown fences, no explanation before or after.",
    ])
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


class LLMAgent(ExternalAgent):
    """External agent backed by a language model."""

    def __init__(
        self,
        adapter: ModelAdapter,
        name: str = "llm",
        max_tokens: int = 256,
        timeout_s: float = 30.0,
        parser: MoveParser | None = None,
        seed: int | None = None,
    ) -> None:
        self._adapter = adapter
        self._name = name
        self._max_tokens = max_tokens
        self._timeout_s = timeout_s
        self._parser = parser or MoveParser()
        self._seed = seed
        self._calls = 0
        self.last_reasoning: str | None = None

    @property
    def name(self) -> str:
        return self._name

    def propose_move(self, position: Position, color: Color) -> Move | None:
        self.last_reasoning = None
        moves = legal_moves(position, color)
        messages = build_messages(position, color, moves)
        context = {
            "position": dict(position),
            "color": color,
            "legal_moves": moves,
            "seed": None if self._seed is None else self._seed + self._calls,
        }
        self._calls += 1

        try:
            response = self._adapter.query(
                messages,
                max_tokens=self._max_tokens,
                timeout_s=self._timeout_s,
                context=context,
            )
        except AdapterError as e:
            logger.warning("Agent %s failed: %s", self._name, e)
            return None

        if not response.raw_text.strip():
            logger.warning("Agent %s returned an empty response", self._name)
            return None

        result = self._parser.parse(response.raw_text)
        if result.injection_detected:
            logger.warning("Agent %s output contains injection patterns", self._name)
        if not result.success:
            logger.warning("Agent %s reply unparseable: %s", self._name, result.error)
            return None

        self.last_reasoning = result.reasoning
        logger.debug(
            "Agent %s proposes %s (%.0f ms)",
            self._name, _format_move(result.move), response.latency_ms,
        )
        return result.move
