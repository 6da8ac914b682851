"""Game state and the execute-move transition.

A single ``GameState`` instance is owned by the orchestrator and mutated
only through ``execute_move`` (and ``forfeit_turn`` for a skipped agent
turn). ``execute_move`` trusts its caller: legality must already have
been checked with ``is_legal``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from xiangqi.rules.board import (
    Color,
    Coord,
    Move,
    Piece,
    PieceType,
    Position,
    PreconditionViolation,
    count_pieces,
    create_initial_position,
    with_move,
)
from xiangqi.rules.notation import format_history_entry

logger = logging.getLogger(__name__)


class MoveKind(Enum):
    MOVE = "move"
    CAPTURE = "capture"
    WIN = "win"


@dataclass
class GameState:
    position: Position
    turn: Color = Color.RED
    selected: Coord | None = None
    last_move: Move | None = None
    winner: Color | None = None
    history: list[str] = field(default_factory=list)

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    def snapshot(self) -> dict:
        """Return a serializable, read-only copy of the state."""
        pieces = count_pieces(self.position)
        return {
            "position": {
                str(coord): {
                    "type": p.type.value,
                    "color": p.color.value,
                    "id": p.id,
                }
                for coord, p in sorted(self.position.items())
            },
            "turn": self.turn.value,
            "selected": list(self.selected) if self.selected else None,
            "last_move": (
                {"from": list(self.last_move.fr), "to": list(self.last_move.to)}
                if self.last_move
                else None
            ),
            "winner": self.winner.value if self.winner else None,
            "history": list(self.history),
            "pieces_remaining": {c.value: n for c, n in pieces.items()},
        }


@dataclass(frozen=True)
class MoveResult:
    """What happened when a move was executed."""

    piece: Piece
    captured: Piece | None
    move: Move
    kind: MoveKind
    record: str


def new_game() -> GameState:
    """Fresh state: standard layout, red to move."""
    return GameState(position=create_initial_position())


def execute_move(state: GameState, fr: tuple[int, int], to: tuple[int, int]) -> MoveResult:
    """Apply a legal move to *state* in place and return what happened."""
    if state.winner is not None:
        raise PreconditionViolation(
            f"Game already won by {state.winner.value}; no further moves"
        )
    fr, to = Coord(*fr), Coord(*to)
    mover = state.turn
    piece = state.position.get(fr)
    if piece is None:
        raise PreconditionViolation(f"No piece at {fr} to move")
    captured = state.position.get(to)

    state.position = with_move(state.position, fr, to)
    if captured is not None and captured.type is PieceType.GENERAL:
        state.winner = mover
    # Turn still flips after a win; it is irrelevant once winner is set
    state.turn = mover.opponent
    state.selected = None
    state.last_move = Move(fr=fr, to=to)
    record = format_history_entry(piece, fr, to)
    state.history.append(record)

    if state.winner is not None:
        kind = MoveKind.WIN
    elif captured is not None:
        kind = MoveKind.CAPTURE
    else:
        kind = MoveKind.MOVE
    logger.info("%s %s (%s)", mover.value, record, kind.value)

    return MoveResult(
        piece=piece,
        captured=captured,
        move=state.last_move,
        kind=kind,
        record=record,
    )


def forfeit_turn(state: GameState) -> None:
    """Skip the side to move: flip the turn without touching the board."""
    if state.winner is not None:
        raise PreconditionViolation("Cannot forfeit a turn in a finished game")
    logger.info("%s forfeits the turn", state.turn.value)
    state.turn = state.turn.opponent
    state.selected = None
