"""Xiangqi board model — sparse (x, y) -> Piece mapping.

Coordinates are (x, y) with x the file in [0, 8] and y the rank in [0, 9].
Origin is the top-left intersection.

Black starts at the top (y 0-4), red at the bottom (y 5-9).
Red moves UP the board (decreasing y), black moves DOWN.
The river lies between ranks 4 and 5.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

BOARD_WIDTH = 9
BOARD_HEIGHT = 10


class PreconditionViolation(Exception):
    """Raised when a caller skips the legality gate (programming error)."""


class Color(Enum):
    RED = "red"
    BLACK = "black"

    @property
    def opponent(self) -> Color:
        return Color.BLACK if self is Color.RED else Color.RED


class PieceType(Enum):
    GENERAL = "general"
    ADVISOR = "advisor"
    ELEPHANT = "elephant"
    HORSE = "horse"
    CHARIOT = "chariot"
    CANNON = "cannon"
    SOLDIER = "soldier"


class Coord(NamedTuple):
    """A board intersection. Hashable and totally ordered."""

    x: int
    y: int

    def __str__(self) -> str:
        return f"{self.x},{self.y}"


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color
    id: str  # stable identity, independent of location


@dataclass(frozen=True)
class Move:
    fr: Coord
    to: Coord


Position = dict[Coord, Piece]


# Back-rank layout by file, shared by both sides.
_BACK_RANK = (
    PieceType.CHARIOT,
    PieceType.HORSE,
    PieceType.ELEPHANT,
    PieceType.ADVISOR,
    PieceType.GENERAL,
    PieceType.ADVISOR,
    PieceType.ELEPHANT,
    PieceType.HORSE,
    PieceType.CHARIOT,
)


def create_initial_position() -> Position:
    """Return a fresh position with all 32 pieces in their starting places."""
    position: Position = {}

    def add(ptype: PieceType, color: Color, x: int, y: int) -> None:
        position[Coord(x, y)] = Piece(
            type=ptype, color=color, id=f"{color.value}-{ptype.value}-{x}-{y}"
        )

    for color, back, cannons, soldiers in (
        (Color.BLACK, 0, 2, 3),
        (Color.RED, 9, 7, 6),
    ):
        for x, ptype in enumerate(_BACK_RANK):
            add(ptype, color, x, back)
        add(PieceType.CANNON, color, 1, cannons)
        add(PieceType.CANNON, color, 7, cannons)
        for x in range(0, BOARD_WIDTH, 2):
            add(PieceType.SOLDIER, color, x, soldiers)

    return position


def in_bounds(coord: tuple[int, int]) -> bool:
    x, y = coord
    return 0 <= x < BOARD_WIDTH and 0 <= y < BOARD_HEIGHT


def piece_at(position: Position, coord: tuple[int, int]) -> Piece | None:
    return position.get(Coord(*coord))


def with_move(position: Position, fr: Coord, to: Coord) -> Position:
    """Return a new position with the piece on *fr* relocated to *to*.

    Whatever stood on *to* is removed (capture). No rule checking is done
    here; callers gate this with the legality engine.
    """
    piece = position.get(fr)
    if piece is None:
        raise PreconditionViolation(f"No piece at {fr} to move")
    new_position = dict(position)
    del new_position[fr]
    new_position[Coord(*to)] = piece
    return new_position


def count_pieces(position: Position) -> dict[Color, int]:
    """Count remaining pieces for each side."""
    counts = {Color.RED: 0, Color.BLACK: 0}
    for piece in position.values():
        counts[piece.color] += 1
    return counts


# Single-letter codes; cannon is N so it does not clash with chariot.
PIECE_LETTERS = {
    PieceType.GENERAL: "G",
    PieceType.ADVISOR: "A",
    PieceType.ELEPHANT: "E",
    PieceType.HORSE: "H",
    PieceType.CHARIOT: "C",
    PieceType.CANNON: "N",
    PieceType.SOLDIER: "S",
}


def piece_code(piece: Piece) -> str:
    """Two-letter code, e.g. 'RG' for the red general."""
    side = "R" if piece.color is Color.RED else "B"
    return side + PIECE_LETTERS[piece.type]


def render_board(position: Position) -> str:
    """Render an ASCII grid for prompts and logs."""
    lines = ["   " + " ".join(f"{x:>2}" for x in range(BOARD_WIDTH))]
    for y in range(BOARD_HEIGHT):
        cells = []
        for x in range(BOARD_WIDTH):
            piece = position.get(Coord(x, y))
            cells.append(piece_code(piece) if piece else " .")
        lines.append(f"{y:>2} " + " ".join(cells))
        if y == 4:
            lines.append("   " + "~~ " * BOARD_WIDTH + " river")
    return "\n".join(lines)
