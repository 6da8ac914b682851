"""Move legality — per-piece rules for a single proposed move.

``is_legal`` is the only gate in front of state changes: human clicks and
agent proposals both pass through it before a move is executed.

Deliberately not implemented: the flying-general rule, and any check or
checkmate detection. A game ends only when a general is captured.
"""

from __future__ import annotations

from typing import Callable

from .board import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    Color,
    Coord,
    Move,
    Piece,
    PieceType,
    Position,
    in_bounds,
)

__all__ = ["is_legal", "legal_destinations", "legal_moves"]

_PALACE_FILES = range(3, 6)


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def _in_palace(piece: Piece, to: Coord) -> bool:
    if to.x not in _PALACE_FILES:
        return False
    if piece.color is Color.RED:
        return to.y >= 7
    return to.y <= 2


def _pieces_between(position: Position, fr: Coord, to: Coord) -> int:
    """Count pieces strictly between two squares on a rank or file."""
    dx = _sign(to.x - fr.x)
    dy = _sign(to.y - fr.y)
    count = 0
    x, y = fr.x + dx, fr.y + dy
    while (x, y) != (to.x, to.y):
        if Coord(x, y) in position:
            count += 1
        x += dx
        y += dy
    return count


# ── Per-piece rules ──────────────────────────────────────────────
# Each rule receives a move already known to be in bounds, non-null,
# and not a self-capture.


def _general(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    if abs(to.x - fr.x) + abs(to.y - fr.y) != 1:
        return False
    return _in_palace(piece, to)


def _advisor(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    if abs(to.x - fr.x) != 1 or abs(to.y - fr.y) != 1:
        return False
    return _in_palace(piece, to)


def _elephant(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    dx, dy = to.x - fr.x, to.y - fr.y
    if abs(dx) != 2 or abs(dy) != 2:
        return False
    # Elephants never cross the river
    if piece.color is Color.RED and to.y < 5:
        return False
    if piece.color is Color.BLACK and to.y > 4:
        return False
    eye = Coord(fr.x + dx // 2, fr.y + dy // 2)
    return eye not in position


def _horse(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    dx, dy = to.x - fr.x, to.y - fr.y
    if (abs(dx), abs(dy)) not in ((1, 2), (2, 1)):
        return False
    if abs(dy) == 2:
        leg = Coord(fr.x, fr.y + _sign(dy))
    else:
        leg = Coord(fr.x + _sign(dx), fr.y)
    return leg not in position


def _chariot(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    if fr.x != to.x and fr.y != to.y:
        return False
    return _pieces_between(position, fr, to) == 0


def _cannon(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    if fr.x != to.x and fr.y != to.y:
        return False
    between = _pieces_between(position, fr, to)
    if to in position:
        return between == 1  # capture needs exactly one screen
    return between == 0


def _soldier(position: Position, piece: Piece, fr: Coord, to: Coord) -> bool:
    dx, dy = to.x - fr.x, to.y - fr.y
    forward = -1 if piece.color is Color.RED else 1
    if piece.color is Color.RED:
        crossed = fr.y <= 4
    else:
        crossed = fr.y >= 5

    if dx == 0 and dy == forward:
        return True
    # Sideways steps only after crossing the river
    return crossed and dy == 0 and abs(dx) == 1


_RULES: dict[PieceType, Callable[[Position, Piece, Coord, Coord], bool]] = {
    PieceType.GENERAL: _general,
    PieceType.ADVISOR: _advisor,
    PieceType.ELEPHANT: _elephant,
    PieceType.HORSE: _horse,
    PieceType.CHARIOT: _chariot,
    PieceType.CANNON: _cannon,
    PieceType.SOLDIER: _soldier,
}


# ── Public API ───────────────────────────────────────────────────


def is_legal(
    position: Position,
    fr: tuple[int, int],
    to: tuple[int, int],
    turn: Color,
) -> bool:
    """Return True if moving the piece on *fr* to *to* is legal for *turn*.

    Fails closed: an empty origin, a piece of the wrong colour, an
    off-board or unchanged destination, or a self-capture all return False.
    """
    fr, to = Coord(*fr), Coord(*to)
    piece = position.get(fr)
    if piece is None or piece.color is not turn:
        return False
    if not in_bounds(to) or fr == to:
        return False
    target = position.get(to)
    if target is not None and target.color is turn:
        return False

    rule = _RULES.get(piece.type)
    if rule is None:
        return False
    return rule(position, piece, fr, to)


def legal_destinations(
    position: Position, fr: tuple[int, int], turn: Color
) -> list[Coord]:
    """Return every square the piece on *fr* may legally move to."""
    return [
        Coord(x, y)
        for y in range(BOARD_HEIGHT)
        for x in range(BOARD_WIDTH)
        if is_legal(position, fr, (x, y), turn)
    ]


def legal_moves(position: Position, turn: Color) -> list[Move]:
    """Return all legal moves for *turn*, ordered by origin then destination."""
    moves: list[Move] = []
    for fr in sorted(c for c, p in position.items() if p.color is turn):
        for to in legal_destinations(position, fr, turn):
            moves.append(Move(fr=fr, to=to))
    return moves
