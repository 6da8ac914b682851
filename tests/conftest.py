"""Shared test fixtures for xiangqi."""

import pytest

from xiangqi.rules.board import Color, Coord, Piece, PieceType, create_initial_position


@pytest.fixture
def initial_position():
    return create_initial_position()


@pytest.fixture
def place():
    """Return a helper that puts a piece on a position in place."""

    def _place(position, ptype: PieceType, color: Color, x: int, y: int):
        piece = Piece(type=ptype, color=color, id=f"{color.value}-{ptype.value}-{x}-{y}")
        position[Coord(x, y)] = piece
        return piece

    return _place
