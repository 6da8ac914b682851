"""Move notation — history records and traditional Chinese notation.

History records are plain text: ``"horse 1,9 to 2,7"``.

Traditional notation is four characters: piece, start file, direction,
then either the destination file or the number of ranks travelled.
Red counts files right-to-left in Chinese numerals (九 .. 一),
black counts left-to-right in Arabic digits (1 .. 9).
"""

from __future__ import annotations

from .board import Color, Coord, Piece, PieceType

PIECE_GLYPHS = {
    (Color.RED, PieceType.GENERAL): "帅",
    (Color.BLACK, PieceType.GENERAL): "将",
    (Color.RED, PieceType.ADVISOR): "仕",
    (Color.BLACK, PieceType.ADVISOR): "士",
    (Color.RED, PieceType.ELEPHANT): "相",
    (Color.BLACK, PieceType.ELEPHANT): "象",
    (Color.RED, PieceType.HORSE): "马",
    (Color.BLACK, PieceType.HORSE): "马",
    (Color.RED, PieceType.CHARIOT): "车",
    (Color.BLACK, PieceType.CHARIOT): "车",
    (Color.RED, PieceType.CANNON): "炮",
    (Color.BLACK, PieceType.CANNON): "炮",
    (Color.RED, PieceType.SOLDIER): "兵",
    (Color.BLACK, PieceType.SOLDIER): "卒",
}

_CHINESE_NUMS = "零一二三四五六七八九"

# Pieces whose vertical moves are written as a step count
_LINEAR_MOVERS = {
    PieceType.CHARIOT,
    PieceType.CANNON,
    PieceType.SOLDIER,
    PieceType.GENERAL,
}


def format_history_entry(piece: Piece, fr: Coord, to: Coord) -> str:
    return f"{piece.type.value} {fr.x},{fr.y} to {to.x},{to.y}"


def _file_number(color: Color, x: int) -> int:
    return 9 - x if color is Color.RED else x + 1


def _numeral(color: Color, n: int) -> str:
    return _CHINESE_NUMS[n] if color is Color.RED else str(n)


def traditional_notation(piece: Piece, fr: Coord, to: Coord) -> str:
    """Return e.g. ``"炮二平五"`` for red's central cannon opening."""
    color = piece.color
    glyph = PIECE_GLYPHS[(color, piece.type)]
    start = _numeral(color, _file_number(color, fr.x))
    dy = to.y - fr.y

    if dy == 0:
        return f"{glyph}{start}平{_numeral(color, _file_number(color, to.x))}"

    forward = dy < 0 if color is Color.RED else dy > 0
    direction = "进" if forward else "退"
    if piece.type in _LINEAR_MOVERS:
        target = _numeral(color, abs(dy))
    else:
        target = _numeral(color, _file_number(color, to.x))
    return f"{glyph}{start}{direction}{target}"
