"""Tests for the board model."""

import pytest

from xiangqi.rules.board import (
    Color,
    Coord,
    Piece,
    PieceType,
    PreconditionViolation,
    count_pieces,
    create_initial_position,
    in_bounds,
    piece_at,
    render_board,
    with_move,
)


class TestInitialPosition:
    def test_32_pieces(self, initial_position):
        assert len(initial_position) == 32

    def test_16_each(self, initial_position):
        counts = count_pieces(initial_position)
        assert counts[Color.RED] == 16
        assert counts[Color.BLACK] == 16

    def test_generals_on_center_file(self, initial_position):
        assert initial_position[Coord(4, 0)].type is PieceType.GENERAL
        assert initial_position[Coord(4, 0)].color is Color.BLACK
        assert initial_position[Coord(4, 9)].type is PieceType.GENERAL
        assert initial_position[Coord(4, 9)].color is Color.RED

    def test_cannons(self, initial_position):
        for coord, color in (
            ((1, 2), Color.BLACK), ((7, 2), Color.BLACK),
            ((1, 7), Color.RED), ((7, 7), Color.RED),
        ):
            piece = piece_at(initial_position, coord)
            assert piece.type is PieceType.CANNON
            assert piece.color is color

    def test_soldiers_on_even_files(self, initial_position):
        for x in range(0, 9, 2):
            assert piece_at(initial_position, (x, 3)).type is PieceType.SOLDIER
            assert piece_at(initial_position, (x, 6)).type is PieceType.SOLDIER
        for x in range(1, 9, 2):
            assert piece_at(initial_position, (x, 3)) is None
            assert piece_at(initial_position, (x, 6)) is None

    def test_back_ranks(self, initial_position):
        order = ["chariot", "horse", "elephant", "advisor", "general",
                 "advisor", "elephant", "horse", "chariot"]
        assert [initial_position[Coord(x, 0)].type.value for x in range(9)] == order
        assert [initial_position[Coord(x, 9)].type.value for x in range(9)] == order

    def test_identities_unique(self, initial_position):
        ids = [p.id for p in initial_position.values()]
        assert len(set(ids)) == 32

    def test_fresh_copy_each_call(self):
        a = create_initial_position()
        b = create_initial_position()
        del a[Coord(0, 0)]
        assert Coord(0, 0) in b


class TestBounds:
    @pytest.mark.parametrize("coord", [(0, 0), (8, 9), (4, 5), (8, 0), (0, 9)])
    def test_inside(self, coord):
        assert in_bounds(coord)

    @pytest.mark.parametrize("coord", [(-1, 0), (9, 0), (0, 10), (0, -1), (9, 10)])
    def test_outside(self, coord):
        assert not in_bounds(coord)


class TestWithMove:
    def test_relocates_piece(self, initial_position):
        new = with_move(initial_position, Coord(0, 6), Coord(0, 5))
        assert Coord(0, 6) not in new
        assert new[Coord(0, 5)] == initial_position[Coord(0, 6)]

    def test_original_untouched(self, initial_position):
        with_move(initial_position, Coord(0, 6), Coord(0, 5))
        assert Coord(0, 6) in initial_position
        assert Coord(0, 5) not in initial_position

    def test_capture_replaces_target(self, initial_position):
        new = with_move(initial_position, Coord(1, 7), Coord(1, 0))
        assert new[Coord(1, 0)].type is PieceType.CANNON
        assert new[Coord(1, 0)].color is Color.RED
        assert len(new) == 31

    def test_identity_preserved(self, initial_position):
        piece = initial_position[Coord(7, 9)]
        new = with_move(initial_position, Coord(7, 9), Coord(6, 7))
        assert new[Coord(6, 7)].id == piece.id

    def test_empty_origin_raises(self, initial_position):
        with pytest.raises(PreconditionViolation):
            with_move(initial_position, Coord(4, 4), Coord(4, 5))


class TestCoord:
    def test_hashable_and_ordered(self):
        assert {Coord(1, 2): "a"}[Coord(1, 2)] == "a"
        assert sorted([Coord(2, 0), Coord(1, 5)]) == [Coord(1, 5), Coord(2, 0)]

    def test_equals_tuple(self):
        assert Coord(3, 4) == (3, 4)

    def test_str(self):
        assert str(Coord(3, 4)) == "3,4"


class TestPiece:
    def test_frozen(self):
        p = Piece(type=PieceType.HORSE, color=Color.RED, id="h")
        with pytest.raises(AttributeError):
            p.color = Color.BLACK

    def test_color_opponent(self):
        assert Color.RED.opponent is Color.BLACK
        assert Color.BLACK.opponent is Color.RED


class TestRender:
    def test_contains_codes(self, initial_position):
        text = render_board(initial_position)
        assert "RG" in text
        assert "BG" in text
        assert "RN" in text  # red cannon
        assert "river" in text

    def test_empty_board(self):
        text = render_board({})
        assert "RG" not in text
        assert text.count("\n") == 11  # header + 10 ranks + river line
