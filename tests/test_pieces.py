import pytest

from cakechess.tunerchess.pieces import (
    Piece,
    PieceType,
    piece_char,
    piece_color,
    piece_create,
    piece_from_char,
    piece_type_char,
    piece_type_from_char,
    piece_type_of,
)
from cakechess.tunerchess.squares import Color


@pytest.mark.parametrize("c", list("PNBRQKpnbrqk"))
def test_piece_char_round_trip(c):
    assert piece_char(piece_from_char(c)) == c


def test_piece_from_char_unknown():
    assert piece_from_char("x") == Piece.NONE
    assert piece_char(Piece.NONE) == "."


def test_piece_type_chars():
    for piece_type in list(PieceType)[:6]:
        assert piece_type_from_char(piece_type_char(piece_type)) == piece_type
        assert piece_type_from_char(piece_type_char(piece_type).upper()) == piece_type
    assert piece_type_from_char("z") == PieceType.NONE
    assert piece_type_char(PieceType.KING) == "k"


def test_create_and_split():
    for piece_type in list(PieceType)[:6]:
        for color in (Color.WHITE, Color.BLACK):
            piece = piece_create(piece_type, color)
            assert piece_type_of(piece) == piece_type
            assert piece_color(piece) == color
    assert piece_create(PieceType.QUEEN, Color.BLACK) == Piece.BLACK_QUEEN


def test_uppercase_is_white():
    assert piece_color(piece_from_char("R")) == Color.WHITE
    assert piece_color(piece_from_char("r")) == Color.BLACK


def test_invalid_arguments_raise():
    with pytest.raises(ValueError):
        piece_create(PieceType.NONE, Color.WHITE)
    with pytest.raises(ValueError):
        piece_create(PieceType.PAWN, Color.NONE)
    with pytest.raises(ValueError):
        piece_type_of(Piece.NONE)
    with pytest.raises(ValueError):
        piece_color(12)
    with pytest.raises(ValueError):
        piece_type_char(6)