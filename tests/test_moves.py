import pytest

from cakechess.tunerchess.moves import (
    MoveType,
    move_create,
    move_from,
    move_get,
    move_promotion_type,
    move_str,
    move_to,
    move_type,
)
from cakechess.tunerchess.pieces import PieceType, piece_type_char
from cakechess.tunerchess.squares import square_name


@pytest.mark.parametrize("origin,target", [(0, 63), (12, 28), (63, 0), (35, 42)])
def test_create_round_trip(origin, target):
    move = move_create(origin, target)
    assert move_from(move) == origin
    assert move_to(move) == target
    assert move_type(move) == MoveType.NORMAL


@pytest.mark.parametrize(
    "promotion",
    [PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN],
)
def test_promotion_round_trip(promotion):
    move = move_get(52, 60, promotion, MoveType.PROMOTION)
    assert move_promotion_type(move) == promotion
    assert move_type(move) == MoveType.PROMOTION
    assert move_from(move) == 52
    assert move_to(move) == 60
    assert move_str(move) == square_name(52) + square_name(60) + piece_type_char(promotion)


@pytest.mark.parametrize("kind", list(MoveType))
def test_type_round_trip(kind):
    move = move_get(8, 16, PieceType.KNIGHT, kind)
    assert move_type(move) == kind
    assert move_from(move) == 8
    assert move_to(move) == 16


def test_default_get_matches_create():
    assert move_get(12, 28) == move_create(12, 28)


def test_normal_move_string():
    assert move_str(move_create(12, 28)) == "e2e4"


def test_castling_string_uses_king_target():
    assert move_str(move_get(4, 7, move_type=MoveType.CASTLING)) == "e1g1"


def test_queen_promotion_string():
    assert move_str(move_get(52, 60, PieceType.QUEEN, MoveType.PROMOTION)) == "e7e8q"


def test_castling_queenside_black_matches_square_names():
    move = move_get(60, 56, move_type=MoveType.CASTLING)
    assert move_str(move) == square_name(60) + square_name(58)


def test_en_passant_string_has_no_suffix():
    move = move_get(36, 43, move_type=MoveType.ENPASSANT)
    assert move_str(move) == square_name(36) + square_name(43)


@pytest.mark.parametrize("origin,target", [(-1, 0), (0, 64), (64, 3)])
def test_invalid_squares_rejected(origin, target):
    with pytest.raises(ValueError):
        move_create(origin, target)
    with pytest.raises(ValueError):
        move_get(origin, target)


@pytest.mark.parametrize("promotion", [PieceType.PAWN, PieceType.KING])
def test_invalid_promotion_rejected(promotion):
    with pytest.raises(ValueError):
        move_get(52, 60, promotion, MoveType.PROMOTION)