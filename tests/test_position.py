import pytest

from cakechess.tunerchess.pieces import piece_color, piece_from_char, piece_type_of
from cakechess.tunerchess.position import Position
from cakechess.tunerchess.squares import Color

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def test_new_position_is_empty():
    position = Position()
    assert position.pieces == [0] * 6
    assert position.colors == [0, 0]
    assert all(square == -1 for square in position.board)
    assert position.stm == Color.WHITE


def test_set_startpos_places_pieces():
    position = Position()
    position.set(START)
    assert position.board[0] == piece_from_char("R")
    assert position.board[60] == piece_from_char("k")
    assert position.colors[Color.WHITE] == 0xFFFF
    assert position.colors[Color.BLACK] == 0xFFFF << 48
    assert position.pieces[piece_type_of(piece_from_char("P"))] == 0x00FF00000000FF00


def test_bitboards_agree_with_board_map():
    position = Position()
    position.set("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R b KQkq - 0 1")
    for square, piece in enumerate(position.board):
        bit = 1 << square
        if piece == -1:
            assert not (position.colors[0] | position.colors[1]) & bit
        else:
            assert position.pieces[piece_type_of(piece)] & bit
            assert position.colors[piece_color(piece)] & bit
    assert position.stm == Color.BLACK


def test_set_resets_previous_state():
    position = Position()
    position.set(START)
    position.set("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert bin(position.colors[0] | position.colors[1]).count("1") == 2


def test_render_startpos():
    position = Position()
    position.set(START)
    lines = position.render().split("\n")
    assert lines[0] == "r n b q k b n r"
    assert lines[7] == "R N B Q K B N R"
    assert lines[3] == ". . . . . . . ."
    assert position.render().endswith("\n\n")


def test_short_fen_raises():
    with pytest.raises(ValueError):
        Position().set("8/8/8/8/8/8/8/8 w")


def test_bad_piece_letter_raises():
    with pytest.raises(ValueError):
        Position().set("4k3/8/8/8/8/8/8/4X3 w - - 0 1")