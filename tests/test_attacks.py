import random

import pytest

from cakechess.tunerchess import attacks
from cakechess.tunerchess.attacks import (
    DELTA_BISHOP,
    DELTA_ROOK,
    SliderTable,
    between,
    bishop,
    king,
    knight,
    line,
    pawn,
    pawn_left,
    pawn_right,
    pawn_span,
    queen,
    rook,
    sliders,
)
from cakechess.tunerchess.bitboard import (
    FILE_A,
    FILE_H,
    RANK,
    RANK_1,
    count,
    is_set,
    iter_squares,
)
from cakechess.tunerchess.squares import Color


def test_leaper_values_from_fixed_tables():
    assert knight(0) == 0x0000000000020400
    assert knight(63) == 0x0020400000000000
    assert king(0) == 0x0000000000000302
    assert pawn(0, Color.WHITE) == 0x0000000000000200
    assert pawn(8, Color.BLACK) == 0x0000000000000002


def test_pawn_on_last_rank_attacks_nothing():
    assert all(pawn(square, Color.WHITE) == 0 for square in range(56, 64))
    assert all(pawn(square, Color.BLACK) == 0 for square in range(8))


@pytest.mark.parametrize("table", [knight, king])
def test_leapers_are_symmetric(table):
    for a in range(64):
        for b in range(64):
            assert is_set(table(a), b) == is_set(table(b), a)


def test_pawn_attacks_mirror_between_colors():
    for a in range(64):
        for b in range(64):
            assert is_set(pawn(a, Color.WHITE), b) == is_set(pawn(b, Color.BLACK), a)


@pytest.mark.parametrize("color", [Color.WHITE, Color.BLACK])
def test_pawn_span_matches_table(color):
    pawns = RANK[3] | RANK[5] | 1 << 9
    expected = 0
    for square in iter_squares(pawns):
        expected |= pawn(square, color)
    assert pawn_span(pawns, color) == expected
    assert pawn_left(pawns, color) | pawn_right(pawns, color) == expected


def test_pawn_edge_files_do_not_wrap():
    assert pawn_left(FILE_A, Color.WHITE) == 0
    assert pawn_right(FILE_H, Color.WHITE) == 0
    assert pawn_left(FILE_H, Color.BLACK) == 0
    assert pawn_right(FILE_A, Color.BLACK) == 0


@pytest.mark.parametrize("square", [0, 27, 63])
def test_rook_empty_board_covers_rank_and_file(square):
    assert count(rook(square, 0)) == 14


@pytest.mark.parametrize("square", [0, 27, 63])
def test_lookup_matches_direct_rays(square):
    rng = random.Random(square)
    for _ in range(50):
        occupied = rng.getrandbits(64)
        assert rook(square, occupied) == sliders(square, occupied, DELTA_ROOK)
        assert bishop(square, occupied) == sliders(square, occupied, DELTA_BISHOP)
        assert queen(square, occupied) == rook(square, occupied) | bishop(square, occupied)


def test_rook_stops_at_blocker():
    attacked = rook(0, 1 << 8)
    assert is_set(attacked, 8)
    assert not is_set(attacked, 16)
    assert is_set(attacked, 7)


def test_slider_table_with_custom_deltas():
    table = SliderTable(DELTA_ROOK)
    assert table.lookup(27, 0) == sliders(27, 0, DELTA_ROOK)
    with pytest.raises(ValueError):
        table.lookup(64, 0)


def test_between_and_line_on_first_rank():
    interior = RANK_1 & ~FILE_A & ~FILE_H
    assert between(0, 7) == interior
    assert line(0, 7) == RANK_1
    assert between(7, 0) == interior


def test_unaligned_squares_have_no_relation():
    assert between(0, 10) == 0
    assert line(0, 10) == 0
    assert between(5, 5) == 0


def test_between_is_inside_line():
    for a, b in [(0, 63), (3, 59), (9, 54)]:
        assert between(a, b) & line(a, b) == between(a, b)
        assert between(a, b) == between(b, a)
        assert is_set(line(a, b), a) and is_set(line(a, b), b)


@pytest.mark.parametrize("func", [knight, king])
def test_invalid_square_raises(func):
    with pytest.raises(ValueError):
        func(64)


def test_invalid_inputs_raise():
    with pytest.raises(ValueError):
        pawn(0, Color.NONE)
    with pytest.raises(ValueError):
        rook(-1, 0)
    with pytest.raises(ValueError):
        between(0, 64)
    with pytest.raises(ValueError):
        attacks.pawn_span(1, 5)