"""Attack sets of the tuner's board model: computed leaper tables and slider lookup tables."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Sequence

from .bitboard import FILE, FILE_A, FILE_H, MASK64, RANK, RANK_1, RANK_8
from .squares import Color

DELTA_BISHOP = ((-1, -1), (-1, 1), (1, -1), (1, 1))
DELTA_ROOK = ((-1, 0), (0, -1), (0, 1), (1, 0))

_DELTA_KNIGHT = ((-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1))
_DELTA_KING = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1))
_DELTA_PAWN = (((1, -1), (1, 1)), ((-1, -1), (-1, 1)))


def _check_square(square: int) -> None:
    if not 0 <= square <= 63:
        raise ValueError(f"invalid square: {square}")


def _check_color(color: int) -> None:
    if color not in (Color.WHITE, Color.BLACK):
        raise ValueError(f"invalid color: {color}")


def _steps(square: int, deltas: Sequence[tuple[int, int]]) -> int:
    rank, file = square >> 3, square & 7
    result = 0
    for d_rank, d_file in deltas:
        r, f = rank + d_rank, file + d_file
        if 0 <= r < 8 and 0 <= f < 8:
            result |= 1 << (f | r << 3)
    return result


_PAWN = tuple(tuple(_steps(square, deltas) for square in range(64)) for deltas in _DELTA_PAWN)
_KNIGHT = tuple(_steps(square, _DELTA_KNIGHT) for square in range(64))
_KING = tuple(_steps(square, _DELTA_KING) for square in range(64))


def pawn_left(pawns: int, color: int) -> int:
    """Squares attacked toward the a-file side (white's view) by a set of pawns."""
    _check_color(color)
    pawns &= MASK64
    if color == Color.WHITE:
        return (pawns << 7) & ~FILE_H & MASK64
    return (pawns >> 7) & ~FILE_A & MASK64


def pawn_right(pawns: int, color: int) -> int:
    """Squares attacked toward the h-file side (white's view) by a set of pawns."""
    _check_color(color)
    pawns &= MASK64
    if color == Color.WHITE:
        return (pawns << 9) & ~FILE_A & MASK64
    return (pawns >> 9) & ~FILE_H & MASK64


def pawn_span(pawns: int, color: int) -> int:
    """All squares attacked by a set of pawns of color."""
    return pawn_left(pawns, color) | pawn_right(pawns, color)


def sliders(square: int, occupied: int, deltas: Sequence[tuple[int, int]]) -> int:
    """Squares reached from square along each (rank, file) step, stopping on the first blocker."""
    _check_square(square)
    rank0, file0 = square >> 3, square & 7
    result = 0
    for d_rank, d_file in deltas:
        rank, file = rank0 + d_rank, file0 + d_file
        while 0 <= rank < 8 and 0 <= file < 8:
            target = file | rank << 3
            result |= 1 << target
            if occupied >> target & 1:
                break
            rank += d_rank
            file += d_file
    return result


class SliderTable:
    """Precomputed slider attacks keyed by the relevant blockers of each square."""

    def __init__(self, deltas: Sequence[tuple[int, int]]) -> None:
        self.deltas = tuple((int(r), int(f)) for r, f in deltas)
        self.masks = tuple(self._relevant(square) for square in range(64))
        self._tables: list[Optional[dict[int, int]]] = [None] * 64

    def _relevant(self, square: int) -> int:
        rank, file = square >> 3, square & 7
        edges = ((RANK_1 | RANK_8) & ~RANK[rank]) | ((FILE_A | FILE_H) & ~FILE[file])
        return sliders(square, 0, self.deltas) & ~edges & MASK64

    def _build(self, square: int) -> dict[int, int]:
        mask = self.masks[square]
        table: dict[int, int] = {}
        occupied = 0
        while True:
            table[occupied] = sliders(square, occupied, self.deltas)
            occupied = (occupied - mask) & mask
            if not occupied:
                break
        self._tables[square] = table
        return table

    def lookup(self, square: int, occupied: int) -> int:
        _check_square(square)
        table = self._tables[square]
        if table is None:
            table = self._build(square)
        return table[occupied & self.masks[square]]


_BISHOP_TABLE = SliderTable(DELTA_BISHOP)
_ROOK_TABLE = SliderTable(DELTA_ROOK)


def pawn(square: int, color: int) -> int:
    _check_square(square)
    _check_color(color)
    return _PAWN[color][square]


def knight(square: int) -> int:
    _check_square(square)
    return _KNIGHT[square]


def bishop(square: int, occupied: int) -> int:
    return _BISHOP_TABLE.lookup(square, occupied)


def rook(square: int, occupied: int) -> int:
    return _ROOK_TABLE.lookup(square, occupied)


def queen(square: int, occupied: int) -> int:
    return bishop(square, occupied) | rook(square, occupied)


def king(square: int) -> int:
    _check_square(square)
    return _KING[square]


@lru_cache(maxsize=None)
def _relation(square_1: int, square_2: int) -> tuple[int, int]:
    if square_1 == square_2:
        return 0, 0
    bb1 = 1 << square_1
    bb2 = 1 << square_2
    between_bb = line_bb = 0
    if rook(square_1, 0) & bb2:
        between_bb = rook(square_1, bb2) & rook(square_2, bb1)
        line_bb = (rook(square_1, 0) & rook(square_2, 0)) | bb1 | bb2
    if bishop(square_1, 0) & bb2:
        between_bb = bishop(square_1, bb2) & bishop(square_2, bb1)
        line_bb = (bishop(square_1, 0) & bishop(square_2, 0)) | bb1 | bb2
    return between_bb, line_bb


def between(square_1: int, square_2: int) -> int:
    """Squares strictly between two aligned squares; empty when they are not aligned."""
    _check_square(square_1)
    _check_square(square_2)
    return _relation(square_1, square_2)[0]


def line(square_1: int, square_2: int) -> int:
    """The whole line through two aligned squares; empty when they are not aligned."""
    _check_square(square_1)
    _check_square(square_2)
    return _relation(square_1, square_2)[1]