"""64-bit square sets of the tuner's board model."""

from __future__ import annotations

from typing import Iterator

from .squares import Color, Direction

MASK64 = (1 << 64) - 1

RANK = tuple(0xFF << 8 * rank for rank in range(8))
FILE = tuple(0x0101010101010101 << file for file in range(8))

RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = RANK
FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = FILE

PRE_PROMOTION_RANK = (RANK_7, RANK_2)
PROMOTION_RANK = (RANK_8, RANK_1)

LIGHT = 0x55AA55AA55AA55AA
DARK = 0xAA55AA55AA55AA55


def _check_square(square: int) -> None:
    if not 0 <= square <= 63:
        raise ValueError(f"invalid square: {square}")


def from_square(square: int) -> int:
    _check_square(square)
    return 1 << square


def is_many(bitboard: int) -> bool:
    """True when more than one square is set."""
    return bool(bitboard & (bitboard - 1))


def is_only(bitboard: int) -> bool:
    """True when exactly one square is set."""
    return bool(bitboard) and not is_many(bitboard)


def is_set(bitboard: int, square: int) -> bool:
    _check_square(square)
    return bool(bitboard >> square & 1)


def set_bit(bitboard: int, square: int) -> int:
    _check_square(square)
    return bitboard | 1 << square


def pop_bit(bitboard: int, square: int) -> int:
    """Toggle the bit of square."""
    _check_square(square)
    return bitboard ^ 1 << square


def count(bitboard: int) -> int:
    return bin(bitboard & MASK64).count("1")


def lsb(bitboard: int) -> int:
    if not bitboard:
        raise ValueError("empty bitboard has no lowest bit")
    return (bitboard & -bitboard).bit_length() - 1


def msb(bitboard: int) -> int:
    if not bitboard:
        raise ValueError("empty bitboard has no highest bit")
    return (bitboard & MASK64).bit_length() - 1


def flip(bitboard: int) -> int:
    """Mirror the board vertically (reverse byte order)."""
    return int.from_bytes((bitboard & MASK64).to_bytes(8, "little"), "big")


def iter_squares(bitboard: int) -> Iterator[int]:
    """Set squares from lowest to highest."""
    bitboard &= MASK64
    while bitboard:
        low = bitboard & -bitboard
        yield low.bit_length() - 1
        bitboard ^= low


def fill_up(bitboard: int) -> int:
    bitboard |= bitboard << 8
    bitboard |= bitboard << 16
    bitboard |= bitboard << 32
    return bitboard & MASK64


def fill_down(bitboard: int) -> int:
    bitboard &= MASK64
    bitboard |= bitboard >> 8
    bitboard |= bitboard >> 16
    bitboard |= bitboard >> 32
    return bitboard


def fill_up_relative(bitboard: int, color: int) -> int:
    """Fill toward the opponent's side of the board for color."""
    return fill_down(bitboard) if color == Color.BLACK else fill_up(bitboard)


def fill_down_relative(bitboard: int, color: int) -> int:
    """Fill toward color's own side of the board."""
    return fill_up(bitboard) if color == Color.BLACK else fill_down(bitboard)


_NOT_A = ~FILE_A & MASK64
_NOT_H = ~FILE_H & MASK64

_SHIFTS = {
    Direction.NORTH: lambda b: b << 8,
    Direction.SOUTH: lambda b: b >> 8,
    Direction.EAST: lambda b: (b & _NOT_H) << 1,
    Direction.WEST: lambda b: (b & _NOT_A) >> 1,
    Direction.NORTH_EAST: lambda b: (b & _NOT_H) << 9,
    Direction.NORTH_WEST: lambda b: (b & _NOT_A) << 7,
    Direction.SOUTH_EAST: lambda b: (b & _NOT_H) >> 7,
    Direction.SOUTH_WEST: lambda b: (b & _NOT_A) >> 9,
}


def shift(bitboard: int, direction: int) -> int:
    """Move every set square one step in direction, dropping those that leave the board."""
    try:
        step = _SHIFTS[Direction(direction)]
    except ValueError:
        raise ValueError(f"invalid direction: {direction}") from None
    return step(bitboard & MASK64) & MASK64


def board_str(bitboard: int) -> str:
    """Eight text rows, rank 8 first, with 'X' on set squares, followed by a blank line."""
    rows = []
    for rank in range(7, -1, -1):
        cells = ["X" if bitboard >> (rank << 3 | file) & 1 else "." for file in range(8)]
        rows.append(" ".join(cells) + "\n")
    return "".join(rows) + "\n"