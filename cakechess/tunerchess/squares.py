"""Colors, directions, files, ranks and squares of the tuner's board model."""

from __future__ import annotations

from enum import IntEnum


class Color(IntEnum):
    WHITE = 0
    BLACK = 1
    NONE = -1


class Direction(IntEnum):
    NORTH = 8
    WEST = -1
    SOUTH = -8
    EAST = 1
    NORTH_EAST = 9
    NORTH_WEST = 7
    SOUTH_WEST = -9
    SOUTH_EAST = -7


FILE_A, FILE_B, FILE_C, FILE_D, FILE_E, FILE_F, FILE_G, FILE_H = range(8)
FILE_NONE = -1
RANK_1, RANK_2, RANK_3, RANK_4, RANK_5, RANK_6, RANK_7, RANK_8 = range(8)
RANK_NONE = -1

A1, C1, G1, H1 = 0, 2, 6, 7
A8, C8, G8, H8 = 56, 58, 62, 63
SQUARE_NONE = -1


def _check_color(color: int) -> None:
    if color not in (Color.WHITE, Color.BLACK):
        raise ValueError(f"invalid color: {color}")


def _check_file(file: int) -> None:
    if not FILE_A <= file <= FILE_H:
        raise ValueError(f"invalid file: {file}")


def _check_rank(rank: int) -> None:
    if not RANK_1 <= rank <= RANK_8:
        raise ValueError(f"invalid rank: {rank}")


def _check_square(square: int) -> None:
    if not 0 <= square <= 63:
        raise ValueError(f"invalid square: {square}")


def color_from_char(c: str) -> Color:
    return Color.WHITE if c == "w" else Color.BLACK if c == "b" else Color.NONE


def color_char(color: int) -> str:
    _check_color(color)
    return "w" if color == Color.WHITE else "b"


def relative_direction(direction: int, color: int) -> int:
    _check_color(color)
    return direction if color == Color.WHITE else -direction


def file_from_char(c: str) -> int:
    return ord(c) - ord("a") if "a" <= c <= "h" else FILE_NONE


def rank_from_char(c: str) -> int:
    return ord(c) - ord("1") if "1" <= c <= "8" else RANK_NONE


def file_char(file: int) -> str:
    _check_file(file)
    return chr(ord("a") + file)


def rank_char(rank: int) -> str:
    _check_rank(rank)
    return chr(ord("1") + rank)


def relative_rank(rank: int, color: int) -> int:
    _check_rank(rank)
    _check_color(color)
    return rank if color == Color.WHITE else RANK_8 - rank


def square_create(file: int, rank: int) -> int:
    _check_file(file)
    _check_rank(rank)
    return file | rank << 3


def square_file(square: int) -> int:
    _check_square(square)
    return square & 7


def square_rank(square: int) -> int:
    _check_square(square)
    return square >> 3


def is_light(square: int) -> bool:
    _check_square(square)
    return (square // 8 + square % 8) % 2 == 0


def is_dark(square: int) -> bool:
    return not is_light(square)


def is_same_color(square_1: int, square_2: int) -> bool:
    _check_square(square_1)
    _check_square(square_2)
    return (9 * (square_1 ^ square_2)) & 8 == 0


def flip_file(square: int) -> int:
    _check_square(square)
    return square ^ 7


def flip_rank(square: int) -> int:
    _check_square(square)
    return square ^ 56


def relative_square(square: int, color: int) -> int:
    _check_square(square)
    _check_color(color)
    return square ^ (color * 56)


def distance_file(square_1: int, square_2: int) -> int:
    return abs(square_file(square_1) - square_file(square_2))


def distance_rank(square_1: int, square_2: int) -> int:
    return abs(square_rank(square_1) - square_rank(square_2))


def distance(square_1: int, square_2: int) -> int:
    """Manhattan distance between two squares."""
    return distance_file(square_1, square_2) + distance_rank(square_1, square_2)


def chebyshev(square_1: int, square_2: int) -> int:
    """King-move distance between two squares."""
    return max(distance_file(square_1, square_2), distance_rank(square_1, square_2))


def square_name(square: int) -> str:
    return file_char(square_file(square)) + rank_char(square_rank(square))