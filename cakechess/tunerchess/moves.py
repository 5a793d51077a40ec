"""Move encoding of the tuner's board model: type, promotion, origin and target."""

from __future__ import annotations

from enum import IntEnum

from .pieces import PieceType, piece_type_char
from .squares import A1, A8, C1, C8, G1, G8, H1, H8, square_name

MAX_MOVES = 256
MOVE_NONE = 0

_CASTLING_TARGETS = {A1: C1, H1: G1, A8: C8, H8: G8}


class MoveType(IntEnum):
    NORMAL = 0
    PROMOTION = 1 << 14
    ENPASSANT = 2 << 14
    CASTLING = 3 << 14


def _check_square(square: int) -> None:
    if not 0 <= square <= 63:
        raise ValueError(f"invalid square: {square}")


def move_create(from_square: int, to_square: int) -> int:
    """A normal move between two squares."""
    _check_square(from_square)
    _check_square(to_square)
    return (from_square << 6) + to_square


def move_get(
    from_square: int,
    to_square: int,
    promotion_type: int = PieceType.KNIGHT,
    move_type: int = MoveType.NORMAL,
) -> int:
    """A move of the given type; castling moves name the rook's square as target."""
    _check_square(from_square)
    _check_square(to_square)
    if not PieceType.KNIGHT <= promotion_type <= PieceType.QUEEN:
        raise ValueError(f"invalid promotion type: {promotion_type}")
    return move_type + ((promotion_type - PieceType.KNIGHT) << 12) + (from_square << 6) + to_square


def move_from(move: int) -> int:
    return (move >> 6) & 0x3F


def move_to(move: int) -> int:
    return move & 0x3F


def move_type(move: int) -> MoveType:
    return MoveType(move & (3 << 14))


def move_promotion_type(move: int) -> PieceType:
    return PieceType(((move >> 12) & 3) + PieceType.KNIGHT)


def move_str(move: int) -> str:
    """Coordinate notation, with castling shown as the king's two-square step."""
    origin = move_from(move)
    target = move_to(move)
    kind = move_type(move)
    if kind == MoveType.CASTLING:
        target = _CASTLING_TARGETS.get(target, target)
    text = square_name(origin) + square_name(target)
    if kind == MoveType.PROMOTION:
        text += piece_type_char(move_promotion_type(move))
    return text