"""Piece types and colored pieces of the tuner's board model."""

from __future__ import annotations

from enum import IntEnum

from .squares import Color

_TYPE_CHARS = "pnbrqk"
_PIECE_CHARS = "PpNnBbRrQqKk"


class PieceType(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5
    NONE = -1


class Piece(IntEnum):
    WHITE_PAWN = 0
    BLACK_PAWN = 1
    WHITE_KNIGHT = 2
    BLACK_KNIGHT = 3
    WHITE_BISHOP = 4
    BLACK_BISHOP = 5
    WHITE_ROOK = 6
    BLACK_ROOK = 7
    WHITE_QUEEN = 8
    BLACK_QUEEN = 9
    WHITE_KING = 10
    BLACK_KING = 11
    NONE = -1


def _check_type(piece_type: int) -> None:
    if not PieceType.PAWN <= piece_type <= PieceType.KING:
        raise ValueError(f"invalid piece type: {piece_type}")


def _check_piece(piece: int) -> None:
    if not Piece.WHITE_PAWN <= piece <= Piece.BLACK_KING:
        raise ValueError(f"invalid piece: {piece}")


def piece_type_from_char(c: str) -> PieceType:
    index = _TYPE_CHARS.find(c.lower()) if len(c) == 1 else -1
    return PieceType(index)


def piece_type_char(piece_type: int) -> str:
    _check_type(piece_type)
    return _TYPE_CHARS[piece_type]


def piece_create(piece_type: int, color: int) -> Piece:
    _check_type(piece_type)
    if color not in (Color.WHITE, Color.BLACK):
        raise ValueError(f"invalid color: {color}")
    return Piece(piece_type * 2 + color)


def piece_from_char(c: str) -> Piece:
    index = _PIECE_CHARS.find(c) if len(c) == 1 else -1
    return Piece(index)


def piece_type_of(piece: int) -> PieceType:
    _check_piece(piece)
    return PieceType(piece // 2)


def piece_color(piece: int) -> Color:
    _check_piece(piece)
    return Color(piece & 1)


def piece_char(piece: int) -> str:
    """Letter of a piece, upper case for white, or '.' for no piece."""
    if not Piece.WHITE_PAWN <= piece <= Piece.BLACK_KING:
        return "."
    return _PIECE_CHARS[piece]