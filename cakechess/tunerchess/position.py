"""Piece placement and side to move of the tuner's board model."""

from __future__ import annotations

from .bitboard import from_square
from .pieces import piece_char, piece_color, piece_from_char, piece_type_of
from .squares import Color

_EMPTY = -1


class Position:
    """Bitboards per piece type and color, a square-to-piece map and the side to move."""

    def __init__(self) -> None:
        self.pieces: list[int] = [0] * 6
        self.colors: list[int] = [0, 0]
        self.board: list[int] = [_EMPTY] * 64
        self.stm: int = Color.WHITE

    def set(self, fen: str) -> None:
        """Reset and load the placement and side to move from FEN text."""
        fields = fen.split(" ")
        if len(fields) < 4 or not fields[0]:
            raise ValueError(f"incomplete FEN: {fen!r}")

        self.__init__()
        placement, side = fields[0], fields[1]

        square = 56
        for c in placement:
            if c.isdigit():
                square += int(c)
            elif c == "/":
                square -= 16
            else:
                piece = piece_from_char(c)
                if piece < 0:
                    raise ValueError(f"invalid piece letter {c!r} in FEN")
                if not 0 <= square < 64:
                    raise ValueError(f"FEN placement runs off the board: {placement!r}")
                bit = from_square(square)
                self.board[square] = piece
                self.pieces[piece_type_of(piece)] |= bit
                self.colors[piece_color(piece)] |= bit
                square += 1

        self.stm = Color.WHITE if side == "w" else Color.BLACK

    def render(self) -> str:
        """Eight text rows, rank 8 first, with piece letters and '.' on empty squares."""
        rows = []
        for rank in range(7, -1, -1):
            cells = []
            for file in range(8):
                piece = self.board[file | rank << 3]
                cells.append("." if piece == _EMPTY else piece_char(piece))
            rows.append(" ".join(cells) + "\n")
        return "".join(rows) + "\n"