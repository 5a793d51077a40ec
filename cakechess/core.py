"""Shared chess primitives: moves, bitboards, attacks, hashing keys and the transposition table."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable

MASK64 = (1 << 64) - 1

TRUE = 1
FALSE = 0

WHITE = 0
BLACK = 1

PAWN = 0
KNIGHT = 1
BISHOP = 2
ROOK = 3
QUEEN = 4
KING = 5
TYPE_NONE = 6

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
PIECE_NONE = 12

A1, B1, C1, D1, E1, F1, G1, H1 = range(8)
A2 = 8
A7 = 48
A8 = 56
H8 = 63
SQUARE_NONE = 64

MAX_PLY = 256
MAX_MOVE = 256

WIN = 30000
INF = 32000
DRAW = 0

CASTLED_NONE = 0
CASTLED_WK = 1
CASTLED_WQ = 2
CASTLED_BK = 4
CASTLED_BQ = 8

BOUND_UPPER = 0
BOUND_LOWER = 1
BOUND_EXACT = 2

MOVE_NONE = 0

HIST_MAX = 16384

CORRHIST_SIZE = 16384
CORRHIST_BONUS_MAX = 512
CORRHIST_BONUS_SCALE = 8

STACK_SIZE = 264

TT_BITS_DEFAULT = 20
TT_ENTRY_BYTES = 8

FILE_A_BB = 0x0101010101010101
FILE_H_BB = 0x8080808080808080


def to_i16(value: int) -> int:
    """Wrap an integer to a signed 16-bit value."""
    return ((value + 0x8000) & 0xFFFF) - 0x8000


# Moves

def move_make(from_square: int, to_square: int, promo: int = PAWN) -> int:
    """Pack a move: 6 bits from, 6 bits to, promotion type above."""
    return from_square | to_square << 6 | promo << 12


def move_from(move: int) -> int:
    return move & 63


def move_to(move: int) -> int:
    return move >> 6 & 63


def move_promo(move: int) -> int:
    return move >> 12


def format_move(move: int) -> str:
    """Coordinate text of a move; the fifth character is 'q' for a promotion, else a space."""
    origin, target = move_from(move), move_to(move)
    return (
        chr(97 + origin % 8)
        + chr(49 + origin // 8)
        + chr(97 + target % 8)
        + chr(49 + target // 8)
        + ("q" if move_promo(move) else " ")
    )


# Bitboards

def lsb(bitboard: int) -> int:
    """Index of the lowest set bit, or 64 for an empty board."""
    if not bitboard:
        return 64
    return (bitboard & -bitboard).bit_length() - 1


def popcount(bitboard: int) -> int:
    return bin(bitboard & MASK64).count("1")


def byteswap(bitboard: int) -> int:
    return int.from_bytes((bitboard & MASK64).to_bytes(8, "little"), "big")


def north(bitboard: int) -> int:
    return bitboard << 8 & MASK64


def south(bitboard: int) -> int:
    return bitboard >> 8


def west(bitboard: int) -> int:
    return bitboard >> 1 & ~FILE_H_BB & MASK64


def east(bitboard: int) -> int:
    return bitboard << 1 & ~FILE_A_BB & MASK64


def nw(bitboard: int) -> int:
    return north(west(bitboard))


def ne(bitboard: int) -> int:
    return north(east(bitboard))


def sw(bitboard: int) -> int:
    return south(west(bitboard))


def se(bitboard: int) -> int:
    return south(east(bitboard))


def ray(mask: int, occupied: int, func: Callable[[int], int]) -> int:
    """Squares reached by sliding along one direction until blocked."""
    mask = func(mask)
    for _ in range(6):
        mask |= func(mask & ~occupied & MASK64)
    return mask


def hyperbola(mask: int, occupied: int, line: int) -> int:
    """Slider attacks of a single piece along one line, by hyperbola quintessence."""
    blockers = occupied & line
    forward = (blockers - mask) & MASK64
    backward = byteswap((byteswap(blockers) - byteswap(mask)) & MASK64)
    return line & (forward ^ backward)


def _build_diagonals() -> tuple[tuple[int, ...], tuple[int, ...]]:
    anti = [0] * 64
    main = [0] * 64
    for square in range(64):
        anti[square] = ray(1 << square, 0, se) | ray(1 << square, 0, nw)
        main[square ^ 56] = byteswap(anti[square])
    return tuple(main), tuple(anti)


DIAG = _build_diagonals()


def attack(mask: int, occupied: int, piece_type: int) -> int:
    """Attack set of a non-pawn piece standing on the single square in mask."""
    mask &= MASK64
    if piece_type < BISHOP:
        return (
            (mask << 6 | mask >> 10) & 0x3F3F3F3F3F3F3F3F
            | (mask << 10 | mask >> 6) & 0xFCFCFCFCFCFCFCFC
            | (mask << 17 | mask >> 15) & ~FILE_A_BB
            | (mask << 15 | mask >> 17) & ~FILE_H_BB
        ) & MASK64

    if piece_type > QUEEN:
        return (
            mask << 8
            | mask >> 8
            | (mask >> 1 | mask >> 9 | mask << 7) & ~FILE_H_BB
            | (mask << 1 | mask << 9 | mask >> 7) & ~FILE_A_BB
        ) & MASK64

    square = lsb(mask)
    result = 0
    if piece_type != ROOK:
        result |= hyperbola(mask, occupied, DIAG[0][square]) | hyperbola(mask, occupied, DIAG[1][square])
    if piece_type > BISHOP:
        file_line = mask ^ (FILE_A_BB << square % 8)
        result |= hyperbola(mask, occupied, file_line) | ray(mask, occupied, east) | ray(mask, occupied, west)
    return result & MASK64


def bitboard_str(bitboard: int) -> str:
    """Eight text rows, rank 8 first, with 'X' on set squares, followed by a blank line."""
    rows = []
    for rank in range(7, -1, -1):
        cells = ["X" if bitboard >> (rank << 3 | file) & 1 else "." for file in range(8)]
        rows.append(" ".join(cells) + "\n")
    return "".join(rows) + "\n"


def now_ms() -> int:
    """Milliseconds on the monotonic clock."""
    return time.monotonic_ns() // 1_000_000


# Hashing

class Mersenne64:
    """64-bit Mersenne Twister (MT19937-64)."""

    _N = 312
    _M = 156
    _MATRIX = 0xB5026F5AA96619E9
    _UPPER = 0xFFFFFFFF80000000
    _LOWER = 0x7FFFFFFF

    def __init__(self, seed: int = 5489) -> None:
        state = [seed & MASK64]
        for i in range(1, self._N):
            prev = state[-1]
            state.append((6364136223846793005 * (prev ^ (prev >> 62)) + i) & MASK64)
        self._state = state
        self._index = self._N

    def _twist(self) -> None:
        state = self._state
        n = self._N
        for i in range(n):
            x = (state[i] & self._UPPER) | (state[(i + 1) % n] & self._LOWER)
            shifted = x >> 1
            if x & 1:
                shifted ^= self._MATRIX
            state[i] = state[(i + self._M) % n] ^ shifted
        self._index = 0

    def next(self) -> int:
        """Return the next 64-bit output."""
        if self._index >= self._N:
            self._twist()
        y = self._state[self._index]
        self._index += 1
        y ^= (y >> 29) & 0x5555555555555555
        y ^= (y << 17) & 0x71D67FFFEDA60000
        y ^= (y << 37) & 0xFFF7EEE000000000
        y ^= y >> 43
        return y & MASK64


def zobrist_keys() -> tuple[tuple[int, ...], ...]:
    """Hash keys indexed [piece][square]; the 65th column (no square) is zero."""
    rng = Mersenne64()
    table = [[0] * 65 for _ in range(13)]
    for piece in range(13):
        for square in range(64):
            table[piece][square] = rng.next()
    return tuple(tuple(row) for row in table)


KEYS = zobrist_keys()


# Transposition table

@dataclass(slots=True)
class TTEntry:
    key: int = 0
    move: int = 0
    score: int = 0
    depth: int = 0
    bound: int = 0


class TranspositionTable:
    """Always-replace hash table indexed by the top bits of the position hash."""

    def __init__(self, bits: int = TT_BITS_DEFAULT) -> None:
        self._set_bits(bits)

    def _set_bits(self, bits: int) -> None:
        if not 0 <= bits <= 63:
            raise ValueError(f"table bits out of range: {bits}")
        self.bits = bits
        self.shift = 64 - bits
        self._entries: list[TTEntry | None] = [None] * (1 << bits)

    def __len__(self) -> int:
        return len(self._entries)

    def index(self, key: int) -> int:
        return (key & MASK64) >> self.shift

    def probe(self, key: int) -> TTEntry:
        """Copy of the stored entry when its 16-bit key matches, else an empty entry."""
        entry = self._entries[self.index(key)]
        if entry is None or entry.key != to_i16(key):
            return TTEntry()
        return replace(entry)

    def store(self, key: int, entry: TTEntry) -> None:
        self._entries[self.index(key)] = replace(
            entry,
            key=to_i16(key),
            score=to_i16(entry.score),
            depth=entry.depth & 0xFF,
            bound=entry.bound & 0xFF,
        )

    def resize_mb(self, megabytes: int) -> None:
        """Reallocate to the largest power of two of entries that fits in megabytes."""
        size = megabytes * (1024 * 1024 // TT_ENTRY_BYTES)
        if size < 1:
            raise ValueError(f"hash size must be at least 1 MB, got {megabytes}")
        self._set_bits(size.bit_length() - 1)

    def clear(self) -> None:
        self._entries = [None] * (1 << self.bits)