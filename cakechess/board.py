"""Bitboard position with move generation, static exchange and classical evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Protocol

from .core import (
    A1,
    A2,
    A7,
    A8,
    BISHOP,
    BLACK,
    BLACK_KING,
    BLACK_PAWN,
    BLACK_QUEEN,
    C1,
    CASTLED_BK,
    CASTLED_BQ,
    CASTLED_WK,
    CASTLED_WQ,
    E1,
    FILE_A_BB,
    G1,
    H1,
    H8,
    KEYS,
    KING,
    KNIGHT,
    MASK64,
    PAWN,
    PIECE_NONE,
    QUEEN,
    ROOK,
    SQUARE_NONE,
    TYPE_NONE,
    WHITE,
    WHITE_KNIGHT,
    WHITE_ROOK,
    attack,
    byteswap,
    east,
    lsb,
    move_from,
    move_make,
    move_promo,
    move_to,
    ne,
    north,
    nw,
    popcount,
    se,
    south,
    sw,
    to_i16,
    west,
)
from .weights import (
    BISHOP_PAIR,
    INDEX_KING_ATTACK,
    INDEX_KING_PASSER_THEM,
    INDEX_KING_PASSER_US,
    INDEX_MOBILITY,
    INDEX_PASSER,
    INDEX_PHALANX,
    INDEX_PST_FILE,
    INDEX_PST_RANK,
    INDEX_PUSH_THREAT,
    INDEX_THREAT,
    KING_OPEN,
    KING_SEMIOPEN,
    LAYOUT,
    MATERIAL,
    OFFSET_KING_ATTACK,
    OFFSET_MOBILITY,
    OFFSET_PASSER,
    OFFSET_PHALANX,
    OFFSET_PST,
    OFFSET_PUSH_THREAT,
    OFFSET_THREAT,
    PAWN_DOUBLED,
    PAWN_PROTECTED,
    PAWN_SHIELD,
    PHASE,
    ROOK_OPEN,
    ROOK_SEMIOPEN,
    SCALE,
    TEMPO,
    VALUE,
    get_data,
)

_PIECE_LETTERS = "PpNnBbRrQqKk"
_CORNER_FLAGS = ((H1, CASTLED_WK), (A1, CASTLED_WQ), (H8, CASTLED_BK), (A8, CASTLED_BQ))
_SHIELD_MASK = 0x70700


class Evaluator(Protocol):
    def evaluate(self, board: "Board") -> int: ...


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _squares(bitboard: int) -> Iterator[int]:
    while bitboard:
        low = bitboard & -bitboard
        yield low.bit_length() - 1
        bitboard ^= low


def _pawn_moves(targets: int, offset: int) -> Iterator[int]:
    for to in _squares(targets):
        yield move_make(to - offset, to, QUEEN if to < 8 or to > 55 else PAWN)


def _piece_moves(targets: int, occupied: int, mask: int, piece_type: int) -> Iterator[int]:
    for origin in _squares(mask):
        for to in _squares(attack(1 << origin, occupied, piece_type) & targets):
            yield move_make(origin, to)


@dataclass
class Board:
    """A chess position; castling flags mark rights that are gone."""

    checkers: int = 0
    hash: int = 0
    hash_pawn: int = 0
    hash_non_pawn: list[int] = field(default_factory=lambda: [0, 0])
    colors: list[int] = field(default_factory=lambda: [0, 0])
    pieces: list[int] = field(default_factory=lambda: [0] * 6)
    trend: int = 0
    stm: int = WHITE
    castled: int = 0
    halfmove: int = 0
    enpassant: int = SQUARE_NONE
    board: list[int] = field(default_factory=lambda: [PIECE_NONE] * 64)

    def copy(self) -> "Board":
        return replace(
            self,
            hash_non_pawn=list(self.hash_non_pawn),
            colors=list(self.colors),
            pieces=list(self.pieces),
            board=list(self.board),
        )

    def _toggle(self, piece: int, square: int) -> None:
        bit = 1 << square
        self.pieces[piece // 2] ^= bit
        self.colors[piece % 2] ^= bit
        key = KEYS[piece][square]
        self.hash ^= key
        if piece < WHITE_KNIGHT:
            self.hash_pawn ^= key
        else:
            self.hash_non_pawn[piece % 2] ^= key

    def edit(self, square: int, piece: int) -> None:
        """Replace whatever stands on square with piece (PIECE_NONE to clear it)."""
        current = self.board[square]
        if current < PIECE_NONE:
            self._toggle(current, square)
        if piece < PIECE_NONE:
            self._toggle(piece, square)
        self.board[square] = piece

    def _attackers(self, mask: int, colors: list[int]) -> int:
        if not mask:
            return 0
        white, black = colors
        occupied = white | black
        pieces = self.pieces
        return (
            (nw(mask) | ne(mask)) & pieces[PAWN] & black
            | (sw(mask) | se(mask)) & pieces[PAWN] & white
            | attack(mask, 0, KNIGHT) & pieces[KNIGHT]
            | attack(mask, 0, KING) & pieces[KING]
            | attack(mask, occupied, BISHOP) & (pieces[BISHOP] | pieces[QUEEN])
            | attack(mask, occupied, ROOK) & (pieces[ROOK] | pieces[QUEEN])
        )

    def attackers(self, mask: int) -> int:
        """Pieces of either color attacking the square in mask."""
        return self._attackers(mask, self.colors)

    def quiet(self, move: int) -> bool:
        """True for a move that captures nothing and does not promote."""
        target = move_to(move)
        return (
            self.board[target] > BLACK_KING
            and not move_promo(move)
            and not (self.board[move_from(move)] < WHITE_KNIGHT and target == self.enpassant)
        )

    def see(self, move: int, threshold: int) -> bool:
        """Static exchange: does the move win at least threshold material?"""
        origin, target = move_from(move), move_to(move)
        side = self.stm ^ 1

        if move_promo(move) or (self.board[origin] < WHITE_KNIGHT and target == self.enpassant):
            return True

        threshold -= VALUE[self.board[target] // 2]
        if threshold > 0:
            return False

        threshold += VALUE[self.board[origin] // 2]
        if threshold <= 0:
            return True

        colors = list(self.colors)
        colors[self.stm] ^= 1 << origin
        target_mask = 1 << target

        while threats := self._attackers(target_mask, colors) & colors[side]:
            piece_type = next((t for t in range(PAWN, KING) if self.pieces[t] & threats), KING)
            side ^= 1
            threshold = VALUE[piece_type] - threshold
            if threshold < 0:
                if piece_type == KING and self._attackers(target_mask, colors) & colors[side]:
                    side ^= 1
                break
            colors[side ^ 1] ^= 1 << lsb(self.pieces[piece_type] & threats)

        return side != self.stm

    def make(self, move: int) -> bool:
        """Play a move in place; True means it was illegal and the board must be discarded."""
        origin, target = move_from(move), move_to(move)
        piece = self.board[origin]
        stm = self.stm
        none_keys = KEYS[PIECE_NONE]

        self.halfmove = (self.halfmove + 1) & 0xFF
        if not (self.board[target] > BLACK_KING and piece > BLACK_PAWN):
            self.halfmove = 0

        promo = move_promo(move)
        self.edit(target, promo * 2 + stm if promo else piece)
        self.edit(origin, PIECE_NONE)

        self.hash ^= none_keys[self.enpassant]
        if piece < WHITE_KNIGHT and target == self.enpassant:
            self.edit(target ^ 8, PIECE_NONE)
            self.hash ^= none_keys[self.enpassant]

        is_double_push = piece < WHITE_KNIGHT and abs(origin - target) == 16
        self.enpassant = target ^ 8 if is_double_push else SQUARE_NONE
        self.hash ^= none_keys[self.enpassant]

        self.hash ^= none_keys[self.castled]
        if piece > BLACK_QUEEN:
            self.castled |= 3 << stm * 2
            if abs(origin - target) == 2:
                middle = (origin + target) // 2
                if self.attackers(1 << middle) & self.colors[stm ^ 1]:
                    return True
                self.edit(target + (1 if target > origin else -2), PIECE_NONE)
                self.edit(middle, WHITE_ROOK + stm)

        for corner, flag in _CORNER_FLAGS:
            if origin == corner or target == corner:
                self.castled |= flag

        self.hash ^= none_keys[self.castled]
        self.hash ^= none_keys[0]

        self.stm ^= 1
        self.checkers = self.attackers(self.pieces[KING] & self.colors[self.stm]) & self.colors[stm]
        return bool(self.attackers(self.pieces[KING] & self.colors[stm]) & self.colors[self.stm])

    def movegen(self, is_all: bool) -> list[int]:
        """Pseudo-legal moves; without is_all only captures and promotions."""
        stm = self.stm
        them = stm ^ 1
        occupied = self.colors[WHITE] | self.colors[BLACK]
        own = self.colors[stm]
        targets = ~own & MASK64 if is_all else self.colors[them]
        pawns = self.pieces[PAWN] & own
        push = (
            (south(pawns) if stm else north(pawns))
            & ~occupied
            & (MASK64 if is_all else 0xFF000000000000FF)
        )
        pawn_targets = self.colors[them] | (1 << self.enpassant if self.enpassant < SQUARE_NONE else 0)
        sign = -1 if stm else 1

        moves: list[int] = []
        moves.extend(_pawn_moves(push, 8 * sign))
        double = (south(push & 0xFF0000000000) if stm else north(push & 0xFF0000)) & ~occupied
        moves.extend(_pawn_moves(double, 16 * sign))
        moves.extend(_pawn_moves((se(pawns) if stm else nw(pawns)) & pawn_targets, 7 * sign))
        moves.extend(_pawn_moves((sw(pawns) if stm else ne(pawns)) & pawn_targets, 9 * sign))

        pieces = self.pieces
        moves.extend(_piece_moves(targets, occupied, pieces[KING] & own, KING))
        moves.extend(_piece_moves(targets, occupied, pieces[KNIGHT] & own, KNIGHT))
        moves.extend(_piece_moves(targets, occupied, (pieces[BISHOP] | pieces[QUEEN]) & own, BISHOP))
        moves.extend(_piece_moves(targets, occupied, (pieces[ROOK] | pieces[QUEEN]) & own, ROOK))

        if is_all and not self.checkers:
            base = stm * 56
            rights = self.castled >> stm * 2
            if not rights & 1 and not occupied & 96 << base:
                moves.append(move_make(E1 + base, G1 + base))
            if not rights & 2 and not occupied & 14 << base:
                moves.append(move_make(E1 + base, C1 + base))

        return moves

    def eval(self, network: Optional[Evaluator] = None) -> int:
        """Static score from the side to move's view; uses the network when one is given."""
        if network is not None:
            return network.evaluate(self)

        colors = list(self.colors)
        pieces = list(self.pieces)
        score = _tdiv(self.trend, 2) + (_tdiv(self.trend, 4) << 16)
        phases = [0, 0]

        for color in (WHITE, BLACK):
            occupied = colors[WHITE] | colors[BLACK]
            pawns_us = pieces[PAWN] & colors[color]
            pawns_them = pieces[PAWN] & colors[color ^ 1]
            pawns_attacks = ne(pawns_us) | nw(pawns_us)
            pawns_threats = se(pawns_them) | sw(pawns_them)
            pawns_them_push = south(pawns_them) & ~occupied
            pawns_push_threats = se(pawns_them_push) | sw(pawns_them_push)

            king_us = lsb(pieces[KING] & colors[color])
            king_them = lsb(pieces[KING] & colors[color ^ 1])

            score += (
                (popcount(pieces[BISHOP] & colors[color]) > 1) * BISHOP_PAIR
                + popcount(pawns_us & pawns_attacks) * PAWN_PROTECTED
                - popcount(pawns_us & (north(pawns_us) | pawns_us << 16 & MASK64)) * PAWN_DOUBLED
            )

            for piece_type in range(PAWN, TYPE_NONE):
                for square in _squares(pieces[piece_type] & colors[color]):
                    phases[color] += PHASE[piece_type]
                    rank, file = square // 8, square % 8
                    bit = 1 << square

                    score += MATERIAL[piece_type] + (
                        get_data(piece_type * 8 + rank + INDEX_PST_RANK)
                        + get_data(piece_type * 8 + file + INDEX_PST_FILE)
                        + OFFSET_PST
                    ) * SCALE

                    if piece_type == PAWN:
                        if west(pawns_us) & pawns_us & bit:
                            score += (get_data(rank + INDEX_PHALANX) + OFFSET_PHALANX) * SCALE
                        if not (FILE_A_BB << square) & (pawns_them | pawns_threats):
                            us_distance = max(abs(rank - king_us // 8 + 1), abs(file - king_us % 8))
                            them_distance = max(abs(rank - king_them // 8 + 1), abs(file - king_them % 8))
                            score += (
                                get_data(rank + INDEX_PASSER)
                                + get_data(us_distance + INDEX_KING_PASSER_US)
                                + get_data(them_distance + INDEX_KING_PASSER_THEM)
                                + OFFSET_PASSER
                            ) * SCALE
                        continue

                    mobility = attack(bit, occupied, piece_type)
                    score += (get_data(piece_type + INDEX_MOBILITY) + OFFSET_MOBILITY) * popcount(
                        mobility & ~colors[color] & ~pawns_threats & MASK64
                    )

                    if bit & pawns_threats:
                        score -= (get_data(piece_type + INDEX_THREAT) + OFFSET_THREAT) * SCALE

                    file_mask = FILE_A_BB << file
                    if not file_mask & pieces[PAWN]:
                        score += (piece_type > QUEEN) * KING_OPEN + (piece_type == ROOK) * ROOK_OPEN
                    if not file_mask & pawns_us:
                        score += (piece_type > QUEEN) * KING_SEMIOPEN + (piece_type == ROOK) * ROOK_SEMIOPEN

                    if piece_type > QUEEN:
                        shield = popcount(pawns_us & _SHIELD_MASK << 5 * (file > 2))
                        score += shield * PAWN_SHIELD * (square < A2)
                    elif pieces[QUEEN]:
                        king_zone = attack(1 << king_them, 0, KING)
                        score += popcount(mobility & king_zone) * (
                            get_data(piece_type + INDEX_KING_ATTACK) + OFFSET_KING_ATTACK
                        )

                    if bit & pawns_push_threats:
                        score -= get_data(piece_type + INDEX_PUSH_THREAT) + OFFSET_PUSH_THREAT

            colors = [byteswap(c) for c in colors]
            pieces = [byteswap(p) for p in pieces]
            score = -score

        strong = 1 if score < 0 else 0
        phase = phases[WHITE] + phases[BLACK]
        pawn_count = popcount(self.pieces[PAWN] & self.colors[strong])

        if self.stm:
            score = -score
        scale = 1 if not pawn_count and phases[strong] - phases[strong ^ 1] < 2 else 8 + pawn_count
        endgame = _tdiv((score >> 16) * scale, 16) * (24 - phase)
        return _tdiv(to_i16(score) * phase + endgame, 24) + TEMPO

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Build a board from FEN text; the fullmove field may be left out."""
        fields = fen.split()
        if len(fields) < 5:
            raise ValueError(f"incomplete FEN: {fen!r}")
        placement, side, castling, enpassant, halfmove = fields[:5]

        board = cls()
        square = A8
        for c in placement:
            if c.isdigit():
                square += int(c)
            elif c == "/":
                square -= 16
            else:
                if not 0 <= square < 64:
                    raise ValueError(f"FEN placement runs off the board: {placement!r}")
                index = _PIECE_LETTERS.find(c)
                board.edit(square, index if index >= 0 else PIECE_NONE)
                square += 1

        none_keys = KEYS[PIECE_NONE]
        if side == "b":
            board.stm = BLACK
            board.hash ^= none_keys[0]

        board.castled = CASTLED_WK | CASTLED_WQ | CASTLED_BK | CASTLED_BQ
        for c, flag in (("K", CASTLED_WK), ("Q", CASTLED_WQ), ("k", CASTLED_BK), ("q", CASTLED_BQ)):
            if c in castling:
                board.castled ^= flag
        board.hash ^= none_keys[board.castled]

        board.enpassant = SQUARE_NONE
        if enpassant != "-":
            if len(enpassant) != 2 or enpassant[0] not in "abcdefgh" or enpassant[1] not in "12345678":
                raise ValueError(f"invalid en passant square: {enpassant!r}")
            board.enpassant = (ord(enpassant[1]) - ord("1")) * 8 + ord(enpassant[0]) - ord("a") + A1
            board.hash ^= none_keys[board.enpassant]

        board.halfmove = int(halfmove) & 0xFF
        board.checkers = board.attackers(board.pieces[KING] & board.colors[board.stm]) & board.colors[board.stm ^ 1]
        return board

    @classmethod
    def startpos(cls) -> "Board":
        board = cls()
        for file, piece_type in enumerate(LAYOUT):
            board.edit(file + A1, piece_type * 2 + WHITE)
            board.edit(file + A8, piece_type * 2 + BLACK)
            board.edit(file + A2, 0)
            board.edit(file + A7, 1)
        return board