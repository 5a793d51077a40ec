"""Traced classical evaluation: weights, feature counts and weight formatting for tuning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..tunerchess.attacks import bishop, king, knight, pawn_span, rook
from ..tunerchess.bitboard import MASK64, count, flip, iter_squares, lsb, shift
from ..tunerchess.position import Position
from ..tunerchess.squares import Color, Direction

MG = 0
EG = 1

PAWN, KNIGHT, BISHOP, ROOK, QUEEN, KING = range(6)
PHASE = (0, 1, 1, 2, 4, 0)

_FILE_A = 0x0101010101010101
_SHIELD = 0x70700


def _to_i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def _to_i16(value: int) -> int:
    value &= 0xFFFF
    return value - (1 << 16) if value >= 1 << 15 else value


def _tdiv(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _round_away(value: float) -> int:
    """Round half away from zero."""
    magnitude = int(abs(value) + 0.5)
    return magnitude if value >= 0 else -magnitude


def pack(mg: int, eg: int) -> int:
    """Pack a middlegame and an endgame score into one 32-bit integer."""
    return _to_i32(_to_i32(eg << 16) + mg)


def mg_part(score: int) -> int:
    return _to_i16(score)


def eg_part(score: int) -> int:
    return _to_i16((score + 0x8000) >> 16)


S = pack

MATERIAL = (S(95, 206), S(360, 586), S(375, 595), S(506, 1062), S(1271, 1795))

PST_RANK = (
    S(0, 0), S(-22, -25), S(-35, -36), S(-27, -32), S(-11, -23), S(45, 13), S(52, 120), S(0, 0),
    S(-30, -28), S(-10, -11), S(5, 7), S(26, 32), S(46, 36), S(60, 6), S(35, -14), S(-131, -28),
    S(-6, -15), S(11, -11), S(17, 4), S(16, 6), S(27, 6), S(21, 2), S(-11, -3), S(-75, 11),
    S(3, -25), S(-8, -27), S(-6, -22), S(-15, 2), S(9, 11), S(17, 10), S(-2, 31), S(1, 20),
    S(9, -52), S(16, -48), S(5, -8), S(1, 15), S(1, 34), S(9, 30), S(-18, 34), S(-24, -4),
    S(-20, -32), S(42, -12), S(-37, 6), S(-102, 21), S(-81, 26), S(21, 27), S(35, 23), S(21, -49),
)
PST_FILE = (
    S(-19, 14), S(-9, 14), S(-5, -4), S(5, -16), S(15, -9), S(13, -1), S(14, 6), S(-14, -5),
    S(-41, -20), S(-14, -3), S(-3, 15), S(15, 19), S(17, 18), S(19, 4), S(8, -5), S(-2, -29),
    S(-18, -6), S(2, 0), S(4, -1), S(-3, 11), S(4, 9), S(-1, 7), S(13, -1), S(-1, -18),
    S(-14, 5), S(-15, 11), S(-6, 13), S(4, 1), S(16, -10), S(4, -1), S(17, -8), S(-6, -11),
    S(-15, -19), S(-12, -5), S(-12, 12), S(-4, 15), S(-2, 21), S(6, 5), S(20, -11), S(18, -18),
    S(5, -56), S(38, -18), S(-1, 13), S(-58, 34), S(-24, 22), S(-44, 22), S(29, -8), S(16, -53),
)
MOBILITY = (S(9, 5), S(8, 7), S(3, 6), S(2, 10), S(-9, -2))
PASSER = (S(15, -27), S(10, 8), S(2, 72), S(12, 138), S(-36, 235), S(20, 228))
PHALANX = (S(9, 4), S(17, 21), S(32, 37), S(59, 102), S(159, 293), S(154, 294))
THREAT = (S(76, 27), S(81, 56), S(104, -6), S(89, -58))
PUSH_THREAT = (S(29, 9), S(29, -7), S(20, 19), S(25, -16))
KING_ATTACK = (S(8, 20), S(16, 31), S(45, -27), S(18, 19))
KING_PASSER_US = (S(-74, 68), S(-49, 94), S(-14, 37), S(-23, 13), S(-3, -18), S(7, -35), S(40, -49), S(8, -37))
KING_PASSER_THEM = (S(-97, -4), S(40, -80), S(1, -41), S(-16, -6), S(-21, 24), S(-28, 44), S(-52, 68), S(-64, 60))
BISHOP_PAIR = S(30, 96)
KING_OPEN = S(-69, -7)
KING_SEMIOPEN = S(-33, 13)
ROOK_OPEN = S(25, -5)
ROOK_SEMIOPEN = S(15, 19)
PAWN_PROTECTED = S(23, 28)
PAWN_DOUBLED = S(10, 39)
PAWN_SHIELD = S(29, -13)

TEMPO = 20


def _table(size: int):
    return field(default_factory=lambda: [[0] * size, [0] * size])


@dataclass
class Trace:
    """Per-color counts of every evaluation feature, with the score they produced."""

    pst_rank: list[list[int]] = _table(48)
    pst_file: list[list[int]] = _table(48)
    mobility: list[list[int]] = _table(5)
    passer: list[list[int]] = _table(6)
    phalanx: list[list[int]] = _table(6)
    threat: list[list[int]] = _table(4)
    push_threat: list[list[int]] = _table(4)
    king_attack: list[list[int]] = _table(5)
    king_passer_us: list[list[int]] = _table(8)
    king_passer_them: list[list[int]] = _table(8)
    bishop_pair: list[int] = field(default_factory=lambda: [0, 0])
    king_open: list[int] = field(default_factory=lambda: [0, 0])
    king_semiopen: list[int] = field(default_factory=lambda: [0, 0])
    rook_open: list[int] = field(default_factory=lambda: [0, 0])
    rook_semiopen: list[int] = field(default_factory=lambda: [0, 0])
    pawn_protected: list[int] = field(default_factory=lambda: [0, 0])
    pawn_doubled: list[int] = field(default_factory=lambda: [0, 0])
    pawn_shield: list[int] = field(default_factory=lambda: [0, 0])
    score: float = 0.0
    scale: float = 1.0
    phase: int = 0
    delta: int = 0


def _attack(piece_type: int, square: int, occupied: int) -> int:
    if piece_type == KNIGHT:
        return knight(square)
    if piece_type == BISHOP:
        return bishop(square, occupied)
    if piece_type == ROOK:
        return rook(square, occupied)
    if piece_type == QUEEN:
        return bishop(square, occupied) | rook(square, occupied)
    return king(square)


def get_trace(position: Position, wdl: float) -> Trace:
    """Evaluate position from white's view, recording how often each weight applies."""
    trace = Trace()
    colors = list(position.colors)
    pieces = list(position.pieces)

    score = 0
    phase = 0
    phases = [0, 0]
    material = 0

    for color in (Color.WHITE, Color.BLACK):
        them = color ^ 1
        occupied = colors[Color.WHITE] | colors[Color.BLACK]
        pawns_us = pieces[PAWN] & colors[color]
        pawns_them = pieces[PAWN] & colors[them]
        pawns_threats = pawn_span(pawns_them, Color.BLACK)
        pawns_attacks = pawn_span(pawns_us, Color.WHITE)
        pawns_phalanx = shift(pawns_us, Direction.WEST) & pawns_us
        pawns_push_threats = pawn_span(shift(pawns_them, Direction.SOUTH) & ~occupied & MASK64, Color.BLACK)

        king_us = lsb(pieces[KING] & colors[color])
        king_them = lsb(pieces[KING] & colors[them])

        if count(pieces[BISHOP] & colors[color]) > 1:
            score += BISHOP_PAIR
            trace.bishop_pair[color] += 1

        protected = count(pawns_us & pawns_attacks)
        score += protected * PAWN_PROTECTED
        trace.pawn_protected[color] += protected

        doubled = count(pawns_us & (pawns_us << 8 | pawns_us << 16) & MASK64)
        score -= doubled * PAWN_DOUBLED
        trace.pawn_doubled[color] -= doubled

        for piece_type in range(PAWN, KING + 1):
            for square in iter_squares(pieces[piece_type] & colors[color]):
                rank, file = square // 8, square % 8
                bit = 1 << square

                phase += PHASE[piece_type]
                phases[color] += PHASE[piece_type]

                if piece_type < KING:
                    score += MATERIAL[piece_type]
                    material += MATERIAL[piece_type]

                score += PST_RANK[piece_type * 8 + rank]
                trace.pst_rank[color][piece_type * 8 + rank] += 1
                score += PST_FILE[piece_type * 8 + file]
                trace.pst_file[color][piece_type * 8 + file] += 1

                if piece_type == PAWN:
                    if pawns_phalanx & bit:
                        score += PHALANX[rank - 1]
                        trace.phalanx[color][rank - 1] += 1

                    if not (_FILE_A << square) & MASK64 & (pawns_them | pawns_threats):
                        score += PASSER[rank - 1]
                        trace.passer[color][rank - 1] += 1

                        dist_us = max(abs(rank - king_us // 8 + 1), abs(file - king_us % 8))
                        dist_them = max(abs(rank - king_them // 8 + 1), abs(file - king_them % 8))
                        score += KING_PASSER_US[dist_us]
                        trace.king_passer_us[color][dist_us] += 1
                        score += KING_PASSER_THEM[dist_them]
                        trace.king_passer_them[color][dist_them] += 1
                    continue

                attacks = _attack(piece_type, square, occupied)
                index = piece_type - 1

                mobility = count(attacks & ~colors[color] & ~pawns_threats & MASK64)
                score += mobility * MOBILITY[index]
                trace.mobility[color][index] += mobility

                file_mask = _FILE_A << file
                if not file_mask & pieces[PAWN]:
                    if piece_type == KING:
                        score += KING_OPEN
                        trace.king_open[color] += 1
                    if piece_type == ROOK:
                        score += ROOK_OPEN
                        trace.rook_open[color] += 1

                if not file_mask & pawns_us:
                    if piece_type == KING:
                        score += KING_SEMIOPEN
                        trace.king_semiopen[color] += 1
                    if piece_type == ROOK:
                        score += ROOK_SEMIOPEN
                        trace.rook_semiopen[color] += 1

                if piece_type == KING and square < 8:
                    shield = count(pawns_us & _SHIELD << 5 * (file > 2))
                    score += shield * PAWN_SHIELD
                    trace.pawn_shield[color] += shield

                if bit & pawns_threats:
                    score -= THREAT[index]
                    trace.threat[color][index] -= 1

                if bit & pawns_push_threats:
                    score -= PUSH_THREAT[index]
                    trace.push_threat[color][index] -= 1

                if piece_type < KING and pieces[QUEEN]:
                    attacked = count(attacks & king(king_them))
                    score += attacked * KING_ATTACK[index]
                    trace.king_attack[color][index] += attacked

        colors = [flip(c) for c in colors]
        pieces = [flip(p) for p in pieces]
        score = -score
        material = -material

    strong = 1 if wdl < 0.5 else 0
    pawns = count(pieces[PAWN] & colors[strong])
    weak_ending = phases[strong] - phases[strong ^ 1] < 2 or (
        phases[strong] < 3 and count(pieces[KNIGHT]) < 3
    )
    scale = 1 if pawns == 0 and weak_ending else 8 + pawns
    mg, eg = mg_part(score), eg_part(score)

    trace.score = _tdiv(mg * phase + _tdiv(eg * scale, 16) * (24 - phase), 24)
    trace.scale = scale / 16.0
    trace.phase = phase
    trace.delta = material
    return trace


_WEIGHT_TABLES = (
    PST_RANK, PST_FILE, MOBILITY, PASSER, PHALANX, THREAT, PUSH_THREAT, KING_ATTACK[:4],
    KING_PASSER_US, KING_PASSER_THEM,
)
_WEIGHT_SCALARS = (
    BISHOP_PAIR, KING_OPEN, KING_SEMIOPEN, ROOK_OPEN, ROOK_SEMIOPEN, PAWN_PROTECTED, PAWN_DOUBLED, PAWN_SHIELD,
)


def initial_weights() -> list[list[float]]:
    """Current weights as mutable [mg, eg] pairs in tuning order."""
    values = [v for table in _WEIGHT_TABLES for v in table] + list(_WEIGHT_SCALARS)
    return [[float(mg_part(v)), float(eg_part(v))] for v in values]


def coefficients(trace: Trace) -> list[int]:
    """White-minus-black feature counts, in the order of initial_weights()."""
    tables = (
        (trace.pst_rank, 48), (trace.pst_file, 48), (trace.mobility, 5), (trace.passer, 6),
        (trace.phalanx, 6), (trace.threat, 4), (trace.push_threat, 4), (trace.king_attack, 4),
        (trace.king_passer_us, 8), (trace.king_passer_them, 8),
    )
    result = [white - black for (white_row, black_row), size in tables
              for white, black in zip(white_row[:size], black_row[:size])]
    scalars = (
        trace.bishop_pair, trace.king_open, trace.king_semiopen, trace.rook_open,
        trace.rook_semiopen, trace.pawn_protected, trace.pawn_doubled, trace.pawn_shield,
    )
    result.extend(white - black for white, black in scalars)
    return result


def format_score(value: Sequence[float]) -> str:
    return f"S({_round_away(value[MG])}, {_round_away(value[EG])})"


def _format_one(name: str, value: Sequence[float]) -> str:
    return f"i32 {name} = {format_score(value)};\n"


def _format_many(name: str, values: Sequence[Sequence[float]]) -> str:
    size = len(values)
    edge = "\n" if size > 8 else " "
    body = []
    for i, value in enumerate(values):
        body.append(format_score(value))
        if i < size - 1:
            body.append(", ")
            if (i + 1) % 8 == 0:
                body.append("\n")
    return f"i32 {name}[] = {{{edge}{''.join(body)}{edge}}};\n"


_TABLE_LAYOUT = (
    ("PST_RANK", 48), ("PST_FILE", 48), ("MOBILITY", 5), ("PASSER", 6), ("PHALANX", 6),
    ("THREAT", 4), ("PUSH_THREAT", 4), ("KING_ATTACK", 4), ("KING_PASSER_US", 8), ("KING_PASSER_THEM", 8),
)
_SCALAR_NAMES = (
    "BISHOP_PAIR", "KING_OPEN", "KING_SEMIOPEN", "ROOK_OPEN", "ROOK_SEMIOPEN",
    "PAWN_PROTECTED", "PAWN_DOUBLED", "PAWN_SHIELD",
)


def format_weights(weights: Sequence[Sequence[float]]) -> str:
    """Source text of the weights, with PST averages folded into material."""
    weights = [[float(mg), float(eg)] for mg, eg in weights]
    material = [[float(mg_part(v)), float(eg_part(v))] for v in MATERIAL]

    for piece_type in range(5):
        rank_rows = weights[piece_type * 8:piece_type * 8 + 8]
        file_rows = weights[48 + piece_type * 8:48 + piece_type * 8 + 8]
        for phase in (MG, EG):
            rank_avg = sum(row[phase] / 8 for row in rank_rows)
            file_avg = sum(row[phase] / 8 for row in file_rows)
            material[piece_type][phase] += rank_avg + file_avg
            for row in rank_rows:
                row[phase] -= rank_avg
            for row in file_rows:
                row[phase] -= file_avg

    parts = [_format_many("MATERIAL", material)]
    index = 0
    for name, size in _TABLE_LAYOUT:
        parts.append(_format_many(name, weights[index:index + size]))
        index += size
    for name in _SCALAR_NAMES:
        parts.append(_format_one(name, weights[index]))
        index += 1
    parts.append(f"i32 TEMPO = {float(_round_away(TEMPO)):.6f};\n")
    return "".join(parts)