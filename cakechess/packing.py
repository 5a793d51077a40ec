"""Packing of evaluation weight tables into a printable string with index and offset macros."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .weights import eg_part, mg_part, pack

S = pack


@dataclass(frozen=True)
class Param:
    name: str
    data: tuple[int, ...]
    scale: int
    index_offset: int


@dataclass(frozen=True)
class Compressed:
    str_mg: str
    str_eg: str
    min_mg: int
    min_eg: int


PARAMS = (
    Param(
        "PST_RANK",
        (
            S(0, 0), S(-23, -22), S(-36, -34), S(-27, -32), S(-11, -22), S(45, 17), S(50, 116), S(0, 0),
            S(-31, -28), S(-11, -11), S(5, 9), S(26, 38), S(46, 39), S(60, 4), S(35, -18), S(-131, -32),
            S(-6, -15), S(10, -12), S(16, 7), S(15, 7), S(27, 5), S(21, 1), S(-11, -5), S(-74, 12),
            S(3, -30), S(-9, -31), S(-6, -24), S(-15, 4), S(8, 13), S(16, 12), S(-2, 34), S(5, 22),
            S(9, -59), S(16, -54), S(5, -9), S(1, 18), S(1, 40), S(9, 35), S(-18, 39), S(-23, -8),
            S(-23, -51), S(40, -26), S(-37, -3), S(-97, 23), S(-75, 45), S(18, 53), S(35, 40), S(21, -57),
        ),
        8,
        0,
    ),
    Param(
        "PST_FILE",
        (
            S(-20, 16), S(-9, 15), S(-5, -5), S(6, -19), S(15, -11), S(13, -1), S(14, 8), S(-14, -4),
            S(-41, -19), S(-14, -2), S(-3, 16), S(15, 21), S(17, 20), S(20, 2), S(9, -7), S(-2, -32),
            S(-18, -4), S(2, 0), S(4, -2), S(-3, 12), S(4, 9), S(-1, 6), S(13, -3), S(-1, -19),
            S(-14, 6), S(-15, 13), S(-6, 15), S(4, 1), S(16, -11), S(4, -2), S(17, -10), S(-6, -12),
            S(-16, -20), S(-12, -5), S(-12, 14), S(-4, 17), S(-2, 24), S(6, 4), S(20, -13), S(18, -21),
            S(7, -68), S(37, -16), S(-1, 17), S(-59, 40), S(-24, 28), S(-45, 28), S(28, -7), S(17, -63),
        ),
        8,
        0,
    ),
    Param("MOBILITY", (S(9, 6), S(8, 9), S(3, 6), S(1, 13), S(-8, -4)), 1, -1),
    Param("PASSER", (S(14, -57), S(9, -18), S(0, 53), S(11, 125), S(-37, 232), S(17, 236)), 8, -1),
    Param("PHALANX", (S(10, 4), S(17, 25), S(31, 44), S(57, 123), S(160, 341), S(160, 334)), 8, -1),
    Param("THREAT", (S(76, 33), S(81, 65), S(103, -1), S(87, -53)), 8, -1),
    Param("PUSH_THREAT", (S(29, 7), S(29, -5), S(20, 24), S(24, -11)), 1, -1),
    Param("KING_ATTACK", (S(9, 18), S(17, 32), S(46, -36), S(18, 21)), 1, -1),
    Param(
        "KING_PASSER_US",
        (S(-89, 57), S(-47, 86), S(-15, 27), S(-23, -1), S(-3, -36), S(7, -56), S(40, -71), S(9, -60)),
        8,
        0,
    ),
    Param(
        "KING_PASSER_THEM",
        (S(-104, -86), S(38, -60), S(0, -7), S(-15, 35), S(-20, 68), S(-26, 91), S(-51, 119), S(-62, 111)),
        8,
        0,
    ),
)

_PST_PARAMS = ("PST_FILE", "PST_RANK")
_PASSER_PARAMS = ("PASSER", "KING_PASSER_US", "KING_PASSER_THEM")
_TRIGRAPH_ENDS = "=/()!<>-"

_GET_DATA = (
    "i32 get_data(i32 index) {\n"
    "    auto data = DATA_STR;\n\n"
    "    return data[index] + (data[index + INDEX_EG] << 16) - S(32, 32);\n"
    "}"
)


def _round_away(value: float) -> int:
    magnitude = int(abs(value) + 0.5)
    return magnitude if value >= 0 else -magnitude


def compress(data: Sequence[int], scale: int) -> Compressed:
    """Scale packed scores down and encode each half as characters offset from its minimum."""
    if not data:
        raise ValueError("no data to compress")
    scale = max(scale, 1)
    pairs = [(mg_part(score), eg_part(score)) for score in data]
    if scale > 1:
        pairs = [(_round_away(mg / scale), _round_away(eg / scale)) for mg, eg in pairs]
    min_mg = min(mg for mg, _ in pairs)
    min_eg = min(eg for _, eg in pairs)
    return Compressed(
        str_mg="".join(chr(mg - min_mg + 32) for mg, _ in pairs),
        str_eg="".join(chr(eg - min_eg + 32) for _, eg in pairs),
        min_mg=min_mg,
        min_eg=min_eg,
    )


def _is_trigraph(text: str, i: int) -> bool:
    return text[i:i + 2] == "??" and i + 2 < len(text) and text[i + 2] in _TRIGRAPH_ENDS


def _escape(text: str) -> str:
    out = []
    for i, c in enumerate(text):
        if c in '\\"':
            out.append("\\")
        out.append(c)
        if _is_trigraph(text, i):
            out.append("\\")
    return "".join(out)


def eval_source(params: Sequence[Param] = PARAMS) -> str:
    """Source text defining the packed data string, its index and offset macros and get_data."""
    mg = eg = index = offset = ""
    index_eg = 0
    pst_mg = pst_eg = 0
    passer_mg = passer_eg = 0

    for param in params:
        packed = compress(param.data, param.scale)
        mg += packed.str_mg
        eg += packed.str_eg
        index += f"#define INDEX_{param.name} {index_eg + param.index_offset}\n"

        if param.name in _PST_PARAMS:
            pst_mg += packed.min_mg
            pst_eg += packed.min_eg
        elif param.name in _PASSER_PARAMS:
            passer_mg += packed.min_mg
            passer_eg += packed.min_eg
        else:
            offset += f"#define OFFSET_{param.name} S({packed.min_mg}, {packed.min_eg})\n"

        index_eg += len(param.data)

    offset += f"#define OFFSET_PST S({pst_mg}, {pst_eg})\n"
    offset += f"#define OFFSET_PASSER S({passer_mg}, {passer_eg})\n"

    return (
        f'#define DATA_STR "{_escape(mg)}{_escape(eg)}"\n\n'
        f"#define INDEX_EG {index_eg}\n\n"
        f"{index}\n"
        f"{offset}\n"
        f"{_GET_DATA}"
    )