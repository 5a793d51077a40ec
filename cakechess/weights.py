"""Classical evaluation weights, packed as middlegame/endgame pairs."""

from __future__ import annotations

from .core import BISHOP, KING, KNIGHT, QUEEN, ROOK


def pack(mg: int, eg: int) -> int:
    """Pack a middlegame and an endgame score into one integer."""
    return mg + (eg << 16)


def mg_part(score: int) -> int:
    return ((score + 0x8000) & 0xFFFF) - 0x8000


def eg_part(score: int) -> int:
    return (score + 0x8000) >> 16


PHASE = (0, 1, 1, 2, 4, 0)
LAYOUT = (ROOK, KNIGHT, BISHOP, QUEEN, KING, BISHOP, KNIGHT, ROOK)
VALUE = (115, 300, 300, 497, 974, 5000, 0)
MATERIAL = (pack(92, 231), pack(359, 658), pack(375, 667), pack(505, 1197), pack(1290, 1975), 0)

SCALE = 8

BISHOP_PAIR = pack(29, 106)
KING_OPEN = pack(-67, -14)
KING_SEMIOPEN = pack(-34, 17)
ROOK_OPEN = pack(26, -10)
ROOK_SEMIOPEN = pack(14, 27)
PAWN_PROTECTED = pack(23, 30)
PAWN_DOUBLED = pack(10, 44)
PAWN_SHIELD = pack(29, -16)

TEMPO = 20

DATA_STR = "0-+-/660,/13684 /12233/'0//.1201121001.--5+$'243$&&()))%\"%'))*('%'('(')'%%&()()&%%%&'(*)(,' $!+)10+) '&%& ' !#&33  #!)) $ (E) %)(+,0, 2-+**'%'$##$)6'#&(,,(%#%%((('&)##$())+*  &),+,&!$'*-., ++('()*(')+,,)(%())+**)'*++)()('&(++,*'& '+.--(!*-*1  %.7DE \"%.JI+/' 2&C Vd Y04,)$\" ! #*/46:9"

INDEX_EG = 141

INDEX_PST_RANK = 0
INDEX_PST_FILE = 48
INDEX_MOBILITY = 95
INDEX_PASSER = 100
INDEX_PHALANX = 106
INDEX_THREAT = 112
INDEX_PUSH_THREAT = 116
INDEX_KING_ATTACK = 120
INDEX_KING_PASSER_US = 125
INDEX_KING_PASSER_THEM = 133

OFFSET_MOBILITY = pack(-8, -4)
OFFSET_PHALANX = pack(1, 1)
OFFSET_THREAT = pack(10, -7)
OFFSET_PUSH_THREAT = pack(20, -11)
OFFSET_KING_ATTACK = pack(9, -36)
OFFSET_PST = pack(-23, -16)
OFFSET_PASSER = pack(-29, -27)


def get_data(index: int) -> int:
    """Decode the packed weight stored at index, before its table offset is added."""
    mg = ord(DATA_STR[index])
    eg = ord(DATA_STR[index + INDEX_EG])
    return mg + ((eg - 32) << 16) - 32