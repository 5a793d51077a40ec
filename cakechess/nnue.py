"""A small 768 -> 2x32 -> 1 neural network evaluator."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from .core import BLACK, KING, PAWN, WHITE

INPUT_SIZE = 768
HIDDEN_SIZE = 32
QA = 255
QB = 64
NNUE_SCALE = 400

ENV_VAR = "C4KE_NNUE_FILE"
DEFAULT_PATH = "nnue.bin"

_VALUE_COUNT = INPUT_SIZE * HIDDEN_SIZE + HIDDEN_SIZE + 2 * HIDDEN_SIZE + 1
MIN_BYTES = _VALUE_COUNT * 2


class NetworkError(ValueError):
    """Raised when network weights cannot be read."""


def screlu(x: int) -> int:
    """Squared clipped ReLU on [0, QA]."""
    x = min(max(x, 0), QA)
    return x * x


def feature_indices(piece_type: int, square: int, is_opponent: bool) -> tuple[int, int]:
    """Input indices from the side to move's and the other side's perspective."""
    base = 64 * piece_type
    stm_index = (384 if is_opponent else 0) + base + square
    ntm_index = (0 if is_opponent else 384) + base + (square ^ 56)
    return stm_index, ntm_index


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _squares(bitboard: int) -> Iterator[int]:
    while bitboard:
        low = bitboard & -bitboard
        yield low.bit_length() - 1
        bitboard ^= low


@dataclass(frozen=True)
class Network:
    feature_weights: tuple[tuple[int, ...], ...]
    feature_bias: tuple[int, ...]
    output_weights: tuple[int, ...]
    output_bias: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "Network":
        """Parse little-endian int16 weights; trailing bytes are ignored."""
        if len(data) < MIN_BYTES:
            raise NetworkError(f"network data too short: {len(data)} < {MIN_BYTES} bytes")
        values = struct.unpack_from(f"<{_VALUE_COUNT}h", data, 0)
        split_bias = INPUT_SIZE * HIDDEN_SIZE
        split_output = split_bias + HIDDEN_SIZE
        features = tuple(
            values[start:start + HIDDEN_SIZE] for start in range(0, split_bias, HIDDEN_SIZE)
        )
        return cls(
            feature_weights=features,
            feature_bias=values[split_bias:split_output],
            output_weights=values[split_output:split_output + 2 * HIDDEN_SIZE],
            output_bias=values[-1],
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "Network":
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise NetworkError(f"cannot read network file {path}: {exc}") from exc
        if not data:
            raise NetworkError(f"network file {path} is empty")
        return cls.from_bytes(data)

    def evaluate(self, board: Any) -> int:
        """Score of the board from the side to move's point of view."""
        acc_stm = list(self.feature_bias)
        acc_ntm = list(self.feature_bias)
        stm = board.stm
        blacks = board.colors[BLACK]

        for piece_type in range(PAWN, KING + 1):
            for square in _squares(board.pieces[piece_type]):
                piece_color = BLACK if blacks >> square & 1 else WHITE
                pov = square if stm == WHITE else square ^ 56
                stm_index, ntm_index = feature_indices(piece_type, pov, piece_color != stm)
                for h, weight in enumerate(self.feature_weights[stm_index]):
                    acc_stm[h] += weight
                for h, weight in enumerate(self.feature_weights[ntm_index]):
                    acc_ntm[h] += weight

        out = sum(screlu(a) * w for a, w in zip(acc_stm, self.output_weights[:HIDDEN_SIZE]))
        out += sum(screlu(a) * w for a, w in zip(acc_ntm, self.output_weights[HIDDEN_SIZE:]))
        out = _trunc_div(out, QA)
        out += self.output_bias
        out *= NNUE_SCALE
        return _trunc_div(out, QA * QB)


def load_default(verbose: bool = False) -> Network | None:
    """Load from the path in the environment, then from nnue.bin; None when neither loads."""
    paths = []
    env_path = os.environ.get(ENV_VAR)
    if env_path:
        paths.append(env_path)
    paths.append(DEFAULT_PATH)

    for path in paths:
        try:
            network = Network.from_file(path)
        except NetworkError:
            continue
        if verbose:
            print(f"info string NNUE loaded: {path}", flush=True)
        return network

    if verbose:
        print("info string NNUE not found, using classical eval", flush=True)
    return None