"""Training positions for the evaluation tuner: FEN, search score and game result."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

from ..tunerchess.position import Position
from ..tunerchess.squares import Color
from .evaluation import coefficients, eg_part, get_trace, mg_part

DEFAULT_LIMIT = 10_000_000

_LEADING_INT = re.compile(r"[+-]?\d+")


@dataclass
class Entry:
    """One position reduced to feature coefficients and the values the loss needs."""

    coefs: list[int] = field(default_factory=list)
    score: float = 0.0
    delta: tuple[float, float] = (0.0, 0.0)
    scale: float = 1.0
    phase: float = 0.0
    wdl: float = 0.0
    is_white: bool = True


def _field(text: str) -> str:
    return "".join(c for c in text if c not in " |").strip("\r\n")


def parse_entry(line: str) -> Entry:
    """Parse a line of the form '<FEN> | <score> | <wdl>'."""
    first = line.find("|")
    second = line.find("|", first + 1) if first >= 0 else -1
    if first < 0 or second < 0:
        raise ValueError(f"expected '<FEN> | <score> | <wdl>', got {line!r}")

    position = Position()
    position.set(line)

    score_text = _field(line[first:second])
    match = _LEADING_INT.match(score_text)
    if match is None:
        raise ValueError(f"invalid score {score_text!r} in {line!r}")

    wdl_text = _field(line[second:])
    if wdl_text == "0.0":
        wdl = 0.0
    elif wdl_text == "1.0":
        wdl = 1.0
    else:
        wdl = 0.5

    trace = get_trace(position, wdl)
    return Entry(
        coefs=coefficients(trace),
        score=float(int(match.group())),
        delta=(float(mg_part(trace.delta)), float(eg_part(trace.delta))),
        scale=trace.scale,
        phase=float(trace.phase),
        wdl=wdl,
        is_white=position.stm == Color.WHITE,
    )


def load_dataset(path: str | os.PathLike[str], limit: int = DEFAULT_LIMIT) -> list[Entry]:
    """Read up to limit entries from a dataset file, reporting progress on stdout."""
    entries: list[Entry] = []
    print("Loading dataset")
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            if len(entries) >= limit:
                break
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            entries.append(parse_entry(line))
            if len(entries) % 1000 == 0:
                print(f"\rLoaded {len(entries)} data entries", end="")
    print(f"\nTotal {len(entries)} data entries")
    return entries