"""UCI front end of the engine, with perft and bench commands."""

from __future__ import annotations

import sys
import threading
from typing import Iterable, Optional, TextIO

from .board import Board, Evaluator
from .core import (
    BLACK,
    BLACK_KING,
    BLACK_PAWN,
    WHITE,
    move_from,
    move_make,
    move_promo,
    move_to,
    now_ms,
)
from .nnue import load_default
from .search import SearchThread, SharedState

ENGINE_NAME = "CakeChess dev 20260308"
ENGINE_AUTHOR = "the CakeChess team"

_INFINITE_TIME = 1 << 32
_UNLIMITED = (1 << 64) - 1
_PROMO_LETTERS = " nbrq"

BENCH_FENS = (
    "rnbqkb1r/1ppp1p1p/p3pnp1/8/2PP4/4P3/PPQ2PPP/RNB1KBNR w KQkq - 0 1",
    "r1bqkbnr/pp1ppp1p/6p1/2p5/2PnP3/2N5/PP1PNPPP/R1BQKB1R w KQkq - 0 1",
    "rn1qkb1r/p1pppp1p/bp3np1/8/2P2N2/3P4/PP2PPPP/RNBQKB1R w KQkq - 0 1",
    "r2qkbnr/ppp2ppp/2n5/P2ppb2/3P4/2P5/1P2PPPP/RNBQKBNR w KQkq - 0 1",
    "r2q1rk1/1ppbppbp/3p1np1/p2P4/1nP5/2N2NP1/PP2PPBP/R1BQ1RK1 w - - 0 11",
    "r2qkbnr/pp1n1pp1/2p1p2p/7P/3P4/3Q1NN1/PPP2PP1/R1B1K2R w KQkq - 0 11",
    "rnbqkb1r/1p3ppp/p4n2/3p4/3p4/2N1PN2/PPQ1BPPP/R1B1K2R w KQkq - 0 9",
    "rnbq1rk1/pp2ppbp/1n4p1/2p5/3P4/1BN1PN2/PP3PPP/R1BQK2R w KQ - 0 9",
    "rnbqkb1r/1p3ppp/p4n2/2pp4/3P4/2N1PN2/PPQ2PPP/R1B1KB1R w KQkq - 0 8",
    "rnbqkbnr/pp2pppp/8/2pp4/8/1P2PN2/P1PP1PPP/RNBQKB1R b KQkq - 0 3",
    "3r1rk1/pp3pp1/1qpbp2p/3n3P/2NP3Q/8/PPPB1PP1/2KR3R b - - 8 19",
    "1nb2rk1/rp3ppp/p7/3Nb3/3N4/8/PP2BPPP/3RK2R w K - 2 17",
    "r2q1rk1/pb1nbpp1/1p2pn1p/2pp4/2PP4/2NBPNB1/PP3PPP/R2Q1RK1 w - - 0 11",
    "2r2b1k/r4p1p/p5p1/1p1N3P/3R1P2/6K1/PP4P1/7R w - - 1 25",
    "r3r1k1/5pp1/p1p2b2/7p/3R1p1P/2N2P2/PPP3P1/1K5R w - - 3 24",
    "3r2qk/pp1r1pp1/1np1p2p/7P/1BPP4/P5R1/1P2QPP1/1K2R3 b - - 0 29",
    "8/P5R1/4kp2/7p/r4r1P/8/2P5/2K4R b - - 0 38",
    "2R2bk1/7p/p5p1/1p2N3/5P2/6K1/PP1r2P1/8 b - - 5 32",
    "5bk1/7p/6p1/R3N3/5P2/P5K1/r5P1/8 b - - 0 38",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "7r/pb3p2/2pR4/2P1nP2/PP2PkB1/2N4P/6K1/8 b - - 2 47",
    "6k1/8/pB2p1p1/3p3p/7q/PB6/Q7/2R3K1 w - - 0 37",
    "8/p4p2/7p/1P6/3b1P2/2kB2P1/6K1/8 w - - 5 35",
    "1r4k1/Q4ppp/8/8/4P3/8/K4PPP/1r3BR1 w - - 1 36",
)


def move_str(move: int) -> str:
    """Coordinate notation of a move, with the promotion letter when there is one."""
    origin, target = move_from(move), move_to(move)
    text = chr(97 + origin % 8) + chr(49 + origin // 8) + chr(97 + target % 8) + chr(49 + target // 8)
    promo = move_promo(move)
    if promo:
        text += _PROMO_LETTERS[promo]
    return text


def parse_move(token: str) -> int:
    """Decode coordinate notation such as 'e2e4' or 'a7a8q'."""
    if len(token) < 4 or any(c not in "abcdefgh" for c in token[0:4:2]) or any(
        c not in "12345678" for c in token[1:4:2]
    ):
        raise ValueError(f"invalid move: {token!r}")
    promo_code = ord(token[4]) if len(token) > 4 else 0
    return move_make(
        ord(token[0]) + ord(token[1]) * 8 - 489,
        ord(token[2]) + ord(token[3]) * 8 - 489,
        promo_code % 35 * 5 % 6,
    )


def perft(board: Board, depth: int, is_root: bool = False) -> int:
    """Count leaf nodes of the legal move tree; the root prints a count per move."""
    if depth <= 0:
        return 1
    nodes = 0
    for move in board.movegen(True):
        child = board.copy()
        if child.make(move):
            continue
        children = perft(child, depth - 1)
        nodes += children
        if is_root:
            print(f"{move_str(move)} - {children}", flush=True)
    return nodes


def bench(network: Optional[Evaluator] = None, depth: int = 15) -> int:
    """Search a fixed set of positions to a fixed depth; print and return the node total."""
    shared = SharedState()
    nodes = 0
    elapsed = 0
    for fen in BENCH_FENS:
        board = Board.from_fen(fen)
        shared.clear_stop()
        shared.time_start = now_ms()
        shared.time_soft = _UNLIMITED
        shared.time_limit = _UNLIMITED
        shared.visited = []
        engine = SearchThread(shared, 0, network)
        started = now_ms()
        engine.start(board, depth, True)
        elapsed += now_ms() - started
        nodes += engine.nodes
    print(f"{nodes} nodes {nodes * 1000 // max(elapsed, 1)} nps", flush=True)
    return nodes


class UciEngine:
    """Command handler for the UCI protocol; one line at a time."""

    def __init__(self, output: Optional[TextIO] = None) -> None:
        self.output = output if output is not None else sys.stdout
        self.shared = SharedState()
        self.shared.output = self.output
        self.board = Board.startpos()
        self.network: Optional[Evaluator] = None
        self.threads = 1
        self._workers: list[threading.Thread] = []
        self._waiting = False

    def _say(self, text: str) -> None:
        print(text, file=self.output, flush=True)

    def handle(self, line: str) -> bool:
        """Process one command line; False means the engine should quit."""
        text = line.strip()
        if self._waiting:
            return self._handle_during_search(text)
        words = text.split()
        if not words:
            return True
        head = words[0][0]
        if head == "i":
            self._say("readyok")
        elif head == "u":
            self.shared.tt.clear()
        elif head == "s":
            self._setoption(words)
        elif head == "p":
            self._position(words)
        elif head == "g":
            self._go(words)
        elif head == "q":
            return False
        return True

    def _handle_during_search(self, text: str) -> bool:
        if text == "stop":
            self._finish()
        elif text == "quit":
            self._finish()
            return False
        elif text == "isready":
            self._say("readyok")
        return True

    def _finish(self) -> None:
        self.shared.stop()
        for worker in self._workers:
            worker.join()
        self._workers = []
        self._waiting = False

    def _setoption(self, words: list[str]) -> None:
        if len(words) < 3:
            return
        name = words[2]
        if name not in ("Hash", "Threads"):
            return
        if len(words) < 5:
            raise ValueError(f"missing value for option {name}")
        value = int(words[4])
        if name == "Hash":
            self.shared.tt.resize_mb(value)
        else:
            if value < 1:
                raise ValueError(f"thread count must be at least 1, got {value}")
            self.threads = value

    def _position(self, words: list[str]) -> None:
        if len(words) > 1 and words[1].startswith("f"):
            board = Board.from_fen(" ".join(words[2:8]))
            rest = words[9:]
        else:
            board = Board.startpos()
            rest = words[3:]

        visited: list[int] = []
        best_move = self.shared.best_move
        for token in rest:
            move = parse_move(token)
            best_move = move
            visited.append(board.hash)
            irreversible = not (
                board.board[move_to(move)] > BLACK_KING and board.board[move_from(move)] > BLACK_PAWN
            )
            if irreversible:
                visited.clear()
            board.make(move)

        self.board = board
        self.shared.visited = visited
        self.shared.best_move = best_move

    def _go(self, words: list[str]) -> None:
        time_ms = _INFINITE_TIME
        stm = self.board.stm
        tokens = iter(words[1:])
        for word in tokens:
            if (word == "wtime" and stm == WHITE) or (word == "btime" and stm == BLACK):
                value = next(tokens, None)
                if value is None:
                    raise ValueError(f"missing value for {word}")
                time_ms = int(value)

        shared = self.shared
        shared.clear_stop()
        shared.time_start = now_ms()
        shared.time_soft = time_ms // 20
        shared.time_limit = shared.time_start + time_ms // 2

        board = self.board
        workers = [
            threading.Thread(target=self._run, args=(thread_id, board), daemon=True)
            for thread_id in range(self.threads)
        ]
        for worker in workers:
            worker.start()

        self._workers = workers
        if time_ms == _INFINITE_TIME:
            self._waiting = True
        else:
            self._finish_timed()

    def _finish_timed(self) -> None:
        for worker in self._workers:
            worker.join()
        self._workers = []

    def _run(self, thread_id: int, board: Board) -> None:
        SearchThread(self.shared, thread_id, self.network).start(board)


def _uci_loop(lines: Iterable[str]) -> int:
    lines = iter(lines)
    remainder = ""
    for line in lines:
        parts = line.split(None, 1)
        if parts:
            remainder = parts[1] if len(parts) > 1 else ""
            break

    engine = UciEngine(sys.stdout)
    engine.network = load_default(True)
    engine._say(f"id name {ENGINE_NAME}")
    engine._say(f"id author {ENGINE_AUTHOR}")
    engine._say("option name Hash type spin default 8 min 1 max 67108864")
    engine._say("option name Threads type spin default 1 min 1 max 2048")
    engine._say("uciok")

    try:
        for line in (remainder, *()) if False else _chain(remainder, lines):
            try:
                if not engine.handle(line):
                    break
            except ValueError as exc:
                engine._say(f"info string {exc}")
    finally:
        engine._finish()
    return 0


def _chain(first: str, rest: Iterable[str]) -> Iterable[str]:
    yield first
    yield from rest


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)

    if args and args[0] == "bench":
        bench(load_default(False))
        return 0

    if len(args) > 1 and args[0] == "perft":
        depth = int(args[1])
        started = now_ms()
        nodes = perft(Board.startpos(), depth, True)
        elapsed = now_ms() - started
        print(f"{nodes} nodes {nodes * 1000 // max(elapsed, 1)} nps", flush=True)
        return 0

    return _uci_loop(sys.stdin)


if __name__ == "__main__":
    sys.exit(main())