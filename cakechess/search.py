"""Alpha-beta search with quiescence, pruning, extensions and history heuristics."""

from __future__ import annotations

import math
import sys
import threading
from typing import Optional, TextIO

from .board import Board, Evaluator
from .core import (
    BOUND_EXACT,
    BOUND_LOWER,
    BOUND_UPPER,
    CORRHIST_SIZE,
    DRAW,
    HIST_MAX,
    INF,
    KEYS,
    KING,
    MAX_PLY,
    MOVE_NONE,
    PAWN,
    PIECE_NONE,
    SQUARE_NONE,
    STACK_SIZE,
    TT_BITS_DEFAULT,
    TYPE_NONE,
    WHITE,
    BLACK,
    WIN,
    TranspositionTable,
    TTEntry,
    format_move,
    move_from,
    move_to,
    now_ms,
    to_i16,
)
from .weights import VALUE

_TABLE_SIZE = 12 * 64
_UNLIMITED = (1 << 64) - 1


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _clamp(value, low, high):
    return max(low, min(value, high))


def update_history(entry: int, bonus: int) -> int:
    """New value of a 16-bit history entry after applying a gravity-scaled bonus."""
    return to_i16(entry + bonus - _tdiv(entry * abs(bonus), HIST_MAX))


class SharedState:
    """State shared by all search threads: table, clock, stop flag and game history."""

    def __init__(self, tt_bits: int = TT_BITS_DEFAULT) -> None:
        self.tt = TranspositionTable(tt_bits)
        self.best_move = MOVE_NONE
        self.visited: list[int] = []
        self.time_start = now_ms()
        self.time_soft = _UNLIMITED
        self.time_limit = _UNLIMITED
        self.output: Optional[TextIO] = None
        self._stop = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def clear_stop(self) -> None:
        self._stop.clear()

    def emit(self, text: str) -> None:
        stream = self.output if self.output is not None else sys.stdout
        print(text, file=stream, flush=True)


class SearchThread:
    """One search worker with its own history tables."""

    def __init__(self, shared: SharedState, thread_id: int = 0, network: Optional[Evaluator] = None) -> None:
        self.shared = shared
        self.id = thread_id
        self.network = network
        self.nodes = 0
        self.nodes_table = [0] * 4096
        self.visited = [0] * STACK_SIZE
        self.qhist = [[0] * 4096 for _ in range(2)]
        self.corrhist = [[0] * CORRHIST_SIZE for _ in range(2)]
        self.nhist = [0] * (TYPE_NONE * _TABLE_SIZE)
        self.stack_eval = [0] * STACK_SIZE
        self._conthist: dict[int, list[int]] = {}
        self.stack_conthist: list[Optional[list[int]]] = [None] * STACK_SIZE
        self.stack_conthist[0] = self.stack_conthist[1] = self._cont(1)

    def _cont(self, index: int) -> list[int]:
        table = self._conthist.get(index)
        if table is None:
            table = self._conthist[index] = [0] * _TABLE_SIZE
        return table

    @staticmethod
    def _nhist_index(board: Board, move: int) -> int:
        target = move_to(move)
        captured = board.board[target] // 2 % TYPE_NONE
        return (captured * 12 + board.board[move_from(move)]) * 64 + target

    def _bump_quiet(self, board: Board, move: int, ply: int, bonus: int) -> None:
        slot = board.board[move_from(move)] * 64 + move_to(move)
        qhist = self.qhist[board.stm]
        qhist[move & 4095] = update_history(qhist[move & 4095], bonus)
        for table in (self.stack_conthist[ply], self.stack_conthist[ply + 1]):
            table[slot] = update_history(table[slot], bonus)

    def _score_move(self, board: Board, move: int, tt_move: int, ply: int) -> int:
        if move == tt_move:
            return 100_000_000
        slot = board.board[move_from(move)] * 64 + move_to(move)
        if board.quiet(move):
            return int(
                self.qhist[board.stm][move & 4095]
                + 2 * self.stack_conthist[ply][slot]
                + 2.2 * self.stack_conthist[ply + 1][slot]
            )
        captured = board.board[move_to(move)] // 2 % TYPE_NONE
        return int(
            VALUE[captured] * 16
            + self.nhist[self._nhist_index(board, move)]
            + board.see(move, 0) * 2e7
            - 1e7
        )

    def search(
        self,
        board: Board,
        alpha: int,
        beta: int,
        ply: int,
        depth: int,
        is_pv: bool = False,
        excluded: int = MOVE_NONE,
    ) -> int:
        """Score of board within the (alpha, beta) window, from the side to move's view."""
        shared = self.shared
        best = -INF
        is_improving = False
        legals = 0
        bound = BOUND_UPPER
        quiet_list: list[int] = []
        noisy_list: list[int] = []
        eval_ = 0

        if depth < 0:
            depth = 0

        if not self.id:
            self.nodes += 1
            if not self.nodes & 4095 and now_ms() > shared.time_limit:
                shared.stop()

        if shared.stopped or ply >= MAX_PLY:
            return DRAW

        if ply:
            if any(board.hash == self.visited[ply - i] for i in range(4, ply + 1, 2)):
                return DRAW
            if board.hash in shared.visited:
                return DRAW
            if board.halfmove > 99:
                return DRAW

        self.visited[ply] = board.hash

        tt = shared.tt.probe(board.hash)
        if tt.key != to_i16(board.hash):
            tt = TTEntry()
        elif not is_pv and not excluded and depth <= tt.depth and tt.bound != (tt.score < beta):
            return tt.score

        self.stack_eval[ply] = INF

        if not board.checkers:
            corr = self.corrhist[board.stm]
            eval_ = self.stack_eval[ply] = to_i16(
                board.eval(self.network)
                + _tdiv(corr[board.hash_pawn % CORRHIST_SIZE], 107)
                + _tdiv(corr[board.hash_non_pawn[WHITE] % CORRHIST_SIZE], 166)
                + _tdiv(corr[board.hash_non_pawn[BLACK] % CORRHIST_SIZE], 166)
                + _tdiv(self.stack_conthist[ply + 1][0], 130)
                + _tdiv(self.stack_conthist[ply][64], 200)
            )

            if tt.key and not excluded and tt.bound != (tt.score < eval_):
                eval_ = tt.score

            is_improving = ply > 1 and self.stack_eval[ply] > self.stack_eval[ply - 2]

            if not is_pv and not excluded and depth < 6 and self.stack_eval[ply] + 180 * depth < alpha:
                depth = 0

            if not depth:
                best = eval_
                alpha = max(alpha, best)
                if alpha >= beta:
                    return eval_

            if (
                not is_pv
                and not excluded
                and 0 < depth < 9
                and eval_ < WIN
                and eval_ > beta + 79 * depth - 79 * is_improving
            ):
                return _tdiv(eval_ + beta, 2)

            if (
                not is_pv
                and not excluded
                and depth > 2
                and eval_ > beta + 27
                and board.colors[board.stm] & ~board.pieces[PAWN] & ~board.pieces[KING]
            ):
                child = board.copy()
                child.stm ^= 1
                child.hash ^= KEYS[PIECE_NONE][0]
                child.hash ^= KEYS[PIECE_NONE][child.enpassant]
                child.enpassant = SQUARE_NONE
                self.stack_conthist[ply + 2] = self._cont(0)
                score = -self.search(child, -beta, -alpha, ply + 1, depth - 4 - depth // 3)
                if score >= beta:
                    return score if score < WIN else beta

        moves = board.movegen(bool(depth or board.checkers))
        scores = [self._score_move(board, move, tt.move, ply) for move in moves]
        count = len(moves)

        for i in range(count):
            pick = max(range(i, count), key=scores.__getitem__)
            moves[i], moves[pick] = moves[pick], moves[i]
            scores[i], scores[pick] = scores[pick], scores[i]

            move = moves[i]
            move_score = scores[i]
            is_quiet = board.quiet(move)
            depth_next = depth - 1
            nodes_start = self.nodes

            if not depth and best > -WIN and move_score < 1e6:
                break

            if ply and best > -WIN and is_quiet and len(quiet_list) > (1 + depth * depth) >> (not is_improving):
                continue

            if (
                ply
                and best > -WIN
                and depth < 10
                and not board.checkers
                and is_quiet
                and self.stack_eval[ply] + 80 * depth + _tdiv(move_score, 32) + 90 < alpha
            ):
                continue

            if ply and best > -WIN and move_score < 1e6 and not board.see(move, -77 * depth):
                continue

            child = board.copy()
            if move == excluded or child.make(move):
                continue

            if (
                ply
                and depth > 3
                and not excluded
                and move == tt.move
                and tt.depth > depth - 4
                and tt.bound
                and abs(tt.score) < WIN
            ):
                singular_beta = tt.score - depth
                score = self.search(board, singular_beta - 1, singular_beta, ply, _tdiv(depth_next, 2), False, move)
                if score < singular_beta:
                    depth_next += (
                        1
                        + (not is_pv and score < singular_beta - 10)
                        + (not is_pv and score < singular_beta - 35 and is_quiet)
                    )
                elif score >= beta:
                    return score

            self.stack_conthist[ply + 2] = self._cont(board.board[move_from(move)] * 64 + move_to(move))

            score = beta

            if depth > 2 and legals > 2:
                reduction = int(
                    math.log(depth) * math.log(legals + 1) * 0.33
                    + 1
                    + (not is_pv)
                    - _tdiv(is_quiet * move_score, 7560)
                )
                if not is_quiet and reduction > 1:
                    reduction = 1
                if reduction > 0:
                    score = -self.search(child, -alpha - 1, -alpha, ply + 1, depth_next - reduction)

            if score > alpha and depth and legals:
                score = -self.search(child, -alpha - 1, -alpha, ply + 1, depth_next)

            if not depth or not legals or (is_pv and score > alpha):
                score = -self.search(child, -beta, -alpha, ply + 1, depth_next, is_pv)

            legals += 1

            if shared.stopped:
                return DRAW

            if not ply:
                self.nodes_table[move & 4095] += self.nodes - nodes_start

            best = max(best, score)

            if score > alpha:
                alpha = score
                tt.move = move
                bound = BOUND_EXACT
                if not self.id and not ply:
                    shared.best_move = move

            if score >= beta:
                bound = BOUND_LOWER
                if not depth:
                    break

                bonus = min(169 * depth - 69, 1660) + (self.stack_eval[ply] <= best) * 154

                if is_quiet:
                    self._bump_quiet(board, move, ply, bonus)
                    for quiet in quiet_list:
                        self._bump_quiet(board, quiet, ply, -bonus)
                else:
                    index = self._nhist_index(board, move)
                    self.nhist[index] = update_history(self.nhist[index], bonus)

                for noisy in noisy_list:
                    index = self._nhist_index(board, noisy)
                    self.nhist[index] = update_history(self.nhist[index], -bonus)
                break

            (quiet_list if is_quiet else noisy_list).append(move)

        if not legals and board.checkers:
            return ply - INF
        if not legals and depth:
            return DRAW

        static = self.stack_eval[ply]
        if not board.checkers and (not bound or board.quiet(tt.move)) and bound != (best < static):
            bonus = int(_clamp((best - static) * depth, -550, 550) * 8.4)
            corr = self.corrhist[board.stm]
            for key in (board.hash_pawn, board.hash_non_pawn[WHITE], board.hash_non_pawn[BLACK]):
                corr[key % CORRHIST_SIZE] = update_history(corr[key % CORRHIST_SIZE], bonus)
            one_ply = self.stack_conthist[ply + 1]
            one_ply[0] = update_history(one_ply[0], bonus)
            two_ply = self.stack_conthist[ply]
            two_ply[64] = update_history(two_ply[64], bonus)

        if not excluded:
            shared.tt.store(board.hash, TTEntry(move=tt.move, score=best, depth=depth, bound=bound))

        return best

    def _info(self, depth: int, score: int) -> str:
        shared = self.shared
        if score >= WIN:
            score_text = f"mate {(INF - score) // 2}"
        elif score <= -WIN:
            score_text = f"mate {_tdiv(-INF - score, 2)}"
        else:
            score_text = f"cp {score}"
        elapsed = max(now_ms() - shared.time_start, 1)
        nps = self.nodes * 1000 // elapsed
        return (
            f"info depth {depth} score {score_text} nodes {self.nodes} "
            f"nps {nps} pv {format_move(shared.best_move)}"
        )

    def start(self, board: Board, max_depth: int = 256, bench: bool = False) -> int:
        """Iterative deepening from board; returns the best move found."""
        shared = self.shared
        board = board.copy()
        score = 0

        for depth in range(1, max_depth):
            self.stack_conthist[0] = self.stack_conthist[1] = self._cont(1)

            delta = 9
            alpha = score - delta if depth > 3 else -INF
            beta = score + delta if depth > 3 else INF
            reduction = 0

            while True:
                score = self.search(board, alpha, beta, 0, max(depth - reduction, 1), True)
                if score <= alpha:
                    beta = _tdiv(alpha + beta, 2)
                    alpha = score - delta
                    reduction = 0
                elif score >= beta:
                    beta = score + delta
                    reduction += 1
                else:
                    break
                delta = int(delta * 1.2)
                board.trend = _clamp(-score if board.stm else score, -76, 76)

            if not self.id and not bench:
                shared.emit(self._info(depth, score))

            if not self.id and self.nodes:
                share = self.nodes_table[shared.best_move & 4095] / self.nodes
                if now_ms() > shared.time_start + shared.time_soft * (2 - 1.5 * share):
                    shared.stop()

            if shared.stopped:
                break

        if not self.id and not bench:
            shared.stop()
            shared.emit(f"bestmove {format_move(shared.best_move)}")

        return shared.best_move