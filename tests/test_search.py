import io

import pytest

from cakechess.board import Board
from cakechess.core import (
    A1,
    A8,
    BOUND_EXACT,
    DRAW,
    HIST_MAX,
    INF,
    WIN,
    move_make,
    to_i16,
)
from cakechess.search import SearchThread, SharedState, update_history

MATE_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"
STALEMATE = "k7/8/1Q6/8/8/8/8/7K b - - 0 1"


def _thread(bits=10):
    shared = SharedState(bits)
    return shared, SearchThread(shared, 0, None)


def test_update_history_from_zero_adds_bonus():
    assert update_history(0, 500) == 500


def test_update_history_saturates_at_max():
    assert update_history(HIST_MAX, 100) == HIST_MAX


@pytest.mark.parametrize("bonus", [1660, -1660, 300])
def test_update_history_stays_bounded(bonus):
    value = 0
    for _ in range(200):
        value = update_history(value, bonus)
        assert -HIST_MAX <= value <= HIST_MAX


def test_shared_state_table_size():
    shared = SharedState(4)
    assert len(shared.tt) == 16
    assert not shared.stopped


def test_stop_flag_round_trip():
    shared = SharedState(4)
    shared.stop()
    assert shared.stopped
    shared.clear_stop()
    assert not shared.stopped


def test_mate_in_one_score():
    _, thread = _thread()
    board = Board.from_fen(MATE_IN_ONE)
    assert thread.search(board, -INF, INF, 0, 1, True) == INF - 1


def test_mate_in_one_stores_exact_entry():
    shared, thread = _thread()
    board = Board.from_fen(MATE_IN_ONE)
    thread.search(board, -INF, INF, 0, 1, True)
    entry = shared.tt.probe(board.hash)
    assert entry.key == to_i16(board.hash)
    assert entry.move == move_make(A1, A8)
    assert entry.bound == BOUND_EXACT
    assert entry.depth == 1
    assert shared.best_move == move_make(A1, A8)


def test_stalemate_is_draw():
    _, thread = _thread()
    board = Board.from_fen(STALEMATE)
    assert thread.search(board, -INF, INF, 0, 1, True) == DRAW


def test_repetition_against_game_history_is_draw():
    shared, thread = _thread()
    board = Board.from_fen(MATE_IN_ONE)
    shared.visited.append(board.hash)
    assert thread.search(board, -INF, INF, 1, 3) == DRAW


def test_fifty_move_rule_is_draw():
    _, thread = _thread()
    board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 100 80")
    assert thread.search(board, -INF, INF, 1, 3) == DRAW


def test_stopped_search_returns_draw():
    shared, thread = _thread()
    shared.stop()
    board = Board.from_fen(MATE_IN_ONE)
    assert thread.search(board, -INF, INF, 0, 2, True) == DRAW


def test_start_bench_finds_mate_silently():
    shared, thread = _thread()
    out = io.StringIO()
    shared.output = out
    best = thread.start(Board.from_fen(MATE_IN_ONE), 3, True)
    assert best == move_make(A1, A8)
    assert out.getvalue() == ""
    assert not shared.stopped


def test_start_prints_info_and_bestmove():
    shared, thread = _thread()
    out = io.StringIO()
    shared.output = out
    thread.start(Board.from_fen(MATE_IN_ONE), 3, False)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("info depth 1 score mate ")
    assert lines[-1].rstrip() == "bestmove a1a8"
    assert shared.stopped


def test_start_leaves_input_board_untouched():
    _, thread = _thread()
    board = Board.from_fen(MATE_IN_ONE)
    before = board.copy()
    thread.start(board, 2, True)
    assert board == before


def test_start_score_is_winning():
    shared, thread = _thread()
    board = Board.from_fen(MATE_IN_ONE)
    thread.start(board, 2, True)
    assert shared.tt.probe(board.hash).score >= WIN