import pytest

from cakechess.board import Board
from cakechess.core import (
    BLACK,
    BLACK_PAWN,
    CASTLED_BK,
    CASTLED_BQ,
    CASTLED_NONE,
    CASTLED_WK,
    CASTLED_WQ,
    KING,
    PIECE_NONE,
    QUEEN,
    SQUARE_NONE,
    WHITE,
    WHITE_KING,
    WHITE_KNIGHT,
    WHITE_PAWN,
    WHITE_QUEEN,
    WHITE_ROOK,
    move_make,
)
from cakechess.weights import TEMPO

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def _perft(board, depth):
    if depth == 0:
        return 1
    total = 0
    for move in board.movegen(True):
        child = board.copy()
        if not child.make(move):
            total += _perft(child, depth - 1)
    return total


def _legal(board):
    result = []
    for move in board.movegen(True):
        child = board.copy()
        if not child.make(move):
            result.append(move)
    return result


def _mirror(fen):
    placement, side, castling, ep, half, full = fen.split()
    placement = "/".join(rank.swapcase() for rank in reversed(placement.split("/")))
    side = "b" if side == "w" else "w"
    castling = castling.swapcase()
    if ep != "-":
        ep = ep[0] + str(9 - int(ep[1]))
    return " ".join((placement, side, castling, ep, half, full))


class _FixedNetwork:
    def __init__(self, value):
        self.value = value
        self.seen = None

    def evaluate(self, board):
        self.seen = board
        return self.value


def test_startpos_has_twenty_legal_moves():
    assert len(_legal(Board.startpos())) == 20


def test_startpos_perft_three():
    assert _perft(Board.startpos(), 3) == 8902


def test_kiwipete_perft_one():
    assert len(_legal(Board.from_fen(KIWIPETE))) == 48


def test_startpos_pieces():
    board = Board.startpos()
    assert board.board[4] == WHITE_KING
    assert board.board[12] == WHITE_PAWN
    assert board.board[28] == PIECE_NONE
    assert board.stm == WHITE
    assert board.enpassant == SQUARE_NONE
    assert board.checkers == 0


def test_edit_round_trip_restores_hashes():
    board = Board.startpos()
    before = board.copy()
    board.edit(27, WHITE_QUEEN)
    assert board.hash != before.hash
    board.edit(27, PIECE_NONE)
    assert board == before


def test_knight_tour_returns_to_same_hash():
    board = Board.startpos()
    start_hash = board.hash
    start_pawn_hash = board.hash_pawn
    for move in (move_make(6, 21), move_make(62, 45), move_make(21, 6), move_make(45, 62)):
        assert board.make(move) is False
        assert board.hash_pawn == start_pawn_hash
    assert board.hash == start_hash
    assert board.board == Board.startpos().board


def test_copy_is_independent():
    board = Board.startpos()
    child = board.copy()
    child.make(move_make(12, 28))
    assert board == Board.startpos()
    assert child.board[28] == WHITE_PAWN


def test_quiet_and_capture():
    board = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    assert board.quiet(move_make(28, 36)) is True
    assert board.quiet(move_make(28, 35)) is False


def test_see_pawn_takes_free_pawn():
    board = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    assert board.see(move_make(28, 35), 0) is True


def test_see_queen_takes_defended_pawn():
    board = Board.from_fen("4k3/8/2p5/3p4/8/8/8/3QK3 w - - 0 1")
    capture = move_make(3, 35)
    assert board.see(capture, 0) is False
    assert board.see(capture, -1000) is True
    assert board.colors == Board.from_fen("4k3/8/2p5/3p4/8/8/8/3QK3 w - - 0 1").colors


def test_pinned_piece_move_is_illegal():
    board = Board.from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - - 0 1")
    assert board.copy().make(move_make(12, 19)) is True
    assert board.copy().make(move_make(4, 3)) is False


def test_castling_through_attacked_square_is_rejected():
    board = Board.from_fen("4kr2/8/8/8/8/8/8/4K2R w K - 0 1")
    castle = move_make(4, 6)
    assert castle in board.movegen(True)
    assert board.copy().make(castle) is True


def test_castling_moves_rook_and_loses_rights():
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K2R w K - 0 1")
    castle = move_make(4, 6)
    assert castle in board.movegen(True)
    assert board.make(castle) is False
    assert board.board[6] == WHITE_KING
    assert board.board[5] == WHITE_ROOK
    assert board.board[7] == PIECE_NONE
    assert board.castled & CASTLED_WK
    assert board.stm == BLACK


def test_castling_not_generated_without_rights():
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K2R w - - 0 1")
    assert move_make(4, 6) not in board.movegen(True)


def test_castling_rights_parsed():
    assert Board.from_fen(KIWIPETE).castled == CASTLED_NONE
    full = CASTLED_WK | CASTLED_WQ | CASTLED_BK | CASTLED_BQ
    assert Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1").castled == full


def test_en_passant_capture_removes_pawn():
    board = Board.from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
    capture = move_make(36, 43)
    assert capture in board.movegen(False)
    assert board.quiet(capture) is False
    assert board.make(capture) is False
    assert board.board[35] == PIECE_NONE
    assert board.board[43] == WHITE_PAWN
    assert board.enpassant == SQUARE_NONE


def test_promotion_to_queen():
    board = Board.from_fen("4k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    promo = move_make(48, 56, QUEEN)
    assert promo in board.movegen(True)
    assert promo in board.movegen(False)
    board.make(promo)
    assert board.board[56] == WHITE_QUEEN
    assert board.board[48] == PIECE_NONE


def test_noisy_moves_are_subset_of_all_moves():
    board = Board.from_fen(KIWIPETE)
    noisy = board.movegen(False)
    assert noisy
    assert set(noisy) <= set(board.movegen(True))
    assert all(not board.quiet(move) for move in noisy)


def test_check_detection():
    board = Board.from_fen("4k3/8/8/8/8/8/8/R3K3 w Q - 0 1")
    board.make(move_make(0, 56))
    assert board.checkers == 1 << 56
    in_check = Board.from_fen("4k3/8/8/8/8/8/8/4R1K1 b - - 0 1")
    assert in_check.checkers == 1 << 4


def test_halfmove_clock():
    board = Board.from_fen("4k3/8/8/8/8/8/4P3/4K1N1 w - - 7 20")
    assert board.halfmove == 7
    knight = board.copy()
    knight.make(move_make(6, 21))
    assert knight.halfmove == board.halfmove + 1
    pawn = board.copy()
    pawn.make(move_make(12, 20))
    assert pawn.halfmove == 0


def test_startpos_eval_is_tempo():
    assert Board.startpos().eval() == TEMPO


def test_eval_is_mirror_symmetric():
    fen = "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"
    assert Board.from_fen(fen).eval() == Board.from_fen(_mirror(fen)).eval()
    fen2 = "4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1"
    assert Board.from_fen(fen2).eval() == Board.from_fen(_mirror(fen2)).eval()


def test_eval_uses_network_when_given():
    network = _FixedNetwork(123)
    board = Board.startpos()
    assert board.eval(network) == 123
    assert network.seen is board


def test_from_fen_side_and_pieces():
    board = Board.from_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 1")
    assert board.stm == BLACK
    assert board.pieces[KING] == (1 << 4) | (1 << 60)
    assert board.board[60] == WHITE_KING + 1


def test_from_fen_rejects_incomplete():
    with pytest.raises(ValueError):
        Board.from_fen("4k3/8/8 w -")


def test_from_fen_rejects_bad_halfmove():
    with pytest.raises(ValueError):
        Board.from_fen("4k3/8/8/8/8/8/8/4K3 w - - x 1")


def test_knight_moves_from_corner():
    board = Board.from_fen("4k3/8/8/8/8/8/8/N3K3 w - - 0 1")
    knight_moves = {m for m in board.movegen(True) if board.board[m & 63] == WHITE_KNIGHT}
    assert knight_moves == {move_make(0, 10), move_make(0, 17)}
    assert board.board[0] != BLACK_PAWN