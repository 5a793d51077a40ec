# cakechess

A small chess engine that speaks the UCI protocol, together with the tools
used to build its evaluation: a gradient-descent tuner for the hand-crafted
evaluation terms and a packer that turns tuned weights into the compact data
table the classical evaluation reads. It is pure Python with no third-party
dependencies.

## Installing

```
pip install .
```

For running the test suite:

```
pip install .[test]
pytest
```

## Playing

`cakechess` starts the engine on standard input and output. Point a UCI
graphical interface at it, or talk to it directly:

```
cakechess
uci
position startpos moves e2e4 e7e5
go wtime 60000 btime 60000
quit
```

After the first command line the engine prints its `id` lines, the `Hash`
and `Threads` options and `uciok`. It then understands:

- `isready`: answers `readyok`.
- `ucinewgame`: clears the transposition table.
- `setoption name Hash value <MB>`: resizes the transposition table to the
  largest power of two of 8-byte entries that fits.
- `setoption name Threads value <n>`: the number of search threads started
  by `go` (at least 1).
- `position startpos [moves ...]` and
  `position fen <six FEN fields> [moves ...]`: moves are in coordinate
  notation such as `e2e4` or `a7a8q`.
- `go [wtime <ms>] [btime <ms>]`: only the clock of the side to move is
  used. The search stops after half of that time at the latest, and usually
  much earlier. Without a clock it searches until `stop` (or `quit`) arrives;
  `isready` is still answered meanwhile.
- `quit`.

One `info depth ... score ... nodes ... nps ... pv ...` line is printed per
completed depth and the search ends with `bestmove`. Malformed commands are
reported as `info string <message>`.

Two more modes are available from the command line:

```
cakechess perft 5
cakechess bench
```

`perft` counts leaf nodes from the starting position to the given depth,
printing the count below each root move and then the total with a speed.
`bench` searches 24 fixed positions to depth 15 and prints the total node
count and nodes per second; in Python this takes a long time.

### Evaluation

When a network file can be found, positions are scored by a small NNUE
(768 inputs, 32 hidden units per perspective, SCReLU activation, weights as
little-endian 16-bit integers). The file named by the `C4KE_NNUE_FILE`
environment variable is tried first, then `nnue.bin` in the working
directory. Without one, the engine uses its classical evaluation: packed
piece-square tables by rank and file, mobility, passed pawns and king
distance to them, pawn phalanxes, pawn and pawn-push threats, open files,
pawn shield, king attack and tapered middlegame/endgame scoring.

## Using it as a library

```python
from cakechess.board import Board
from cakechess.uci import perft, move_str

board = Board.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")
print(perft(board, 3, False))        # 8902

moves = board.movegen(True)
print([move_str(m) for m in moves][:5])
```

- `cakechess.core`: move packing, bitboard shifts and attack sets, Zobrist
  keys (`zobrist_keys`, built with `Mersenne64`) and `TranspositionTable`.
- `cakechess.board.Board`: `from_fen`, `startpos`, `make` (returns `True`
  when the move was illegal), `movegen`, `see`, `attackers` and `eval`.
- `cakechess.search`: `SharedState` and `SearchThread`, a principal
  variation search with aspiration windows, transposition table, null-move,
  futility and SEE pruning, singular extensions, late move reductions, and
  history and correction-history heuristics.
- `cakechess.nnue`: `Network.from_bytes`, `Network.from_file`,
  `Network.evaluate` and `load_default`.
- `cakechess.uci`: `UciEngine`, whose `handle(line)` processes one command
  and returns `False` on `quit`; also `perft`, `bench`, `move_str` and
  `parse_move`.

## Tuning the evaluation

The tuner reads a text dataset with one position per line:

```
<FEN> | <score> | <wdl>
```

where `<wdl>` is `1.0` or `0.0` from White's point of view; anything else
counts as a draw. Run

```
cakechess-tune [DATASET] [--epochs N] [--checkpoint FILE]
```

to load the dataset (default `dataset/data.txt`, at most ten million lines),
print the initial weights and loss, and run Adam optimisation (default 5000
epochs) over the evaluation terms, writing the weights to the checkpoint
file (default `checkpoint.txt`) every ten epochs and printing the final
weights when done.

The pieces are also usable on their own: `cakechess.tuning.dataset`
(`parse_entry`, `load_dataset`), `cakechess.tuning.evaluation`
(`get_trace`, `coefficients`, `initial_weights`, `format_weights`) and
`cakechess.tuning.optimizer` (`mse`, `gradient`, `optimal_k`, `tune`). The
tuner uses its own board model in `cakechess.tunerchess`: `Position`, attack
tables, bitboard helpers, squares, pieces and move encoding.

`cakechess.packing.eval_source` turns a set of `Param` tables into the text
of the compressed data string, the `INDEX_`/`OFFSET_` definitions and a
`get_data` function; `compress` encodes a single table.

## What it does not do

- The tuner prints weights as source text; it does not write them back into
  `cakechess.weights`, and `eval_source` only returns text. Updating the
  engine's weights is done by hand.
- There is no source minifier or build of a compressed engine.
- The UCI front end has no pondering, MultiPV, fixed-depth or node-limited
  `go`, and no time controls other than `wtime`/`btime`.
- Search threads are Python threads, so extra threads do not search faster.