import math

import pytest

from cakechess.tuning.dataset import Entry
from cakechess.tuning.evaluation import TEMPO, initial_weights
from cakechess.tuning.optimizer import gradient, linear_score, main, mse, optimal_k, sigmoid, tune

START = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
SIZE = len(initial_weights())


def make_entry(coefs=None, delta=(0.0, 0.0), phase=24.0, scale=1.0, wdl=1.0, is_white=True):
    return Entry(
        coefs=coefs if coefs is not None else [0] * SIZE,
        delta=delta,
        phase=phase,
        scale=scale,
        wdl=wdl,
        is_white=is_white,
    )


def test_sigmoid_midpoint_and_symmetry():
    assert sigmoid(0.0, 2.5) == 0.5
    assert sigmoid(137.0, 2.5) + sigmoid(-137.0, 2.5) == pytest.approx(1.0)
    assert sigmoid(-1e9, 2.5) == 0.0


def test_linear_score_tempo_sign():
    white = make_entry(delta=(380.0, 0.0))
    black = make_entry(delta=(380.0, 0.0), is_white=False)
    assert linear_score(white, initial_weights()) == 380.0 + TEMPO
    assert linear_score(black, initial_weights()) == 380.0 - TEMPO


def test_linear_score_length_mismatch():
    with pytest.raises(ValueError):
        linear_score(make_entry(coefs=[1, 2]), initial_weights())


def test_mse_empty_raises():
    with pytest.raises(ValueError):
        mse([], initial_weights(), 2.5)


def test_mse_single_entry():
    entry = make_entry(delta=(100.0, 0.0), wdl=1.0)
    weights = initial_weights()
    expected = (1.0 - sigmoid(linear_score(entry, weights), 2.5)) ** 2
    assert mse([entry], weights, 2.5) == pytest.approx(expected)


def test_gradient_matches_finite_difference():
    coefs = [0] * SIZE
    coefs[3] = 2
    coefs[60] = -1
    entries = [
        make_entry(coefs=coefs, delta=(50.0, -20.0), phase=12.0, scale=0.5, wdl=1.0),
        make_entry(coefs=coefs, delta=(-30.0, 40.0), phase=6.0, scale=0.75, wdl=0.0, is_white=False),
    ]
    k = 2.5
    weights = initial_weights()
    grads = gradient(entries, weights, k)
    h = 1e-3
    for index in (3, 60):
        for phase in (0, 1):
            up = [list(w) for w in weights]
            down = [list(w) for w in weights]
            up[index][phase] += h
            down[index][phase] -= h
            numeric = (mse(entries, up, k) - mse(entries, down, k)) / (2 * h)
            analytic = -2 * k / (400 * len(entries)) * grads[index][phase]
            assert numeric == pytest.approx(analytic, rel=1e-4, abs=1e-12)
    assert grads[0] == [0.0, 0.0]


def test_optimal_k_fits_mean_result():
    entries = [
        make_entry(delta=(400.0 - TEMPO, 0.0), wdl=1.0),
        make_entry(delta=(400.0 - TEMPO, 0.0), wdl=0.5),
    ]
    k = optimal_k(entries)
    assert sigmoid(400.0, k) == pytest.approx(0.75, abs=1e-4)


def test_tune_reduces_loss_and_writes_checkpoint(tmp_path):
    coefs = [0] * SIZE
    coefs[0] = 1
    entries = [make_entry(coefs=coefs, wdl=1.0)]
    weights = initial_weights()
    path = tmp_path / "checkpoint.txt"
    tuned = tune(entries, weights, 2.5, 11, path)
    assert tuned[0][0] > weights[0][0]
    assert mse(entries, tuned, 2.5) < mse(entries, weights, 2.5)
    assert path.read_text().startswith("i32 MATERIAL[] = {")


def test_tune_empty_raises():
    with pytest.raises(ValueError):
        tune([], initial_weights(), 2.5, 1)


def test_main_runs_one_epoch(tmp_path, monkeypatch, capsys):
    data = tmp_path / "data.txt"
    data.write_text(f"{START} | 20 | 1.0\n{START} | -5 | 0.0\n")
    monkeypatch.chdir(tmp_path)
    assert main([str(data), "--epochs", "1"]) == 0
    out = capsys.readouterr().out
    assert "Init loss: " in out
    assert "epoch: 0 - loss: " in out
    assert (tmp_path / "checkpoint.txt").read_text().startswith("i32 MATERIAL[] = {")
    assert not math.isnan(mse([Entry(coefs=[0] * SIZE)], initial_weights(), 2.5))