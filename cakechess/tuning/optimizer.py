"""Logistic-loss fitting of the evaluation weights with the Adam optimizer."""

from __future__ import annotations

import argparse
import math
import os
from typing import Optional, Sequence

from .dataset import Entry, load_dataset
from .evaluation import EG, MG, TEMPO, format_weights, initial_weights

DEFAULT_K = 2.5

Weights = list[list[float]]


def linear_score(entry: Entry, weights: Sequence[Sequence[float]]) -> float:
    """Tapered score of an entry under the given weights, tempo included."""
    if len(entry.coefs) != len(weights):
        raise ValueError(f"{len(entry.coefs)} coefficients for {len(weights)} weights")
    mg = entry.delta[MG]
    eg = entry.delta[EG]
    for coef, weight in zip(entry.coefs, weights):
        if coef:
            mg += coef * weight[MG]
            eg += coef * weight[EG]
    score = (mg * entry.phase + eg * entry.scale * (24.0 - entry.phase)) / 24.0
    return score + TEMPO if entry.is_white else score - TEMPO


def sigmoid(score: float, k: float) -> float:
    exponent = -k * score / 400.0
    try:
        return 1.0 / (1.0 + math.exp(exponent))
    except OverflowError:
        return 0.0


def mse(entries: Sequence[Entry], weights: Sequence[Sequence[float]], k: float) -> float:
    """Mean squared error between results and predicted win probabilities."""
    if not entries:
        raise ValueError("dataset is empty")
    total = sum((e.wdl - sigmoid(linear_score(e, weights), k)) ** 2 for e in entries)
    return total / len(entries)


def optimal_k(entries: Sequence[Entry]) -> float:
    """The sigmoid scale that minimises the loss of the initial weights."""
    print("Calculating optimal K...", flush=True)
    rate = 10.0
    step = 1e-5
    goal = 1e-6
    k = DEFAULT_K
    deviation = 1.0
    weights = initial_weights()

    while abs(deviation) > goal:
        up = mse(entries, weights, k + step)
        down = mse(entries, weights, k - step)
        deviation = (up - down) / (2 * step)
        k -= deviation * rate
        print(f"\rK: {k:.6f} - deviation: {deviation:.6f}", end="")

    print()
    print(f"Final K: {k:.6f}")
    return k


def gradient(entries: Sequence[Entry], weights: Sequence[Sequence[float]], k: float) -> Weights:
    """Per-weight sums of the loss gradient, up to the factor -2k/(400 n)."""
    result = [[0.0, 0.0] for _ in weights]
    for entry in entries:
        prob = sigmoid(linear_score(entry, weights), k)
        x = (entry.wdl - prob) * prob * (1.0 - prob)
        mg_base = x * entry.phase / 24.0
        eg_base = x * (1.0 - entry.phase / 24.0) * entry.scale
        for pair, coef in zip(result, entry.coefs):
            if coef:
                pair[MG] += mg_base * coef
                pair[EG] += eg_base * coef
    return result


def tune(
    entries: Sequence[Entry],
    weights: Sequence[Sequence[float]],
    k: float = DEFAULT_K,
    epochs: int = 5000,
    checkpoint: Optional[str | os.PathLike[str]] = None,
) -> Weights:
    """Run Adam for a number of epochs and return the tuned weights."""
    if not entries:
        raise ValueError("dataset is empty")
    beta_1 = 0.9
    beta_2 = 0.999
    lr = 0.1
    lr_drop_rate = 1.0
    lr_drop_interval = 200

    weights = [[float(mg), float(eg)] for mg, eg in weights]
    momentum = [[0.0, 0.0] for _ in weights]
    velocity = [[0.0, 0.0] for _ in weights]
    size = float(len(entries))

    for epoch in range(epochs):
        grads = gradient(entries, weights, k)
        for weight, m, v, g in zip(weights, momentum, velocity, grads):
            for phase in (MG, EG):
                step = -k / 400.0 * g[phase] / size
                m[phase] = beta_1 * m[phase] + (1.0 - beta_1) * step
                v[phase] = beta_2 * v[phase] + (1.0 - beta_2) * step * step
                weight[phase] -= lr * m[phase] / (1e-8 + math.sqrt(v[phase]))

        if epoch % lr_drop_interval == 0:
            lr *= lr_drop_rate

        loss = mse(entries, weights, k)
        print(f"epoch: {epoch} - loss: {loss:.6f} - lr: {lr:.6f}")

        if checkpoint is not None and epoch % 10 == 0:
            with open(checkpoint, "w", encoding="utf-8") as handle:
                handle.write(format_weights(weights))

    return weights


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Tune the classical evaluation weights.")
    parser.add_argument("dataset", nargs="?", default="dataset/data.txt")
    parser.add_argument("--epochs", type=int, default=5000)
    parser.add_argument("--checkpoint", default="checkpoint.txt")
    args = parser.parse_args(argv)

    entries = load_dataset(args.dataset)
    weights = initial_weights()

    print("Init weights: ")
    print(format_weights(weights), end="")

    k = DEFAULT_K
    print(f"Init loss: {mse(entries, weights, k):.6f}")

    weights = tune(entries, weights, k, args.epochs, args.checkpoint)
    print(format_weights(weights), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())