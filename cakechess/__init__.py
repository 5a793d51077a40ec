"""A compact UCI chess engine with classical and NNUE evaluation, and tools to tune and pack its weights."""

__version__ = "0.1.0"