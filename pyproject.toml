[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cakechess"
version = "0.1.0"
description = "A compact UCI chess engine with a classical and NNUE evaluation, plus an evaluation tuner"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "uci", "engine", "nnue", "alpha-beta", "tuning", "bitboard"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
cakechess = "cakechess.uci:main"
cakechess-tune = "cakechess.tuning.optimizer:main"

[tool.hatch.build.targets.wheel]
packages = ["cakechess"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
