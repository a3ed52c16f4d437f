"""Solvability search and difficulty scoring for block-away puzzles."""

from .core import Block, Puzzle, SquareTopology, HexTopology
from .analysis import AnalyzerConfig, analyze_puzzle, calculate_difficulty_score, Tier

__version__ = "1.0.0"

__all__ = [
    "Block",
    "Puzzle",
    "SquareTopology",
    "HexTopology",
    "AnalyzerConfig",
    "analyze_puzzle",
    "calculate_difficulty_score",
    "Tier",
]
