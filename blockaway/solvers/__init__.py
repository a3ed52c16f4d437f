"""Solvers module for block puzzles."""

from .base_solver import BaseSolver, SolverStats
from .bfs_solver import BFSSolver
from .sampling_solver import SamplingSolver
from .greedy_solver import GreedySolver, Playout, QuickSolveResult, playout, quick_solve

__all__ = [
    "BaseSolver",
    "SolverStats",
    "BFSSolver",
    "SamplingSolver",
    "GreedySolver",
    "Playout",
    "QuickSolveResult",
    "playout",
    "quick_solve",
]
