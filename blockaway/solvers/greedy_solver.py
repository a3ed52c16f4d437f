"""Greedy single-pass solver and the quick solvability check used by generators."""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from .base_solver import BaseSolver
from ..core.puzzle import Puzzle, PuzzleState
from ..core.rules import clearable_blocks


@dataclass
class Playout:
    """One pass from a state until the board is empty or stuck."""
    solved: bool
    path: List[int] = field(default_factory=list)
    branching_factors: List[int] = field(default_factory=list)

    @property
    def moves(self) -> int:
        return len(self.path)

    @property
    def forced_move_count(self) -> int:
        return sum(1 for b in self.branching_factors if b == 1)


def playout(
    puzzle: Puzzle,
    state: Optional[PuzzleState] = None,
    rng: Optional[random.Random] = None,
) -> Playout:
    """
    Remove one clearable block at a time until the board empties or deadlocks.

    Args:
        puzzle: The puzzle instance.
        state: Starting state (default: the initial state).
        rng: If given, pick uniformly among clearable blocks. Otherwise
             always take the first clearable block (greedy).

    Returns:
        The Playout with its move path and per-step branching factors.
    """
    if state is None:
        state = puzzle.initial_state()

    result = Playout(solved=False)
    while not state.is_empty():
        clearable = clearable_blocks(puzzle, state)
        if not clearable:
            return result
        result.branching_factors.append(len(clearable))
        choice = clearable[0] if rng is None else rng.choice(clearable)
        result.path.append(choice)
        state = puzzle.remove(state, choice)

    result.solved = True
    return result


class QuickSolveResult(NamedTuple):
    solvable: bool
    moves: int


def quick_solve(puzzle: Puzzle) -> QuickSolveResult:
    """
    Quick solvability check without full analysis (for generation).

    Clearing a block never makes another block harder to clear, so a
    single greedy pass decides solvability.
    """
    result = playout(puzzle)
    return QuickSolveResult(result.solved, result.moves)


class GreedySolver(BaseSolver):
    """
    Greedy solver: always removes the first clearable block.

    Linear in the number of moves; each step scans the remaining blocks.
    """

    name = "Greedy"

    def _solve(self, puzzle: Puzzle) -> Optional[List[int]]:
        result = playout(puzzle)
        self.stats.states_explored = result.moves + 1
        for branching in result.branching_factors:
            self.stats.record_step(branching)

        if not result.solved:
            if result.moves > 0:
                self.stats.bottleneck_count = 1
            return None

        self.stats.solution_count = 1
        return result.path
