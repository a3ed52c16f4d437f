"""Sampling solver for puzzles too large to explore exhaustively."""

from __future__ import annotations
import logging
import random
from typing import List, Optional

from .base_solver import BaseSolver
from .greedy_solver import Playout, playout
from ..core.puzzle import Puzzle

logger = logging.getLogger(__name__)

SAMPLE_COUNT = 50


class SamplingSolver(BaseSolver):
    """
    Greedy pass first, then random playouts if the greedy pass gets stuck.

    Only one successful pass is needed, so solution_count is 0 or 1
    ("at least one found"). The successful pass supplies the branching
    factors and forced-move count, which keeps the downstream metrics the
    same shape as an exact search. Each failed random playout that made at
    least one move counts a bottleneck; the greedy pass never does.

    Random choices come from a seeded random.Random so runs can be
    reproduced.
    """

    name = "Sampling"

    def __init__(
        self,
        sample_count: int = SAMPLE_COUNT,
        seed: Optional[int] = None,
        track_memory: bool = False
    ):
        super().__init__(track_memory=track_memory)
        self.sample_count = sample_count
        self.seed = seed

    def _solve(self, puzzle: Puzzle) -> Optional[List[int]]:
        result = playout(puzzle)
        self._tally(result, sampled=False)
        if result.solved:
            return self._accept(result)

        rng = random.Random(self.seed)
        for sample in range(self.sample_count):
            result = playout(puzzle, rng=rng)
            self._tally(result)
            if result.solved:
                logger.debug("Random playout %d solved the puzzle", sample + 1)
                self.stats.extra["samples_used"] = sample + 1
                return self._accept(result)

        self.stats.extra["samples_used"] = self.sample_count
        logger.debug("No playout out of %d solved the puzzle", self.sample_count + 1)
        return None

    def _tally(self, result: Playout, sampled: bool = True) -> None:
        self.stats.states_explored += result.moves + 1
        if sampled and not result.solved and result.moves > 0:
            self.stats.bottleneck_count += 1

    def _accept(self, result: Playout) -> List[int]:
        for branching in result.branching_factors:
            self.stats.record_step(branching)
        self.stats.solution_count = 1
        return result.path
