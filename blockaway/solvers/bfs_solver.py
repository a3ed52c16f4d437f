"""Exact breadth-first exploration of every reachable board state."""

from __future__ import annotations
import logging
from collections import deque
from typing import Dict, List, Optional, Tuple

from .base_solver import BaseSolver
from .greedy_solver import playout
from ..core.puzzle import Puzzle
from ..core.rules import clearable_blocks

logger = logging.getLogger(__name__)

MAX_SOLUTIONS = 1000
MAX_STATES = 50000


class BFSSolver(BaseSolver):
    """
    Breadth-first search over board states with deduplication.

    Every state reached from the initial board by removing clearable
    blocks one at a time is visited once. Each visited state contributes
    its branching factor to the stats; stuck states after at least one
    move count as bottlenecks.

    States are deduplicated by occupancy, so the empty board is reached
    at most once and solution_count is 0 or 1.

    Bounds:
    - max_states caps visited plus pending states, so the queue cannot
      outgrow the cap on boards with many symmetric blocks.
    - max_solutions caps the reported solution count.

    When the state cap cuts the search short before reaching the empty
    board, a greedy pass settles solvability.
    """

    name = "BFS"

    def __init__(
        self,
        max_solutions: int = MAX_SOLUTIONS,
        max_states: int = MAX_STATES,
        track_memory: bool = False
    ):
        super().__init__(track_memory=track_memory)
        self.max_solutions = max_solutions
        self.max_states = max_states

    def _solve(self, puzzle: Puzzle) -> Optional[List[int]]:
        stats = self.stats
        start = puzzle.initial_state()
        start_key = start.key()

        queue = deque([start])
        # State key -> (parent key, block removed) for the first path found
        parents: Dict[int, Optional[Tuple[int, int]]] = {start_key: None}
        solution_key: Optional[int] = None
        truncated = False

        while queue:
            if stats.states_explored >= self.max_states:
                truncated = True
                logger.debug("State cap of %d reached", self.max_states)
                break

            state = queue.popleft()
            key = state.key()
            stats.states_explored += 1

            if state.is_empty():
                stats.solution_count += 1
                solution_key = key
                if stats.solution_count >= self.max_solutions:
                    logger.debug("Solution cap of %d reached", self.max_solutions)
                    break
                continue

            clearable = clearable_blocks(puzzle, state)

            # Deadlock
            if not clearable:
                if key != start_key:
                    stats.bottleneck_count += 1
                continue

            stats.record_step(len(clearable))

            for block_index in clearable:
                child = puzzle.remove(state, block_index)
                child_key = child.key()
                if child_key in parents:
                    continue
                if len(parents) >= self.max_states:
                    truncated = True
                    continue
                parents[child_key] = (key, block_index)
                queue.append(child)

        stats.extra["truncated"] = truncated

        if solution_key is not None:
            return self._reconstruct(parents, solution_key)

        if truncated:
            # Removing a block never blocks another, so greedy is exact here
            logger.debug("Search truncated without a solution, checking greedily")
            greedy = playout(puzzle)
            if greedy.solved:
                stats.solution_count = 1
                return greedy.path

        return None

    @staticmethod
    def _reconstruct(
        parents: Dict[int, Optional[Tuple[int, int]]],
        key: int
    ) -> List[int]:
        path = []
        link = parents[key]
        while link is not None:
            parent_key, block_index = link
            path.append(block_index)
            link = parents[parent_key]
        path.reverse()
        return path
