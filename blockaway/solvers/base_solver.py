"""Base solver interface and common utilities."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple
import logging
import time
import tracemalloc

from ..core.puzzle import Puzzle

logger = logging.getLogger(__name__)


@dataclass
class SolverStats:
    """Statistics from a solver run."""
    # Core metrics
    solved: bool = False
    time_seconds: float = 0.0
    memory_bytes: int = 0
    states_explored: int = 0

    # Move-choice metrics
    solution_count: int = 0
    branching_factors: List[int] = field(default_factory=list)
    forced_move_count: int = 0
    bottleneck_count: int = 0

    # Additional metadata
    algorithm: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def record_step(self, branching_factor: int) -> None:
        """Record the number of choices available at one decision point."""
        self.branching_factors.append(branching_factor)
        if branching_factor == 1:
            self.forced_move_count += 1

    @property
    def avg_branching_factor(self) -> float:
        if not self.branching_factors:
            return 0.0
        return sum(self.branching_factors) / len(self.branching_factors)

    @property
    def min_branching_factor(self) -> int:
        return min(self.branching_factors) if self.branching_factors else 0

    @property
    def forced_move_ratio(self) -> float:
        if not self.branching_factors:
            return 0.0
        return self.forced_move_count / len(self.branching_factors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "solved": self.solved,
            "time_seconds": self.time_seconds,
            "memory_bytes": self.memory_bytes,
            "states_explored": self.states_explored,
            "solution_count": self.solution_count,
            "avg_branching_factor": self.avg_branching_factor,
            "min_branching_factor": self.min_branching_factor,
            "forced_move_count": self.forced_move_count,
            "forced_move_ratio": self.forced_move_ratio,
            "bottleneck_count": self.bottleneck_count,
            "algorithm": self.algorithm,
            **self.extra
        }


class BaseSolver(ABC):
    """Abstract base class for block puzzle solvers."""

    name: str = "BaseSolver"

    def __init__(self, track_memory: bool = False):
        """
        Args:
            track_memory: If True, record peak memory with tracemalloc.
                          Off by default since tracing slows the search down.
        """
        self.track_memory = track_memory
        self.stats = SolverStats(algorithm=self.name)

    def solve(self, puzzle: Puzzle) -> Tuple[Optional[List[str]], SolverStats]:
        """
        Solve a puzzle with timing and optional memory tracking.

        Args:
            puzzle: The puzzle to solve.

        Returns:
            Tuple of (solution as a list of block ids or None, stats).
        """
        self.stats = SolverStats(algorithm=self.name)

        if self.track_memory:
            tracemalloc.start()

        start_time = time.perf_counter()

        try:
            path = self._solve(puzzle)
            self.stats.solved = path is not None
        except Exception as e:
            logger.exception("%s failed on %r", self.name, puzzle)
            self.stats.extra["error"] = str(e)
            path = None

        self.stats.time_seconds = time.perf_counter() - start_time

        if self.track_memory:
            current, peak = tracemalloc.get_traced_memory()
            tracemalloc.stop()
            self.stats.memory_bytes = peak

        if path is None:
            return None, self.stats
        return [puzzle.blocks[i].id for i in path], self.stats

    @abstractmethod
    def _solve(self, puzzle: Puzzle) -> Optional[List[int]]:
        """
        Internal solve method to be implemented by subclasses.

        Args:
            puzzle: The puzzle to solve.

        Returns:
            Block indices in removal order, or None if no solution was found.
        """
        pass

    def reset_stats(self) -> None:
        """Reset solver statistics."""
        self.stats = SolverStats(algorithm=self.name)
