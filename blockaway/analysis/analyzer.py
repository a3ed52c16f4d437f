"""Puzzle analyzer: structural metrics for difficulty calculation."""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ..core.puzzle import Puzzle
from ..core.rules import clearable_blocks, blocker_totals
from ..solvers import BaseSolver, BFSSolver, SamplingSolver
from ..solvers.bfs_solver import MAX_SOLUTIONS, MAX_STATES
from ..solvers.sampling_solver import SAMPLE_COUNT

logger = logging.getLogger(__name__)

SAMPLING_THRESHOLD = 25


@dataclass
class AnalyzerConfig:
    """Search limits for one analysis run."""
    max_solutions: int = MAX_SOLUTIONS
    max_states: int = MAX_STATES
    # Puzzles with more blocks than this skip exact search
    sampling_threshold: int = SAMPLING_THRESHOLD
    sample_count: int = SAMPLE_COUNT
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AnalyzerConfig:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = set(data) - set(known)
        if unknown:
            raise ValueError(f"Unknown analyzer settings: {sorted(unknown)}")
        return cls(**known)

    @classmethod
    def from_json(cls, path: str) -> AnalyzerConfig:
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))


@dataclass(frozen=True)
class PuzzleAnalysis:
    """All metrics computed for one puzzle instance."""
    # Basic
    solvable: bool
    block_count: int
    hole_count: int
    locked_count: int
    grid_size: int
    density: float

    # Solution analysis
    solution_count: int
    min_moves: int

    # Branching & choices
    avg_branching_factor: float
    min_branching_factor: int
    forced_move_count: int
    forced_move_ratio: float

    # Depth & waves
    solution_depth: int
    max_chain_length: int

    # Initial state
    initial_clearable: int
    initial_clearability: float

    # Bottlenecks
    has_critical_path: bool
    bottleneck_count: int

    # Blockers
    total_blockers: int
    avg_blockers: float

    # Direction variety
    unique_directions: int = 0
    direction_variety: float = 0.0
    bidirectional_ratio: float = 0.0

    # Search bookkeeping
    search_mode: str = "exact"
    states_explored: int = 0
    solution_path: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["solution_path"] = list(self.solution_path)
        return data


def empty_analysis(puzzle: Puzzle) -> PuzzleAnalysis:
    """Analysis of a puzzle without blocks: unsolvable, all metrics zero."""
    return PuzzleAnalysis(
        solvable=False,
        block_count=0,
        hole_count=puzzle.hole_count,
        locked_count=0,
        grid_size=puzzle.grid_size,
        density=0.0,
        solution_count=0,
        min_moves=0,
        avg_branching_factor=0.0,
        min_branching_factor=0,
        forced_move_count=0,
        forced_move_ratio=0.0,
        solution_depth=0,
        max_chain_length=0,
        initial_clearable=0,
        initial_clearability=0.0,
        has_critical_path=False,
        bottleneck_count=0,
        total_blockers=0,
        avg_blockers=0.0,
        search_mode="empty",
    )


def solution_depth(puzzle: Puzzle) -> int:
    """
    Count the waves needed to clear the board.

    Each wave removes every block clearable at that moment. Stops early on
    deadlock, in which case the depth is the number of waves completed.
    """
    depth = 0
    state = puzzle.initial_state()
    while not state.is_empty():
        clearable = clearable_blocks(puzzle, state)
        if not clearable:
            break
        for block_index in clearable:
            state = puzzle.remove(state, block_index)
        depth += 1
    return depth


def create_search(puzzle: Puzzle, config: AnalyzerConfig) -> BaseSolver:
    """Pick exact search for small puzzles, sampling above the threshold."""
    if puzzle.block_count > config.sampling_threshold:
        return SamplingSolver(sample_count=config.sample_count, seed=config.seed)
    return BFSSolver(max_solutions=config.max_solutions, max_states=config.max_states)


def analyze_puzzle(puzzle: Puzzle, config: Optional[AnalyzerConfig] = None) -> PuzzleAnalysis:
    """
    Analyze a puzzle to determine its difficulty metrics.

    Args:
        puzzle: The puzzle instance.
        config: Search limits (default: AnalyzerConfig()).

    Returns:
        PuzzleAnalysis with solvability, branching, depth, blocker and
        direction metrics.
    """
    config = config or AnalyzerConfig()
    block_count = puzzle.block_count

    if block_count == 0:
        return empty_analysis(puzzle)

    state = puzzle.initial_state()

    total_blockers, avg_blockers = blocker_totals(puzzle, state)

    initial_clearable = len(clearable_blocks(puzzle, state))
    depth = solution_depth(puzzle)

    solver = create_search(puzzle, config)
    search_mode = "sampling" if isinstance(solver, SamplingSolver) else "exact"
    logger.debug("Analyzing %r with %s search", puzzle, search_mode)
    path, stats = solver.solve(puzzle)

    directions = [b.direction for b in puzzle.blocks]
    unique_directions = len(set(directions))
    bidirectional = sum(1 for d in directions if puzzle.topology.is_bidirectional(d))

    branching = np.asarray(stats.branching_factors, dtype=float)

    return PuzzleAnalysis(
        solvable=stats.solution_count > 0,
        block_count=block_count,
        hole_count=puzzle.hole_count,
        locked_count=puzzle.locked_count,
        grid_size=puzzle.grid_size,
        density=block_count / puzzle.grid_size,
        solution_count=stats.solution_count,
        # Every block leaves in exactly one move
        min_moves=block_count,
        avg_branching_factor=float(branching.mean()) if branching.size else 0.0,
        min_branching_factor=int(branching.min()) if branching.size else 0,
        forced_move_count=stats.forced_move_count,
        forced_move_ratio=stats.forced_move_ratio,
        solution_depth=depth,
        max_chain_length=depth,
        initial_clearable=initial_clearable,
        initial_clearability=initial_clearable / block_count,
        has_critical_path=stats.bottleneck_count > 0,
        bottleneck_count=stats.bottleneck_count,
        total_blockers=total_blockers,
        avg_blockers=avg_blockers,
        unique_directions=unique_directions,
        direction_variety=unique_directions / len(puzzle.topology.direction_specs),
        bidirectional_ratio=bidirectional / block_count,
        search_mode=search_mode,
        states_explored=stats.states_explored,
        solution_path=tuple(path) if path is not None else (),
    )
