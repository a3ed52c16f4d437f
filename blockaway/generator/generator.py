"""Level generator producing solvable block puzzles of a target difficulty."""

from __future__ import annotations
import json
import logging
import os
import random
from typing import Iterable, List, Optional, Union

from ..core.puzzle import Block, Puzzle
from ..core.rules import clearable_blocks
from ..core.topology import Coord, Topology
from ..solvers.greedy_solver import quick_solve
from ..analysis.analyzer import AnalyzerConfig, analyze_puzzle
from ..analysis.difficulty import DifficultyWeights, DEFAULT_WEIGHTS, Tier, calculate_difficulty_score

logger = logging.getLogger(__name__)


def _block_id(coord: Coord) -> str:
    return f"block-{coord[0]}-{coord[1]}"


class LevelGenerator:
    """
    Generator for block puzzles on a fixed topology.

    Algorithms:
    - smart_fill: cover every free cell with blocks pointing at their
      nearest edge, then flip and lock a share of them, keeping each change
      only while the level stays solvable.
    - generate: place blocks at random, choosing directions that are clear
      at placement time, and retry until a solvable candidate whose initial
      clearability matches the target tier turns up.

    Candidates are screened with quick_solve, never with the full analysis.
    """

    def __init__(self, topology: Topology, seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            topology: Grid to generate levels on.
            seed: Random seed for reproducibility.
        """
        self.topology = topology
        self.rng = random.Random(seed)

    # ------------------------------------------------------------------
    # Direction helpers
    # ------------------------------------------------------------------

    def direction_preference(self, coord: Coord, target: Optional[Tier] = None) -> List[str]:
        """
        Order the single directions for a cell by how easy they make it.

        Easy targets prefer the nearest edge, hard and superHard the
        farthest. Medium or no target gives a random order.
        """
        directions = list(self.topology.direction_names)

        if target is None or target == Tier.MEDIUM:
            self.rng.shuffle(directions)
            return directions

        distance = {d: self.topology.distance_to_edge(coord, d) for d in directions}
        return sorted(directions, key=lambda d: distance[d], reverse=(target != Tier.EASY))

    def _clear_directions(self, puzzle: Puzzle, coord: Coord, allow_axes: bool) -> List[str]:
        """Directions in which a block at coord would currently leave the board."""
        occupied = {b.coord for b in puzzle.blocks}
        holes = puzzle.holes

        def is_clear(direction: str) -> bool:
            for cell in self.topology.ray(coord, direction):
                if cell in holes:
                    return True
                if cell in occupied:
                    return False
            return True

        valid = [d for d in self.topology.direction_names if is_clear(d)]
        if allow_axes:
            for axis, (first, second) in self.topology.AXES.items():
                if is_clear(first) or is_clear(second):
                    valid.append(axis)
        return valid

    # ------------------------------------------------------------------
    # Smart fill
    # ------------------------------------------------------------------

    def smart_fill(
        self,
        holes: Iterable[Coord] = (),
        flip_percent: Optional[float] = None,
        lock_percent: Optional[float] = None
    ) -> Puzzle:
        """
        Fill every free cell, guaranteed solvable.

        Args:
            holes: Hole positions to keep free.
            flip_percent: Share of blocks to turn away from their nearest
                          edge (default scales with size: 50%/35%/25%).
            lock_percent: Share of blocks to lock (default 20%/18%/15%).

        Returns:
            A solvable Puzzle covering every non-hole cell.
        """
        holes = frozenset(holes)
        free = [c for c in self.topology.cells() if c not in holes]
        if not free:
            return Puzzle(self.topology, [], holes)

        by_coord = {
            c: Block(_block_id(c), c, self.direction_preference(c, Tier.EASY)[0])
            for c in free
        }
        count = len(by_coord)

        if flip_percent is None:
            flip_percent = 0.25 if count > 200 else 0.35 if count > 100 else 0.5
        if lock_percent is None:
            lock_percent = 0.15 if count > 200 else 0.18 if count > 100 else 0.20

        def solvable() -> bool:
            return quick_solve(Puzzle(self.topology, by_coord.values(), holes)).solvable

        order = list(free)
        self.rng.shuffle(order)

        flip_target = int(count * flip_percent)
        flipped = 0
        for coord in order:
            if flipped >= flip_target:
                break
            block = by_coord[coord]
            others = [d for d in self.topology.direction_names if d != block.direction]
            by_coord[coord] = Block(block.id, coord, self.rng.choice(others), block.locked)
            if solvable():
                flipped += 1
            else:
                by_coord[coord] = block

        self.rng.shuffle(order)

        lock_target = int(count * lock_percent)
        locked = 0
        for coord in order:
            if locked >= lock_target:
                break
            block = by_coord[coord]
            by_coord[coord] = Block(block.id, coord, block.direction, True)
            if solvable():
                locked += 1
            else:
                by_coord[coord] = block

        logger.debug("Smart fill: %d blocks, %d flipped, %d locked", count, flipped, locked)
        return Puzzle(self.topology, by_coord.values(), holes)

    # ------------------------------------------------------------------
    # Random generation
    # ------------------------------------------------------------------

    def _random_candidate(
        self,
        block_count: int,
        target: Optional[Tier],
        holes: frozenset,
        allow_axes: bool
    ) -> Puzzle:
        free = [c for c in self.topology.cells() if c not in holes]
        self.rng.shuffle(free)

        puzzle = Puzzle(self.topology, [], holes)
        blocks: List[Block] = []
        for coord in free[:block_count]:
            valid = self._clear_directions(puzzle, coord, allow_axes)
            if not valid:
                continue

            if target in (Tier.MEDIUM, Tier.HARD, Tier.SUPER_HARD):
                # Directions pointing back into the grid are more likely to get blocked
                inward = [
                    d for d in valid
                    if self.topology.is_bidirectional(d)
                    or self.topology.in_bounds(self.topology.neighbor(coord, d))
                ]
                valid = inward or valid

            blocks.append(Block(_block_id(coord), coord, self.rng.choice(valid)))
            puzzle = Puzzle(self.topology, blocks, holes)
        return puzzle

    @staticmethod
    def matches_target(puzzle: Puzzle, target: Optional[Tier]) -> bool:
        """Check a candidate's initially clearable share against a tier band."""
        if target is None:
            return True
        if puzzle.block_count == 0:
            return False

        state = puzzle.initial_state()
        ratio = len(clearable_blocks(puzzle, state)) / puzzle.block_count

        if target == Tier.EASY:
            return ratio >= 0.5
        if target == Tier.MEDIUM:
            return 0.2 <= ratio < 0.5
        # hard and superHard: under 20% but at least one move available
        return 0 < ratio < 0.2

    def generate(
        self,
        block_count: int,
        target: Optional[Union[Tier, str]] = None,
        holes: Iterable[Coord] = (),
        allow_axes: bool = False
    ) -> Puzzle:
        """
        Generate a solvable puzzle, preferring one that matches the target tier.

        Args:
            block_count: Number of cells to try to fill.
            target: Desired tier (or its value string), None for any.
            holes: Hole positions.
            allow_axes: Also place bidirectional blocks.

        Returns:
            The first solvable candidate matching the target, else the
            first solvable candidate, else a fresh unchecked candidate.
        """
        if isinstance(target, str):
            target = Tier(target)
        holes = frozenset(holes)
        max_attempts = 10 if block_count > 50 else 30

        best: Optional[Puzzle] = None
        for attempt in range(max_attempts):
            candidate = self._random_candidate(block_count, target, holes, allow_axes)
            if not quick_solve(candidate).solvable:
                continue
            if self.matches_target(candidate, target):
                logger.debug("Candidate %d matched target %s", attempt + 1, target)
                return candidate
            if best is None:
                best = candidate

        if best is not None:
            return best
        logger.info("No solvable candidate in %d attempts", max_attempts)
        return self._random_candidate(block_count, target, holes, allow_axes)

    def generate_batch(
        self,
        count: int,
        block_count: int,
        target: Optional[Union[Tier, str]] = None
    ) -> List[Puzzle]:
        """
        Generate multiple puzzles of the same size and target.

        Args:
            count: Number of puzzles to generate.
            block_count: Blocks per puzzle.
            target: Desired tier.

        Returns:
            List of Puzzle objects.
        """
        return [self.generate(block_count, target) for _ in range(count)]

    # ------------------------------------------------------------------
    # Difficulty adjustment
    # ------------------------------------------------------------------

    def increase_difficulty(
        self,
        puzzle: Puzzle,
        weights: DifficultyWeights = DEFAULT_WEIGHTS,
        config: Optional[AnalyzerConfig] = None
    ) -> Optional[Puzzle]:
        """
        Turn one block toward its farthest edge if that raises the score.

        Returns:
            The harder puzzle, or None if no single flip both keeps the
            level solvable and increases its score.
        """
        before = calculate_difficulty_score(analyze_puzzle(puzzle, config), weights).score

        order = list(range(puzzle.block_count))
        self.rng.shuffle(order)

        for index in order:
            block = puzzle.blocks[index]
            for direction in self.direction_preference(block.coord, Tier.HARD):
                if direction == block.direction:
                    continue
                blocks = list(puzzle.blocks)
                blocks[index] = Block(block.id, block.coord, direction, block.locked)
                candidate = Puzzle(self.topology, blocks, puzzle.holes)
                if not quick_solve(candidate).solvable:
                    continue
                after = calculate_difficulty_score(analyze_puzzle(candidate, config), weights).score
                if after > before:
                    return candidate
        return None

    @staticmethod
    def save_to_folder(puzzles: List[Puzzle], folder_path: str, prefix: str = "level") -> None:
        """
        Save a list of puzzles to a folder as individual JSON files.

        Args:
            puzzles: List of Puzzle objects.
            folder_path: Directory to save the puzzles.
            prefix: Prefix for the filename (default: "level").
        """
        os.makedirs(folder_path, exist_ok=True)

        for i, puzzle in enumerate(puzzles, 1):
            file_path = os.path.join(folder_path, f"{prefix}_{i}.json")
            with open(file_path, "w") as f:
                json.dump(puzzle.to_dict(), f, indent=2)
