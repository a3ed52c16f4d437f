"""Move rules: which blocks can leave the board, and what stands in their way."""

from __future__ import annotations
from typing import List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .puzzle import Puzzle, PuzzleState


def _popcount(mask: int) -> int:
    return bin(mask).count("1")


def is_locked_in(puzzle: Puzzle, state: PuzzleState, block_index: int) -> bool:
    """
    Check the lock rule for a block.

    A locked block cannot move while any orthogonal neighbour is occupied.
    Unlocked blocks are never held by this rule.
    """
    if not puzzle.blocks[block_index].locked:
        return False
    return bool(state.occupied & puzzle.neighbor_masks[block_index])


def can_clear(puzzle: Puzzle, state: PuzzleState, block_index: int) -> bool:
    """
    Check if a block can be cleared this turn.

    The block traces a straight line in its direction. It leaves the board
    if the line reaches a hole or the edge without meeting another block.
    Axis blocks may use either of their two directions.

    Args:
        puzzle: The puzzle instance.
        state: Current occupancy.
        block_index: Index of the block in puzzle.blocks.

    Returns:
        True if the block can be removed.
    """
    if is_locked_in(puzzle, state, block_index):
        return False

    occupied = state.occupied
    for ray in puzzle.ray_masks[block_index]:
        if not occupied & ray:
            return True
    return False


def clearable_blocks(puzzle: Puzzle, state: PuzzleState) -> List[int]:
    """Get the indices of every block that can be cleared, in block order."""
    occupied = state.occupied
    clearable = []
    for i, bit in enumerate(puzzle.block_bits):
        if occupied & bit and can_clear(puzzle, state, i):
            clearable.append(i)
    return clearable


def blocks_ahead(puzzle: Puzzle, state: PuzzleState, block_index: int) -> int:
    """
    Count the blocks standing between a block and its exit.

    Every occupied cell along the ray counts, up to the first hole or the
    edge. Axis blocks report the smaller of their two counts.
    """
    occupied = state.occupied
    return min(_popcount(occupied & ray) for ray in puzzle.ray_masks[block_index])


def blocker_totals(puzzle: Puzzle, state: PuzzleState) -> Tuple[int, float]:
    """
    Total and average blockers over the blocks present in a state.

    Returns:
        Tuple of (total_blockers, avg_blockers). Both are 0 for an empty state.
    """
    present = puzzle.remaining(state)
    if not present:
        return 0, 0.0
    total = sum(blocks_ahead(puzzle, state, i) for i in present)
    return total, total / len(present)
