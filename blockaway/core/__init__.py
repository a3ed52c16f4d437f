"""Core module for grid topologies, puzzle representation and move rules."""

from .topology import Topology, SquareTopology, HexTopology, topology_from_dict
from .puzzle import Block, Puzzle, PuzzleState
from .rules import can_clear, clearable_blocks, blocks_ahead, blocker_totals

__all__ = [
    "Topology",
    "SquareTopology",
    "HexTopology",
    "topology_from_dict",
    "Block",
    "Puzzle",
    "PuzzleState",
    "can_clear",
    "clearable_blocks",
    "blocks_ahead",
    "blocker_totals",
]
