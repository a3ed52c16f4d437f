"""Puzzle instance (blocks, holes, topology) and its immutable search states."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Any

import numpy as np

from .topology import Topology, Coord, topology_from_dict


@dataclass(frozen=True)
class Block:
    """A block on the grid. Never mutated; clearing removes it from the state."""
    id: str
    coord: Coord
    direction: str
    locked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "coord": list(self.coord),
            "direction": self.direction,
        }
        if self.locked:
            data["locked"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Block:
        return cls(
            id=str(data["id"]),
            coord=(int(data["coord"][0]), int(data["coord"][1])),
            direction=data["direction"],
            locked=bool(data.get("locked", False)),
        )


@dataclass(frozen=True)
class PuzzleState:
    """
    Set of blocks still on the board, as a bitmask over grid cells.

    Bit i is set when cell i (in the puzzle's dense cell order) holds a
    block. Direction and lock flag are fixed per cell for the whole
    puzzle, so the occupied cells fully determine the state and the mask
    doubles as the state hash.
    """
    occupied: int

    def key(self) -> int:
        return self.occupied

    def is_empty(self) -> bool:
        return self.occupied == 0

    @property
    def block_count(self) -> int:
        return bin(self.occupied).count("1")


class Puzzle:
    """
    One puzzle instance: a topology, a block list and a fixed set of holes.

    Construction validates the level data and precomputes, per block, the
    exit rays (as cell bitmasks cut at the first hole) and the neighbour
    mask used by the lock rule. States produced during search only carry
    an occupancy bitmask.
    """

    def __init__(
        self,
        topology: Topology,
        blocks: Iterable[Block],
        holes: Iterable[Coord] = (),
    ):
        self.topology = topology
        self.blocks: Tuple[Block, ...] = tuple(blocks)
        self.holes: FrozenSet[Coord] = frozenset(tuple(h) for h in holes)

        self._validate()

        self.cells: List[Coord] = topology.cells()
        self.cell_index: Dict[Coord, int] = {c: i for i, c in enumerate(self.cells)}
        self._id_index: Dict[str, int] = {b.id: i for i, b in enumerate(self.blocks)}

        self.block_bits: Tuple[int, ...] = tuple(
            1 << self.cell_index[b.coord] for b in self.blocks
        )
        self.ray_masks: Tuple[Tuple[int, ...], ...] = tuple(
            tuple(self._ray_mask(b.coord, d) for d in topology.exit_directions(b.direction))
            for b in self.blocks
        )
        self.neighbor_masks: Tuple[int, ...] = tuple(
            self._neighbor_mask(b.coord) for b in self.blocks
        )

    def _validate(self) -> None:
        seen_coords = set()
        seen_ids = set()
        for hole in self.holes:
            if not self.topology.in_bounds(hole):
                raise ValueError(f"Hole {hole} is outside the {self.topology!r} grid")
        for block in self.blocks:
            if not self.topology.is_valid_direction(block.direction):
                raise ValueError(
                    f"Block {block.id!r} has invalid direction {block.direction!r} "
                    f"(expected one of {self.topology.direction_specs})"
                )
            if not self.topology.in_bounds(block.coord):
                raise ValueError(f"Block {block.id!r} at {block.coord} is out of bounds")
            if block.coord in seen_coords:
                raise ValueError(f"Two blocks share coordinate {block.coord}")
            if block.coord in self.holes:
                raise ValueError(f"Block {block.id!r} sits on a hole at {block.coord}")
            if block.id in seen_ids:
                raise ValueError(f"Duplicate block id {block.id!r}")
            seen_coords.add(block.coord)
            seen_ids.add(block.id)

    def _ray_mask(self, start: Coord, direction: str) -> int:
        """Cells a block passes over when leaving in one direction, up to the first hole."""
        mask = 0
        for coord in self.topology.ray(start, direction):
            if coord in self.holes:
                break
            mask |= 1 << self.cell_index[coord]
        return mask

    def _neighbor_mask(self, coord: Coord) -> int:
        mask = 0
        for neighbor in self.topology.neighbors(coord):
            if self.topology.in_bounds(neighbor):
                mask |= 1 << self.cell_index[neighbor]
        return mask

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def initial_state(self) -> PuzzleState:
        mask = 0
        for bit in self.block_bits:
            mask |= bit
        return PuzzleState(mask)

    def remove(self, state: PuzzleState, block_index: int) -> PuzzleState:
        """Return a new state without the given block."""
        return PuzzleState(state.occupied & ~self.block_bits[block_index])

    def remaining(self, state: PuzzleState) -> List[int]:
        """Indices of the blocks still present, in block order."""
        occupied = state.occupied
        return [i for i, bit in enumerate(self.block_bits) if occupied & bit]

    def block_index(self, block_id: str) -> int:
        try:
            return self._id_index[block_id]
        except KeyError:
            raise KeyError(f"No block with id {block_id!r}") from None

    def state_from_ids(self, block_ids: Iterable[str]) -> PuzzleState:
        """Build the state in which only the given blocks remain."""
        mask = 0
        for block_id in block_ids:
            mask |= self.block_bits[self.block_index(block_id)]
        return PuzzleState(mask)

    def can_clear(self, block_id: str, state: Optional[PuzzleState] = None) -> bool:
        """
        Check whether a block may be removed right now.

        Entry point for callers driving one move at a time.
        """
        from .rules import can_clear

        if state is None:
            state = self.initial_state()
        return can_clear(self, state, self.block_index(block_id))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    @property
    def hole_count(self) -> int:
        return len(self.holes)

    @property
    def locked_count(self) -> int:
        return sum(1 for b in self.blocks if b.locked)

    @property
    def grid_size(self) -> int:
        return self.topology.size

    def occupancy_grid(self, state: Optional[PuzzleState] = None) -> np.ndarray:
        """
        Occupancy as a 2D array for square grids (1 block, -1 hole, 0 empty).

        Hex grids are returned as a single row in the dense cell order.
        """
        if state is None:
            state = self.initial_state()
        flat = np.zeros(len(self.cells), dtype=np.int8)
        for i, coord in enumerate(self.cells):
            if state.occupied >> i & 1:
                flat[i] = 1
            elif coord in self.holes:
                flat[i] = -1
        if self.topology.name == "square":
            return flat.reshape(self.topology.rows, self.topology.cols)
        return flat.reshape(1, -1)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topology": {"type": self.topology.name, **self.topology.describe()},
            "blocks": [b.to_dict() for b in self.blocks],
            "holes": [list(h) for h in sorted(self.holes)],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Puzzle:
        """
        Create a puzzle from a plain dict.

        Blocks without an id get one derived from their coordinate.
        """
        topology = topology_from_dict(data["topology"])
        blocks = []
        for raw in data.get("blocks", []):
            if "id" not in raw:
                raw = {**raw, "id": f"block-{raw['coord'][0]}-{raw['coord'][1]}"}
            blocks.append(Block.from_dict(raw))
        holes = [(int(h[0]), int(h[1])) for h in data.get("holes", [])]
        return cls(topology, blocks, holes)

    ARROWS = {"N": "^", "E": ">", "S": "v", "W": "<", "N_S": "|", "E_W": "-"}

    def __str__(self) -> str:
        """Pretty-print square puzzles; hex puzzles fall back to repr."""
        if self.topology.name != "square":
            return repr(self)
        by_coord = {b.coord: b for b in self.blocks}
        lines = []
        border = "+" + "-" * (self.topology.cols * 2 + 1) + "+"
        lines.append(border)
        for row in range(self.topology.rows):
            row_str = "|"
            for col in range(self.topology.cols):
                block = by_coord.get((row, col))
                if block is not None:
                    # Locked blocks are drawn as '#', their direction hidden
                    row_str += " #" if block.locked else f" {self.ARROWS[block.direction]}"
                elif (row, col) in self.holes:
                    row_str += " o"
                else:
                    row_str += " ."
            lines.append(row_str + " |")
        lines.append(border)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Puzzle({self.topology!r}, blocks={self.block_count}, "
            f"holes={self.hole_count}, locked={self.locked_count})"
        )
