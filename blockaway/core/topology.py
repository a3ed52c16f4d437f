"""Grid topologies: rectangular (row, col) and hexagonal axial (q, r)."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, Iterator

Coord = Tuple[int, int]


class Topology(ABC):
    """
    A bounded grid with a fixed set of named directions.

    Subclasses provide the direction vectors, the bidirectional axes and
    the bounds check. Everything else (ray tracing, neighbours, keys) is
    shared so the puzzle rules are written once for every grid shape.
    """

    name: str = "topology"

    # Direction name -> coordinate delta, in canonical order
    DIRECTIONS: Dict[str, Coord] = {}
    # Axis name -> its two opposite directions
    AXES: Dict[str, Tuple[str, str]] = {}

    @abstractmethod
    def in_bounds(self, coord: Coord) -> bool:
        """Check if a coordinate lies inside the grid."""
        pass

    @abstractmethod
    def cells(self) -> List[Coord]:
        """All in-bounds coordinates, in a stable order."""
        pass

    @abstractmethod
    def describe(self) -> Dict[str, int]:
        """Dimensions of the grid as a plain dict."""
        pass

    @property
    def direction_names(self) -> List[str]:
        return list(self.DIRECTIONS)

    @property
    def axis_names(self) -> List[str]:
        return list(self.AXES)

    @property
    def direction_specs(self) -> List[str]:
        """Every value a block direction may take (single + axis)."""
        return self.direction_names + self.axis_names

    @property
    def size(self) -> int:
        """Number of cells in the grid."""
        return len(self.cells())

    @staticmethod
    def key(coord: Coord) -> str:
        """Canonical string key for a coordinate."""
        return f"{coord[0]},{coord[1]}"

    @staticmethod
    def parse_key(key: str) -> Coord:
        a, b = key.split(",")
        return (int(a), int(b))

    @staticmethod
    def add(a: Coord, b: Coord) -> Coord:
        return (a[0] + b[0], a[1] + b[1])

    def is_valid_direction(self, direction: str) -> bool:
        return direction in self.DIRECTIONS or direction in self.AXES

    def is_bidirectional(self, direction: str) -> bool:
        return direction in self.AXES

    def exit_directions(self, direction: str) -> Tuple[str, ...]:
        """
        Resolve a block direction to the single directions it may exit by.

        A plain direction resolves to itself, an axis to its two halves.
        """
        if direction in self.AXES:
            return self.AXES[direction]
        if direction in self.DIRECTIONS:
            return (direction,)
        raise ValueError(f"Unknown direction for {self.name} grid: {direction!r}")

    def neighbor(self, coord: Coord, direction: str) -> Coord:
        return self.add(coord, self.DIRECTIONS[direction])

    def neighbors(self, coord: Coord) -> List[Coord]:
        """All orthogonal neighbours, including out-of-bounds ones."""
        return [self.add(coord, delta) for delta in self.DIRECTIONS.values()]

    def ray(self, start: Coord, direction: str) -> Iterator[Coord]:
        """Yield the cells from start (exclusive) toward the edge in one direction."""
        delta = self.DIRECTIONS[direction]
        current = self.add(start, delta)
        while self.in_bounds(current):
            yield current
            current = self.add(current, delta)

    def opposite(self, direction: str) -> str:
        dq, dr = self.DIRECTIONS[direction]
        for name, delta in self.DIRECTIONS.items():
            if delta == (-dq, -dr):
                return name
        raise ValueError(f"No opposite for {direction!r}")

    def distance_to_edge(self, coord: Coord, direction: str) -> int:
        """Number of in-bounds cells between coord and the edge along a direction."""
        return sum(1 for _ in self.ray(coord, direction))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Topology):
            return False
        return self.name == other.name and self.describe() == other.describe()

    def __hash__(self) -> int:
        return hash((self.name, tuple(sorted(self.describe().items()))))


class SquareTopology(Topology):
    """Rectangular grid addressed by (row, col), row 0 at the top."""

    name = "square"

    DIRECTIONS = {
        "N": (-1, 0),
        "E": (0, 1),
        "S": (1, 0),
        "W": (0, -1),
    }
    AXES = {
        "N_S": ("N", "S"),
        "E_W": ("E", "W"),
    }

    def __init__(self, rows: int, cols: int):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols

    def in_bounds(self, coord: Coord) -> bool:
        row, col = coord
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cells(self) -> List[Coord]:
        return [(row, col) for row in range(self.rows) for col in range(self.cols)]

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def describe(self) -> Dict[str, int]:
        return {"rows": self.rows, "cols": self.cols}

    def __repr__(self) -> str:
        return f"SquareTopology(rows={self.rows}, cols={self.cols})"


class HexTopology(Topology):
    """
    Hexagon-shaped grid of pointy-top hexes in axial (q, r) coordinates.

    Radius 0 is a single hex, radius 1 has 7 hexes, radius 2 has 19.
    """

    name = "hex"

    DIRECTIONS = {
        "NE": (1, -1),
        "E": (1, 0),
        "SE": (0, 1),
        "SW": (-1, 1),
        "W": (-1, 0),
        "NW": (0, -1),
    }
    AXES = {
        "NE_SW": ("NE", "SW"),
        "E_W": ("E", "W"),
        "SE_NW": ("SE", "NW"),
    }

    def __init__(self, radius: int):
        if radius < 0:
            raise ValueError(f"Radius must be non-negative, got {radius}")
        self.radius = radius

    def in_bounds(self, coord: Coord) -> bool:
        q, r = coord
        s = -q - r
        return max(abs(q), abs(r), abs(s)) <= self.radius

    def cells(self) -> List[Coord]:
        n = self.radius
        coords = []
        for q in range(-n, n + 1):
            for r in range(max(-n, -q - n), min(n, -q + n) + 1):
                coords.append((q, r))
        return coords

    @property
    def size(self) -> int:
        n = self.radius
        return 3 * n * (n + 1) + 1

    def describe(self) -> Dict[str, int]:
        return {"radius": self.radius}

    def __repr__(self) -> str:
        return f"HexTopology(radius={self.radius})"


def topology_from_dict(data: Dict) -> Topology:
    """
    Build a topology from a descriptor dict.

    Accepts {"type": "square", "rows": R, "cols": C} or
    {"type": "hex", "radius": N}.
    """
    kind = data.get("type", "square")
    if kind == "square":
        return SquareTopology(int(data["rows"]), int(data["cols"]))
    if kind == "hex":
        return HexTopology(int(data["radius"]))
    raise ValueError(f"Unknown topology type: {kind!r}")
