"""
Square tile grid.

Tiles are stored row-major (index = y * width + x) and created once per
world. Generation and placement mutate them in place; everything else
reads them.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple

import numpy as np


class Terrain(IntEnum):
    """Terrain kinds. Values are the codes exported to the renderer."""

    WATER = 0
    DESERT = 1
    GRASSLAND = 2
    FOREST = 3
    SWAMP = 4
    HILLS = 5
    MOUNTAIN = 6


TERRAIN_NAMES = {
    Terrain.WATER: "Water",
    Terrain.DESERT: "Desert",
    Terrain.GRASSLAND: "Grassland",
    Terrain.FOREST: "Forest",
    Terrain.SWAMP: "Swamp",
    Terrain.HILLS: "Hills",
    Terrain.MOUNTAIN: "Mountain",
}

# Row-major 8-neighbourhood, center skipped
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)
)


class OutOfBoundsError(IndexError):
    """Raised when a coordinate falls outside the grid."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(f"({x}, {y}) is outside the {width}x{height} grid")
        self.x = x
        self.y = y


@dataclass
class Tile:
    """One grid cell."""

    x: int
    y: int
    terrain: Terrain = Terrain.WATER
    village_id: Optional[int] = None  # handle into the village arena

    @property
    def has_village(self) -> bool:
        return self.village_id is not None

    @property
    def is_land(self) -> bool:
        return self.terrain != Terrain.WATER


class Grid:
    """Fixed-size 2D tile grid."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.tiles: List[Tile] = [
            Tile(x=x, y=y) for y in range(height) for x in range(width)
        ]

    def __len__(self) -> int:
        return len(self.tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, x: int, y: int) -> int:
        """Row-major index of (x, y), rejecting coordinates outside the grid."""
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(x, y, self.width, self.height)
        return y * self.width + x

    def tile(self, x: int, y: int) -> Tile:
        return self.tiles[self.index(x, y)]

    def neighbors(self, x: int, y: int) -> Iterator[Tile]:
        """Yield the in-bounds 8-neighbours of (x, y) in row-major order."""
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield self.tiles[ny * self.width + nx]

    @classmethod
    def from_terrain(cls, terrain: np.ndarray) -> "Grid":
        """
        Build a grid from a (height, width) array of terrain codes.

        Args:
            terrain: 2D integer array of Terrain values

        Returns:
            Grid with unoccupied tiles
        """
        height, width = terrain.shape
        grid = cls(width, height)
        for tile in grid.tiles:
            tile.terrain = Terrain(int(terrain[tile.y, tile.x]))
        return grid

    def land_mask(self) -> np.ndarray:
        """Boolean (height, width) array, True for land."""
        return self.terrain_array() != Terrain.WATER

    def terrain_array(self) -> np.ndarray:
        """Terrain codes as a (height, width) uint8 array."""
        return np.array(
            [int(t.terrain) for t in self.tiles], dtype=np.uint8
        ).reshape(self.height, self.width)

    def village_array(self) -> np.ndarray:
        """Village handles as a (height, width) int32 array, -1 where empty."""
        return np.array(
            [-1 if t.village_id is None else t.village_id for t in self.tiles],
            dtype=np.int32,
        ).reshape(self.height, self.width)


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
