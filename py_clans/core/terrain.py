"""
Terrain generation.

This module handles:
- Random land seeding over an all-water mask
- Cellular automaton smoothing into coherent landmasses
- Terrain classification of land cells from neighbour density

The neighbour counts are computed with NumPy slicing over a zero-padded
mask, so cells outside the grid never count as land.
"""

from typing import Optional

import numpy as np
import structlog
from pydantic import BaseModel, Field

from ..utils.random import make_rng
from .grid import Grid, Terrain

logger = structlog.get_logger()

# Smoothing rule: >= this many land neighbours makes a cell land
LAND_THRESHOLD = 4


class TerrainOptions(BaseModel):
    """Terrain generation options."""

    width: int = Field(default=74, gt=0, description="Grid width in tiles")
    height: int = Field(default=46, gt=0, description="Grid height in tiles")
    land_fraction: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Land draws as a fraction of the cell count"
    )
    smoothing_iterations: int = Field(default=5, ge=0, description="Smoothing passes")


def count_neighbors(mask: np.ndarray) -> np.ndarray:
    """
    Count True cells in each cell's 8-neighbourhood.

    Args:
        mask: 2D boolean array

    Returns:
        2D int array of the same shape, values 0-8
    """
    h, w = mask.shape
    padded = np.pad(mask.astype(np.int8), 1, mode="constant", constant_values=0)
    counts = np.zeros((h, w), dtype=np.int8)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            counts += padded[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]
    return counts


def smooth_step(mask: np.ndarray) -> np.ndarray:
    """One majority pass. Every cell is recomputed from the input snapshot."""
    return count_neighbors(mask) >= LAND_THRESHOLD


def seed_land(width: int, height: int, land_fraction: float, rng: np.random.Generator) -> np.ndarray:
    """
    Scatter land over an all-water mask.

    Draws are independent, so repeated indices leave fewer distinct land
    cells than draws.
    """
    total = width * height
    draws = int(land_fraction * total)
    mask = np.zeros(total, dtype=bool)
    mask[rng.integers(0, total, size=draws)] = True
    return mask.reshape(height, width)


def classify_terrain(mask: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Assign a terrain kind to every land cell.

    One uniform draw per land cell, consumed in row-major order. Water
    cells stay Water.

    Args:
        mask: 2D boolean land mask
        rng: Random stream

    Returns:
        2D uint8 array of Terrain codes
    """
    land_neighbors = count_neighbors(mask)
    near_water = count_neighbors(~mask) > 0

    terrain = np.full(mask.shape, Terrain.WATER, dtype=np.uint8)
    land = np.flatnonzero(mask)
    draws = rng.random(land.size)

    n = land_neighbors.ravel()[land]
    coast = near_water.ravel()[land]

    interior = np.select(
        [draws < 0.2, draws < 0.5, draws < 0.75],
        [Terrain.MOUNTAIN, Terrain.HILLS, Terrain.FOREST],
        default=Terrain.GRASSLAND,
    )
    plains = np.where(draws < 0.8, Terrain.GRASSLAND, Terrain.FOREST)
    sparse = np.select(
        [coast & (draws < 0.7), draws < 0.6],
        [Terrain.SWAMP, Terrain.DESERT],
        default=Terrain.GRASSLAND,
    )

    kinds = np.select([n >= 7, n >= 5], [interior, plains], default=sparse)
    terrain.ravel()[land] = kinds
    return terrain


class TerrainGenerator:
    """Generates the tile grid: land mask, smoothing, classification."""

    def __init__(self, options: Optional[TerrainOptions] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the terrain generator.

        Args:
            options: Terrain options
            rng: Random stream shared with later generation steps
        """
        self.options = options or TerrainOptions()
        self.rng = make_rng(rng)
        self.mask: Optional[np.ndarray] = None

    def build_mask(self) -> np.ndarray:
        """Seed land and run the smoothing passes."""
        opts = self.options
        mask = seed_land(opts.width, opts.height, opts.land_fraction, self.rng)
        logger.debug("Seeded land", seeded_cells=int(mask.sum()))

        for _ in range(opts.smoothing_iterations):
            mask = smooth_step(mask)

        self.mask = mask
        return mask

    def generate(self) -> Grid:
        """
        Generate a classified grid.

        Returns:
            Grid with terrain set on every tile and no villages
        """
        opts = self.options
        logger.info(
            "Generating terrain",
            width=opts.width,
            height=opts.height,
            land_fraction=opts.land_fraction,
            iterations=opts.smoothing_iterations,
        )

        mask = self.build_mask()
        grid = Grid.from_terrain(classify_terrain(mask, self.rng))

        logger.info("Terrain generated", land_cells=int(mask.sum()), total_cells=len(grid))
        return grid


def generate_terrain(
    width: int = 74,
    height: int = 46,
    land_fraction: float = 0.5,
    smoothing_iterations: int = 5,
    rng: Optional[np.random.Generator] = None,
) -> Grid:
    """Convenience wrapper around TerrainGenerator."""
    options = TerrainOptions(
        width=width,
        height=height,
        land_fraction=land_fraction,
        smoothing_iterations=smoothing_iterations,
    )
    return TerrainGenerator(options, rng).generate()
