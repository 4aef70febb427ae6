"""
Village construction rules.

A building occupies one tile in the 8-neighbourhood of its village and
needs a free worker, enough stored production and matching terrain.

Callers run can_build() then build_building() with the returned tile as
one step; build_building() does not re-check eligibility.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .grid import Grid, Terrain

if TYPE_CHECKING:
    from .settlements import Village

logger = structlog.get_logger()

MAX_BUILDINGS = 8


class BuildingType(Enum):
    """Building kinds a village can construct."""

    FARM = "farm"
    LOGGING_CAMP = "logging_camp"
    MINE = "mine"
    WORSHIP_SITE = "worship_site"
    LIBRARY = "library"


@dataclass(frozen=True)
class BuildingSpec:
    """Static per-kind construction data."""

    name: str
    cost: int
    terrain: Terrain
    bonus: str  # output the building adds to: food, production, gold, knowledge, worship
    upkeep: int = 0


BUILDING_SPECS: Mapping[BuildingType, BuildingSpec] = MappingProxyType(
    {
        BuildingType.FARM: BuildingSpec("Farm", 5, Terrain.GRASSLAND, "production"),
        BuildingType.LOGGING_CAMP: BuildingSpec("Logging Camp", 5, Terrain.FOREST, "production"),
        BuildingType.MINE: BuildingSpec("Mine", 7, Terrain.HILLS, "gold"),
        BuildingType.WORSHIP_SITE: BuildingSpec("Worship Site", 7, Terrain.HILLS, "worship"),
        BuildingType.LIBRARY: BuildingSpec("Library", 6, Terrain.GRASSLAND, "knowledge"),
    }
)


class Building(BaseModel):
    """A constructed building."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name")
    type: BuildingType = Field(description="Building kind")
    production_cost: int = Field(description="Production paid at construction")
    upkeep_cost: int = Field(default=0, description="Production per turn to maintain")
    food_bonus: int = Field(default=0)
    production_bonus: int = Field(default=0)
    gold_bonus: int = Field(default=0)
    knowledge_bonus: int = Field(default=0)
    worship_bonus: int = Field(default=0)
    worker_idx: int = Field(default=-1, description="Assigned worker slot, -1 if none")
    tile_x: int = Field(description="Occupied tile x")
    tile_y: int = Field(description="Occupied tile y")

    @property
    def tile(self) -> Tuple[int, int]:
        return (self.tile_x, self.tile_y)


def can_build(
    village: Village, grid: Grid, building_type: BuildingType
) -> Tuple[bool, Optional[Tuple[int, int]]]:
    """
    Check whether a village can construct a building.

    Checks, in order: a free worker and fewer than MAX_BUILDINGS buildings,
    enough stored production, then the first adjacent tile (row-major) with
    the required terrain that holds no village and none of this village's
    buildings.

    Args:
        village: Village to build in
        grid: Generated grid
        building_type: Kind to build

    Returns:
        (True, (x, y)) with the tile to build on, or (False, None)
    """
    if village.free_worker_index() is None or len(village.buildings) >= MAX_BUILDINGS:
        return False, None

    spec = BUILDING_SPECS[building_type]
    if village.production_storehouse < spec.cost:
        return False, None

    used = {b.tile for b in village.buildings}
    for tile in grid.neighbors(village.x, village.y):
        if tile.terrain == spec.terrain and not tile.has_village and (tile.x, tile.y) not in used:
            return True, (tile.x, tile.y)

    return False, None


def build_building(village: Village, building_type: BuildingType, tile: Tuple[int, int]) -> Building:
    """
    Construct a building on a tile returned by can_build().

    Assigns the lowest free worker slot, deducts the cost from the
    production storehouse and appends the building.

    Raises:
        ValueError: The village has no free worker or no building room left
    """
    worker_idx = village.free_worker_index()
    if worker_idx is None or len(village.buildings) >= MAX_BUILDINGS:
        raise ValueError(f"{village.name} has no room for another building")

    spec = BUILDING_SPECS[building_type]
    building = Building(
        name=spec.name,
        type=building_type,
        production_cost=spec.cost,
        upkeep_cost=spec.upkeep,
        worker_idx=worker_idx,
        tile_x=tile[0],
        tile_y=tile[1],
        **{f"{spec.bonus}_bonus": 1},
    )

    village.workers[worker_idx] = True
    village.production_storehouse -= spec.cost
    village.buildings.append(building)

    logger.debug(
        "Building constructed",
        village=village.name,
        building=spec.name,
        tile=tile,
        worker=worker_idx,
        storehouse=village.production_storehouse,
    )
    return building
