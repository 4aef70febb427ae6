"""
World generation pipeline.

Stages, all sharing one random stream:
1. TerrainGenerator - land mask and terrain kinds
2. SettlementPlacer - clans and villages

The World object is what the turn driver and the renderer hold. Map and
village state should only change through generate_world(), can_build()
and build() below.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import structlog

from ..config import Settings, get_settings
from ..utils.random import make_rng
from .buildings import Building, BuildingType, build_building, can_build
from .grid import Grid
from .settlements import Clan, PlacementOptions, SettlementPlacer, Village
from .terrain import TerrainGenerator, TerrainOptions

logger = structlog.get_logger()


@dataclass
class World:
    """Generated grid plus clans and the village arena."""

    grid: Grid
    clans: List[Clan]
    villages: Dict[int, Village]
    seed: Optional[int] = None
    land_mask: Optional[np.ndarray] = field(default=None, repr=False)

    def village(self, village_id: int) -> Village:
        return self.villages[village_id]

    def clan_villages(self, clan_id: int) -> List[Village]:
        return [self.villages[v] for v in self.clans[clan_id].village_ids]

    def can_build(
        self, village_id: int, building_type: BuildingType
    ) -> Tuple[bool, Optional[Tuple[int, int]]]:
        return can_build(self.villages[village_id], self.grid, building_type)

    def build(self, village_id: int, building_type: BuildingType) -> Optional[Building]:
        """
        Check and commit a construction in one step.

        Returns:
            The new Building, or None if the village is ineligible
        """
        eligible, tile = self.can_build(village_id, building_type)
        if not eligible:
            return None
        return build_building(self.villages[village_id], building_type, tile)

    def clan_income(self, clan_id: int) -> Dict[str, int]:
        """Gold, knowledge and worship per turn across a clan's villages."""
        income = {"gold": 0, "knowledge": 0, "worship": 0}
        for village in self.clan_villages(clan_id):
            output = village.effective_output()
            for key in income:
                income[key] += output[key]
        return income


def options_from_settings(settings: Settings) -> Tuple[TerrainOptions, PlacementOptions]:
    """Split settings into per-stage options."""
    terrain = TerrainOptions(
        width=settings.grid_width,
        height=settings.grid_height,
        land_fraction=settings.land_fraction,
        smoothing_iterations=settings.smoothing_iterations,
    )
    placement = PlacementOptions(
        faction_count=settings.faction_count,
        settlements_per_faction=settings.settlements_per_faction,
        home_min_distance=settings.home_min_distance,
        satellite_min_distance=settings.satellite_min_distance,
        satellite_radius=settings.satellite_radius,
        max_attempts=settings.max_placement_attempts,
        relaxations=settings.placement_relaxations,
        relaxation_factor=settings.relaxation_factor,
    )
    return terrain, placement


def generate_world(
    seed: Optional[Union[int, np.random.Generator]] = None,
    terrain_options: Optional[TerrainOptions] = None,
    placement_options: Optional[PlacementOptions] = None,
    settings: Optional[Settings] = None,
) -> World:
    """
    Generate a complete world.

    Explicit options win over settings; the seed falls back to
    ``settings.seed``.

    Raises:
        PlacementExhaustedError: Village placement could not complete
    """
    settings = settings or get_settings()
    default_terrain, default_placement = options_from_settings(settings)
    terrain_options = terrain_options or default_terrain
    placement_options = placement_options or default_placement
    if seed is None:
        seed = settings.seed

    rng = make_rng(seed)
    logger.info("Generating world", seed=seed if isinstance(seed, int) else None)

    terrain_gen = TerrainGenerator(terrain_options, rng)
    grid = terrain_gen.generate()

    clans, villages = SettlementPlacer(grid, placement_options, rng).place()

    logger.info("World generated", clans=len(clans), villages=len(villages))
    return World(
        grid=grid,
        clans=clans,
        villages=villages,
        seed=seed if isinstance(seed, int) else None,
        land_mask=terrain_gen.mask,
    )
