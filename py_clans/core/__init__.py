"""
Core world generation and construction rules.
"""

from .grid import Grid, Terrain, Tile, OutOfBoundsError
from .terrain import TerrainGenerator, TerrainOptions, generate_terrain
from .buildings import BuildingType, Building, BUILDING_SPECS, can_build, build_building
from .settlements import (
    Clan,
    Village,
    PlacementOptions,
    SettlementPlacer,
    PlacementExhaustedError,
    place_settlements,
)
from .units import Unit, SpecialAbility
from .world import World, generate_world

__all__ = ['Grid', 'Terrain', 'Tile', 'OutOfBoundsError',
           'TerrainGenerator', 'TerrainOptions', 'generate_terrain',
           'BuildingType', 'Building', 'BUILDING_SPECS', 'can_build', 'build_building',
           'Clan', 'Village', 'PlacementOptions', 'SettlementPlacer',
           'PlacementExhaustedError', 'place_settlements',
           'Unit', 'SpecialAbility', 'World', 'generate_world']
