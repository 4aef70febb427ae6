"""
Unit tests for clan and village placement.

Tests cover:
- Placement options
- Village and clan models
- Home and satellite placement with spacing
- Bounded search and relaxation
"""

import itertools

import numpy as np
import pytest

from py_clans.core.grid import Grid, Terrain, manhattan
from py_clans.core.settlements import (
    CLAN_DEFINITIONS,
    MAX_POPULATION,
    ClanDefinition,
    Clan,
    PlacementExhaustedError,
    PlacementOptions,
    SettlementPlacer,
    Village,
    clan_definitions,
    place_settlements,
)


def land_grid(width, height, terrain=Terrain.HILLS):
    grid = Grid(width, height)
    for tile in grid:
        tile.terrain = terrain
    return grid


def assert_spacing(villages, home_distance=15, other_distance=3):
    for a, b in itertools.combinations(villages.values(), 2):
        limit = home_distance if a.is_home and b.is_home else other_distance
        assert manhattan(a.position, b.position) >= limit, (a.name, b.name)


class TestPlacementOptions:
    def test_default_options(self):
        options = PlacementOptions()
        assert options.faction_count == 4
        assert options.settlements_per_faction == 3
        assert options.home_min_distance == 15
        assert options.satellite_min_distance == 3
        assert options.satellite_radius == 10.0
        assert options.max_attempts == 10000
        assert options.relaxations == 0

    def test_custom_options(self):
        options = PlacementOptions(faction_count=2, satellite_radius=4.5)
        assert options.faction_count == 2
        assert options.satellite_radius == 4.5


class TestVillageModel:
    def test_village_defaults(self):
        village = Village(id=1, x=3, y=4, clan_id=0)
        assert village.population == 4
        assert village.production_storehouse == 0
        assert village.food_production == 2
        assert village.production_output == 1
        assert village.gold_output == 1
        assert village.buildings == []
        assert village.workers == [False] * MAX_POPULATION
        assert village.position == (3, 4)

    def test_workers_not_shared(self):
        a = Village(id=1, x=0, y=0, clan_id=0)
        b = Village(id=2, x=1, y=0, clan_id=0)
        a.workers[0] = True
        assert b.workers[0] is False

    def test_free_worker_index(self):
        village = Village(id=1, x=0, y=0, clan_id=0)
        village.workers[0] = True
        village.workers[1] = True
        assert village.free_worker_index() == 2
        village.workers = [True] * MAX_POPULATION
        assert village.free_worker_index() is None

    def test_clan_model(self):
        clan = Clan(id=0, name="Red Claw", color=(255, 128, 128, 255), village_tile=(0, 704, 16, 16))
        assert clan.gold == 0
        assert clan.village_ids == []


class TestSettlementPlacer:
    """Placement on hand-built grids."""

    def setup_method(self):
        self.grid = land_grid(74, 46)
        self.rng = np.random.default_rng(2024)

    def test_default_placement(self):
        clans, villages = SettlementPlacer(self.grid, rng=self.rng).place()

        assert [c.name for c in clans] == [d.name for d in CLAN_DEFINITIONS]
        assert len(villages) == 12
        for clan in clans:
            assert len(clan.village_ids) == 3
            owned = [villages[v] for v in clan.village_ids]
            assert owned[0].is_home
            assert not any(v.is_home for v in owned[1:])
            assert all(v.clan_id == clan.id for v in owned)

    def test_minimum_spacing(self):
        _, villages = SettlementPlacer(self.grid, rng=self.rng).place()
        assert_spacing(villages)

    def test_satellite_spacing_is_global(self):
        """Satellites keep their distance from other clans' villages as well."""
        _, villages = SettlementPlacer(self.grid, rng=self.rng).place()
        for a, b in itertools.combinations(villages.values(), 2):
            if a.clan_id != b.clan_id:
                assert manhattan(a.position, b.position) >= 3

    def test_satellites_within_radius(self):
        clans, villages = SettlementPlacer(self.grid, rng=self.rng).place()
        for clan in clans:
            home = villages[clan.village_ids[0]]
            for vid in clan.village_ids[1:]:
                v = villages[vid]
                assert abs(v.x - home.x) < 10
                assert abs(v.y - home.y) < 10

    def test_tiles_marked_and_forced_to_grassland(self):
        _, villages = SettlementPlacer(self.grid, rng=self.rng).place()
        for vid, village in villages.items():
            tile = self.grid.tile(village.x, village.y)
            assert tile.village_id == vid
            assert tile.terrain == Terrain.GRASSLAND
        occupied = [t for t in self.grid if t.has_village]
        assert len(occupied) == 12
        # untouched tiles keep their terrain
        assert all(t.terrain == Terrain.HILLS for t in self.grid if not t.has_village)

    def test_names_use_creation_index(self):
        clans, villages = SettlementPlacer(self.grid, rng=self.rng).place()
        assert villages[1].name == "Red Claw Village 1"
        assert villages[4].name == "Glendwellers Village 4"
        assert villages[12].name == "Xenth Village 12"

    def test_villages_only_on_land(self):
        grid = Grid(40, 40)
        for tile in grid:
            if tile.x >= 20:
                tile.terrain = Terrain.FOREST
        _, villages = SettlementPlacer(
            grid, PlacementOptions(faction_count=2), np.random.default_rng(5)
        ).place()
        assert all(v.x >= 20 for v in villages.values())

    def test_extra_factions_beyond_roster(self):
        """Clans past the static roster are generated and keep the spacing."""
        clans, villages = SettlementPlacer(
            self.grid, PlacementOptions(faction_count=6), self.rng
        ).place()

        assert len(clans) == 6
        assert len(villages) == 18
        assert [c.name for c in clans[4:]] == ["Clan 5", "Clan 6"]
        assert len({c.color for c in clans}) == 6
        assert_spacing(villages)

    def test_zero_factions(self):
        clans, villages = SettlementPlacer(
            self.grid, PlacementOptions(faction_count=0), self.rng
        ).place()
        assert clans == []
        assert villages == {}

    def test_deterministic_under_seed(self):
        _, a = SettlementPlacer(land_grid(74, 46), rng=np.random.default_rng(3)).place()
        _, b = SettlementPlacer(land_grid(74, 46), rng=np.random.default_rng(3)).place()
        assert [v.position for v in a.values()] == [v.position for v in b.values()]


class TestBoundedSearch:
    def test_water_world_exhausts(self):
        grid = Grid(20, 20)
        options = PlacementOptions(faction_count=1, max_attempts=50)
        with pytest.raises(PlacementExhaustedError) as exc_info:
            SettlementPlacer(grid, options, np.random.default_rng(0)).place()
        assert exc_info.value.kind == "home"
        assert exc_info.value.clan_name == "Red Claw"
        assert exc_info.value.attempts == 50

    def test_crowded_homes_exhaust(self):
        """Four homes 15 apart cannot fit on a 10x10 island."""
        grid = land_grid(10, 10)
        options = PlacementOptions(max_attempts=200)
        with pytest.raises(PlacementExhaustedError):
            SettlementPlacer(grid, options, np.random.default_rng(0)).place()

    def test_relaxation_recovers(self):
        grid = land_grid(20, 20)
        options = PlacementOptions(
            faction_count=1,
            settlements_per_faction=2,
            satellite_min_distance=50,
            max_attempts=200,
            relaxations=30,
        )
        clans, villages = SettlementPlacer(grid, options, np.random.default_rng(8)).place()
        assert len(villages) == 2
        assert len({v.position for v in villages.values()}) == 2

    def test_place_settlements_wrapper(self):
        grid = land_grid(74, 46)
        clans, villages = place_settlements(
            grid, faction_count=3, settlements_per_faction=2, rng=np.random.default_rng(1)
        )
        assert len(clans) == 3
        assert len(villages) == 6
        assert_spacing(villages)


class TestClanDefinitions:
    def test_roster_prefix(self):
        assert clan_definitions(2) == CLAN_DEFINITIONS[:2]
        assert clan_definitions(0) == ()

    def test_generated_definitions(self):
        definitions = clan_definitions(7)
        assert len(definitions) == 7
        assert definitions[:4] == CLAN_DEFINITIONS
        extra = definitions[4:]
        assert [d.name for d in extra] == ["Clan 5", "Clan 6", "Clan 7"]
        for d in extra:
            assert isinstance(d, ClanDefinition)
            assert all(0 <= c <= 255 for c in d.color)
            assert d.color[3] == 255
        assert extra[0].village_tile == CLAN_DEFINITIONS[0].village_tile
