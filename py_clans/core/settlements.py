"""
Clan and village placement.

Process, per clan in definition order:
1. place_home() - random land tile far from every existing village
2. place_satellites() - tiles within a radius of the home village, with a
   smaller minimum spacing to every existing village

Spacing is checked against villages of all clans, not only the current
one. Both searches draw at most ``max_attempts`` candidates; an exhausted
search optionally retries with relaxed spacing, then raises
PlacementExhaustedError.
"""

import colorsys
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field

from ..utils.random import make_rng
from .buildings import Building
from .grid import Grid, Terrain, Tile, manhattan

logger = structlog.get_logger()

MAX_POPULATION = 12


@dataclass(frozen=True)
class ClanDefinition:
    """Static clan configuration."""

    name: str
    color: Tuple[int, int, int, int]
    village_tile: Tuple[float, float, float, float]  # x, y, w, h in the tileset


CLAN_DEFINITIONS: Tuple[ClanDefinition, ...] = (
    ClanDefinition("Red Claw", (255, 128, 128, 255), (0 * 16.0, 44 * 16.0, 16, 16)),
    ClanDefinition("Glendwellers", (128, 255, 128, 255), (1 * 16.0, 6 * 16.0, 16, 16)),
    ClanDefinition("Gilded", (255, 255, 128, 255), (0 * 16.0, 6 * 16.0, 16, 16)),
    ClanDefinition("Xenth", (0, 243, 192, 255), (1 * 16.0, 44 * 16.0, 16, 16)),
)


def clan_definitions(
    count: int, base: Tuple[ClanDefinition, ...] = CLAN_DEFINITIONS
) -> Tuple[ClanDefinition, ...]:
    """
    Return the first ``count`` clan definitions.

    Clans past the end of ``base`` are named "Clan <n>" with hues spread
    by the golden ratio, and reuse the base village markers in turn.
    """
    definitions = list(base[:count])
    for n in range(len(definitions), count):
        hue = (n * 0.618033988749895) % 1.0
        r, g, b = colorsys.hsv_to_rgb(hue, 0.5, 1.0)
        definitions.append(
            ClanDefinition(
                f"Clan {n + 1}",
                (int(r * 255), int(g * 255), int(b * 255), 255),
                base[n % len(base)].village_tile if base else (0.0, 0.0, 16, 16),
            )
        )
    return tuple(definitions)


class PlacementExhaustedError(RuntimeError):
    """A village search ran out of attempts."""

    def __init__(self, clan_name: str, kind: str, attempts: int):
        super().__init__(
            f"Could not place {kind} village for {clan_name} after {attempts} attempts"
        )
        self.clan_name = clan_name
        self.kind = kind
        self.attempts = attempts


class PlacementOptions(BaseModel):
    """Village placement options."""

    faction_count: int = Field(default=4, ge=0, description="Number of clans")
    settlements_per_faction: int = Field(
        default=3, ge=1, description="Villages per clan, home village included"
    )
    home_min_distance: int = Field(
        default=15, ge=0, description="Minimum Manhattan distance from a home village to any village"
    )
    satellite_min_distance: int = Field(
        default=3, ge=0, description="Minimum Manhattan distance from a satellite to any village"
    )
    satellite_radius: float = Field(
        default=10.0, gt=0.0, description="Maximum satellite offset from the home village"
    )
    max_attempts: int = Field(default=10000, gt=0, description="Draws per search pass")
    relaxations: int = Field(
        default=0, ge=0, description="Extra passes with reduced spacing after exhaustion"
    )
    relaxation_factor: float = Field(
        default=1.2, gt=1.0, description="Spacing divisor per relaxation pass"
    )


class Village(BaseModel):
    """A clan-owned village on one tile."""

    id: int = Field(description="Stable village handle")
    x: int = Field(description="Tile x")
    y: int = Field(description="Tile y")
    name: str = Field(default="", description="Village name")
    clan_id: int = Field(description="Index of the owning clan")
    is_home: bool = Field(default=False, description="First village placed for the clan")
    population: int = Field(default=4, description="Population, 1-12")
    food_storehouse: int = Field(default=0, description="Stored food")
    production_storehouse: int = Field(default=0, description="Stored production, spent on buildings")
    food_production: int = Field(default=2, description="Food per turn")
    production_output: int = Field(default=1, description="Production per turn")
    gold_output: int = Field(default=1, description="Gold per turn")
    knowledge_output: int = Field(default=0, description="Knowledge per turn")
    worship_output: int = Field(default=0, description="Worship per turn")
    buildings: List[Building] = Field(default_factory=list, description="Buildings in build order")
    workers: List[bool] = Field(
        default_factory=lambda: [False] * MAX_POPULATION,
        description="True where the worker slot is assigned to a building",
    )

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def free_worker_index(self) -> Optional[int]:
        """Lowest unassigned worker slot, or None."""
        for i, assigned in enumerate(self.workers):
            if not assigned:
                return i
        return None

    def effective_output(self) -> Dict[str, int]:
        """Per-turn output with building bonuses added."""
        totals = {
            "food": self.food_production,
            "production": self.production_output,
            "gold": self.gold_output,
            "knowledge": self.knowledge_output,
            "worship": self.worship_output,
        }
        for b in self.buildings:
            totals["food"] += b.food_bonus
            totals["production"] += b.production_bonus
            totals["gold"] += b.gold_bonus
            totals["knowledge"] += b.knowledge_bonus
            totals["worship"] += b.worship_bonus
        return totals


class Clan(BaseModel):
    """A faction owning villages and pooled resources."""

    id: int = Field(description="Clan index in definition order")
    name: str = Field(description="Clan name")
    color: Tuple[int, int, int, int] = Field(description="RGBA display color")
    gold: int = Field(default=0, ge=0)
    knowledge: int = Field(default=0, ge=0)
    worship: int = Field(default=0, ge=0)
    village_ids: List[int] = Field(default_factory=list, description="Owned village handles")
    village_tile: Tuple[float, float, float, float] = Field(
        description="Tileset rectangle for the village marker"
    )


class SettlementPlacer:
    """Places clans and their villages on a generated grid."""

    def __init__(
        self,
        grid: Grid,
        options: Optional[PlacementOptions] = None,
        rng: Optional[np.random.Generator] = None,
        definitions: Tuple[ClanDefinition, ...] = CLAN_DEFINITIONS,
    ):
        """
        Initialize the placer.

        Args:
            grid: Classified grid; occupancy and terrain are mutated in place
            options: Placement options
            rng: Random stream, normally the one used for terrain
            definitions: Clan roster, consumed in order and extended when
                faction_count is larger
        """
        self.grid = grid
        self.options = options or PlacementOptions()
        self.rng = make_rng(rng)

        self.definitions = clan_definitions(self.options.faction_count, definitions)

        self.clans: List[Clan] = []
        self.villages: Dict[int, Village] = {}
        self.next_village_id = 1

    def place(self) -> Tuple[List[Clan], Dict[int, Village]]:
        """
        Place every clan's villages.

        Returns:
            Tuple of (clans list, villages dict keyed by handle)
        """
        logger.info(
            "Placing villages",
            clans=len(self.definitions),
            per_clan=self.options.settlements_per_faction,
        )

        for clan_id, definition in enumerate(self.definitions):
            clan = Clan(
                id=clan_id,
                name=definition.name,
                color=definition.color,
                village_tile=definition.village_tile,
            )
            self.clans.append(clan)

            home = self.place_home(clan)
            self.place_satellites(clan, home)

        logger.info("Placed villages", count=len(self.villages))
        return self.clans, self.villages

    def _too_close(self, x: int, y: int, min_distance: float) -> bool:
        return any(
            manhattan((x, y), v.position) < min_distance for v in self.villages.values()
        )

    def _qualifies(self, x: int, y: int, min_distance: float) -> bool:
        if not self.grid.in_bounds(x, y):
            return False
        tile = self.grid.tile(x, y)
        return tile.is_land and not tile.has_village and not self._too_close(x, y, min_distance)

    def _search(self, clan: Clan, kind: str, base_distance: float, draw) -> Tuple[int, int]:
        """Run the bounded search, relaxing spacing between passes."""
        opts = self.options
        distance = base_distance

        for attempt_pass in range(opts.relaxations + 1):
            for _ in range(opts.max_attempts):
                x, y = draw()
                if self._qualifies(x, y, distance):
                    return x, y

            if attempt_pass < opts.relaxations:
                distance /= opts.relaxation_factor
                logger.warning(
                    "Retrying village placement with reduced spacing",
                    clan=clan.name,
                    kind=kind,
                    spacing=round(distance, 2),
                )

        raise PlacementExhaustedError(
            clan.name, kind, opts.max_attempts * (opts.relaxations + 1)
        )

    def place_home(self, clan: Clan) -> Village:
        """Place the clan's home village anywhere on the map."""
        grid = self.grid

        def draw() -> Tuple[int, int]:
            x = int(self.rng.integers(0, grid.width))
            y = int(self.rng.integers(0, grid.height))
            return x, y

        x, y = self._search(clan, "home", self.options.home_min_distance, draw)
        return self._found_village(clan, grid.tile(x, y), is_home=True)

    def place_satellites(self, clan: Clan, home: Village) -> List[Village]:
        """Place the remaining villages around the home village."""
        radius = self.options.satellite_radius

        def draw() -> Tuple[int, int]:
            angle = self.rng.random() * 2 * math.pi
            r = self.rng.random() * radius
            # int() truncates toward zero
            return home.x + int(r * math.cos(angle)), home.y + int(r * math.sin(angle))

        placed = []
        for _ in range(self.options.settlements_per_faction - 1):
            x, y = self._search(clan, "satellite", self.options.satellite_min_distance, draw)
            placed.append(self._found_village(clan, self.grid.tile(x, y)))
        return placed

    def _found_village(self, clan: Clan, tile: Tile, is_home: bool = False) -> Village:
        village_id = self.next_village_id
        village = Village(
            id=village_id,
            x=tile.x,
            y=tile.y,
            name=f"{clan.name} Village {village_id}",
            clan_id=clan.id,
            is_home=is_home,
        )

        # Villages need buildable ground
        tile.terrain = Terrain.GRASSLAND
        tile.village_id = village_id

        self.villages[village_id] = village
        clan.village_ids.append(village_id)
        self.next_village_id += 1

        logger.debug("Founded village", name=village.name, x=tile.x, y=tile.y, home=is_home)
        return village


def place_settlements(
    grid: Grid,
    faction_count: int = 4,
    settlements_per_faction: int = 3,
    rng: Optional[np.random.Generator] = None,
    **kwargs,
) -> Tuple[List[Clan], Dict[int, Village]]:
    """Convenience wrapper around SettlementPlacer; extra kwargs go to PlacementOptions."""
    options = PlacementOptions(
        faction_count=faction_count,
        settlements_per_faction=settlements_per_faction,
        **kwargs,
    )
    return SettlementPlacer(grid, options, rng).place()
