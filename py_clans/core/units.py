"""Unit data. Movement and combat are resolved elsewhere."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class SpecialAbility(Enum):
    """Special abilities a unit can carry."""

    BUILD_VILLAGE = "build_village"
    FLY = "fly"
    CAST_SPELL = "cast_spell"
    BUFF_STACK = "buff_stack"


class Unit(BaseModel):
    """A clan unit on the grid."""

    name: str = Field(description="Unit name")
    clan_id: int = Field(description="Owning clan")
    x: int = Field(description="Tile x")
    y: int = Field(description="Tile y")
    attack_strength: int = Field(default=1)
    defense_strength: int = Field(default=1)
    movement_points: int = Field(default=2, description="Tiles per turn")
    special_abilities: List[SpecialAbility] = Field(default_factory=list)

    def has_ability(self, ability: SpecialAbility) -> bool:
        return ability in self.special_abilities
