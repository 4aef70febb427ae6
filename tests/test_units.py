"""Tests for unit data."""

from py_clans.core.units import SpecialAbility, Unit


class TestUnit:
    def test_defaults(self):
        unit = Unit(name="Settler", clan_id=1, x=4, y=5)
        assert unit.attack_strength == 1
        assert unit.defense_strength == 1
        assert unit.movement_points == 2
        assert unit.special_abilities == []

    def test_abilities(self):
        unit = Unit(name="Settler", clan_id=0, x=0, y=0,
                    special_abilities=[SpecialAbility.BUILD_VILLAGE])
        assert unit.has_ability(SpecialAbility.BUILD_VILLAGE)
        assert not unit.has_ability(SpecialAbility.FLY)
