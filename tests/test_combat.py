"""Tests for dice combat and shipyard assaults."""

import pytest

from naval_engine import CombatResolver, ShipyardAssault
from naval_engine.config import CombatRules

from conftest import FixedDice


def test_same_seed_same_rolls():
    first = CombatResolver(seed=1234)
    second = CombatResolver(seed=1234)
    for _ in range(25):
        a = first.resolve("unit_0", "unit_1")
        b = second.resolve("unit_0", "unit_1")
        assert a == b


def test_reset_rewinds_the_seed():
    resolver = CombatResolver(seed=99)
    before = [resolver.resolve("unit_0", "unit_1") for _ in range(5)]
    resolver.reset()
    after = [resolver.resolve("unit_0", "unit_1") for _ in range(5)]
    assert before == after


@pytest.mark.parametrize("seed", [0, 1, 17, 2024])
def test_total_damage_is_always_four(seed):
    resolver = CombatResolver(seed)
    for _ in range(200):
        result = resolver.resolve("a", "b")
        assert result.total_damage == 4
        assert result.damage_to_attacker in (0, 2, 4)
        assert result.damage_to_defender in (0, 2, 4)


def test_rolls_are_sorted_highest_first():
    resolver = CombatResolver(seed=5)
    result = resolver.resolve("a", "b")
    assert len(result.attacker_rolls) == 3
    assert len(result.defender_rolls) == 2
    assert result.attacker_rolls == sorted(result.attacker_rolls, reverse=True)
    assert result.defender_rolls == sorted(result.defender_rolls, reverse=True)
    assert all(1 <= r <= 6 for r in result.attacker_rolls + result.defender_rolls)


class TestComparisons:

    def test_defender_wins_ties(self):
        resolver = CombatResolver(seed=0)
        resolver.rng = FixedDice([3, 1, 3, 3, 3])
        result = resolver.resolve("a", "b")

        assert result.attacker_rolls == [3, 3, 1]
        assert result.defender_rolls == [3, 3]
        assert (result.damage_to_attacker, result.damage_to_defender) == (4, 0)

    def test_split_result(self):
        resolver = CombatResolver(seed=0)
        resolver.rng = FixedDice([6, 2, 1, 5, 4])
        result = resolver.resolve("a", "b")

        # 6 beats 5, 2 loses to 4
        assert (result.damage_to_attacker, result.damage_to_defender) == (2, 2)

    def test_attacker_sweep(self):
        resolver = CombatResolver(seed=0)
        resolver.rng = FixedDice([6, 6, 1, 5, 5])
        result = resolver.resolve("a", "b")
        assert (result.damage_to_attacker, result.damage_to_defender) == (0, 4)

    def test_custom_damage_per_loss(self):
        resolver = CombatResolver(seed=0, rules=CombatRules(damage_per_loss=3))
        resolver.rng = FixedDice([6, 6, 1, 5, 5])
        assert resolver.resolve("a", "b").damage_to_defender == 6


class TestShipyardAssault:

    @pytest.mark.parametrize("roll, success", [(1, False), (4, False), (5, True), (6, True)])
    def test_capture_threshold(self, roll, success):
        resolver = CombatResolver(seed=0)
        resolver.rng = FixedDice([roll])
        result = ShipyardAssault(resolver).resolve("unit_0", "structure_0")
        assert result.dice_roll == roll
        assert result.success is success

    def test_shares_the_combat_stream(self):
        resolver = CombatResolver(seed=42)
        expected = CombatResolver(seed=42).roll_d6()
        assert ShipyardAssault(resolver).resolve("unit_0", "structure_0").dice_roll == expected
