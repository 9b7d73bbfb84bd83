"""Tests for the unit, structure and player stores."""

from naval_engine import (
    HexCoord, RulesConfig, UnitManager, StructureManager, StructureType,
    PlayerManager, PlayerType, NEUTRAL_OWNER,
)


class TestUnits:

    def test_ids_are_sequential_and_never_reused(self):
        units = UnitManager()
        first = units.create_unit(0, HexCoord(0, 0))
        second = units.create_unit(1, HexCoord(1, 0))
        units.remove_unit(first.id)
        third = units.create_unit(0, HexCoord(2, 0))

        assert (first.id, second.id, third.id) == ("unit_0", "unit_1", "unit_2")
        assert units.get_unit("unit_0") is None

    def test_queries(self):
        units = UnitManager()
        a = units.create_unit(0, HexCoord(0, 0))
        b = units.create_unit(1, HexCoord(0, 0))
        c = units.create_unit(0, HexCoord(3, 0))

        assert units.get_units_at_position(HexCoord(0, 0)) == [a, b]
        assert units.get_units_for_player(0) == [a, c]
        assert units.get_stats()["by_owner"] == {0: 2, 1: 1}

    def test_move_updates_position_and_facing(self):
        units = UnitManager()
        unit = units.create_unit(0, HexCoord(0, 0))

        assert units.move_unit(unit.id, HexCoord(0, -1))
        assert unit.position == HexCoord(0, -1)
        assert unit.facing_angle == 120.0

        units.move_unit(unit.id, HexCoord(-1, -1))
        assert unit.facing_angle == 180.0
        assert not units.move_unit("unit_99", HexCoord(0, 0))

    def test_tier_and_movement_capacity(self):
        config = RulesConfig()
        units = UnitManager()
        unit = units.create_unit(0, HexCoord(0, 0), max_health=10)

        assert unit.tier(config) == 1
        assert unit.movement_capacity(config) == 3

        unit.max_health = 20
        unit.sails = 1
        assert unit.tier(config) == 2
        assert unit.movement_capacity(config) == 5

        unit.max_health = 30
        unit.sails = 0
        assert unit.tier(config) == 3
        unit.reset_movement(config)
        assert unit.movement_remaining == 5

    def test_damage_is_clamped(self):
        unit = UnitManager().create_unit(0, HexCoord(0, 0))
        unit.take_damage(4)
        assert unit.health == 6
        unit.take_damage(50)
        assert unit.health == 0
        assert unit.is_dead()

    def test_dict_round_trip(self):
        units = UnitManager()
        unit = units.create_unit(1, HexCoord(2, -1), max_health=20)
        unit.queued_path = [HexCoord(2, -1), HexCoord(3, -1)]
        unit.cannons = 2

        restored = UnitManager.from_dict(units.to_dict())
        assert restored.to_dict() == units.to_dict()
        assert restored.create_unit(0, HexCoord(0, 0)).id == "unit_1"


class TestStructures:

    def test_create_and_lookup(self):
        structures = StructureManager()
        yard = structures.create_structure(0, HexCoord(1, 1), StructureType.SHIPYARD)

        assert yard.id == "structure_0"
        assert yard.is_shipyard
        assert structures.get_structure_at_position(HexCoord(1, 1)) is yard
        assert structures.get_structures_for_player(0) == [yard]

    def test_upgrade_chain(self):
        structures = StructureManager()
        yard = structures.create_structure(0, HexCoord(1, 1), StructureType.SHIPYARD)

        assert yard.next_type() == StructureType.NAVAL_YARD
        structures.upgrade_structure(yard.id, StructureType.NAVAL_YARD, max_health=20, tier=2)
        assert (yard.type, yard.health, yard.tier) == (StructureType.NAVAL_YARD, 20, 2)
        assert yard.next_type() == StructureType.NAVAL_FORTRESS

        structures.upgrade_structure(yard.id, StructureType.NAVAL_FORTRESS, max_health=30, tier=3)
        assert yard.next_type() is None

    def test_pirate_cove_is_neutral_and_not_a_shipyard(self):
        cove = StructureManager().create_structure(NEUTRAL_OWNER, HexCoord(0, 0), StructureType.PIRATE_COVE)
        assert cove.is_neutral
        assert not cove.is_shipyard
        assert cove.next_type() is None

    def test_change_owner_and_remove(self):
        structures = StructureManager()
        yard = structures.create_structure(0, HexCoord(1, 1), StructureType.SHIPYARD)
        assert structures.change_owner(yard.id, 1)
        assert yard.owner_id == 1
        assert structures.remove_structure(yard.id) is yard
        assert structures.get_structure(yard.id) is None


class TestPlayers:

    def test_ids_follow_join_order(self):
        players = PlayerManager()
        a = players.add_player("A")
        b = players.add_player("B", PlayerType.AI, gold=40)
        assert (a.id, b.id) == (0, 1)
        assert b.gold == 40
        assert players.get_ai_players() == [b]

    def test_elimination_happens_once(self):
        players = PlayerManager()
        players.add_player("A")
        players.add_player("B")

        assert players.eliminate_player(1) is True
        assert players.eliminate_player(1) is False
        assert [p.id for p in players.get_active_players()] == [0]

    def test_winner_only_when_one_remains(self):
        players = PlayerManager()
        for name in ("A", "B", "C"):
            players.add_player(name)

        assert players.get_winner() is None
        players.eliminate_player(0)
        assert players.get_winner() is None
        players.eliminate_player(2)
        assert players.get_winner().name == "B"

    def test_ready_flags(self):
        players = PlayerManager()
        a = players.add_player("A")
        b = players.add_player("B")
        a.is_ready = True
        assert not players.all_players_ready()
        b.is_ready = True
        assert players.all_players_ready()
        players.reset_ready()
        assert not a.is_ready
