"""Tests for the headless game runner."""

import json

import pytest

from naval_engine import (
    HexCoord, OrderType, PassingDecision, EntryDecision, MoveOrder, StructureType,
)
from game import NavalSimulation, SimpleOrderProducer, decide_encounters, main

from conftest import add_ship, add_shipyard, make_state, path


@pytest.fixture
def sim(tmp_path):
    return NavalSimulation(
        seed=3,
        players=2,
        rules_path=tmp_path / "missing.yaml",
        log_path=tmp_path / "logs" / "game.json",
    )


class TestOrderProducer:

    def test_builds_at_idle_shipyard(self, config):
        state = make_state()
        yard = add_shipyard(state, 0)
        add_ship(state, 0, 0, 0)
        add_ship(state, 1, 4, 0)

        orders = SimpleOrderProducer(state, config).orders_for(0)

        assert orders[0].order_type == OrderType.BUILD_SHIP
        assert orders[0].shipyard_id == yard.id

    def test_fortress_builds_galleons_when_affordable(self, config):
        state = make_state()
        fort = add_shipyard(state, 0, structure_type=StructureType.NAVAL_FORTRESS)
        add_ship(state, 0, 0, 0)
        add_ship(state, 1, 4, 0)

        orders = SimpleOrderProducer(state, config).orders_for(0)
        assert orders[0].order_type == OrderType.BUILD_GALLEON
        assert orders[0].shipyard_id == fort.id

        state.players.get_player(0).gold = config.costs.build_galleon - 1
        orders = SimpleOrderProducer(state, config).orders_for(0)
        assert orders[0].order_type == OrderType.BUILD_SHIP

    def test_closes_on_nearest_enemy(self, config):
        state = make_state()
        ship = add_ship(state, 0, 0, 0)
        add_ship(state, 1, 4, 0)

        orders = SimpleOrderProducer(state, config).orders_for(0)

        assert len(orders) == 1
        assert orders[0].unit_id == ship.id
        assert orders[0].path[0] == HexCoord(0, 0)
        assert orders[0].destination.distance(HexCoord(4, 0)) == 1

    def test_never_deploys_the_last_ship(self, config):
        state = make_state()
        add_ship(state, 0, -3, 0)
        add_ship(state, 1, 4, 0)

        orders = SimpleOrderProducer(state, config).orders_for(0)

        assert all(o.order_type != OrderType.DEPLOY_SHIPYARD for o in orders)


class TestDecideEncounters:

    def test_passing_stronger_ship_attacks(self, state, resolver):
        a = add_ship(state, 0, 0, 0, health=8)
        b = add_ship(state, 1, 1, 0)
        resolver.resolve_turn([
            MoveOrder(a.id, 0, path((0, 0), (1, 0))),
            MoveOrder(b.id, 1, path((1, 0), (0, 0))),
        ])

        decide_encounters(resolver)

        encounter = state.encounters.active_encounters()[0]
        assert encounter.passing_decisions == {a.id: PassingDecision.PROCEED, b.id: PassingDecision.ATTACK}

    def test_entry_lowest_id_claims(self, state, resolver):
        a = add_ship(state, 0, 0, 0)
        b = add_ship(state, 1, 2, 0)
        resolver.resolve_turn([
            MoveOrder(a.id, 0, path((0, 0), (1, 0))),
            MoveOrder(b.id, 1, path((2, 0), (1, 0))),
        ])

        decide_encounters(resolver)

        encounter = state.encounters.active_encounters()[0]
        assert encounter.entry_decisions == {a.id: EntryDecision.ATTACK, b.id: EntryDecision.YIELD}


class TestSimulation:

    def test_missing_rules_file_uses_defaults(self, sim):
        assert sim.config.costs.build_ship == 50
        assert len(sim.state.units.get_all_units()) == 2

    def test_run_turn_returns_event_records(self, sim):
        records = sim.run_turn()
        assert sim.state.turn_number == 1
        assert all("type" in r and "message" in r for r in records)

    def test_run_game_writes_log(self, sim):
        results = sim.run_game(max_turns=5)

        assert 1 <= results["turns_played"] <= 5
        assert set(results["surviving_ships"]) == {"Crimson", "Azure"}

        saved = json.loads(sim.log_path.read_text())
        assert saved["results"]["turns_played"] == results["turns_played"]
        assert len(saved["events"]) == results["events"]

    def test_drawn_game_stops_the_run(self, sim):
        sim.state.is_draw = True

        results = sim.run_game(max_turns=5)

        assert results["turns_played"] == 0
        assert results["draw"]
        assert results["winner"] is None

    def test_same_seed_same_game(self, tmp_path):
        logs = []
        for name in ("a", "b"):
            sim = NavalSimulation(seed=9, rules_path=tmp_path / "missing.yaml", log_path=tmp_path / f"{name}.json")
            sim.run_game(max_turns=6)
            logs.append(sim.game_log)
        assert logs[0] == logs[1]


def test_main(tmp_path, capsys):
    log = tmp_path / "out.json"
    results = main([
        "--seed", "4", "--turns", "3", "--rules", str(tmp_path / "missing.yaml"), "--log", str(log),
    ])

    assert results["seed"] == 4
    assert log.exists()
    assert "FINAL RESULTS" in capsys.readouterr().out
