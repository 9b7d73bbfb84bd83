"""
Headless game runner for the naval engine.

Generates a map, gives every player a ship, and plays turns with a simple
built-in order producer until the game ends or the turn limit is hit.
"""

import os
import json
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from naval_engine import (
    RulesConfig, GameState, TurnResolver, TileType, StructureType, find_path,
    Order, MoveOrder, DeployShipyardOrder, BuildShipOrder, BuildGalleonOrder, AttackShipyardOrder,
    EncounterType, PassingDecision, EntryDecision, event_to_dict,
)

load_dotenv(Path(__file__).parent / ".env")

logger = logging.getLogger(__name__)

PLAYER_NAMES = ["Crimson", "Azure", "Emerald", "Amber", "Violet", "Ivory"]


class SimpleOrderProducer:
    """Plumbing-level orders: found a yard, build ships or galleons, close on the nearest enemy."""

    def __init__(self, state: GameState, config: RulesConfig):
        self.state = state
        self.config = config

    def orders_for(self, player_id: int) -> list[Order]:
        orders: list[Order] = []
        player = self.state.players.get_player(player_id)
        gold = player.gold
        yards = [s for s in self.state.structures.get_structures_for_player(player_id) if s.is_shipyard]

        costs = self.config.costs
        for yard in yards:
            if self.state.construction.get_queue_length(yard.id):
                continue
            if yard.type == StructureType.NAVAL_FORTRESS and gold >= costs.build_galleon:
                orders.append(BuildGalleonOrder(yard.id, player_id))
                gold -= costs.build_galleon
            elif gold >= costs.build_ship:
                orders.append(BuildShipOrder(yard.id, player_id))
                gold -= costs.build_ship

        has_yard = bool(yards)
        ships = self.state.units.get_units_for_player(player_id)
        for unit in ships:
            # Deploying consumes the ship, so never spend the last one
            if not has_yard and len(ships) > 1 and gold >= costs.deploy_shipyard:
                order = self._found_shipyard(unit, player_id)
                if order:
                    orders.append(order)
                    if isinstance(order, DeployShipyardOrder):
                        gold -= costs.deploy_shipyard
                        has_yard = True
                    continue

            order = self._attack_nearby_shipyard(unit, player_id) or self._close_on_enemy(unit, player_id)
            if order:
                orders.append(order)
        return orders

    def _found_shipyard(self, unit, player_id: int) -> Optional[Order]:
        tile = self.state.grid.get_tile(unit.position)
        if tile.type == TileType.HARBOR and not self.state.structures.get_structure_at_position(unit.position):
            return DeployShipyardOrder(unit.id, player_id, unit.position)

        for neighbor in unit.position.neighbors():
            tile = self.state.grid.get_tile(neighbor)
            if tile and tile.type == TileType.HARBOR and not self.state.structures.get_structure_at_position(neighbor):
                return MoveOrder(unit.id, player_id, (unit.position, neighbor))
        return None

    def _attack_nearby_shipyard(self, unit, player_id: int) -> Optional[Order]:
        for structure in self.state.structures.get_all_structures():
            if structure.owner_id == player_id or not structure.is_shipyard:
                continue
            if unit.position.distance(structure.position) == 1:
                return AttackShipyardOrder(unit.id, player_id, structure.id, structure.position)
        return None

    def _close_on_enemy(self, unit, player_id: int) -> Optional[Order]:
        enemies = [u for u in self.state.units.get_all_units() if u.owner_id != player_id]
        if not enemies:
            return None

        target = min(enemies, key=lambda e: (unit.position.distance(e.position), e.id))
        if unit.position.distance(target.position) <= 1:
            return None

        path = find_path(self.state.grid, unit.position, target.position)
        if not path or len(path) < 3:
            return None
        # Stop one hex short so the combat phase picks the pair up
        return MoveOrder(unit.id, player_id, tuple(path[:-1]))


def decide_encounters(resolver: TurnResolver):
    """Answer every open decision: ships at least as healthy as the enemy attack."""
    units = resolver.state.units
    for encounter in resolver.state.encounters.active_encounters():
        if encounter.type == EncounterType.PASSING:
            a_id, b_id = encounter.involved_unit_ids
            for unit_id, other_id in ((a_id, b_id), (b_id, a_id)):
                if encounter.passing_decisions[unit_id] != PassingDecision.NONE:
                    continue
                unit, other = units.get_unit(unit_id), units.get_unit(other_id)
                stronger = unit and other and unit.health >= other.health
                decision = PassingDecision.ATTACK if stronger else PassingDecision.PROCEED
                resolver.submit_encounter_decision(encounter.id, unit_id, decision)
        else:
            # Lowest id holds its claim so the encounter cannot stay contested
            claimant = encounter.involved_unit_ids[0]
            for unit_id in encounter.involved_unit_ids:
                if encounter.entry_decisions[unit_id] != EntryDecision.NONE:
                    continue
                decision = EntryDecision.ATTACK if unit_id == claimant else EntryDecision.YIELD
                resolver.submit_encounter_decision(encounter.id, unit_id, decision)


class NavalSimulation:
    """Main simulation orchestrator."""

    def __init__(
        self,
        seed: int = 0,
        players: int = 2,
        rules_path: Path | str = "data/rules.yaml",
        log_path: Optional[Path | str] = None,
    ):
        self.seed = seed
        self.config = RulesConfig.load(rules_path)
        self.log_path = Path(log_path) if log_path else Path("logs") / f"naval_game_{seed}.json"

        logger.info("Generating map...")
        self.state = GameState.new_game(PLAYER_NAMES[:players], seed, self.config)
        self.resolver = TurnResolver(self.state, self.config, combat_seed=seed)
        self.producer = SimpleOrderProducer(self.state, self.config)

        self.game_log: list[dict] = []
        self.start_time: Optional[datetime] = None

    def run_turn(self) -> list[dict]:
        """Run a single turn of the simulation."""
        turn = self.state.turn_number + 1
        logger.info(f"{'=' * 20} TURN {turn} {'=' * 20}")

        decide_encounters(self.resolver)
        orders = []
        for player in self.state.players.get_active_players():
            orders.extend(self.producer.orders_for(player.id))

        events = self.resolver.resolve_turn(orders, turn)
        records = [event_to_dict(e) for e in events]
        self.game_log.extend(records)

        for record in records:
            logger.info(f"  {record['type']}: {record['message']}")
        return records

    def run_game(self, max_turns: int = 50) -> dict:
        """Run the full game."""
        self.start_time = datetime.now()

        while self.state.turn_number < max_turns and not self.state.is_game_over:
            self.run_turn()

        results = self._compile_results()
        self._save_game_log(results)
        return results

    def _compile_results(self) -> dict:
        """Compile final game results."""
        winner = None
        if self.state.winner_id is not None:
            winner = self.state.players.get_player(self.state.winner_id)
        return {
            "seed": self.seed,
            "turns_played": self.state.turn_number,
            "winner": winner.name if winner else None,
            "draw": self.state.is_draw,
            "surviving_ships": {
                p.name: len(self.state.units.get_units_for_player(p.id)) for p in self.state.players.players
            },
            "gold": {p.name: p.gold for p in self.state.players.players},
            "events": len(self.game_log),
            "duration": str(datetime.now() - self.start_time) if self.start_time else None,
        }

    def _save_game_log(self, results: dict):
        """Save event log and results to file."""
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.log_path, "w") as f:
            json.dump({"results": results, "events": self.game_log}, f, indent=2, default=str)
        logger.info(f"Game log saved to: {self.log_path}")


def main(argv: Optional[list[str]] = None):
    """Run a headless naval game."""
    import argparse

    parser = argparse.ArgumentParser(description="Headless naval wargame simulation")
    parser.add_argument("--seed", type=int, default=int(os.environ.get("NAVAL_SEED", "0")), help="Map and dice seed")
    parser.add_argument("--players", type=int, default=2, choices=range(2, len(PLAYER_NAMES) + 1), help="Number of players")
    parser.add_argument("--turns", type=int, default=50, help="Max turns")
    parser.add_argument("--rules", default=os.environ.get("NAVAL_RULES", "data/rules.yaml"), help="Rules YAML path")
    parser.add_argument("--log", default=None, help="Event log output path")

    args = parser.parse_args(argv)

    logging.basicConfig(level=os.environ.get("NAVAL_LOG_LEVEL", "INFO").upper())

    sim = NavalSimulation(
        seed=args.seed,
        players=args.players,
        rules_path=args.rules,
        log_path=args.log,
    )
    results = sim.run_game(max_turns=args.turns)

    print("\n" + "=" * 60)
    print("FINAL RESULTS")
    print("=" * 60)
    print(f"Seed: {results['seed']}")
    print(f"Turns played: {results['turns_played']}")
    if results["draw"]:
        print("Winner: none, every fleet sank")
    else:
        print(f"Winner: {results['winner']}")
    for name, ships in results["surviving_ships"].items():
        print(f"  {name}: {ships} ships, {results['gold'][name]} gold")
    print(f"Events logged: {results['events']}")
    return results


if __name__ == "__main__":
    main()
