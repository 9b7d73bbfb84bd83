"""
Turn resolution for the naval engine.

Orchestrates phases: income → construction → economy → movement → combat → elimination
Every phase reads the state the previous one left behind. All iteration runs
over sorted ids, so the same (state, orders, combat seed) always yields the
same event log.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from pathlib import Path
from typing import Optional, Callable

from .combat import CombatResolver, ShipyardAssault
from .config import RulesConfig
from .construction import ConstructionManager, ConstructionState
from .encounters import (
    Encounter, EncounterTracker, EncounterType, EntryDecision,
)
from .errors import SnapshotError
from .events import (
    GameEvent, UnitMovedEvent, UnitsCollidedEvent, UnitDestroyedEvent,
    ShipRepairedEvent, ShipUpgradedEvent, StructureUpgradedEvent,
    CombatOccurredEvent, ConflictDetectedEvent, CollisionNeedsResolutionEvent,
    CollisionResolvedEvent, ShipyardAttackedEvent, ShipyardDestroyedEvent,
    PlayerEliminatedEvent, GameWonEvent, GameDrawnEvent, GoldEarnedEvent, event_to_dict,
)
from .hexgrid import HexCoord, HexGrid, is_continuous_path
from .mapgen import MapGenerator, find_spawn_positions
from .orders import Order, OrderType, AttackShipyardOrder, sort_orders
from .players import PlayerManager, PlayerType
from .structures import StructureManager, StructureType
from .units import Unit, UnitManager
from .validation import OrderValidator

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Resolution phases in order of execution."""
    INCOME = "income"
    CONSTRUCTION = "construction"  # build queues advance
    ECONOMY = "economy"  # deploy, build, repair, upgrade, cancel, shipyard attacks
    MOVEMENT = "movement"  # pending encounters, then move orders
    COMBAT = "combat"
    ELIMINATION = "elimination"


@dataclass
class GameState:
    """Complete game state: map, entity stores and pending encounters."""
    grid: HexGrid
    players: PlayerManager
    units: UnitManager = field(default_factory=UnitManager)
    structures: StructureManager = field(default_factory=StructureManager)
    construction: ConstructionState = field(default_factory=ConstructionState)
    encounters: EncounterTracker = field(default_factory=EncounterTracker)
    turn_number: int = 0
    map_seed: int = 0
    winner_id: Optional[int] = None
    is_draw: bool = False  # every remaining fleet sank on the same turn
    event_history: list[GameEvent] = field(default_factory=list)

    @property
    def is_game_over(self) -> bool:
        return self.winner_id is not None or self.is_draw

    @classmethod
    def new_game(
        cls,
        player_names: list[str],
        seed: int,
        config: Optional[RulesConfig] = None,
        player_type: PlayerType = PlayerType.AI,
    ) -> "GameState":
        """Generate a map from the seed and give every player one ship."""
        config = config or RulesConfig()
        grid = MapGenerator(seed).generate(**asdict(config.map))

        players = PlayerManager()
        for name in player_names:
            players.add_player(name, player_type, gold=config.starting_gold)

        state = cls(
            grid=grid,
            players=players,
            construction=ConstructionState(config.construction.max_queue_size),
            map_seed=seed,
        )

        spawns = find_spawn_positions(grid, len(player_names))
        for player, spawn in zip(players.players, spawns):
            unit = state.units.create_unit(
                player.id, spawn, max_health=config.ship.base_max_health,
            )
            unit.reset_movement(config)

        logger.info(f"New game: {len(player_names)} players, map seed {seed}")
        return state

    def to_dict(self) -> dict:
        """Snapshot of everything needed to resume. The event log is exported but not restored."""
        return {
            "turn_number": self.turn_number,
            "map_seed": self.map_seed,
            "winner_id": self.winner_id,
            "is_draw": self.is_draw,
            "grid": self.grid.to_dict(),
            "players": self.players.to_dict(),
            "units": self.units.to_dict(),
            "structures": self.structures.to_dict(),
            "construction": self.construction.to_dict(),
            "encounters": self.encounters.to_dict(),
            "events": [event_to_dict(e) for e in self.event_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameState":
        try:
            return cls(
                grid=HexGrid.from_dict(data["grid"]),
                players=PlayerManager.from_dict(data["players"]),
                units=UnitManager.from_dict(data["units"]),
                structures=StructureManager.from_dict(data["structures"]),
                construction=ConstructionState.from_dict(data.get("construction", {})),
                encounters=EncounterTracker.from_dict(data.get("encounters", {})),
                turn_number=data.get("turn_number", 0),
                map_seed=data.get("map_seed", 0),
                winner_id=data.get("winner_id"),
                is_draw=data.get("is_draw", False),
            )
        except (KeyError, TypeError, ValueError, IndexError) as e:
            raise SnapshotError("Malformed game snapshot", context={"error": repr(e)})

    def save(self, filepath: Path | str):
        """Save game state to file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: Path | str) -> "GameState":
        """Load game state from file."""
        with open(filepath) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise SnapshotError(f"Cannot parse snapshot {filepath}", context={"error": str(e)})
        if not isinstance(data, dict):
            raise SnapshotError(f"Snapshot {filepath} must contain an object")
        return cls.from_dict(data)


class TurnResolver:
    """Resolves one batch of orders into state changes and an event log."""

    PHASES = [
        Phase.INCOME,
        Phase.CONSTRUCTION,
        Phase.ECONOMY,
        Phase.MOVEMENT,
        Phase.COMBAT,
        Phase.ELIMINATION,
    ]

    def __init__(self, state: GameState, config: Optional[RulesConfig] = None, combat_seed: int = 0):
        self.state = state
        self.config = config or RulesConfig()
        state.construction.max_queue_size = self.config.construction.max_queue_size

        self.combat = CombatResolver(combat_seed, self.config.combat)
        self.assault = ShipyardAssault(self.combat)
        self.construction = ConstructionManager(
            state.grid, state.units, state.structures, state.players,
            state.construction, self.config,
        )
        self.validator = OrderValidator(
            state.grid, state.units, state.structures, state.players,
            self.construction.validator, self.config,
        )

        # Units that already used their move this turn
        self._moved: set[str] = set()
        # Pairs whose encounter settled this turn; no second fight in the combat phase
        self._settled_pairs: set[frozenset] = set()

        # Callbacks for presentation / logging hooks
        self.on_phase_start: Optional[Callable] = None
        self.on_phase_end: Optional[Callable] = None

    @property
    def units(self) -> UnitManager:
        return self.state.units

    @property
    def encounters(self) -> EncounterTracker:
        return self.state.encounters

    def resolve_turn(self, orders: list[Order], turn_number: Optional[int] = None) -> list[GameEvent]:
        """Resolve every phase for one turn and return the ordered event log."""
        if self.state.is_game_over:
            logger.warning(f"Game is over (winner: {self.state.winner_id}), ignoring orders")
            return []

        turn = turn_number if turn_number is not None else self.state.turn_number + 1
        self.state.turn_number = turn
        self._moved = set()
        self._settled_pairs = set()

        for unit in self.units.get_all_units():
            unit.reset_movement(self.config)

        ordered = sort_orders(orders)
        events: list[GameEvent] = []
        for phase in self.PHASES:
            events.extend(self.execute_phase(phase, ordered, turn))

        self.encounters.discard_resolved()
        self.state.event_history.extend(events)
        logger.info(f"Turn {turn} resolved: {len(orders)} orders, {len(events)} events")
        return events

    def execute_phase(self, phase: Phase, orders: list[Order], turn: int) -> list[GameEvent]:
        """Execute a single phase."""
        if self.on_phase_start:
            self.on_phase_start(phase)

        events = []
        if phase == Phase.INCOME:
            events = self._execute_income_phase(turn)
        elif phase == Phase.CONSTRUCTION:
            events = self.construction.process_turn(turn)
        elif phase == Phase.ECONOMY:
            events = self._execute_economy_phase(orders, turn)
        elif phase == Phase.MOVEMENT:
            events = self._execute_movement_phase(orders, turn)
        elif phase == Phase.COMBAT:
            events = self._execute_combat_phase(turn)
        elif phase == Phase.ELIMINATION:
            events = self._execute_elimination_phase(turn)

        logger.debug(f"Turn {turn} {phase.value}: {len(events)} events")
        if self.on_phase_end:
            self.on_phase_end(phase, events)
        return events

    # Encounter decision intake
    def submit_encounter_decision(self, encounter_id: str, unit_id: str, decision):
        self.encounters.submit_decision(encounter_id, unit_id, decision)

    def resolve_encounters(self, turn: Optional[int] = None) -> list[GameEvent]:
        """Resolve every encounter whose decisions are all in.

        Runs automatically at the start of each movement phase. Contested
        ENTRY encounters stay open and are offered again.
        """
        turn = turn if turn is not None else self.state.turn_number
        events = self._settle_lost_participants(turn)

        for encounter in self.encounters.ready_encounters():
            if encounter.is_resolved:
                continue
            if encounter.type == EncounterType.PASSING:
                events.extend(self._resolve_passing(encounter, turn))
            else:
                events.extend(self._resolve_entry(encounter, turn))
        return events

    def _settle_lost_participants(self, turn: int) -> list[GameEvent]:
        """Destroyed or deployed ships yield. A PASSING encounter missing a ship just ends."""
        events = []
        for encounter in self.encounters.active_encounters():
            missing = [u for u in encounter.involved_unit_ids if self.units.get_unit(u) is None]
            if not missing:
                continue
            if encounter.type == EncounterType.PASSING:
                encounter.mark_as_resolved()
                events.append(CollisionResolvedEvent(
                    turn_number=turn,
                    encounter_id=encounter.id,
                    unit_ids=list(encounter.involved_unit_ids),
                    position=encounter.location,
                    resolution="Encounter ended: a ship was lost",
                ))
            else:
                for unit_id in missing:
                    encounter.record_entry_decision(unit_id, EntryDecision.YIELD)
        return events

    def _resolve_passing(self, encounter: Encounter, turn: int) -> list[GameEvent]:
        events = []
        a_id, b_id = encounter.involved_unit_ids
        a, b = self.units.get_unit(a_id), self.units.get_unit(b_id)
        attackers = encounter.attacking_unit_ids()

        if (a.position != encounter.previous_positions[a_id]
                or b.position != encounter.previous_positions[b_id]):
            resolution = "Encounter ended: ships are no longer facing each other"
        elif not attackers:
            pos_a, pos_b = a.position, b.position
            events.append(self._step_unit(a, [pos_a, pos_b], turn))
            events.append(self._step_unit(b, [pos_b, pos_a], turn))
            resolution = f"{a_id} and {b_id} passed each other"
        else:
            attacker = self.units.get_unit(attackers[0])
            defender = b if attacker is a else a
            events.extend(self._fight(attacker, defender, attacker.position, turn))
            self._remove_dead([a, b])
            resolution = f"{attacker.id} attacked {defender.id} instead of passing"

        self._settled_pairs.add(frozenset((a_id, b_id)))
        encounter.mark_as_resolved()
        events.append(CollisionResolvedEvent(
            turn_number=turn,
            encounter_id=encounter.id,
            unit_ids=list(encounter.involved_unit_ids),
            position=encounter.location,
            resolution=resolution,
        ))
        return events

    def _resolve_entry(self, encounter: Encounter, turn: int) -> list[GameEvent]:
        events = []
        tile = encounter.tile
        attackers = [u for u in encounter.attacking_unit_ids() if self.units.get_unit(u)]

        if len(attackers) >= 2:
            encounter.mark_as_contested()
            events.append(ConflictDetectedEvent(
                turn_number=turn,
                unit_ids=attackers,
                position=tile,
                reason="Contested: more than one ship holds its claim",
            ))
            logger.info(f"{encounter.id} contested at {tile} by {', '.join(attackers)}")
            return events

        if len(attackers) == 1:
            winner = self.units.get_unit(attackers[0])
            path = self._claim_path(encounter, winner)
            if self._hostile_at(tile, winner.owner_id):
                resolution = f"{winner.id} could not take {tile}: a hostile ship holds it"
            elif path is None:
                resolution = f"{winner.id} can no longer reach {tile}"
            else:
                events.append(self._step_unit(winner, path, turn))
                resolution = f"{winner.id} took {tile}"
        else:
            resolution = f"All ships yielded {tile}"

        for unit_id in encounter.involved_unit_ids:
            for other_id in encounter.involved_unit_ids:
                if unit_id < other_id:
                    self._settled_pairs.add(frozenset((unit_id, other_id)))

        encounter.mark_as_resolved()
        events.append(CollisionResolvedEvent(
            turn_number=turn,
            encounter_id=encounter.id,
            unit_ids=list(encounter.involved_unit_ids),
            position=tile,
            resolution=resolution,
        ))
        return events

    def _claim_path(self, encounter: Encounter, unit: Unit) -> Optional[list[HexCoord]]:
        path = encounter.unit_paths.get(unit.id)
        if (path and path[0] == unit.position and path[-1] == encounter.tile
                and is_continuous_path(path)):
            return path
        if unit.position.distance(encounter.tile) == 1:
            return [unit.position, encounter.tile]
        return None

    def _step_unit(self, unit: Unit, path: list[HexCoord], turn: int,
                   remaining_path: Optional[list[HexCoord]] = None) -> UnitMovedEvent:
        """Walk a unit along path one hex at a time and report the move."""
        start = unit.position
        for coord in path[1:]:
            self.units.move_unit(unit.id, coord)

        used = len(path) - 1
        unit.movement_remaining = max(0, unit.movement_remaining - used)
        unit.queued_path = list(remaining_path) if remaining_path and len(remaining_path) > 1 else []
        self._moved.add(unit.id)

        return UnitMovedEvent(
            turn_number=turn,
            unit_id=unit.id,
            from_position=start,
            to_position=unit.position,
            path=list(path),
            movement_used=used,
            movement_remaining=unit.movement_remaining,
            remaining_path=list(unit.queued_path),
        )

    def _hostile_at(self, coord: HexCoord, owner_id: int, ignore: Optional[set] = None) -> list[Unit]:
        ignore = ignore or set()
        return [u for u in self.units.get_units_at_position(coord)
                if u.owner_id != owner_id and u.id not in ignore]

    # Income
    def _execute_income_phase(self, turn: int) -> list[GameEvent]:
        """Pay every active player before anything is bought this turn."""
        events = []
        rates = self.config.income
        for player in self.state.players.get_active_players():
            shipyards = [s for s in self.state.structures.get_structures_for_player(player.id)
                         if s.type == StructureType.SHIPYARD]
            ships = self.units.get_units_for_player(player.id)

            shipyard_bonus = rates.per_shipyard * len(shipyards)
            ship_bonus = rates.per_ship * len(ships)
            amount = rates.base + shipyard_bonus + ship_bonus
            if amount <= 0:
                continue

            player.gold += amount
            events.append(GoldEarnedEvent(
                turn_number=turn,
                player_id=player.id,
                amount=amount,
                base_income=rates.base,
                shipyard_bonus=shipyard_bonus,
                ship_bonus=ship_bonus,
                total_gold=player.gold,
            ))
            logger.debug(f"Player {player.id} earned {amount}g, now {player.gold}g")
        return events

    # Economy
    def _execute_economy_phase(self, orders: list[Order], turn: int) -> list[GameEvent]:
        events = []
        for order in orders:
            if order.order_type == OrderType.MOVE:
                continue
            result = self.validator.validate(order)
            if not result:
                logger.info(f"Skipping {order.order_type.value} order for {order.unit_id}: {result.reason}")
                continue
            events.extend(self._apply_economic_order(order, turn))
        return events

    def _apply_economic_order(self, order: Order, turn: int) -> list[GameEvent]:
        order_type = order.order_type
        player = self.state.players.get_player(order.player_id)
        costs = self.config.costs

        if order_type == OrderType.DEPLOY_SHIPYARD:
            result = self.construction.deploy_shipyard(order.player_id, order.unit_id, turn)
            return self._construction_events(order, result)

        elif order_type == OrderType.BUILD_SHIP:
            result = self.construction.queue_ship(order.player_id, order.shipyard_id, turn)
            return self._construction_events(order, result)

        elif order_type == OrderType.BUILD_GALLEON:
            result = self.construction.queue_galleon(order.player_id, order.shipyard_id, turn)
            return self._construction_events(order, result)

        elif order_type == OrderType.CANCEL_CONSTRUCTION:
            result = self.construction.cancel_job(order.player_id, order.job_id, turn)
            return self._construction_events(order, result)

        elif order_type == OrderType.REPAIR_SHIP:
            unit = self.units.get_unit(order.unit_id)
            old_health = unit.health
            unit.health = unit.max_health
            player.gold -= costs.repair_ship
            return [ShipRepairedEvent(
                turn_number=turn,
                ship_id=unit.id,
                shipyard_id=order.shipyard_id,
                player_id=order.player_id,
                old_health=old_health,
                new_health=unit.health,
                cost=costs.repair_ship,
            )]

        elif order_type in (OrderType.UPGRADE_SHIP, OrderType.UPGRADE_MAX_LIFE):
            unit = self.units.get_unit(order.unit_id)
            cost = costs.upgrade_ship if order_type == OrderType.UPGRADE_SHIP else costs.upgrade_max_life
            old_value = unit.max_health
            unit.max_health = min(self.config.ship.max_health_cap,
                                  unit.max_health + self.config.ship.max_health_step)
            unit.health = unit.max_health
            unit.reset_movement(self.config)
            player.gold -= cost
            upgrade = "hull" if order_type == OrderType.UPGRADE_SHIP else "max_life"
            return [self._upgrade_event(order, turn, upgrade, old_value, unit.max_health, cost)]

        elif order_type == OrderType.UPGRADE_SAILS:
            unit = self.units.get_unit(order.unit_id)
            unit.sails += 1
            unit.reset_movement(self.config)
            player.gold -= costs.upgrade_sails
            return [self._upgrade_event(order, turn, "sails", unit.sails - 1, unit.sails, costs.upgrade_sails)]

        elif order_type == OrderType.UPGRADE_CANNONS:
            unit = self.units.get_unit(order.unit_id)
            unit.cannons += 1
            player.gold -= costs.upgrade_cannons
            return [self._upgrade_event(order, turn, "cannons", unit.cannons - 1, unit.cannons, costs.upgrade_cannons)]

        elif order_type == OrderType.UPGRADE_STRUCTURE:
            structure = self.state.structures.get_structure(order.structure_id)
            old_type = structure.type
            new_type = structure.next_type()
            self.state.structures.upgrade_structure(
                structure.id, new_type,
                self.config.structure_max_health(new_type),
                self.config.structure_tier(new_type),
            )
            player.gold -= costs.upgrade_structure
            return [StructureUpgradedEvent(
                turn_number=turn,
                structure_id=structure.id,
                player_id=order.player_id,
                old_type=old_type.value,
                new_type=new_type.value,
                cost=costs.upgrade_structure,
            )]

        elif order_type == OrderType.ATTACK_SHIPYARD:
            return self._attack_shipyard(order, turn)

        raise ValueError(f"Unhandled order type: {order_type}")

    def _construction_events(self, order: Order, result) -> list[GameEvent]:
        if not result.success:
            logger.info(f"Skipping {order.order_type.value} order for {order.unit_id}: {result.reason}")
        return result.events

    def _upgrade_event(self, order, turn: int, upgrade: str, old_value: int, new_value: int,
                       cost: int) -> ShipUpgradedEvent:
        return ShipUpgradedEvent(
            turn_number=turn,
            ship_id=order.unit_id,
            shipyard_id=order.shipyard_id,
            player_id=order.player_id,
            upgrade=upgrade,
            old_value=old_value,
            new_value=new_value,
            cost=cost,
        )

    def _attack_shipyard(self, order: AttackShipyardOrder, turn: int) -> list[GameEvent]:
        """Sail up to the target, roll once, and sail into the harbor on a hit."""
        events = []
        unit = self.units.get_unit(order.unit_id)
        target = self.state.structures.get_structure(order.target_shipyard_id)

        if self.encounters.encounter_for_unit(unit.id):
            logger.info(f"Skipping attack_shipyard order for {unit.id}: unit is in an open encounter")
            return events

        path = list(order.path) or [unit.position]
        steps = min(unit.movement_remaining, len(path) - 1)
        approach = path[:steps + 1]

        if len(approach) > 1:
            if self._hostile_at(approach[-1], unit.owner_id):
                logger.info(f"Skipping attack_shipyard order for {unit.id}: approach tile {approach[-1]} is held")
                return events
            events.append(self._step_unit(unit, approach, turn, remaining_path=path[steps:]))
        self._moved.add(unit.id)

        if unit.position.distance(target.position) != 1:
            logger.debug(f"{unit.id} is still {unit.position.distance(target.position)} hexes from {target.id}")
            return events

        assault = self.assault.resolve(unit.id, target.id)
        events.append(ShipyardAttackedEvent(
            turn_number=turn,
            attacker_unit_id=unit.id,
            shipyard_id=target.id,
            attacking_player_id=unit.owner_id,
            defending_player_id=target.owner_id,
            position=target.position,
            dice_roll=assault.dice_roll,
            success=assault.success,
        ))
        if not assault.success:
            return events

        self.state.structures.remove_structure(target.id)
        events.append(ShipyardDestroyedEvent(
            turn_number=turn,
            shipyard_id=target.id,
            owner_id=target.owner_id,
            position=target.position,
            attacker_unit_id=unit.id,
        ))
        events.extend(self.construction.on_shipyard_destroyed(target.id, turn))
        logger.info(f"{unit.id} destroyed {target.id} at {target.position}")

        if not self._hostile_at(target.position, unit.owner_id):
            events.append(self._step_unit(unit, [unit.position, target.position], turn))
        return events

    # Movement
    def _execute_movement_phase(self, orders: list[Order], turn: int) -> list[GameEvent]:
        events = self.resolve_encounters(turn)

        for encounter in self.encounters.active_encounters():
            if encounter.is_contested:
                events.append(self._needs_resolution_event(encounter, turn))

        intents, remaining = self._collect_move_intents(orders)
        events.extend(self._void_shared_destinations(intents, turn))
        events.extend(self._void_open_entry_tiles(intents, turn))
        events.extend(self._open_passing_encounters(intents, turn))
        events.extend(self._void_blocked_destinations(intents, turn))

        for unit_id in sorted(intents):
            unit = self.units.get_unit(unit_id)
            events.append(self._step_unit(unit, intents[unit_id], turn, remaining_path=remaining[unit_id]))
        return events

    def _collect_move_intents(self, orders: list[Order]) -> tuple[dict[str, list[HexCoord]], dict[str, list[HexCoord]]]:
        """Validated, capacity-truncated paths keyed by unit id, plus the untravelled rest."""
        intents: dict[str, list[HexCoord]] = {}
        remaining: dict[str, list[HexCoord]] = {}

        for order in orders:
            if order.order_type != OrderType.MOVE:
                continue
            if order.unit_id in self._moved or order.unit_id in intents:
                logger.info(f"Skipping move order for {order.unit_id}: unit already moved this turn")
                continue
            if self.encounters.encounter_for_unit(order.unit_id):
                logger.info(f"Skipping move order for {order.unit_id}: unit is in an open encounter")
                continue
            result = self.validator.validate(order)
            if not result:
                logger.info(f"Skipping move order for {order.unit_id}: {result.reason}")
                continue

            unit = self.units.get_unit(order.unit_id)
            steps = min(unit.movement_remaining, len(order.path) - 1)
            if steps <= 0:
                continue
            intents[unit.id] = list(order.path[:steps + 1])
            remaining[unit.id] = list(order.path[steps:])
        return intents, remaining

    def _void_shared_destinations(self, intents: dict, turn: int) -> list[GameEvent]:
        events = []
        by_destination: dict[HexCoord, list[str]] = {}
        for unit_id in sorted(intents):
            by_destination.setdefault(intents[unit_id][-1], []).append(unit_id)

        for destination in sorted(by_destination):
            group = by_destination[destination]
            if len(group) < 2:
                continue

            paths = {unit_id: intents.pop(unit_id) for unit_id in group}
            events.append(UnitsCollidedEvent(turn_number=turn, unit_ids=list(group), position=destination))
            logger.info(f"{len(group)} units collided at {destination}: {', '.join(group)}")

            group_units = [self.units.get_unit(u) for u in group]
            occupied = any(u.id not in group for u in self.units.get_units_at_position(destination))
            hostile_pair = len({u.owner_id for u in group_units}) > 1
            if hostile_pair and not occupied and not self.encounters.entry_encounter_at(destination):
                positions = {u.id: u.position for u in group_units}
                encounter = self.encounters.open_entry(turn, destination, group, positions, paths)
                events.append(self._needs_resolution_event(encounter, turn))
        return events

    def _void_open_entry_tiles(self, intents: dict, turn: int) -> list[GameEvent]:
        events = []
        for unit_id in sorted(intents):
            destination = intents[unit_id][-1]
            if self.encounters.entry_encounter_at(destination):
                del intents[unit_id]
                events.append(ConflictDetectedEvent(
                    turn_number=turn,
                    unit_ids=[unit_id],
                    position=destination,
                    reason="Tile is claimed by an open encounter",
                ))
        return events

    def _open_passing_encounters(self, intents: dict, turn: int) -> list[GameEvent]:
        events = []
        for unit_id in sorted(intents):
            if unit_id not in intents:
                continue
            unit = self.units.get_unit(unit_id)
            destination = intents[unit_id][-1]

            for other_id in sorted(intents):
                if other_id == unit_id:
                    continue
                other = self.units.get_unit(other_id)
                if other.position != destination or intents[other_id][-1] != unit.position:
                    continue
                if other.owner_id == unit.owner_id:
                    break

                paths = {unit_id: intents.pop(unit_id), other_id: intents.pop(other_id)}
                positions = {unit_id: unit.position, other_id: other.position}
                encounter = self.encounters.open_passing(turn, unit_id, other_id, positions, paths)
                events.append(self._needs_resolution_event(encounter, turn))
                break
        return events

    def _void_blocked_destinations(self, intents: dict, turn: int) -> list[GameEvent]:
        """Repeat until stable: nobody may end on a tile a stationary hostile holds."""
        events = []
        changed = True
        while changed:
            changed = False
            for unit_id in sorted(intents):
                unit = self.units.get_unit(unit_id)
                destination = intents[unit_id][-1]
                blockers = [u for u in self._hostile_at(destination, unit.owner_id) if u.id not in intents]
                if not blockers:
                    continue
                del intents[unit_id]
                events.append(ConflictDetectedEvent(
                    turn_number=turn,
                    unit_ids=sorted([unit_id] + [u.id for u in blockers]),
                    position=destination,
                    reason="Destination held by a hostile ship",
                ))
                changed = True
        return events

    def _needs_resolution_event(self, encounter: Encounter, turn: int) -> CollisionNeedsResolutionEvent:
        return CollisionNeedsResolutionEvent(
            turn_number=turn,
            encounter_id=encounter.id,
            encounter_type=encounter.type.value,
            unit_ids=list(encounter.involved_unit_ids),
            position=encounter.location,
            contested=encounter.is_contested,
        )

    # Combat
    def _execute_combat_phase(self, turn: int) -> list[GameEvent]:
        """Every adjacent hostile pair fights once; the lower id attacks."""
        events = []
        all_units = self.units.get_all_units()
        for unit in all_units:
            unit.in_combat = False
            unit.combat_opponent_id = None

        engaged = set(self._settled_pairs)
        for encounter in self.encounters.active_encounters():
            for unit_id in encounter.involved_unit_ids:
                for other_id in encounter.involved_unit_ids:
                    if unit_id < other_id:
                        engaged.add(frozenset((unit_id, other_id)))

        for i, attacker in enumerate(all_units):
            for defender in all_units[i + 1:]:
                if attacker.owner_id == defender.owner_id:
                    continue
                if attacker.position.distance(defender.position) != 1:
                    continue
                if attacker.is_dead() or defender.is_dead():
                    continue
                if frozenset((attacker.id, defender.id)) in engaged:
                    continue

                events.extend(self._fight(attacker, defender, attacker.position, turn))
                if not attacker.is_dead() and not defender.is_dead():
                    attacker.in_combat = defender.in_combat = True
                    attacker.combat_opponent_id = defender.id
                    defender.combat_opponent_id = attacker.id

        self._remove_dead(all_units)
        return events

    def _fight(self, attacker: Unit, defender: Unit, position: HexCoord, turn: int) -> list[GameEvent]:
        result = self.combat.resolve(attacker.id, defender.id)
        attacker.take_damage(result.damage_to_attacker)
        defender.take_damage(result.damage_to_defender)

        events: list[GameEvent] = [CombatOccurredEvent(
            turn_number=turn,
            attacker_id=attacker.id,
            defender_id=defender.id,
            position=position,
            attacker_rolls=result.attacker_rolls,
            defender_rolls=result.defender_rolls,
            damage_to_attacker=result.damage_to_attacker,
            damage_to_defender=result.damage_to_defender,
            attacker_destroyed=attacker.is_dead(),
            defender_destroyed=defender.is_dead(),
        )]
        for unit in (attacker, defender):
            if unit.is_dead():
                events.append(UnitDestroyedEvent(
                    turn_number=turn,
                    unit_id=unit.id,
                    owner_id=unit.owner_id,
                    position=unit.position,
                ))
        return events

    def _remove_dead(self, units: list[Unit]):
        for unit in units:
            if unit.is_dead() and self.units.get_unit(unit.id) is unit:
                self.units.remove_unit(unit.id)
                logger.info(f"{unit.id} (player {unit.owner_id}) sunk at {unit.position}")

    # Elimination
    def _execute_elimination_phase(self, turn: int) -> list[GameEvent]:
        events = []
        eliminated = []
        players = self.state.players
        for player in players.get_active_players():
            if self.units.get_units_for_player(player.id):
                continue
            if players.eliminate_player(player.id):
                eliminated.append(player.id)
                events.append(PlayerEliminatedEvent(turn_number=turn, player_id=player.id, player_name=player.name))

        if self.state.is_game_over:
            return events

        if players.players and not players.get_active_players():
            self.state.is_draw = True
            events.append(GameDrawnEvent(turn_number=turn, eliminated_player_ids=eliminated))
            logger.info(f"Game drawn on turn {turn}: no fleet survived")
        else:
            winner = players.get_winner()
            if winner:
                self.state.winner_id = winner.id
                events.append(GameWonEvent(turn_number=turn, player_id=winner.id, player_name=winner.name))
                logger.info(f"Player {winner.name} wins on turn {turn}")
        return events
