"""
Order admission checks.

Every check is pure: it reads state and returns a ValidationResult, never
mutating anything. Checks short-circuit in a fixed order: the referenced
entity exists, the caller owns it, the entity is the right kind, spatial
preconditions hold, then resources suffice.

The turn resolver re-runs these at resolution time because state may have
changed since the order was submitted.
"""

from dataclasses import dataclass
from typing import Optional

from .config import RulesConfig
from .hexgrid import HexCoord, HexGrid, TileType
from .orders import (
    Order, OrderType, MoveOrder, DeployShipyardOrder, BuildShipOrder, BuildGalleonOrder,
    RepairShipOrder, UpgradeShipOrder, UpgradeSailsOrder, UpgradeCannonsOrder,
    UpgradeMaxLifeOrder, UpgradeStructureOrder, CancelConstructionOrder,
    AttackShipyardOrder,
)
from .players import PlayerManager
from .structures import StructureManager, Structure
from .units import UnitManager, Unit, UnitType


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(True)

    @classmethod
    def fail(cls, reason: str) -> "ValidationResult":
        return cls(False, reason)

    def __bool__(self):
        return self.is_valid


class OrderValidator:
    """One validation method per order type plus a dispatching validate()."""

    def __init__(
        self,
        grid: HexGrid,
        units: UnitManager,
        structures: StructureManager,
        players: PlayerManager,
        construction_validator,
        config: Optional[RulesConfig] = None,
    ):
        self.grid = grid
        self.units = units
        self.structures = structures
        self.players = players
        self.construction = construction_validator
        self.config = config or RulesConfig()

    def validate(self, order: Order) -> ValidationResult:
        order_type = order.order_type
        if order_type == OrderType.MOVE:
            return self.validate_move(order)
        elif order_type == OrderType.DEPLOY_SHIPYARD:
            return self.validate_deploy_shipyard(order)
        elif order_type == OrderType.BUILD_SHIP:
            return self.validate_build_ship(order)
        elif order_type == OrderType.BUILD_GALLEON:
            return self.validate_build_galleon(order)
        elif order_type == OrderType.REPAIR_SHIP:
            return self.validate_repair_ship(order)
        elif order_type == OrderType.UPGRADE_SHIP:
            return self.validate_upgrade_ship(order)
        elif order_type == OrderType.UPGRADE_SAILS:
            return self.validate_upgrade_sails(order)
        elif order_type == OrderType.UPGRADE_CANNONS:
            return self.validate_upgrade_cannons(order)
        elif order_type == OrderType.UPGRADE_MAX_LIFE:
            return self.validate_upgrade_max_life(order)
        elif order_type == OrderType.UPGRADE_STRUCTURE:
            return self.validate_upgrade_structure(order)
        elif order_type == OrderType.CANCEL_CONSTRUCTION:
            return self.validate_cancel_construction(order)
        elif order_type == OrderType.ATTACK_SHIPYARD:
            return self.validate_attack_shipyard(order)
        raise ValueError(f"Unhandled order type: {order_type}")

    # Shared layers
    def _check_unit(self, unit_id: str, player_id: int) -> tuple[Optional[Unit], ValidationResult]:
        unit = self.units.get_unit(unit_id)
        if unit is None:
            return None, ValidationResult.fail("Unit does not exist")
        if unit.owner_id != player_id:
            return unit, ValidationResult.fail("Player does not own this unit")
        return unit, ValidationResult.ok()

    def _check_path(self, unit: Unit, path, player_id: int) -> ValidationResult:
        if not path:
            return ValidationResult.fail("Path is empty")
        if path[0] != unit.position:
            return ValidationResult.fail("Path does not start at unit position")

        prev = None
        for coord in path:
            if not self.grid.is_navigable(coord):
                return ValidationResult.fail(f"Path contains non-navigable tile at {coord}")
            if prev is not None and prev.distance(coord) != 1:
                return ValidationResult.fail(f"Path is not continuous between {prev} and {coord}")
            prev = coord

        for coord in path[1:]:
            structure = self.structures.get_structure_at_position(coord)
            if structure and structure.is_shipyard and structure.owner_id != player_id:
                return ValidationResult.fail("Cannot move into a harbor occupied by an enemy shipyard")
        return ValidationResult.ok()

    def _check_gold(self, player_id: int, cost: int) -> ValidationResult:
        player = self.players.get_player(player_id)
        gold = player.gold if player else 0
        if gold < cost:
            return ValidationResult.fail(f"Not enough gold. Need {cost}, have {gold}")
        return ValidationResult.ok()

    def _check_ship_at_own_yard(self, order) -> tuple[Optional[Unit], Optional[Structure], ValidationResult]:
        unit, result = self._check_unit(order.unit_id, order.player_id)
        if not result:
            return unit, None, result

        shipyard = self.structures.get_structure(order.shipyard_id)
        if shipyard is None or not shipyard.is_shipyard:
            return unit, None, ValidationResult.fail("Shipyard does not exist")
        if shipyard.owner_id != order.player_id:
            return unit, shipyard, ValidationResult.fail("Player does not own this shipyard")
        if unit.position != shipyard.position:
            return unit, shipyard, ValidationResult.fail("Ship must be at the shipyard")
        return unit, shipyard, ValidationResult.ok()

    # Per-order checks
    def validate_move(self, order: MoveOrder) -> ValidationResult:
        unit, result = self._check_unit(order.unit_id, order.player_id)
        if not result:
            return result
        result = self._check_path(unit, order.path, order.player_id)
        if not result:
            return result
        if len(order.path) < 2:
            return ValidationResult.fail("Path has no steps")
        return ValidationResult.ok()

    def validate_deploy_shipyard(self, order: DeployShipyardOrder) -> ValidationResult:
        unit, result = self._check_unit(order.unit_id, order.player_id)
        if not result:
            return result
        if not is_ship(unit):
            return ValidationResult.fail("Only ships can be deployed as shipyards")
        if order.position != unit.position:
            return ValidationResult.fail("Deploy position does not match ship position")
        return self.construction.validate_deploy_shipyard(order.player_id, unit)

    def validate_build_ship(self, order: BuildShipOrder) -> ValidationResult:
        return self.construction.validate_queue_ship(order.player_id, order.shipyard_id)

    def validate_build_galleon(self, order: BuildGalleonOrder) -> ValidationResult:
        return self.construction.validate_queue_galleon(order.player_id, order.shipyard_id)

    def validate_repair_ship(self, order: RepairShipOrder) -> ValidationResult:
        unit, _, result = self._check_ship_at_own_yard(order)
        if not result:
            return result
        if unit.health >= unit.max_health:
            return ValidationResult.fail("Unit is already at full health")
        return self._check_gold(order.player_id, self.config.costs.repair_ship)

    def _validate_hull_upgrade(self, order, cost: int) -> ValidationResult:
        unit, _, result = self._check_ship_at_own_yard(order)
        if not result:
            return result
        if unit.max_health >= self.config.ship.max_health_cap:
            return ValidationResult.fail("Unit is already at maximum tier")
        return self._check_gold(order.player_id, cost)

    def validate_upgrade_ship(self, order: UpgradeShipOrder) -> ValidationResult:
        return self._validate_hull_upgrade(order, self.config.costs.upgrade_ship)

    def validate_upgrade_max_life(self, order: UpgradeMaxLifeOrder) -> ValidationResult:
        return self._validate_hull_upgrade(order, self.config.costs.upgrade_max_life)

    def validate_upgrade_sails(self, order: UpgradeSailsOrder) -> ValidationResult:
        unit, _, result = self._check_ship_at_own_yard(order)
        if not result:
            return result
        if unit.sails >= self.config.ship.max_sails:
            return ValidationResult.fail("Unit already has maximum sails upgrades")
        return self._check_gold(order.player_id, self.config.costs.upgrade_sails)

    def validate_upgrade_cannons(self, order: UpgradeCannonsOrder) -> ValidationResult:
        unit, _, result = self._check_ship_at_own_yard(order)
        if not result:
            return result
        if unit.cannons >= self.config.ship.max_cannons:
            return ValidationResult.fail("Unit already has maximum cannons upgrades")
        return self._check_gold(order.player_id, self.config.costs.upgrade_cannons)

    def validate_upgrade_structure(self, order: UpgradeStructureOrder) -> ValidationResult:
        structure = self.structures.get_structure(order.structure_id)
        if structure is None:
            return ValidationResult.fail("Structure does not exist")
        if structure.owner_id != order.player_id:
            return ValidationResult.fail("Player does not own this structure")
        if not structure.is_shipyard:
            return ValidationResult.fail("Only shipyards can be upgraded")
        if structure.next_type() is None:
            return ValidationResult.fail("Structure is already at maximum tier")
        return self._check_gold(order.player_id, self.config.costs.upgrade_structure)

    def validate_cancel_construction(self, order: CancelConstructionOrder) -> ValidationResult:
        return self.construction.validate_cancel_job(order.player_id, order.job_id)

    def validate_attack_shipyard(self, order: AttackShipyardOrder) -> ValidationResult:
        unit, result = self._check_unit(order.unit_id, order.player_id)
        if not result:
            return result

        target = self.structures.get_structure(order.target_shipyard_id)
        if target is None or target.position != order.target_position:
            return ValidationResult.fail("Target shipyard does not exist")
        if not target.is_shipyard:
            return ValidationResult.fail("Target is not a shipyard")
        if target.owner_id == order.player_id:
            return ValidationResult.fail("Cannot attack your own shipyard")

        path = order.path or (unit.position,)
        result = self._check_path(unit, path, order.player_id)
        if not result:
            return result
        if path[-1].distance(order.target_position) != 1:
            return ValidationResult.fail("Path does not end adjacent to target shipyard")
        return ValidationResult.ok()


def is_harbor(grid: HexGrid, coord: HexCoord) -> bool:
    tile = grid.get_tile(coord)
    return tile is not None and tile.type == TileType.HARBOR


def is_ship(unit: Unit) -> bool:
    return unit.type == UnitType.SHIP
