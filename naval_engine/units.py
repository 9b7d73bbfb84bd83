"""
Unit state management for the naval engine.

Units are ships or fortress-built galleons. Hull tier (from max health) and sail upgrades decide
how far it can move in one turn.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import RulesConfig
from .hexgrid import HexCoord

logger = logging.getLogger(__name__)


class UnitType(Enum):
    SHIP = "ship"
    GALLEON = "galleon"


# Facing angle in degrees for each hex direction (E, NE, NW, W, SW, SE)
FACING_ANGLES = (0.0, 60.0, 120.0, 180.0, 240.0, 300.0)


@dataclass
class Unit:
    """A ship on the map."""
    id: str
    owner_id: int
    position: HexCoord
    type: UnitType = UnitType.SHIP
    health: int = 10
    max_health: int = 10
    movement_remaining: int = 0
    sails: int = 0  # upgrade count
    cannons: int = 0  # upgrade count
    in_combat: bool = False
    combat_opponent_id: Optional[str] = None
    facing_angle: float = 0.0  # 0 = facing east
    queued_path: list[HexCoord] = field(default_factory=list)

    def tier(self, config: RulesConfig) -> int:
        """Hull tier: the highest threshold max health has reached (1-based)."""
        tier = 1
        for i, threshold in enumerate(config.ship.tier_thresholds):
            if self.max_health >= threshold:
                tier = i + 1
        return tier

    def movement_capacity(self, config: RulesConfig) -> int:
        base = config.ship.movement_by_tier.get(self.tier(config), 1)
        return base + self.sails

    def reset_movement(self, config: RulesConfig):
        self.movement_remaining = self.movement_capacity(config)

    def take_damage(self, amount: int):
        self.health = max(0, self.health - amount)

    def is_dead(self) -> bool:
        return self.health <= 0

    def update_facing(self, old_pos: HexCoord, new_pos: HexCoord):
        """Point the unit along the step it just took."""
        if old_pos == new_pos:
            return
        direction = old_pos.direction_to(new_pos)
        if direction is not None:
            self.facing_angle = FACING_ANGLES[direction]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "position": self.position.to_list(),
            "type": self.type.value,
            "health": self.health,
            "max_health": self.max_health,
            "movement_remaining": self.movement_remaining,
            "sails": self.sails,
            "cannons": self.cannons,
            "in_combat": self.in_combat,
            "combat_opponent_id": self.combat_opponent_id,
            "facing_angle": self.facing_angle,
            "queued_path": [c.to_list() for c in self.queued_path],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Unit":
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            position=HexCoord.from_list(data["position"]),
            type=UnitType(data.get("type", "ship")),
            health=data["health"],
            max_health=data["max_health"],
            movement_remaining=data.get("movement_remaining", 0),
            sails=data.get("sails", 0),
            cannons=data.get("cannons", 0),
            in_combat=data.get("in_combat", False),
            combat_opponent_id=data.get("combat_opponent_id"),
            facing_angle=data.get("facing_angle", 0.0),
            queued_path=[HexCoord.from_list(c) for c in data.get("queued_path", [])],
        )


class UnitManager:
    """Authoritative store of all units, keyed by id."""

    def __init__(self):
        self.units: dict[str, Unit] = {}
        self.next_unit_id = 0

    def create_unit(
        self,
        owner_id: int,
        position: HexCoord,
        unit_type: UnitType = UnitType.SHIP,
        max_health: int = 10,
    ) -> Unit:
        unit_id = f"unit_{self.next_unit_id}"
        self.next_unit_id += 1

        unit = Unit(
            id=unit_id,
            owner_id=owner_id,
            position=position,
            type=unit_type,
            health=max_health,
            max_health=max_health,
        )
        self.units[unit_id] = unit
        logger.debug(f"Created {unit_id} for player {owner_id} at {position}")
        return unit

    def remove_unit(self, unit_id: str) -> Optional[Unit]:
        unit = self.units.pop(unit_id, None)
        if unit:
            logger.debug(f"Removed {unit_id}")
        return unit

    def move_unit(self, unit_id: str, new_position: HexCoord) -> bool:
        """Move a unit and recompute its facing. Returns False if unknown."""
        unit = self.units.get(unit_id)
        if not unit:
            return False
        unit.update_facing(unit.position, new_position)
        unit.position = new_position
        return True

    # Query methods
    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.units.get(unit_id)

    def get_units_at_position(self, position: HexCoord) -> list[Unit]:
        return [u for u in self.get_all_units() if u.position == position]

    def get_units_for_player(self, owner_id: int) -> list[Unit]:
        return [u for u in self.get_all_units() if u.owner_id == owner_id]

    def get_all_units(self) -> list[Unit]:
        return [self.units[uid] for uid in sorted(self.units)]

    def get_stats(self) -> dict:
        """Get unit statistics."""
        by_owner: dict[int, int] = {}
        for unit in self.units.values():
            by_owner[unit.owner_id] = by_owner.get(unit.owner_id, 0) + 1

        return {
            "total_units": len(self.units),
            "by_owner": by_owner,
            "total_health": sum(u.health for u in self.units.values()),
        }

    def to_dict(self) -> dict:
        return {
            "next_unit_id": self.next_unit_id,
            "units": [u.to_dict() for u in self.get_all_units()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UnitManager":
        manager = cls()
        manager.next_unit_id = data.get("next_unit_id", 0)
        for entry in data.get("units", []):
            unit = Unit.from_dict(entry)
            manager.units[unit.id] = unit
        return manager
