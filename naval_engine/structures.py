"""
Structures: shipyards and their upgraded forms, plus neutral pirate coves.

At most one structure per tile; the validators enforce that, not this store.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .hexgrid import HexCoord

logger = logging.getLogger(__name__)

NEUTRAL_OWNER = -1


class StructureType(Enum):
    SHIPYARD = "shipyard"
    NAVAL_YARD = "naval_yard"
    NAVAL_FORTRESS = "naval_fortress"
    PIRATE_COVE = "pirate_cove"


# Upgrade chain for player-owned yards
SHIPYARD_TYPES = (StructureType.SHIPYARD, StructureType.NAVAL_YARD, StructureType.NAVAL_FORTRESS)


@dataclass
class Structure:
    id: str
    owner_id: int
    position: HexCoord
    type: StructureType
    tier: int = 1
    health: int = 10
    max_health: int = 10

    @property
    def is_shipyard(self) -> bool:
        """Any tier of yard can build, repair and upgrade ships."""
        return self.type in SHIPYARD_TYPES

    @property
    def is_neutral(self) -> bool:
        return self.owner_id == NEUTRAL_OWNER

    def next_type(self) -> Optional[StructureType]:
        if self.type not in SHIPYARD_TYPES:
            return None
        index = SHIPYARD_TYPES.index(self.type)
        if index + 1 >= len(SHIPYARD_TYPES):
            return None
        return SHIPYARD_TYPES[index + 1]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "position": self.position.to_list(),
            "type": self.type.value,
            "tier": self.tier,
            "health": self.health,
            "max_health": self.max_health,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Structure":
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            position=HexCoord.from_list(data["position"]),
            type=StructureType(data["type"]),
            tier=data.get("tier", 1),
            health=data["health"],
            max_health=data["max_health"],
        )


class StructureManager:
    """Authoritative store of all structures, keyed by id."""

    def __init__(self):
        self.structures: dict[str, Structure] = {}
        self.next_structure_id = 0

    def create_structure(
        self,
        owner_id: int,
        position: HexCoord,
        structure_type: StructureType,
        max_health: int = 10,
        tier: int = 1,
    ) -> Structure:
        structure_id = f"structure_{self.next_structure_id}"
        self.next_structure_id += 1

        structure = Structure(
            id=structure_id,
            owner_id=owner_id,
            position=position,
            type=structure_type,
            tier=tier,
            health=max_health,
            max_health=max_health,
        )
        self.structures[structure_id] = structure
        logger.debug(f"Created {structure_type.value} {structure_id} for player {owner_id} at {position}")
        return structure

    def remove_structure(self, structure_id: str) -> Optional[Structure]:
        return self.structures.pop(structure_id, None)

    def change_owner(self, structure_id: str, new_owner_id: int) -> bool:
        structure = self.structures.get(structure_id)
        if not structure:
            return False
        structure.owner_id = new_owner_id
        return True

    def upgrade_structure(self, structure_id: str, new_type: StructureType,
                          max_health: int, tier: int) -> bool:
        """Switch a yard to its next tier and restore it to full health."""
        structure = self.structures.get(structure_id)
        if not structure:
            return False
        structure.type = new_type
        structure.tier = tier
        structure.max_health = max_health
        structure.health = max_health
        return True

    # Query methods
    def get_structure(self, structure_id: str) -> Optional[Structure]:
        return self.structures.get(structure_id)

    def get_structure_at_position(self, position: HexCoord) -> Optional[Structure]:
        for structure in self.get_all_structures():
            if structure.position == position:
                return structure
        return None

    def get_structures_for_player(self, owner_id: int) -> list[Structure]:
        return [s for s in self.get_all_structures() if s.owner_id == owner_id]

    def get_all_structures(self) -> list[Structure]:
        return [self.structures[sid] for sid in sorted(self.structures)]

    def to_dict(self) -> dict:
        return {
            "next_structure_id": self.next_structure_id,
            "structures": [s.to_dict() for s in self.get_all_structures()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StructureManager":
        manager = cls()
        manager.next_structure_id = data.get("next_structure_id", 0)
        for entry in data.get("structures", []):
            structure = Structure.from_dict(entry)
            manager.structures[structure.id] = structure
        return manager
