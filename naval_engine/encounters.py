"""
Encounters: pending decisions that keep hostile ships off the same tile.

PASSING - two hostile ships try to swap tiles. Each chooses PROCEED or ATTACK.
ENTRY   - two or more ships, at least one hostile pair, try to enter the same
          empty tile. Each chooses YIELD or ATTACK.

An encounter collects one decision per involved unit. Decisions may arrive
in any order from different players; the encounter stays awaiting until none
is NONE.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import (
    EncounterNotFoundError, EncounterResolvedError,
    UnitNotInEncounterError, WrongEncounterTypeError,
)
from .hexgrid import HexCoord

logger = logging.getLogger(__name__)


class EncounterType(Enum):
    PASSING = "passing"
    ENTRY = "entry"


class PassingDecision(Enum):
    NONE = "none"
    PROCEED = "proceed"
    ATTACK = "attack"


class EntryDecision(Enum):
    NONE = "none"
    YIELD = "yield"
    ATTACK = "attack"


# Position of each type in the resolution sort key
TYPE_ORDER = {EncounterType.PASSING: 0, EncounterType.ENTRY: 1}


@dataclass
class Encounter:
    id: str
    type: EncounterType
    turn_created: int
    involved_unit_ids: list[str]
    tile: Optional[HexCoord] = None  # ENTRY
    edge: Optional[tuple[HexCoord, HexCoord]] = None  # PASSING
    previous_positions: dict[str, HexCoord] = field(default_factory=dict)
    unit_paths: dict[str, list[HexCoord]] = field(default_factory=dict)
    passing_decisions: dict[str, PassingDecision] = field(default_factory=dict)
    entry_decisions: dict[str, EntryDecision] = field(default_factory=dict)
    is_contested: bool = False
    is_resolved: bool = False

    @classmethod
    def create_passing(
        cls,
        encounter_id: str,
        turn: int,
        unit_a: str,
        unit_b: str,
        positions: dict[str, HexCoord],
        paths: Optional[dict[str, list[HexCoord]]] = None,
    ) -> "Encounter":
        units = sorted([unit_a, unit_b])
        edge = tuple(sorted([positions[unit_a], positions[unit_b]]))
        return cls(
            id=encounter_id,
            type=EncounterType.PASSING,
            turn_created=turn,
            involved_unit_ids=units,
            edge=edge,
            previous_positions={uid: positions[uid] for uid in units},
            unit_paths={uid: list(p) for uid, p in (paths or {}).items() if uid in units},
            passing_decisions={uid: PassingDecision.NONE for uid in units},
        )

    @classmethod
    def create_entry(
        cls,
        encounter_id: str,
        turn: int,
        tile: HexCoord,
        unit_ids: list[str],
        positions: dict[str, HexCoord],
        paths: Optional[dict[str, list[HexCoord]]] = None,
    ) -> "Encounter":
        if len(unit_ids) < 2:
            raise ValueError("An ENTRY encounter needs at least two units")
        units = sorted(unit_ids)
        return cls(
            id=encounter_id,
            type=EncounterType.ENTRY,
            turn_created=turn,
            involved_unit_ids=units,
            tile=tile,
            previous_positions={uid: positions[uid] for uid in units},
            unit_paths={uid: list(p) for uid, p in (paths or {}).items() if uid in units},
            entry_decisions={uid: EntryDecision.NONE for uid in units},
        )

    @property
    def awaiting_player_choices(self) -> bool:
        if self.is_resolved:
            return False
        if self.type == EncounterType.PASSING:
            return any(d == PassingDecision.NONE for d in self.passing_decisions.values())
        return any(d == EntryDecision.NONE for d in self.entry_decisions.values())

    @property
    def location(self) -> HexCoord:
        """Tile for ENTRY, the lower edge coordinate for PASSING."""
        return self.tile if self.type == EncounterType.ENTRY else self.edge[0]

    def involves(self, unit_id: str) -> bool:
        return unit_id in self.involved_unit_ids

    def record_passing_decision(self, unit_id: str, decision: PassingDecision):
        if self.type != EncounterType.PASSING:
            raise WrongEncounterTypeError(
                "Cannot record a passing decision on an entry encounter",
                context={"encounter_id": self.id},
            )
        self._check_involved(unit_id)
        self.passing_decisions[unit_id] = decision

    def record_entry_decision(self, unit_id: str, decision: EntryDecision):
        if self.type != EncounterType.ENTRY:
            raise WrongEncounterTypeError(
                "Cannot record an entry decision on a passing encounter",
                context={"encounter_id": self.id},
            )
        self._check_involved(unit_id)
        self.entry_decisions[unit_id] = decision

    def _check_involved(self, unit_id: str):
        if not self.involves(unit_id):
            raise UnitNotInEncounterError(
                f"Unit {unit_id} is not part of encounter {self.id}",
                context={"encounter_id": self.id, "unit_id": unit_id},
            )

    def attacking_unit_ids(self) -> list[str]:
        if self.type == EncounterType.PASSING:
            return [u for u in self.involved_unit_ids
                    if self.passing_decisions.get(u) == PassingDecision.ATTACK]
        return [u for u in self.involved_unit_ids
                if self.entry_decisions.get(u) == EntryDecision.ATTACK]

    def mark_as_contested(self):
        """Two or more ships held their claim: re-offer the choice next turn.

        Yields stand; attackers are asked again.
        """
        if self.type != EncounterType.ENTRY:
            raise WrongEncounterTypeError(
                "Only entry encounters can be contested",
                context={"encounter_id": self.id},
            )
        self.is_contested = True
        for unit_id, decision in self.entry_decisions.items():
            if decision == EntryDecision.ATTACK:
                self.entry_decisions[unit_id] = EntryDecision.NONE

    def mark_as_resolved(self):
        self.is_resolved = True

    def get_involved_owner_ids(self, units) -> set[int]:
        """Owners of the involved units still present in the unit store."""
        owners = set()
        for unit_id in self.involved_unit_ids:
            unit = units.get_unit(unit_id)
            if unit:
                owners.add(unit.owner_id)
        return owners

    def are_all_units_from_same_player(self, units) -> bool:
        return len(self.get_involved_owner_ids(units)) <= 1

    def sort_key(self) -> tuple:
        """Stable resolution order: location, type, smallest unit id."""
        if self.type == EncounterType.ENTRY:
            location = (self.tile,)
        else:
            location = self.edge
        return (location, TYPE_ORDER[self.type], min(self.involved_unit_ids))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "turn_created": self.turn_created,
            "involved_unit_ids": list(self.involved_unit_ids),
            "tile": self.tile.to_list() if self.tile else None,
            "edge": [c.to_list() for c in self.edge] if self.edge else None,
            "previous_positions": {u: p.to_list() for u, p in self.previous_positions.items()},
            "unit_paths": {u: [c.to_list() for c in p] for u, p in self.unit_paths.items()},
            "passing_decisions": {u: d.value for u, d in self.passing_decisions.items()},
            "entry_decisions": {u: d.value for u, d in self.entry_decisions.items()},
            "is_contested": self.is_contested,
            "is_resolved": self.is_resolved,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Encounter":
        return cls(
            id=data["id"],
            type=EncounterType(data["type"]),
            turn_created=data["turn_created"],
            involved_unit_ids=list(data["involved_unit_ids"]),
            tile=HexCoord.from_list(data["tile"]) if data.get("tile") else None,
            edge=tuple(HexCoord.from_list(c) for c in data["edge"]) if data.get("edge") else None,
            previous_positions={u: HexCoord.from_list(p) for u, p in data.get("previous_positions", {}).items()},
            unit_paths={u: [HexCoord.from_list(c) for c in p] for u, p in data.get("unit_paths", {}).items()},
            passing_decisions={u: PassingDecision(d) for u, d in data.get("passing_decisions", {}).items()},
            entry_decisions={u: EntryDecision(d) for u, d in data.get("entry_decisions", {}).items()},
            is_contested=data.get("is_contested", False),
            is_resolved=data.get("is_resolved", False),
        )


class EncounterTracker:
    """Active encounters for a game session, with decision intake."""

    def __init__(self):
        self.encounters: dict[str, Encounter] = {}
        self.next_encounter_id = 0

    def _next_id(self) -> str:
        encounter_id = f"encounter_{self.next_encounter_id}"
        self.next_encounter_id += 1
        return encounter_id

    def open_passing(self, turn: int, unit_a: str, unit_b: str,
                     positions: dict[str, HexCoord],
                     paths: Optional[dict[str, list[HexCoord]]] = None) -> Encounter:
        encounter = Encounter.create_passing(self._next_id(), turn, unit_a, unit_b, positions, paths)
        self.encounters[encounter.id] = encounter
        logger.info(f"PASSING encounter {encounter.id}: {unit_a} and {unit_b} on {encounter.edge[0]}-{encounter.edge[1]}")
        return encounter

    def open_entry(self, turn: int, tile: HexCoord, unit_ids: list[str],
                   positions: dict[str, HexCoord],
                   paths: Optional[dict[str, list[HexCoord]]] = None) -> Encounter:
        encounter = Encounter.create_entry(self._next_id(), turn, tile, unit_ids, positions, paths)
        self.encounters[encounter.id] = encounter
        logger.info(f"ENTRY encounter {encounter.id}: {', '.join(encounter.involved_unit_ids)} at {tile}")
        return encounter

    def get(self, encounter_id: str) -> Optional[Encounter]:
        return self.encounters.get(encounter_id)

    def active_encounters(self) -> list[Encounter]:
        active = [e for e in self.encounters.values() if not e.is_resolved]
        return sorted(active, key=lambda e: e.sort_key())

    def encounter_for_unit(self, unit_id: str) -> Optional[Encounter]:
        for encounter in self.active_encounters():
            if encounter.involves(unit_id):
                return encounter
        return None

    def entry_encounter_at(self, tile: HexCoord) -> Optional[Encounter]:
        for encounter in self.active_encounters():
            if encounter.type == EncounterType.ENTRY and encounter.tile == tile:
                return encounter
        return None

    def ready_encounters(self) -> list[Encounter]:
        """Active encounters whose every decision is in, in resolution order."""
        return [e for e in self.active_encounters() if not e.awaiting_player_choices]

    def submit_decision(self, encounter_id: str, unit_id: str, decision):
        """Record one unit's choice. Accepts the enum or its string value."""
        encounter = self.encounters.get(encounter_id)
        if encounter is None:
            raise EncounterNotFoundError(
                f"Encounter {encounter_id} does not exist",
                context={"encounter_id": encounter_id},
            )
        if encounter.is_resolved:
            raise EncounterResolvedError(
                f"Encounter {encounter_id} is already resolved",
                context={"encounter_id": encounter_id},
            )

        if encounter.type == EncounterType.PASSING:
            if not isinstance(decision, PassingDecision):
                decision = self._coerce(PassingDecision, decision, encounter)
            encounter.record_passing_decision(unit_id, decision)
        else:
            if not isinstance(decision, EntryDecision):
                decision = self._coerce(EntryDecision, decision, encounter)
            encounter.record_entry_decision(unit_id, decision)

        logger.debug(f"{encounter_id}: {unit_id} chose {decision.value}")

    @staticmethod
    def _coerce(enum_cls, value, encounter: Encounter):
        """Turn a plain string into enum_cls. Members of the other decision enum are refused."""
        if isinstance(value, str) and value in {d.value for d in enum_cls}:
            return enum_cls(value)
        raise WrongEncounterTypeError(
            f"Decision {value!r} is not valid for a {encounter.type.value} encounter",
            context={"encounter_id": encounter.id},
        )

    def discard_resolved(self) -> int:
        resolved = [eid for eid, e in self.encounters.items() if e.is_resolved]
        for eid in resolved:
            del self.encounters[eid]
        return len(resolved)

    def to_dict(self) -> dict:
        return {
            "next_encounter_id": self.next_encounter_id,
            "encounters": [e.to_dict() for e in self.active_encounters()],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EncounterTracker":
        tracker = cls()
        tracker.next_encounter_id = data.get("next_encounter_id", 0)
        for entry in data.get("encounters", []):
            encounter = Encounter.from_dict(entry)
            tracker.encounters[encounter.id] = encounter
        return tracker
