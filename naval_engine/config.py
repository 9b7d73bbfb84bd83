"""
Game-balance rules for the naval engine.

Defaults are built in; a YAML rules file may override any subset of them.
"""

import yaml
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path

from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class CostRules:
    """Gold prices for every economic order."""
    build_ship: int = 50
    repair_ship: int = 20
    upgrade_ship: int = 75
    upgrade_sails: int = 60
    upgrade_cannons: int = 60
    upgrade_max_life: int = 60
    deploy_shipyard: int = 100
    upgrade_structure: int = 150
    build_galleon: int = 200


@dataclass
class ShipRules:
    base_max_health: int = 10
    max_health_step: int = 10  # added per hull upgrade
    max_health_cap: int = 30
    tier_thresholds: list[int] = field(default_factory=lambda: [10, 20, 30])
    movement_by_tier: dict[int, int] = field(default_factory=lambda: {1: 3, 2: 4, 3: 5})
    max_sails: int = 2
    max_cannons: int = 2
    galleon_max_health: int = 30


@dataclass
class ConstructionRules:
    ship_build_time: int = 3  # turns
    galleon_build_time: int = 5
    max_queue_size: int = 5
    refund_percent: float = 0.75


@dataclass
class IncomeRules:
    """Gold paid to every active player at the start of a turn."""
    base: int = 10
    per_shipyard: int = 5  # plain shipyards only
    per_ship: int = 2


@dataclass
class StructureRules:
    max_health: dict[str, int] = field(default_factory=lambda: {
        "shipyard": 10,
        "naval_yard": 20,
        "naval_fortress": 30,
        "pirate_cove": 15,
    })
    tiers: dict[str, int] = field(default_factory=lambda: {
        "shipyard": 1,
        "naval_yard": 2,
        "naval_fortress": 3,
        "pirate_cove": 1,
    })


@dataclass
class CombatRules:
    attacker_dice: int = 3
    defender_dice: int = 2
    damage_per_loss: int = 2
    shipyard_capture_roll: int = 5  # 1d6 >= this destroys the shipyard


@dataclass
class MapRules:
    sea_tiles: int = 500
    islands: int = 25
    min_island_size: int = 4
    max_island_size: int = 8


@dataclass
class RulesConfig:
    """All tunable rules, grouped the same way as the YAML file."""
    costs: CostRules = field(default_factory=CostRules)
    ship: ShipRules = field(default_factory=ShipRules)
    construction: ConstructionRules = field(default_factory=ConstructionRules)
    structures: StructureRules = field(default_factory=StructureRules)
    combat: CombatRules = field(default_factory=CombatRules)
    map: MapRules = field(default_factory=MapRules)
    income: IncomeRules = field(default_factory=IncomeRules)
    starting_gold: int = 100

    SECTIONS = {
        "costs": CostRules,
        "ship": ShipRules,
        "construction": ConstructionRules,
        "structures": StructureRules,
        "combat": CombatRules,
        "map": MapRules,
        "income": IncomeRules,
    }

    @classmethod
    def load(cls, path: Path | str = "data/rules.yaml") -> "RulesConfig":
        """Load rules from YAML, falling back to defaults."""
        path = Path(path)
        if not path.exists():
            logger.warning(f"Rules file not found: {path}, using defaults")
            return cls()

        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse rules file {path}", context={"error": str(e)})

        if not isinstance(data, dict):
            raise ConfigError(f"Rules file {path} must contain a mapping")

        config = cls.from_dict(data)
        logger.info(f"Loaded rules from {path}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "RulesConfig":
        config = cls()
        for key, value in data.items():
            if key in cls.SECTIONS:
                if not isinstance(value, dict):
                    raise ConfigError(f"Section '{key}' must be a mapping")
                setattr(config, key, cls._build_section(cls.SECTIONS[key], key, value))
            elif key == "starting_gold":
                config.starting_gold = int(value)
            else:
                logger.debug(f"Ignoring unknown rules key: {key}")

        if config.ship.movement_by_tier:
            config.ship.movement_by_tier = {
                int(tier): int(moves) for tier, moves in config.ship.movement_by_tier.items()
            }
        return config

    @staticmethod
    def _build_section(section_cls, name: str, values: dict):
        section = section_cls()
        known = set(asdict(section).keys())
        for key, value in values.items():
            if key not in known:
                logger.debug(f"Ignoring unknown rules key: {name}.{key}")
                continue
            default = getattr(section, key)
            if isinstance(default, dict):
                merged = dict(default)
                merged.update(value or {})
                value = merged
            setattr(section, key, value)
        return section

    def to_dict(self) -> dict:
        data = {name: asdict(getattr(self, name)) for name in self.SECTIONS}
        data["starting_gold"] = self.starting_gold
        return data

    # Convenience lookups
    def structure_max_health(self, structure_type) -> int:
        key = getattr(structure_type, "value", structure_type)
        return self.structures.max_health.get(key, 10)

    def structure_tier(self, structure_type) -> int:
        key = getattr(structure_type, "value", structure_type)
        return self.structures.tiers.get(key, 1)
