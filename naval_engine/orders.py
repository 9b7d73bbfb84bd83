"""
Orders submitted by players during the planning phase.

Orders form a closed family: one frozen dataclass per OrderType. Every order
carries the id of the entity it acts on (a unit, or a shipyard for build and
cancel orders) and the issuing player's id.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import ClassVar

from .hexgrid import HexCoord


class OrderType(Enum):
    DEPLOY_SHIPYARD = "deploy_shipyard"
    BUILD_SHIP = "build_ship"
    BUILD_GALLEON = "build_galleon"
    REPAIR_SHIP = "repair_ship"
    UPGRADE_SHIP = "upgrade_ship"
    UPGRADE_SAILS = "upgrade_sails"
    UPGRADE_CANNONS = "upgrade_cannons"
    UPGRADE_MAX_LIFE = "upgrade_max_life"
    UPGRADE_STRUCTURE = "upgrade_structure"
    CANCEL_CONSTRUCTION = "cancel_construction"
    ATTACK_SHIPYARD = "attack_shipyard"
    MOVE = "move"


# Resolution order within a turn; lower runs first
ORDER_PRIORITY = {
    OrderType.DEPLOY_SHIPYARD: 0,
    OrderType.BUILD_SHIP: 1,
    OrderType.BUILD_GALLEON: 2,
    OrderType.REPAIR_SHIP: 3,
    OrderType.UPGRADE_SHIP: 4,
    OrderType.UPGRADE_SAILS: 5,
    OrderType.UPGRADE_CANNONS: 6,
    OrderType.UPGRADE_MAX_LIFE: 7,
    OrderType.UPGRADE_STRUCTURE: 8,
    OrderType.CANCEL_CONSTRUCTION: 9,
    OrderType.ATTACK_SHIPYARD: 10,
    OrderType.MOVE: 11,
}

UPGRADE_ORDER_TYPES = (
    OrderType.UPGRADE_SHIP,
    OrderType.UPGRADE_SAILS,
    OrderType.UPGRADE_CANNONS,
    OrderType.UPGRADE_MAX_LIFE,
)


@dataclass(frozen=True)
class Order:
    unit_id: str
    player_id: int

    order_type: ClassVar[OrderType]


@dataclass(frozen=True)
class MoveOrder(Order):
    """Sail along a path. path[0] is the unit's current position."""
    path: tuple[HexCoord, ...]

    order_type: ClassVar[OrderType] = OrderType.MOVE

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))

    @property
    def destination(self) -> HexCoord:
        return self.path[-1]


@dataclass(frozen=True)
class DeployShipyardOrder(Order):
    """Consume a ship to found a shipyard on the harbor it sits on."""
    position: HexCoord

    order_type: ClassVar[OrderType] = OrderType.DEPLOY_SHIPYARD


@dataclass(frozen=True)
class BuildShipOrder(Order):
    """Queue a ship at a shipyard. unit_id is the shipyard id."""

    order_type: ClassVar[OrderType] = OrderType.BUILD_SHIP

    @property
    def shipyard_id(self) -> str:
        return self.unit_id


@dataclass(frozen=True)
class BuildGalleonOrder(Order):
    """Queue a galleon at a Naval Fortress. unit_id is the fortress id."""

    order_type: ClassVar[OrderType] = OrderType.BUILD_GALLEON

    @property
    def shipyard_id(self) -> str:
        return self.unit_id


@dataclass(frozen=True)
class RepairShipOrder(Order):
    shipyard_id: str

    order_type: ClassVar[OrderType] = OrderType.REPAIR_SHIP


@dataclass(frozen=True)
class UpgradeShipOrder(Order):
    shipyard_id: str

    order_type: ClassVar[OrderType] = OrderType.UPGRADE_SHIP


@dataclass(frozen=True)
class UpgradeSailsOrder(Order):
    shipyard_id: str

    order_type: ClassVar[OrderType] = OrderType.UPGRADE_SAILS


@dataclass(frozen=True)
class UpgradeCannonsOrder(Order):
    shipyard_id: str

    order_type: ClassVar[OrderType] = OrderType.UPGRADE_CANNONS


@dataclass(frozen=True)
class UpgradeMaxLifeOrder(Order):
    shipyard_id: str

    order_type: ClassVar[OrderType] = OrderType.UPGRADE_MAX_LIFE


@dataclass(frozen=True)
class UpgradeStructureOrder(Order):
    """Raise a yard one tier. unit_id is the structure id."""

    order_type: ClassVar[OrderType] = OrderType.UPGRADE_STRUCTURE

    @property
    def structure_id(self) -> str:
        return self.unit_id


@dataclass(frozen=True)
class CancelConstructionOrder(Order):
    """Cancel a queued or building job. unit_id is the shipyard id."""
    job_id: str

    order_type: ClassVar[OrderType] = OrderType.CANCEL_CONSTRUCTION


@dataclass(frozen=True)
class AttackShipyardOrder(Order):
    """Sail next to an enemy shipyard and try to destroy it."""
    target_shipyard_id: str
    target_position: HexCoord
    path: tuple[HexCoord, ...] = ()

    order_type: ClassVar[OrderType] = OrderType.ATTACK_SHIPYARD

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))


ORDER_CLASSES: dict[OrderType, type] = {
    OrderType.MOVE: MoveOrder,
    OrderType.DEPLOY_SHIPYARD: DeployShipyardOrder,
    OrderType.BUILD_SHIP: BuildShipOrder,
    OrderType.BUILD_GALLEON: BuildGalleonOrder,
    OrderType.REPAIR_SHIP: RepairShipOrder,
    OrderType.UPGRADE_SHIP: UpgradeShipOrder,
    OrderType.UPGRADE_SAILS: UpgradeSailsOrder,
    OrderType.UPGRADE_CANNONS: UpgradeCannonsOrder,
    OrderType.UPGRADE_MAX_LIFE: UpgradeMaxLifeOrder,
    OrderType.UPGRADE_STRUCTURE: UpgradeStructureOrder,
    OrderType.CANCEL_CONSTRUCTION: CancelConstructionOrder,
    OrderType.ATTACK_SHIPYARD: AttackShipyardOrder,
}


def sort_orders(orders: list[Order]) -> list[Order]:
    """Deterministic resolution order: type priority, then unit id."""
    return sorted(orders, key=lambda o: (ORDER_PRIORITY[o.order_type], o.unit_id))


def order_to_dict(order: Order) -> dict:
    data = {"type": order.order_type.value}
    for f in fields(order):
        value = getattr(order, f.name)
        if isinstance(value, HexCoord):
            value = value.to_list()
        elif isinstance(value, tuple):
            value = [c.to_list() for c in value]
        data[f.name] = value
    return data


def order_from_dict(data: dict) -> Order:
    try:
        order_type = OrderType(data["type"])
    except (KeyError, ValueError):
        raise ValueError(f"Unknown order type: {data.get('type')!r}")

    cls = ORDER_CLASSES[order_type]
    kwargs = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name in ("path",):
            value = tuple(HexCoord.from_list(c) for c in value)
        elif f.name in ("position", "target_position"):
            value = HexCoord.from_list(value)
        kwargs[f.name] = value
    return cls(**kwargs)
