"""Tests for order records and resolution ordering."""

import dataclasses

import pytest

from naval_engine import (
    HexCoord, OrderType, MoveOrder, DeployShipyardOrder, BuildShipOrder, BuildGalleonOrder,
    RepairShipOrder, UpgradeSailsOrder, AttackShipyardOrder, CancelConstructionOrder,
    sort_orders, order_to_dict, order_from_dict,
)

from conftest import path


def test_sort_by_priority_then_unit_id():
    orders = [
        MoveOrder("unit_2", 0, path((0, 0), (1, 0))),
        MoveOrder("unit_1", 1, path((5, 0), (4, 0))),
        UpgradeSailsOrder("unit_3", 0, "structure_0"),
        RepairShipOrder("unit_4", 0, "structure_0"),
        BuildGalleonOrder("structure_1", 0),
        BuildShipOrder("structure_0", 0),
        DeployShipyardOrder("unit_9", 1, HexCoord(-3, 0)),
    ]

    ordered = sort_orders(orders)

    assert [o.order_type for o in ordered] == [
        OrderType.DEPLOY_SHIPYARD,
        OrderType.BUILD_SHIP,
        OrderType.BUILD_GALLEON,
        OrderType.REPAIR_SHIP,
        OrderType.UPGRADE_SAILS,
        OrderType.MOVE,
        OrderType.MOVE,
    ]
    assert [o.unit_id for o in ordered[-2:]] == ["unit_1", "unit_2"]


def test_sort_ignores_submission_order():
    orders = [
        MoveOrder("unit_1", 0, path((0, 0), (1, 0))),
        BuildShipOrder("structure_1", 1),
        BuildShipOrder("structure_0", 0),
    ]
    assert sort_orders(orders) == sort_orders(list(reversed(orders)))


def test_move_order_path_is_a_tuple():
    order = MoveOrder("unit_0", 0, [HexCoord(0, 0), HexCoord(1, 0)])
    assert isinstance(order.path, tuple)
    assert order.destination == HexCoord(1, 0)


def test_orders_are_immutable():
    order = BuildShipOrder("structure_0", 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        order.player_id = 3


def test_id_aliases():
    assert BuildShipOrder("structure_2", 0).shipyard_id == "structure_2"
    assert BuildGalleonOrder("structure_3", 0).shipyard_id == "structure_3"
    assert CancelConstructionOrder("structure_2", 0, "job_4").job_id == "job_4"


class TestSerialization:

    def test_move_order(self):
        order = MoveOrder("unit_0", 1, path((0, 0), (1, 0), (2, -1)))
        data = order_to_dict(order)

        assert data["type"] == "move"
        assert data["path"] == [[0, 0], [1, 0], [2, -1]]
        assert order_from_dict(data) == order

    def test_attack_shipyard_order(self):
        order = AttackShipyardOrder("unit_0", 0, "structure_1", HexCoord(-3, 0), path((0, 0), (-1, 0)))
        assert order_from_dict(order_to_dict(order)) == order

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="frigate"):
            order_from_dict({"type": "build_frigate", "unit_id": "structure_0", "player_id": 0})
