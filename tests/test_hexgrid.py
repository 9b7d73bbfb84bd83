"""Tests for hex coordinates, the tile index and A* pathfinding."""

import pytest

from naval_engine import HexCoord, HexGrid, Tile, TileType, find_path, is_continuous_path

from conftest import LAND, HARBOR, make_grid


SAMPLE_COORDS = [HexCoord(0, 0), HexCoord(3, -1), HexCoord(-2, 5), HexCoord(7, -7)]


class TestHexCoord:

    @pytest.mark.parametrize("coord", SAMPLE_COORDS)
    def test_neighbor_then_opposite_returns_home(self, coord):
        for direction in range(6):
            back = HexCoord.opposite_direction(direction)
            assert coord.neighbor(direction).neighbor(back) == coord

    def test_cube_coordinates_sum_to_zero(self):
        for coord in SAMPLE_COORDS:
            assert coord.q + coord.r + coord.s == 0

    def test_distance(self):
        origin = HexCoord(0, 0)
        assert origin.distance(origin) == 0
        assert origin.distance(HexCoord(3, -1)) == 3
        assert HexCoord(-2, 5).distance(HexCoord(1, 1)) == 4
        assert all(origin.distance(n) == 1 for n in origin.neighbors())

    def test_direction_to(self):
        origin = HexCoord(0, 0)
        assert origin.direction_to(HexCoord(1, 0)) == 0
        assert origin.direction_to(HexCoord(0, -1)) == 2
        assert origin.direction_to(HexCoord(2, 0)) is None

    def test_equality_and_hashing_by_value(self):
        assert HexCoord(1, 2) == HexCoord(1, 2)
        assert len({HexCoord(1, 2), HexCoord(1, 2), HexCoord(2, 1)}) == 2

    def test_ordering_is_q_then_r(self):
        coords = [HexCoord(1, 0), HexCoord(0, 5), HexCoord(0, -1)]
        assert sorted(coords) == [HexCoord(0, -1), HexCoord(0, 5), HexCoord(1, 0)]

    def test_list_round_trip_and_str(self):
        coord = HexCoord(-3, 4)
        assert HexCoord.from_list(coord.to_list()) == coord
        assert str(coord) == "(-3, 4)"


class TestHexGrid:

    def test_navigability(self, grid):
        assert grid.is_navigable(HexCoord(0, 0))
        assert grid.is_navigable(HARBOR)
        assert not grid.is_navigable(LAND[0])
        assert not grid.is_navigable(HexCoord(40, 40))

    def test_navigable_neighbors_skip_land(self, grid):
        neighbors = grid.get_navigable_neighbors(HexCoord(-3, 1))
        assert LAND[0] not in neighbors
        assert LAND[1] not in neighbors
        assert HARBOR in neighbors

    def test_stats(self, grid):
        stats = grid.get_stats()
        assert stats["total_tiles"] == 127  # 1 + 3 * 6 * 7
        assert stats["type_distribution"]["land"] == 2
        assert stats["type_distribution"]["harbor"] == 1
        assert stats["islands"] == 1

    def test_dict_round_trip(self, grid):
        restored = HexGrid.from_dict(grid.to_dict())
        assert restored.to_dict() == grid.to_dict()
        assert restored.get_tile(HARBOR).type == TileType.HARBOR


class TestPathfinding:

    def test_path_steps_are_adjacent_and_navigable(self, grid):
        start, goal = HexCoord(-5, 0), HexCoord(5, -2)
        result = find_path(grid, start, goal)

        assert result[0] == start
        assert result[-1] == goal
        assert is_continuous_path(result)
        assert all(grid.is_navigable(c) for c in result)

    def test_open_sea_path_is_shortest(self, grid):
        start, goal = HexCoord(0, 0), HexCoord(4, -2)
        result = find_path(grid, start, goal)
        assert len(result) - 1 == start.distance(goal)

    def test_routes_around_land(self, grid):
        start, goal = HexCoord(-5, 0), HexCoord(-3, 1)
        result = find_path(grid, start, goal)
        assert not any(c in LAND for c in result)
        assert len(result) - 1 > start.distance(goal)

    def test_same_start_and_goal(self, grid):
        assert find_path(grid, HexCoord(1, 1), HexCoord(1, 1)) == [HexCoord(1, 1)]

    def test_non_navigable_endpoint(self, grid):
        assert find_path(grid, HexCoord(0, 0), LAND[0]) is None
        assert find_path(grid, LAND[0], HexCoord(0, 0)) is None

    def test_unreachable_goal(self):
        grid = HexGrid()
        grid.add_tile(Tile(HexCoord(0, 0), TileType.SEA))
        grid.add_tile(Tile(HexCoord(5, 0), TileType.SEA))
        assert find_path(grid, HexCoord(0, 0), HexCoord(5, 0)) is None

    def test_max_distance_limit(self, grid):
        assert find_path(grid, HexCoord(0, 0), HexCoord(5, 0), max_distance=3) is None

    def test_deterministic(self):
        first = find_path(make_grid(), HexCoord(-5, 2), HexCoord(5, -3))
        second = find_path(make_grid(), HexCoord(-5, 2), HexCoord(5, -3))
        assert first == second


def test_is_continuous_path():
    assert is_continuous_path([HexCoord(0, 0), HexCoord(1, 0), HexCoord(1, 1)])
    assert not is_continuous_path([HexCoord(0, 0), HexCoord(2, 0)])
