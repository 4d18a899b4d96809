"""test/planner/test_collision.py - 线段碰撞检测测试"""
import math

import numpy as np
import pytest

from rtt import VecRandomTree
from rtt_planner.collision import CollisionChecker, closest_point_on_segment
from rtt_planner.field import Field
from rtt_planner.models import FieldConfig, Point


class TestClosestPoint:
    """线段最近点辅助函数测试"""

    def test_interior_projection(self):
        p = closest_point_on_segment(Point(0, 0), Point(10, 0), 10.0, Point(4, 3))
        assert p == Point(4.0, 0.0)

    def test_clamped_to_src(self):
        src = Point(0, 0)
        p = closest_point_on_segment(src, Point(10, 0), 10.0, Point(-5, 2))
        assert p is src

    def test_clamped_to_dst(self):
        dst = Point(10, 0)
        p = closest_point_on_segment(Point(0, 0), dst, 10.0, Point(15, -1))
        assert p is dst

    def test_diagonal(self):
        seg_len = math.sqrt(200.0)
        p = closest_point_on_segment(Point(0, 0), Point(10, 10), seg_len, Point(10, 0))
        assert p.x == pytest.approx(5.0)
        assert p.y == pytest.approx(5.0)


class TestCollisionChecker:
    """CollisionChecker 测试"""

    def test_blocked_through_center(self, unit_checker):
        """(0,5)→(10,5) 穿过圆心 (5,5)"""
        assert unit_checker.segment_clear(Point(0, 5), Point(10, 5)) is False

    def test_passable_below(self, unit_checker):
        """(0,0)→(10,0) 离圆心 5 > r=2"""
        assert unit_checker.segment_clear(Point(0, 0), Point(10, 0)) is True

    def test_tangent_is_passable(self, unit_checker):
        """最近距离恰好等于半径：严格小于才算阻挡"""
        assert unit_checker.segment_clear(Point(0, 3), Point(10, 3)) is True

    def test_stops_short_of_obstacle(self, unit_checker):
        """终点在障碍物外：最近点截断到终点"""
        assert unit_checker.segment_clear(Point(0, 5), Point(2, 5)) is True

    def test_ends_inside_obstacle(self, unit_checker):
        assert unit_checker.segment_clear(Point(0, 5), Point(4, 5)) is False

    def test_starts_inside_obstacle(self, unit_checker):
        assert unit_checker.segment_clear(Point(5, 4), Point(0, 0)) is False

    def test_degenerate_segment_rejected(self, unit_checker):
        """零长度线段视为无路径（即使远离障碍物）"""
        assert unit_checker.segment_clear(Point(9, 9), Point(9, 9)) is False

    def test_no_obstacles_always_passable(self, rng):
        field = Field(FieldConfig.new(100, 100), Point(0, 0))
        checker = CollisionChecker(field)
        for _ in range(50):
            a = Point(*rng.uniform(0, 100, size=2))
            b = Point(*rng.uniform(0, 100, size=2))
            assert checker.segment_clear(a, b) is True

    def test_first_blocking_obstacle_short_circuits(self):
        field = Field(FieldConfig.new(20, 20), Point(0, 0))
        field.add_obstacle(Point(5, 0), 1.0)
        field.add_obstacle(Point(15, 0), 1.0)
        checker = CollisionChecker(field)
        assert checker.segment_clear(Point(0, 0), Point(20, 0)) is False
        assert checker.segment_clear(Point(0, 5), Point(20, 5)) is True

    def test_obstacles_snapshot_at_construction(self, unit_obstacle_field):
        """求解期间使用的障碍物集合固定"""
        checker = CollisionChecker(unit_obstacle_field)
        unit_obstacle_field.add_obstacle(Point(5, 0), 2.0)
        assert checker.segment_clear(Point(0, 0), Point(10, 0)) is True

    def test_has_route_uses_tree_state(self, unit_checker):
        tree = VecRandomTree()
        root = tree.create_root(Point(0, 5))
        low = tree.expand(root, Point(0, 0))
        assert unit_checker.has_route(tree, root, Point(10, 5)) is False
        assert unit_checker.has_route(tree, low, Point(10, 0)) is True

    def test_has_route_invalid_ref_raises(self, unit_checker):
        tree = VecRandomTree()
        tree.create_root(Point(0, 0))
        other = VecRandomTree()
        foreign = other.create_root(Point(1, 1))
        with pytest.raises(ValueError):
            unit_checker.has_route(tree, foreign, Point(3, 3))

    def test_check_counter(self, unit_checker):
        unit_checker.segment_clear(Point(0, 0), Point(1, 0))
        unit_checker.segment_clear(Point(0, 0), Point(0, 0))
        assert unit_checker.n_checks == 2
        unit_checker.reset_counter()
        assert unit_checker.n_checks == 0

    def test_numpy_scalars_accepted(self, unit_checker):
        a = Point(np.float64(0.0), np.float64(5.0))
        b = Point(np.float64(10.0), np.float64(5.0))
        assert unit_checker.segment_clear(a, b) is False
