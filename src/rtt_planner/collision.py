"""
rtt_planner/collision.py - 线段碰撞检测

判断树节点到采样点的直线段是否穿过任一圆形障碍物：
- 圆心投影到线段单位方向，投影长度截断到 [0, 线段长度]
- 最近点到圆心的距离平方严格小于 r² 即判为阻挡
- 只有求单位方向时开一次方，其余全部用距离平方

零长度线段（距离平方 <= 0）视为"无路径"，不推进搜索。
"""

import logging
import math
from typing import List

from rtt import NodeRef, RandomTree

from .field import Field
from .models import CircleArea, Point

logger = logging.getLogger(__name__)


def closest_point_on_segment(src: Point, dst: Point, seg_len: float,
                             target: Point) -> Point:
    """线段 src→dst 上离 target 最近的点

    Args:
        src, dst: 线段端点
        seg_len: 线段长度（调用方预先计算，须 > 0）
        target: 目标点
    """
    ux = (dst.x - src.x) / seg_len
    uy = (dst.y - src.y) / seg_len
    proj = (target.x - src.x) * ux + (target.y - src.y) * uy
    if proj <= 0.0:
        return src
    if proj >= seg_len:
        return dst
    return Point(src.x + ux * proj, src.y + uy * proj)


class CollisionChecker:
    """圆形障碍物碰撞检测器

    Args:
        field: 求解所用的场地（障碍物在求解期间不变）

    Example:
        >>> checker = CollisionChecker(field)
        >>> checker.segment_clear(Point(0, 0), Point(10, 0))
        True
    """

    def __init__(self, field: Field) -> None:
        self.field = field
        self._obstacles: List[CircleArea] = field.get_obstacles()
        self._n_checks = 0

    @property
    def n_checks(self) -> int:
        """累计线段检测次数"""
        return self._n_checks

    def reset_counter(self) -> None:
        self._n_checks = 0

    def segment_clear(self, src: Point, dst: Point) -> bool:
        """线段 src→dst 是否不穿过任何障碍物

        Returns:
            True = 可通行, False = 被阻挡或线段退化
        """
        self._n_checks += 1
        if src.sq_dist(dst) <= 0.0:
            return False
        seg_len = math.sqrt(src.sq_dist(dst))

        for obstacle in self._obstacles:
            closest = closest_point_on_segment(src, dst, seg_len, obstacle.center)
            if closest.sq_dist(obstacle.center) < obstacle.radius * obstacle.radius:
                return False
        return True

    def has_route(self, tree: RandomTree, node_ref: NodeRef, dst: Point) -> bool:
        """树节点 node_ref 到 dst 的直线段是否可通行"""
        return self.segment_clear(tree.state_of(node_ref), dst)
