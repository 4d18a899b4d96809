"""
rtt_planner/sampling_planner.py - RRT 采样规划器

算法流程（每轮外层迭代，当前前沿节点为 n）：
1. 若 n 已在目标圆内 → 重建 根→n 路径，求解成功
2. 否则反复：
   a. 在 field.bounds 内均匀采样 sample
   b. 线性扫描全部树节点，找距离平方最小者（先根后子节点，相等取先遇到的）
   c. 检查最近节点 → sample 线段是否可通行
   d. 可通行 → 以 sample 为状态扩展子节点，成为新前沿，回到 1
   e. 被阻挡 → 丢弃 sample 重新采样（无重试上限）

调试模式与正常模式共用同一循环，区别仅在于是否注入 ``PlannerSink``。
取消由 ``interrupted`` 回调在每次内层采样开始时检查。
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from rtt import NodeRef, RandomTree, VecRandomTree

from .collision import CollisionChecker
from .field import Field
from .models import (
    PlannerResult,
    Point,
    SampleOutcome,
    SampleSegment,
    Segment,
)

logger = logging.getLogger(__name__)


class PlannerState(Enum):
    AWAITING_ROOT = 'awaiting_root'
    GROWING_FRONTIER = 'growing_frontier'
    GOAL_REACHED = 'goal_reached'
    DONE = 'done'


class PlannerSink(ABC):
    """规划过程观察者（调试快照用）"""

    @abstractmethod
    def observe(
        self,
        tree: RandomTree,
        sample_seg: Optional[SampleSegment],
        tree_changed: bool,
    ) -> None:
        """每次采样后调用；创建根节点后也调用一次（sample_seg 为 None）"""


def tree_segments(tree: RandomTree) -> List[Segment]:
    """枚举树的全部边，每条边只输出一次

    每个非根节点恰好对应一条 父→子 边，按子节点枚举；
    不同节点持有相同状态时也不会漏边或重复。
    """
    segments: List[Segment] = []
    for node_ref, state in tree.all_states().children:
        path = tree.path_from_root(node_ref)
        segments.append((path[-2], state))
    return segments


def nearest_node(tree: RandomTree, sample: Point) -> NodeRef:
    """线性扫描找最近节点（距离平方，相等保留先遇到者）"""
    states = tree.all_states()
    closest_ref, closest_state = states.root
    closest_sq = sample.sq_dist(closest_state)
    for node_ref, state in states.children:
        sq_dist = sample.sq_dist(state)
        if sq_dist < closest_sq:
            closest_ref, closest_sq = node_ref, sq_dist
    return closest_ref


class SamplingPlanner:
    """RRT 可行路径规划器

    Args:
        tree_factory: 创建空随机树的工厂（默认 VecRandomTree）

    Example:
        >>> planner = SamplingPlanner()
        >>> result = planner.solve(field, rng=np.random.default_rng(0))
        >>> if result.success:
        ...     print(f"路径点数: {len(result.path)}")
    """

    def __init__(
        self,
        tree_factory: Callable[[], RandomTree] = VecRandomTree,
    ) -> None:
        self.tree_factory = tree_factory
        self.state = PlannerState.AWAITING_ROOT

    def solve(
        self,
        field: Field,
        rng: Optional[np.random.Generator] = None,
        interrupted: Optional[Callable[[], bool]] = None,
        sink: Optional[PlannerSink] = None,
    ) -> PlannerResult:
        """在 field 上求解从 field.start 到目标圆的路径

        Args:
            field: 场地（求解期间独占）
            rng: 随机数生成器
            interrupted: 取消检查回调，返回 True 时立即终止本次求解
            sink: 调试观察者（可选）

        Returns:
            PlannerResult；被取消时 success=False, message="aborted"
        """
        t0 = time.time()
        if rng is None:
            rng = np.random.default_rng()
        result = PlannerResult()
        checker = CollisionChecker(field)
        min_x, min_y, max_x, max_y = field.config.bounds

        self.state = PlannerState.AWAITING_ROOT
        tree = self.tree_factory()
        node_ref = tree.create_root(field.start)
        goal_reached = field.goal_reached(field.start)
        self.state = PlannerState.GROWING_FRONTIER
        if sink is not None:
            sink.observe(tree, None, True)

        while not goal_reached:
            extended = False
            while not extended:
                if interrupted is not None and interrupted():
                    self.state = PlannerState.DONE
                    result.message = "aborted"
                    result.n_nodes = tree.n_nodes
                    result.computation_time = time.time() - t0
                    logger.debug("求解被取消: %d 次采样, %d 个节点",
                                 result.n_samples, result.n_nodes)
                    return result

                sample = Point(float(rng.uniform(min_x, max_x)),
                               float(rng.uniform(min_y, max_y)))
                result.n_samples += 1
                closest = nearest_node(tree, sample)

                if checker.has_route(tree, closest, sample):
                    outcome = SampleOutcome.PASSABLE
                    node_ref = tree.expand(closest, sample)
                    goal_reached = field.goal_reached(sample)
                    extended = True
                else:
                    outcome = SampleOutcome.BLOCKED
                    result.n_blocked += 1

                if sink is not None:
                    seg = SampleSegment(outcome, tree.state_of(closest), sample)
                    sink.observe(tree, seg, extended)

        self.state = PlannerState.GOAL_REACHED
        result.path = tree.path_from_root(node_ref)
        result.success = True
        result.n_nodes = tree.n_nodes
        result.compute_path_length()
        result.computation_time = time.time() - t0
        result.message = "goal reached"
        self.state = PlannerState.DONE
        logger.info("到达目标: %d 个路径点, 长度 %.3f, %d 次采样 (%d 阻挡), "
                    "%d 个节点, 耗时 %.3fs",
                    len(result.path), result.path_length, result.n_samples,
                    result.n_blocked, result.n_nodes, result.computation_time)
        return result
