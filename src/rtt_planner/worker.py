"""
rtt_planner/worker.py - 求解线程主循环

状态机：
- 空闲：阻塞等待命令。Solve / SolveDebug 开始求解；Abort 忽略，DebugTickAck 只更新授信；
  Terminate 或命令通道关闭 → 线程退出
- 求解中：每次内层采样前非阻塞轮询一次命令。Solve* 忽略；Abort → 丢弃
  当前树回到空闲（不发事件）；Terminate 或通道关闭 → 线程退出；
  DebugTickAck 为调试帧授信
- 成功：发送 RouteDone(path) 后回到空闲

调试节流（DebugPacer）：
    仅当 tick_id 等于当前授信帧号时才发送 DebugTick，发送后 tick_id += 1
    并休眠 debug_tick_interval；收到 DebugTickAck(k) 后授信帧号变为 k + 1。
    因此任意时刻最多一帧调试快照在途。
"""

import logging
import time
from typing import Callable, Optional, Tuple

import numpy as np

from rtt import RandomTree

from .field import Field
from .models import DebugImage, SampleSegment, Segment, SolverConfig
from .protocol import (
    Channel,
    ChannelClosed,
    DebugTick,
    DebugTickAck,
    RouteDone,
    Solve,
    SolveDebug,
    Terminate,
)
from .sampling_planner import PlannerSink, SamplingPlanner, tree_segments

logger = logging.getLogger(__name__)


class DebugPacer(PlannerSink):
    """调试快照构建与确认节流

    帧号与授信在整个线程生命周期内单调递增，跨多次求解保持，
    上一次求解遗留的确认仍能正确推进授信。

    Args:
        events: 事件通道
        interval: 每发送一帧后的休眠时间 (s)
        sleep: 休眠函数（测试可替换）
    """

    def __init__(
        self,
        events: Channel,
        interval: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.events = events
        self.interval = interval
        self._sleep = sleep
        self.tick_id = 0
        self.credit = 0
        self.n_withheld = 0
        self.n_rebuilds = 0
        self._routes: Tuple[Segment, ...] = ()
        self._routes_stale = False

    def acknowledge(self, tick_id: int) -> None:
        """收到第 tick_id 帧的确认"""
        self.credit = max(self.credit, tick_id + 1)

    def reset(self) -> None:
        """新一次求解开始，清空树快照"""
        self._routes = ()
        self._routes_stale = False

    def observe(
        self,
        tree: RandomTree,
        sample_seg: Optional[SampleSegment],
        tree_changed: bool,
    ) -> None:
        # 树边延迟到发送时重建
        if tree_changed:
            self._routes_stale = True
        if self.tick_id != self.credit:
            self.n_withheld += 1
            return
        if self._routes_stale:
            self._routes = tuple(tree_segments(tree))
            self._routes_stale = False
            self.n_rebuilds += 1
        image = DebugImage(self.tick_id, self._routes, sample_seg)
        self.events.send(DebugTick(image))
        logger.debug("发送调试帧 %d: %d 条边", self.tick_id, len(self._routes))
        self.tick_id += 1
        if self.interval > 0:
            self._sleep(self.interval)


class SolverWorker:
    """求解线程

    Args:
        commands: 命令通道（控制端 → 本线程）
        events: 事件通道（本线程 → 控制端）
        config: 求解参数
        planner: 采样规划器（默认 SamplingPlanner()）
        sleep: 调试节流用的休眠函数

    Example:
        >>> worker = SolverWorker(commands, events)
        >>> thread = threading.Thread(target=worker.run, name="RTT solver")
        >>> thread.start()
    """

    def __init__(
        self,
        commands: Channel,
        events: Channel,
        config: Optional[SolverConfig] = None,
        planner: Optional[SamplingPlanner] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.commands = commands
        self.events = events
        self.config = config or SolverConfig()
        self.planner = planner or SamplingPlanner()
        self.pacer = DebugPacer(events, self.config.debug_tick_interval, sleep)
        self._rng = np.random.default_rng(self.config.seed or None)
        self._terminate = False
        self.n_solves = 0
        self.n_routes = 0

    def run(self) -> None:
        """线程入口：运行直到 Terminate 或通道关闭"""
        logger.info("求解线程启动")
        try:
            self._run_idle()
        except Exception:
            logger.exception("求解线程异常退出")
            raise
        logger.info("求解线程退出: %d 次求解, %d 条路径",
                    self.n_solves, self.n_routes)

    def _run_idle(self) -> None:
        while True:
            try:
                command = self.commands.recv()
            except ChannelClosed:
                return
            if isinstance(command, (Solve, SolveDebug)):
                if self._run_solve(command.field, isinstance(command, SolveDebug)):
                    return
            elif isinstance(command, Terminate):
                return
            elif isinstance(command, DebugTickAck):
                self.pacer.acknowledge(command.tick_id)
            else:
                logger.debug("空闲时忽略命令 %r", command)

    def _interrupted(self) -> bool:
        """求解中的单次非阻塞轮询，返回 True 表示结束本次求解"""
        try:
            command = self.commands.try_recv()
        except ChannelClosed:
            self._terminate = True
            return True
        if command is None or isinstance(command, (Solve, SolveDebug)):
            return False
        if isinstance(command, DebugTickAck):
            self.pacer.acknowledge(command.tick_id)
            return False
        if isinstance(command, Terminate):
            self._terminate = True
        # Abort / Terminate
        return True

    def _run_solve(self, field: Field, debug: bool) -> bool:
        """执行一次求解，返回 True 表示线程应退出"""
        self.n_solves += 1
        self._terminate = False
        logger.info("开始求解 #%d (debug=%s): %r", self.n_solves, debug, field)

        sink = None
        if debug:
            self.pacer.reset()
            sink = self.pacer

        try:
            result = self.planner.solve(
                field, rng=self._rng, interrupted=self._interrupted, sink=sink)
            if result.success:
                self.events.send(RouteDone(tuple(result.path)))
                self.n_routes += 1
            else:
                logger.info("求解 #%d 已取消 (terminate=%s)",
                            self.n_solves, self._terminate)
        except ChannelClosed:
            logger.info("事件通道已关闭，视为终止")
            return True
        return self._terminate
