"""
rtt_planner/controller.py - 控制端

持有可变的实时场地，向求解线程发送命令并收取事件：
- 修改场地（加障碍物、重新生成）前总是发送 Abort；中止后到达的 RouteDone 被丢弃
- 每次求解发送场地副本，先 Abort 再 Solve，保证旧求解不会与新求解重叠
- 收到 DebugTick 立即回复 DebugTickAck，维持调试帧节流
"""

import logging
import queue
import threading
import time
from typing import List, Optional, Tuple

import numpy as np

from .field import Field
from .models import DebugImage, FieldConfig, Point, SolverConfig
from .protocol import (
    Abort,
    Channel,
    DebugTick,
    DebugTickAck,
    Event,
    RouteDone,
    Solve,
    SolveDebug,
    Terminate,
)
from .worker import SolverWorker

logger = logging.getLogger(__name__)

MODES = ('path', 'debug')


class SolverController:
    """求解线程的控制端

    Args:
        width, height: 场地尺寸
        config: 求解参数
        rng: 场地生成用随机数生成器

    Example:
        >>> with SolverController(640, 480) as ctrl:
        ...     ctrl.add_obstacle(Point(320, 240), 40.0)
        ...     ctrl.solve()
        ...     route = ctrl.wait_route(timeout=10.0)
    """

    def __init__(
        self,
        width: float,
        height: float,
        config: Optional[SolverConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config or SolverConfig()
        self._rng = rng if rng is not None else np.random.default_rng(
            self.config.seed or None)
        self.field_config = FieldConfig.new(
            width, height, max_side=self.config.max_field_side)
        self.field = Field.generate(self.field_config, self._rng)

        self.mode = 'path'
        self.solving = False
        self.route: Optional[Tuple[Point, ...]] = None
        self.debug_image: Optional[DebugImage] = None

        self.commands: Channel = Channel("commands")
        self.events: Channel = Channel("events")
        self.worker = SolverWorker(self.commands, self.events, self.config)
        self._thread: Optional[threading.Thread] = None

    # ── 线程生命周期 ──

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self.worker.run, name="RTT solver", daemon=True)
        self._thread.start()

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def shutdown(self) -> None:
        """终止求解线程并等待其退出"""
        if not self.commands.closed:
            self.commands.send(Terminate())
            self.commands.close()
        if self._thread is not None:
            self._thread.join(self.config.join_timeout)
            if self._thread.is_alive():
                logger.warning("求解线程在 %.1fs 内未退出", self.config.join_timeout)
        self.events.close()
        self.solving = False

    def __enter__(self) -> 'SolverController':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ── 场地与模式 ──

    def toggle_mode(self) -> str:
        """在 path / debug 模式之间切换（会中止当前求解）"""
        self.abort()
        self.mode = MODES[(MODES.index(self.mode) + 1) % len(MODES)]
        self.debug_image = None
        logger.info("切换模式: %s", self.mode)
        return self.mode

    def reset_field(self) -> Field:
        """重新生成场地（新起点、无障碍物）"""
        self.abort()
        self.field = Field.generate(self.field_config, self._rng)
        self.route = None
        self.debug_image = None
        return self.field

    def add_obstacle(self, center: Point, radius: float) -> None:
        self.abort()
        self.field.add_obstacle(center, radius)
        self.route = None

    # ── 命令 ──

    def solve(self) -> None:
        """以当前场地副本开始新求解"""
        self.commands.send(Abort())
        field = self.field.copy()
        if self.mode == 'debug':
            self.commands.send(SolveDebug(field))
        else:
            self.commands.send(Solve(field))
        self.solving = True
        self.route = None
        self.debug_image = None

    def abort(self) -> None:
        """中止当前求解

        总是发送 Abort：求解线程空闲时 Abort 是空操作，而 ``solving``
        只反映控制端已知的状态，可能落后于求解线程。
        """
        if not self.commands.closed:
            self.commands.send(Abort())
        self.solving = False

    # ── 事件 ──

    def _handle_event(self, event: Event) -> bool:
        """处理一个事件，返回是否接受（中止后到达的 RouteDone 被丢弃）"""
        if isinstance(event, RouteDone):
            if not self.solving:
                logger.debug("丢弃过期路径: %d 个点", len(event.route))
                return False
            self.route = event.route
            self.solving = False
            logger.info("收到路径: %d 个点", len(event.route))
        elif isinstance(event, DebugTick):
            self.debug_image = event.image
            self.commands.send(DebugTickAck(event.image.tick_id))
        return True

    def poll_events(self) -> List[Event]:
        """非阻塞取出全部待处理事件"""
        events = []
        while True:
            event = self.events.try_recv()
            if event is None:
                break
            self._handle_event(event)
            events.append(event)
        return events

    def wait_route(self, timeout: Optional[float] = None) -> Optional[Tuple[Point, ...]]:
        """阻塞等待被接受的 RouteDone，超时返回 None"""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
            try:
                event = self.events.recv(timeout=remaining)
            except queue.Empty:
                return None
            if self._handle_event(event) and isinstance(event, RouteDone):
                return event.route
