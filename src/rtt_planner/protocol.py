"""
rtt_planner/protocol.py - 控制端 ↔ 求解线程 消息协议

两条单向、无界、有序的通道：
- 命令通道（控制端 → 求解线程）：Solve / SolveDebug / Abort / Terminate / DebugTickAck
- 事件通道（求解线程 → 控制端）：RouteDone / DebugTick

跨线程数据全部按值传递（Field 为副本，路径与快照为不可变值），无需加锁。
"""

import logging
import queue
from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar, Union

from .field import Field
from .models import DebugImage, Point

logger = logging.getLogger(__name__)

T = TypeVar('T')


# ==================== 命令 ====================

@dataclass(frozen=True)
class Solve:
    """空闲时开始求解；求解中收到则忽略"""
    field: Field


@dataclass(frozen=True)
class SolveDebug:
    """同 Solve，但开启调试快照流"""
    field: Field


@dataclass(frozen=True)
class Abort:
    """取消当前求解并回到空闲，不发出任何事件"""


@dataclass(frozen=True)
class Terminate:
    """取消当前求解并永久停止求解线程"""


@dataclass(frozen=True)
class DebugTickAck:
    """确认已收到第 tick_id 帧调试快照"""
    tick_id: int


Command = Union[Solve, SolveDebug, Abort, Terminate, DebugTickAck]


# ==================== 事件 ====================

@dataclass(frozen=True)
class RouteDone:
    """求解成功：根 → 目标 的路径点"""
    route: Tuple[Point, ...]


@dataclass(frozen=True)
class DebugTick:
    """调试模式下的一帧快照"""
    image: DebugImage


Event = Union[RouteDone, DebugTick]


# ==================== 通道 ====================

class ChannelClosed(Exception):
    """通道已关闭（对端已离开）"""


_CLOSED = object()


class Channel(Generic[T]):
    """无界有序消息通道（单写单读）

    ``close()`` 之后 ``send`` 抛出 ChannelClosed；接收端在取完
    关闭前已入队的消息后抛出 ChannelClosed。

    Example:
        >>> ch = Channel("commands")
        >>> ch.send(Abort())
        >>> ch.try_recv()
        Abort()
        >>> ch.try_recv() is None
        True
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._queue: "queue.Queue" = queue.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: T) -> None:
        if self._closed:
            raise ChannelClosed(f"通道 '{self.name}' 已关闭")
        self._queue.put(message)

    def close(self) -> None:
        """关闭通道（幂等）"""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_CLOSED)
        logger.debug("通道 '%s' 已关闭", self.name)

    def _unwrap(self, item):
        if item is _CLOSED:
            # 放回哨兵，后续接收同样得到 ChannelClosed
            self._queue.put(_CLOSED)
            raise ChannelClosed(f"通道 '{self.name}' 已关闭")
        return item

    def recv(self, timeout: Optional[float] = None) -> T:
        """阻塞接收

        Raises:
            ChannelClosed: 通道已关闭且无剩余消息
            queue.Empty: 指定 timeout 且超时
        """
        return self._unwrap(self._queue.get(timeout=timeout))

    def try_recv(self) -> Optional[T]:
        """非阻塞接收，无消息时返回 None"""
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        return self._unwrap(item)

    def __repr__(self) -> str:
        return f"Channel(name={self.name!r}, closed={self._closed})"
