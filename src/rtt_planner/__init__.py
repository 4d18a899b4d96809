"""
rtt_planner - 圆形障碍物场地上的 RRT 可行路径规划

在二维场地中，从起点圆内的随机起点出发生长随机树，直到某个节点
落入目标圆。求解在独立线程中运行，控制端通过命令 / 事件通道驱动：

1. Field: 起止圆、采样矩形、随机起点、圆形障碍物
2. CollisionChecker: 树节点 → 采样点 直线段的障碍物检测
3. SamplingPlanner: 采样 → 最近节点 → 碰撞检测 → 扩展 → 目标判定
4. SolverWorker: 命令分发、取消、调试帧确认节流
5. SolverController: 控制端（持有实时场地、收发消息）

树存储由 ``rtt`` 包提供，规划器只依赖其抽象接口。
"""

from .models import (
    Point,
    CircleArea,
    FieldConfig,
    SampleOutcome,
    SampleSegment,
    DebugImage,
    SolverConfig,
    PlannerResult,
)
from .field import Field
from .collision import CollisionChecker
from .sampling_planner import (
    PlannerState,
    PlannerSink,
    SamplingPlanner,
    nearest_node,
    tree_segments,
)
from .protocol import (
    Solve,
    SolveDebug,
    Abort,
    Terminate,
    DebugTickAck,
    RouteDone,
    DebugTick,
    Channel,
    ChannelClosed,
)
from .worker import DebugPacer, SolverWorker
from .controller import SolverController

__version__ = "0.1.0"
__all__ = [
    # 数据模型
    'Point',
    'CircleArea',
    'FieldConfig',
    'SampleOutcome',
    'SampleSegment',
    'DebugImage',
    'SolverConfig',
    'PlannerResult',
    # 场地与碰撞
    'Field',
    'CollisionChecker',
    # 核心算法
    'PlannerState',
    'PlannerSink',
    'SamplingPlanner',
    'nearest_node',
    'tree_segments',
    # 消息协议
    'Solve',
    'SolveDebug',
    'Abort',
    'Terminate',
    'DebugTickAck',
    'RouteDone',
    'DebugTick',
    'Channel',
    'ChannelClosed',
    # 线程
    'DebugPacer',
    'SolverWorker',
    'SolverController',
]
