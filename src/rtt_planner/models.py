"""
rtt_planner/models.py - 规划器数据模型

定义规划器使用的核心数据结构：Point、CircleArea、FieldConfig、
SampleSegment、DebugImage、SolverConfig、PlannerResult。

所有跨线程传递的数据都是不可变值或独立副本。
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

# FieldConfig.new 中起止圆所用边长的上限
MAX_FIELD_SIDE = 40.0


@dataclass(frozen=True)
class Point:
    """二维平面点"""
    x: float
    y: float

    def sq_dist(self, other: 'Point') -> float:
        """到 other 的距离平方（热路径上避免开方）"""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Point':
        return cls(float(data['x']), float(data['y']))


@dataclass(frozen=True)
class CircleArea:
    """圆形区域：起点区、终点区或障碍物

    Attributes:
        center: 圆心
        radius: 半径
    """
    center: Point
    radius: float

    def contains(self, point: Point) -> bool:
        """点是否严格位于圆内"""
        return self.center.sq_dist(point) < self.radius * self.radius

    def to_dict(self) -> Dict[str, Any]:
        return {'center': self.center.to_dict(), 'radius': self.radius}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CircleArea':
        return cls(Point.from_dict(data['center']), float(data['radius']))


Bounds = Tuple[float, float, float, float]


@dataclass(frozen=True)
class FieldConfig:
    """场地配置（由场地尺寸推导，构建后不可变）

    Attributes:
        start_area: 起点所在圆
        finish_area: 目标圆
        bounds: 采样矩形 (min_x, min_y, max_x, max_y)
    """
    start_area: CircleArea
    finish_area: CircleArea
    bounds: Bounds

    @classmethod
    def new(cls, width: float, height: float,
            max_side: float = MAX_FIELD_SIDE) -> 'FieldConfig':
        """由场地宽高推导起止圆

        边长取 min(width, height) 并截断到 max_side；圆直径为边长一半，
        圆心到近角 / 远角的偏移均为 padding + radius。
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"场地尺寸必须为正: {width} x {height}")
        area_side = min(width, height)
        area_side = min(area_side, max_side)
        diameter = area_side / 2.0
        radius = diameter / 2.0
        padding = diameter / 2.0

        return cls(
            start_area=CircleArea(
                center=Point(padding + radius, padding + radius),
                radius=radius,
            ),
            finish_area=CircleArea(
                center=Point(width - padding - radius, height - padding - radius),
                radius=radius,
            ),
            bounds=(0.0, 0.0, float(width), float(height)),
        )

    @property
    def width(self) -> float:
        return self.bounds[2] - self.bounds[0]

    @property
    def height(self) -> float:
        return self.bounds[3] - self.bounds[1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start_area': self.start_area.to_dict(),
            'finish_area': self.finish_area.to_dict(),
            'bounds': list(self.bounds),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldConfig':
        return cls(
            start_area=CircleArea.from_dict(data['start_area']),
            finish_area=CircleArea.from_dict(data['finish_area']),
            bounds=tuple(float(v) for v in data['bounds']),
        )


class SampleOutcome(Enum):
    """单次采样的碰撞检测结果"""
    PASSABLE = 'passable'
    BLOCKED = 'blocked'


@dataclass(frozen=True)
class SampleSegment:
    """最近节点 → 采样点 的线段及其结果"""
    outcome: SampleOutcome
    src: Point
    dst: Point

    @property
    def passable(self) -> bool:
        return self.outcome is SampleOutcome.PASSABLE


Segment = Tuple[Point, Point]


@dataclass(frozen=True)
class DebugImage:
    """调试模式下的一帧搜索快照

    Attributes:
        tick_id: 单调递增帧号
        routes_segs: 当前树的全部边
        sample_seg: 最近一次采样的线段（尚未采样时为 None）
    """
    tick_id: int
    routes_segs: Tuple[Segment, ...] = ()
    sample_seg: Optional[SampleSegment] = None

    def to_dict(self) -> Dict[str, Any]:
        seg = self.sample_seg
        return {
            'tick_id': self.tick_id,
            'routes_segs': [[a.to_dict(), b.to_dict()] for a, b in self.routes_segs],
            'sample_seg': None if seg is None else {
                'outcome': seg.outcome.value,
                'src': seg.src.to_dict(),
                'dst': seg.dst.to_dict(),
            },
        }


@dataclass
class SolverConfig:
    """求解器参数配置

    Attributes:
        max_field_side: 起止圆推导时边长的上限
        debug_tick_interval: 调试帧发出后的休眠时间 (s)
        seed: 随机种子（0 = 不固定种子）
        join_timeout: 关闭时等待工作线程退出的超时 (s)
    """
    max_field_side: float = MAX_FIELD_SIDE
    debug_tick_interval: float = 0.1
    seed: int = 0
    join_timeout: float = 5.0

    # ── JSON 序列化 ──

    def to_dict(self) -> Dict[str, Any]:
        """转为字典"""
        from dataclasses import fields as dc_fields
        return {f.name: getattr(self, f.name) for f in dc_fields(self)}

    def to_json(self, filepath: str | Path) -> str:
        """保存到 JSON 文件，返回路径字符串"""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return str(filepath)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SolverConfig':
        """从字典创建（忽略未知字段，缺失字段用默认值）"""
        from dataclasses import fields as dc_fields
        valid_fields = {f.name for f in dc_fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_json(cls, filepath: str | Path) -> 'SolverConfig':
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)


@dataclass
class PlannerResult:
    """一次求解的结果

    Attributes:
        success: 是否到达目标圆
        path: 根 → 目标节点 的路径点
        n_nodes: 树节点总数
        n_samples: 采样次数
        n_blocked: 被障碍物阻挡的采样次数
        computation_time: 求解耗时 (s)
        path_length: 路径长度
        message: 描述信息
        timestamp: 时间戳
    """
    success: bool = False
    path: List[Point] = field(default_factory=list)
    n_nodes: int = 0
    n_samples: int = 0
    n_blocked: int = 0
    computation_time: float = 0.0
    path_length: float = 0.0
    message: str = ""
    timestamp: str = field(
        default_factory=lambda: datetime.now().strftime('%Y%m%d_%H%M%S'))

    def compute_path_length(self) -> float:
        """计算路径总长度"""
        length = 0.0
        for a, b in zip(self.path, self.path[1:]):
            length += math.sqrt(a.sq_dist(b))
        self.path_length = length
        return length
