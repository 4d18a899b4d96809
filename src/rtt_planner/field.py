"""
rtt_planner/field.py - 场地与障碍物管理

场地由 FieldConfig（起止圆 + 采样矩形）、随机起点和一组圆形障碍物组成。
每次求解拿到的是控制端场地的独立副本，求解期间障碍物不会变化。
"""

import json
import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np

from .models import CircleArea, FieldConfig, Point

logger = logging.getLogger(__name__)


class Field:
    """规划场地

    Example:
        >>> config = FieldConfig.new(640, 480)
        >>> field = Field.generate(config, np.random.default_rng(42))
        >>> field.add_obstacle(Point(320, 240), 30.0)
        >>> field.goal_reached(field.config.finish_area.center)
        True
    """

    def __init__(
        self,
        config: FieldConfig,
        start: Point,
        obstacles: Optional[List[CircleArea]] = None,
    ) -> None:
        self.config = config
        self.start = start
        self._obstacles: List[CircleArea] = list(obstacles or [])

    @classmethod
    def generate(
        cls,
        config: FieldConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> 'Field':
        """在起点圆内随机放置起点

        半径在 [0, r) 内均匀取值（非面积均匀，样本偏向圆心），
        角度在 [0, 2π) 内均匀取值。
        """
        if rng is None:
            rng = np.random.default_rng()
        area = config.start_area
        rnd_radius = rng.uniform(0.0, area.radius)
        rnd_angle = rng.uniform(0.0, math.pi * 2.0)
        start = Point(
            area.center.x + rnd_radius * math.cos(rnd_angle),
            area.center.y + rnd_radius * math.sin(rnd_angle),
        )
        logger.debug("生成场地: bounds=%s, start=(%.3f, %.3f)",
                     config.bounds, start.x, start.y)
        return cls(config, start)

    @property
    def n_obstacles(self) -> int:
        return len(self._obstacles)

    @property
    def obstacles(self) -> List[CircleArea]:
        """障碍物只读视图（副本）"""
        return list(self._obstacles)

    def get_obstacles(self) -> List[CircleArea]:
        """获取所有障碍物"""
        return list(self._obstacles)

    def add_obstacle(self, center: Point, radius: float) -> CircleArea:
        """添加一个圆形障碍物

        Args:
            center: 圆心
            radius: 半径（必须为正）

        Returns:
            创建的 CircleArea
        """
        if radius <= 0:
            raise ValueError(f"障碍物半径必须为正: {radius}")
        obstacle = CircleArea(center=center, radius=float(radius))
        self._obstacles.append(obstacle)
        logger.debug("添加障碍物 #%d: center=(%.3f, %.3f), r=%.3f",
                     len(self._obstacles) - 1, center.x, center.y, radius)
        return obstacle

    def clear_obstacles(self) -> None:
        """清空所有障碍物"""
        self._obstacles.clear()

    def goal_reached(self, point: Point) -> bool:
        """点是否严格落在目标圆内"""
        return self.config.finish_area.contains(point)

    def copy(self) -> 'Field':
        """独立副本（config 与点均不可变，只需复制障碍物列表）"""
        return Field(self.config, self.start, self._obstacles)

    # ── 序列化（仅场地布局） ──

    def to_dict(self) -> Dict[str, Any]:
        return {
            'config': self.config.to_dict(),
            'start': self.start.to_dict(),
            'obstacles': [obs.to_dict() for obs in self._obstacles],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Field':
        return cls(
            config=FieldConfig.from_dict(data['config']),
            start=Point.from_dict(data['start']),
            obstacles=[CircleArea.from_dict(o) for o in data.get('obstacles', [])],
        )

    def to_json(self, filepath: str) -> None:
        """保存场地到 JSON 文件"""
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    @classmethod
    def from_json(cls, filepath: str) -> 'Field':
        """从 JSON 文件加载场地"""
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __repr__(self) -> str:
        return (f"Field(bounds={self.config.bounds}, "
                f"start=({self.start.x:.2f}, {self.start.y:.2f}), "
                f"n_obstacles={self.n_obstacles})")
