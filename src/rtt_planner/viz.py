"""
rtt_planner/viz.py - 场地 / 路径 / 调试快照可视化

只读取核心导出的纯数据（Field、RouteDone 路径、DebugImage），
不参与求解。matplotlib 不可用时各函数返回 None。
"""

import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from .field import Field
from .models import CircleArea, DebugImage, Point

logger = logging.getLogger(__name__)

try:
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection
    from matplotlib.patches import Circle
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False


def _circle(area: CircleArea, **kwargs) -> Any:
    return Circle((area.center.x, area.center.y), area.radius, **kwargs)


def plot_field(
    field: Field,
    ax: Optional[Any] = None,
    title: str = "RTT field",
    figsize: Tuple[float, float] = (8, 6),
) -> Any:
    """绘制场地：采样矩形、起止圆、起点、障碍物

    Returns:
        matplotlib Axes
    """
    if not HAS_MATPLOTLIB:
        logger.warning("matplotlib 不可用")
        return None
    if ax is None:
        _, ax = plt.subplots(figsize=figsize)

    min_x, min_y, max_x, max_y = field.config.bounds
    ax.set_xlim(min_x, max_x)
    ax.set_ylim(min_y, max_y)
    ax.set_aspect('equal')

    ax.add_patch(_circle(field.config.start_area, fill=False,
                         edgecolor='tab:blue', linestyle='--'))
    ax.add_patch(_circle(field.config.finish_area, facecolor='tab:green',
                         alpha=0.3, edgecolor='tab:green'))
    for obstacle in field.get_obstacles():
        ax.add_patch(_circle(obstacle, facecolor='tab:red', alpha=0.6))
    ax.plot(field.start.x, field.start.y, 'o', color='tab:blue', markersize=5)
    ax.set_title(title)
    return ax


def plot_route(
    route: Sequence[Point],
    ax: Any,
    color: str = 'gold',
    linewidth: float = 2.0,
) -> Any:
    """在 ax 上叠加路径折线"""
    if not HAS_MATPLOTLIB or ax is None:
        return None
    if len(route) < 2:
        return ax
    ax.plot([p.x for p in route], [p.y for p in route],
            '-', color=color, linewidth=linewidth)
    return ax


def plot_debug_image(image: DebugImage, ax: Any) -> Any:
    """在 ax 上叠加树的全部边与最近一次采样线段

    可通行采样画绿色，被阻挡采样画红色虚线。
    """
    if not HAS_MATPLOTLIB or ax is None:
        return None
    if image.routes_segs:
        lines = [((a.x, a.y), (b.x, b.y)) for a, b in image.routes_segs]
        ax.add_collection(LineCollection(lines, colors='0.5', linewidths=0.8))
    seg = image.sample_seg
    if seg is not None:
        style = '-' if seg.passable else '--'
        color = 'tab:green' if seg.passable else 'tab:red'
        ax.plot([seg.src.x, seg.dst.x], [seg.src.y, seg.dst.y],
                style, color=color, linewidth=1.2)
    ax.text(0.01, 0.99, f"tick {image.tick_id}", transform=ax.transAxes,
            va='top', ha='left', fontsize=9)
    return ax


def save_figure(ax: Any, filepath: str | Path, dpi: int = 120) -> Optional[str]:
    """保存 ax 所在的 figure 并关闭"""
    if not HAS_MATPLOTLIB or ax is None:
        return None
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    fig = ax.get_figure()
    fig.savefig(filepath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    logger.info("图像已保存: %s", filepath)
    return str(filepath)
