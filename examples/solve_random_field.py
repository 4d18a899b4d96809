#!/usr/bin/env python
"""
examples/solve_random_field.py - 随机圆形障碍物场地求解演示

生成场地并随机放置障碍物（避开起止圆），启动求解线程求解一次，
path 模式保存最终路径图，debug 模式额外保存若干调试帧。

输出（保存到 examples/output/rtt_<ts>/）：
  - field.json      : 场地布局
  - route.png       : 场地 + 路径
  - tick_<k>.png    : 调试帧（仅 --debug）

用法：
    python -m examples.solve_random_field
    python -m examples.solve_random_field --seed 42 --n-obs 12
    python -m examples.solve_random_field --debug --max-ticks 20
"""

from __future__ import annotations

import argparse
import logging
import time
from datetime import datetime
from pathlib import Path

import numpy as np

from rtt_planner.controller import SolverController
from rtt_planner.field import Field
from rtt_planner.models import Point, SolverConfig
from rtt_planner import viz

LOG_FMT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FMT, datefmt="%H:%M:%S")
logger = logging.getLogger("solve_random_field")


def scatter_obstacles(field: Field, n_obs: int, rng: np.random.Generator,
                      r_min: float, r_max: float) -> None:
    """随机放置 n_obs 个圆形障碍物，不覆盖起点与目标圆"""
    min_x, min_y, max_x, max_y = field.config.bounds
    keep_out = [field.config.start_area, field.config.finish_area]
    placed = 0
    for _ in range(n_obs * 50):
        if placed >= n_obs:
            break
        center = Point(float(rng.uniform(min_x, max_x)),
                       float(rng.uniform(min_y, max_y)))
        radius = float(rng.uniform(r_min, r_max))
        if any(center.sq_dist(a.center) < (a.radius + radius) ** 2 for a in keep_out):
            continue
        field.add_obstacle(center, radius)
        placed += 1
    logger.info("放置障碍物 %d / %d", placed, n_obs)


def main() -> None:
    parser = argparse.ArgumentParser(description="RTT random field demo")
    parser.add_argument("--width", type=float, default=640.0)
    parser.add_argument("--height", type=float, default=480.0)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--n-obs", type=int, default=10)
    parser.add_argument("--r-min", type=float, default=15.0)
    parser.add_argument("--r-max", type=float, default=45.0)
    parser.add_argument("--debug", action="store_true", help="调试快照模式")
    parser.add_argument("--max-ticks", type=int, default=10)
    parser.add_argument("--timeout", type=float, default=30.0)
    parser.add_argument("--config", type=str, default=None,
                        help="SolverConfig JSON 文件")
    args = parser.parse_args()

    config = SolverConfig.from_json(args.config) if args.config else SolverConfig()
    if args.seed:
        config.seed = args.seed

    ts = datetime.now().strftime('%Y%m%d_%H%M%S')
    out_dir = Path(__file__).resolve().parent / "output" / f"rtt_{ts}"
    out_dir.mkdir(parents=True, exist_ok=True)

    rng = np.random.default_rng(config.seed or None)
    with SolverController(args.width, args.height, config=config, rng=rng) as ctrl:
        scatter_obstacles(ctrl.field, args.n_obs, rng, args.r_min, args.r_max)
        ctrl.field.to_json(str(out_dir / "field.json"))
        if args.debug:
            ctrl.toggle_mode()

        t0 = time.time()
        ctrl.solve()
        if args.debug:
            n_saved = 0
            deadline = t0 + args.timeout
            while ctrl.solving and time.time() < deadline:
                if ctrl.poll_events() and ctrl.debug_image is not None \
                        and n_saved < args.max_ticks:
                    ax = viz.plot_field(ctrl.field, title=f"tick {ctrl.debug_image.tick_id}")
                    viz.plot_debug_image(ctrl.debug_image, ax)
                    viz.save_figure(ax, out_dir / f"tick_{n_saved:03d}.png")
                    n_saved += 1
                time.sleep(0.01)
            route = ctrl.route
        else:
            route = ctrl.wait_route(timeout=args.timeout)

        if route is None:
            logger.warning("%.1fs 内未找到路径", args.timeout)
            return

        logger.info("找到路径: %d 个点, 耗时 %.3fs", len(route), time.time() - t0)
        ax = viz.plot_field(ctrl.field, title="route")
        viz.plot_route(route, ax)
        viz.save_figure(ax, out_dir / "route.png")

    logger.info("输出目录: %s", out_dir)


if __name__ == "__main__":
    main()
