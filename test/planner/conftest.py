"""test/planner/conftest.py - 共享 fixtures"""
import threading

import pytest

from rtt_planner.collision import CollisionChecker
from rtt_planner.field import Field
from rtt_planner.models import FieldConfig, Point
from rtt_planner.protocol import Channel, Terminate
from rtt_planner.worker import SolverWorker


# ==================== 碰撞检测场景 ====================

@pytest.fixture
def unit_obstacle_field():
    """10x10 场地，障碍物圆心 (5,5)，半径 2"""
    field = Field(FieldConfig.new(10.0, 10.0), Point(0.0, 0.0))
    field.add_obstacle(Point(5.0, 5.0), 2.0)
    return field


@pytest.fixture
def unit_checker(unit_obstacle_field):
    return CollisionChecker(unit_obstacle_field)


# ==================== 求解线程 ====================

@pytest.fixture
def channels():
    """(commands, events)"""
    return Channel("commands"), Channel("events")


@pytest.fixture
def worker(channels, fast_config):
    """同步运行用的 SolverWorker（命令预先入队，在当前线程调用 run）"""
    commands, events = channels
    return SolverWorker(commands, events, fast_config, sleep=lambda s: None)


@pytest.fixture
def running_worker(channels, fast_config):
    """在后台线程运行的 SolverWorker；结束时发送 Terminate 并等待退出"""
    commands, events = channels
    worker = SolverWorker(commands, events, fast_config)
    thread = threading.Thread(target=worker.run, name="RTT solver", daemon=True)
    thread.start()
    yield worker
    if not commands.closed:
        commands.send(Terminate())
    thread.join(timeout=5.0)
    assert not thread.is_alive()
