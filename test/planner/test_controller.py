"""test/planner/test_controller.py - SolverController 测试"""
import time

import pytest

from rtt_planner.controller import MODES, SolverController
from rtt_planner.models import Point
from rtt_planner.protocol import Abort, DebugTick, RouteDone, Solve, SolveDebug


def drain_commands(ctrl):
    messages = []
    while True:
        message = ctrl.commands.try_recv()
        if message is None:
            return messages
        messages.append(message)


@pytest.fixture
def idle_ctrl(fast_config):
    """未启动求解线程的控制端，只检查发出的命令"""
    return SolverController(100.0, 100.0, config=fast_config)


class TestControllerCommands:

    def test_initial_state(self, idle_ctrl):
        assert idle_ctrl.mode == 'path'
        assert not idle_ctrl.solving
        assert idle_ctrl.route is None
        assert idle_ctrl.field.n_obstacles == 0
        assert not idle_ctrl.alive
        start_area = idle_ctrl.field_config.start_area
        assert idle_ctrl.field.start.sq_dist(start_area.center) <= start_area.radius ** 2

    def test_solve_sends_abort_then_copy(self, idle_ctrl):
        idle_ctrl.solve()
        abort, solve = drain_commands(idle_ctrl)
        assert abort == Abort()
        assert isinstance(solve, Solve)
        assert solve.field is not idle_ctrl.field
        assert solve.field.start == idle_ctrl.field.start
        assert idle_ctrl.solving

    def test_debug_mode_sends_solve_debug(self, idle_ctrl):
        assert idle_ctrl.toggle_mode() == 'debug'
        idle_ctrl.solve()
        assert isinstance(drain_commands(idle_ctrl)[-1], SolveDebug)

    def test_toggle_mode_cycles(self, idle_ctrl):
        seen = [idle_ctrl.toggle_mode() for _ in range(len(MODES))]
        assert seen == ['debug', 'path']

    def test_abort_always_sent(self, idle_ctrl):
        """空闲时 Abort 对求解线程是空操作，控制端不依赖 solving 判断"""
        idle_ctrl.abort()
        assert drain_commands(idle_ctrl) == [Abort()]
        idle_ctrl.solve()
        drain_commands(idle_ctrl)
        idle_ctrl.abort()
        assert drain_commands(idle_ctrl) == [Abort()]
        assert not idle_ctrl.solving

    def test_stale_route_does_not_suppress_abort(self, idle_ctrl):
        """上一次求解的 RouteDone 晚到后，修改场地仍会中止正在进行的求解"""
        idle_ctrl.solve()
        idle_ctrl.events.send(RouteDone((Point(20, 20), Point(80, 80))))
        idle_ctrl.solve()
        idle_ctrl.poll_events()
        assert not idle_ctrl.solving
        drain_commands(idle_ctrl)
        idle_ctrl.add_obstacle(Point(50, 50), 10.0)
        assert drain_commands(idle_ctrl) == [Abort()]

    def test_route_after_abort_is_dropped(self, idle_ctrl):
        idle_ctrl.solve()
        idle_ctrl.add_obstacle(Point(50, 50), 10.0)
        idle_ctrl.events.send(RouteDone((Point(20, 20), Point(80, 80))))
        (event,) = idle_ctrl.poll_events()
        assert isinstance(event, RouteDone)
        assert idle_ctrl.route is None

    def test_wait_route_skips_dropped_route(self, idle_ctrl):
        idle_ctrl.solve()
        idle_ctrl.abort()
        idle_ctrl.events.send(RouteDone((Point(0, 0),)))
        assert idle_ctrl.wait_route(timeout=0.05) is None

    def test_abort_after_shutdown(self, idle_ctrl):
        idle_ctrl.shutdown()
        idle_ctrl.toggle_mode()
        assert idle_ctrl.mode == 'debug'

    def test_add_obstacle_aborts_and_keeps_sent_copy(self, idle_ctrl):
        idle_ctrl.solve()
        idle_ctrl.add_obstacle(Point(50, 50), 5.0)
        abort, solve, abort_again = drain_commands(idle_ctrl)
        assert abort_again == Abort()
        # 已发送的副本不受实时场地修改影响
        assert solve.field.n_obstacles == 0
        assert idle_ctrl.field.n_obstacles == 1
        assert idle_ctrl.route is None

    def test_reset_field(self, idle_ctrl):
        idle_ctrl.add_obstacle(Point(50, 50), 5.0)
        field = idle_ctrl.reset_field()
        assert field is idle_ctrl.field
        assert field.n_obstacles == 0
        area = idle_ctrl.field_config.start_area
        assert field.start.sq_dist(area.center) <= area.radius ** 2

    def test_field_clamped_by_config(self, fast_config):
        ctrl = SolverController(640.0, 480.0, config=fast_config)
        assert ctrl.field_config.start_area.radius == pytest.approx(10.0)


class TestControllerThread:

    def test_solve_and_wait_route(self, fast_config):
        with SolverController(100.0, 100.0, config=fast_config) as ctrl:
            assert ctrl.alive
            ctrl.solve()
            route = ctrl.wait_route(timeout=5.0)
            assert route is not None
            assert route[0] == ctrl.field.start
            assert ctrl.field.goal_reached(route[-1])
            assert ctrl.route == route
            assert not ctrl.solving
        assert not ctrl.alive
        assert ctrl.commands.closed

    def test_route_around_obstacle(self, fast_config):
        with SolverController(100.0, 100.0, config=fast_config) as ctrl:
            ctrl.add_obstacle(Point(50.0, 50.0), 15.0)
            ctrl.solve()
            route = ctrl.wait_route(timeout=5.0)
            assert route is not None
            ctrl.add_obstacle(Point(10.0, 90.0), 3.0)
            assert ctrl.route is None

    def test_debug_mode_poll_events(self, fast_config):
        with SolverController(100.0, 100.0, config=fast_config) as ctrl:
            ctrl.toggle_mode()
            ctrl.solve()
            received = []
            deadline = time.monotonic() + 5.0
            while ctrl.route is None and time.monotonic() < deadline:
                received.extend(ctrl.poll_events())
                time.sleep(0.001)
            assert ctrl.route is not None
            assert isinstance(received[0], DebugTick)
            assert isinstance(received[-1], RouteDone)
            assert ctrl.debug_image is not None

    def test_wait_route_timeout(self, fast_config):
        with SolverController(100.0, 100.0, config=fast_config) as ctrl:
            assert ctrl.wait_route(timeout=0.05) is None

    def test_shutdown_idempotent(self, fast_config):
        ctrl = SolverController(100.0, 100.0, config=fast_config)
        ctrl.start()
        ctrl.shutdown()
        ctrl.shutdown()
        assert not ctrl.alive
        assert ctrl.events.closed
