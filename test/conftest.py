"""
conftest.py - pytest fixtures shared across the test suite.

Provides small deterministic fields (100 x 100, goal radius 10) so that
planner and worker tests terminate after a handful of samples.
"""

import os

import numpy as np
import pytest

from rtt_planner.field import Field
from rtt_planner.models import CircleArea, FieldConfig, Point, SolverConfig

os.environ.setdefault("MPLBACKEND", "Agg")


# =========================================================================
# Field fixtures
# =========================================================================

@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture(scope="session")
def small_config() -> FieldConfig:
    """100 x 100 field: start circle at (20, 20), finish circle at (80, 80), r = 10."""
    return FieldConfig.new(100.0, 100.0)


@pytest.fixture()
def open_field(small_config) -> Field:
    """No obstacles, start fixed at the start-circle center."""
    return Field(small_config, small_config.start_area.center)


@pytest.fixture()
def pillar_field(small_config) -> Field:
    """One large obstacle between the start and finish circles."""
    field = Field(small_config, small_config.start_area.center)
    field.add_obstacle(Point(50.0, 50.0), 15.0)
    return field


@pytest.fixture()
def sealed_field(small_config) -> Field:
    """Start point buried inside an obstacle: every extension is blocked."""
    start = small_config.start_area.center
    return Field(small_config, start, [CircleArea(start, 1000.0)])


@pytest.fixture()
def fast_config() -> SolverConfig:
    """Seeded config without debug sleeps."""
    return SolverConfig(seed=7, debug_tick_interval=0.0, join_timeout=5.0)
