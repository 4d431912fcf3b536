"""Pytest configuration and fixtures for the arena driver tests."""

import os

import numpy as np
import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from arena_driver.arena import OccupancyArena  # noqa: E402
from arena_driver.config import SimulationConfig, SimulationContext  # noqa: E402


@pytest.fixture
def rng():
    """Provide a deterministic generator for tests."""
    return np.random.default_rng(42)


@pytest.fixture
def empty_arena():
    """200x200 arena with no border and no obstacles."""
    return OccupancyArena(200, 200)


@pytest.fixture
def small_config():
    """Small, fast configuration: 100x100 arena, 5x4 vision, short episodes."""
    return SimulationConfig.from_dict({
        "width": 100,
        "height": 100,
        "num_obstacles": 5,
        "obstacle_size": 10,
        "vision_x": 5,
        "vision_y": 4,
        "factor_theta": 5.0,
        "factor_depth": 5.0,
        "step_limit": 60,
        "population_size": 20,
        "seed": 7,
    }).validate()


@pytest.fixture
def empty_context(empty_arena):
    """Context over an empty 200x200 arena with the default spawn pose."""
    config = SimulationConfig.from_dict({"width": 200, "height": 200, "step_limit": 500})
    return SimulationContext(config.validate(), empty_arena)
