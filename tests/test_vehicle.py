"""Tests for vehicle kinematics: integration, collision revert and scoring."""

import math

import pytest

from arena_driver.config import KinematicsConfig, VisionConfig
from arena_driver.raycast import make_sensor
from arena_driver.vehicle import Vehicle


def make_vehicle(arena, **overrides):
    kinematics = KinematicsConfig(**overrides)
    return Vehicle(arena, make_sensor(VisionConfig(vision_x=5, vision_y=4)), kinematics)


class TestIntegrate:
    def test_moves_along_heading(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=50, start_y=50, start_theta=0.0,
                               start_speed=10, drag=0.0)
        vehicle.integrate(0.1)
        assert vehicle.x == pytest.approx(51.0)
        assert vehicle.y == pytest.approx(50.0)
        assert not vehicle.collision

    def test_speed_follows_acceleration_and_drag(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=50, start_y=50, start_speed=10, drag=0.5)
        vehicle.set_accel(20)
        vehicle.integrate(0.1)
        assert vehicle.v == pytest.approx(10 + (20 - 0.5 * 10) * 0.1)

    def test_speed_is_clamped(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=50, start_y=50, start_speed=10,
                               v_min=2.0, v_max=12.0)
        vehicle.set_accel(1000)
        vehicle.integrate(0.1)
        assert vehicle.v == 12.0
        vehicle.set_accel(-1000)
        vehicle.integrate(0.1)
        assert vehicle.v == 2.0

    def test_heading_wraps(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=100, start_y=100, start_theta=0.0, start_speed=0)
        vehicle.set_rotation(-1.0)
        vehicle.integrate(0.1)
        assert 0 <= vehicle.theta < 2 * math.pi
        assert vehicle.theta == pytest.approx(2 * math.pi - 0.1)

    def test_turn_rate_is_clamped(self, empty_arena):
        vehicle = make_vehicle(empty_arena)
        vehicle.set_rotation(5.0)
        assert vehicle.v_theta == pytest.approx(math.pi / 3)
        vehicle.set_rotation(-5.0)
        assert vehicle.v_theta == pytest.approx(-math.pi / 3)

    def test_collision_reverts_position_only(self, empty_arena):
        empty_arena.fill_rect(52, 0, 10, 200)
        vehicle = make_vehicle(empty_arena, start_x=50.7, start_y=50.3, start_theta=0.0,
                               start_speed=20, drag=0.5)
        vehicle.set_rotation(0.2)
        vehicle.integrate(0.1)

        assert vehicle.collision
        assert (vehicle.x, vehicle.y) == (50.0, 50.0)
        assert vehicle.theta == pytest.approx(0.02)
        assert vehicle.v == pytest.approx(20 + (0 - 0.5 * 20) * 0.1)


class TestDistance:
    def test_position_weighted(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=100, start_y=50, start_theta=0.0,
                               start_speed=10, drag=0.0)
        vehicle.integrate(0.1)
        assert vehicle.distance == pytest.approx(10 * 0.1 * (101 / 200) * (50 / 200))

    def test_non_decreasing_and_reset(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=20, start_y=20, start_speed=30)
        vehicle.set_rotation(0.4)
        previous = 0.0
        for _ in range(200):
            vehicle.integrate(0.1)
            assert vehicle.distance >= previous >= 0.0
            previous = vehicle.distance
        assert previous > 0

        vehicle.reset()
        assert vehicle.distance == 0.0
        assert (vehicle.x, vehicle.y) == (20.0, 20.0)
        assert vehicle.v == 30.0

    def test_never_negative_outside_field(self, empty_arena):
        vehicle = make_vehicle(empty_arena, start_x=5, start_y=100, start_theta=math.pi,
                               start_speed=30, drag=0.0)
        for _ in range(20):
            vehicle.integrate(0.1)
        assert vehicle.x < 0
        assert vehicle.distance >= 0.0


def test_sense_fills_view(empty_arena):
    vehicle = make_vehicle(empty_arena, start_x=100, start_y=100)
    view = vehicle.sense()
    assert view is vehicle.view
    assert view.shape == (20,)
    assert set(view.tolist()) <= {0.0, 1.0}
