"""Tests for the two vision sensors and their shared encoding."""

import math

import numpy as np
import pytest

from arena_driver.config import VisionConfig
from arena_driver.raycast import ProjectionSensor, RaycastSensor, make_sensor


class RecordingSink:
    def __init__(self):
        self.rays = []
        self.quads = []

    def ray(self, start, end, center=False):
        self.rays.append((start, end, center))

    def quad(self, corners):
        self.quads.append(corners)


def image(sensor, view):
    return view.reshape(sensor.vision_y, sensor.vision_x)


class TestRaycastSensor:
    def test_clear_field_is_all_zero(self, empty_arena):
        sensor = RaycastSensor(7, 5, 10.0, 10.0)
        view = np.full(sensor.size, -1.0)
        sensor.sense(empty_arena, 100, 100, 1.0, view)
        assert not view.any()

    def test_wall_ahead_sets_far_bands(self, empty_arena):
        empty_arena.fill_rect(130, 0, 10, 200)
        sensor = RaycastSensor(3, 6, 1.0, 10.0)
        view = np.zeros(sensor.size)
        sensor.sense(empty_arena, 100.5, 100.5, 0.0, view)
        rows = image(sensor, view)
        assert not rows[:3].any()
        assert rows[3:].all()

    def test_fan_is_symmetric_around_heading(self):
        sensor = RaycastSensor(5, 2, 6.0, 10.0)
        angles = sensor.ray_angles(1.0)
        step = math.pi / 300 * 6.0
        assert angles[2] == pytest.approx(1.0)
        assert angles[0] == pytest.approx(1.0 - 2 * step)
        assert angles[4] == pytest.approx(1.0 + 2 * step)

    def test_only_one_side_blocked(self, empty_arena):
        # Obstacle on the +y side of a vehicle heading along +x
        empty_arena.fill_rect(100, 106, 60, 20)
        sensor = RaycastSensor(9, 4, 30.0, 10.0)
        view = np.zeros(sensor.size)
        sensor.sense(empty_arena, 100, 100, 0.0, view)
        rows = image(sensor, view)
        assert rows[:, -1].any()
        assert not rows[:, 0].any()

    @pytest.mark.parametrize("vision_y, factor_depth", [(3, 2.5), (30, 1.1), (4, 0.7)])
    def test_clear_field_with_fractional_depth_factor(self, empty_arena, vision_y, factor_depth):
        sensor = RaycastSensor(3, vision_y, 1.0, factor_depth)
        view = np.full(sensor.size, -1.0)
        sensor.sense(empty_arena, 100, 100, 0.0, view)
        assert not view.any()

    def test_fractional_depth_factor_still_sees_walls(self, empty_arena):
        empty_arena.fill_rect(106, 0, 10, 200)
        sensor = RaycastSensor(1, 3, 1.0, 2.5)
        view = np.zeros(sensor.size)
        sensor.sense(empty_arena, 100.5, 100.5, 0.0, view)
        assert list(view) == [0.0, 0.0, 1.0]

    def test_reports_rays_to_sink(self, empty_arena):
        sensor = RaycastSensor(5, 3, 10.0, 10.0)
        sink = RecordingSink()
        sensor.sense(empty_arena, 100, 100, 0.0, np.zeros(sensor.size), sink)
        assert len(sink.rays) == 5
        assert [center for _, _, center in sink.rays] == [False, False, True, False, False]
        (start, end, _) = sink.rays[2]
        assert start == (100, 100)
        assert end == pytest.approx((130.0, 100.0))


class TestProjectionSensor:
    def test_clear_field_is_all_zero(self, empty_arena):
        sensor = ProjectionSensor(4, 4, 2.0, 5.0)
        view = np.ones(sensor.size)
        sensor.sense(empty_arena, 100, 100, 0.7, view)
        assert not view.any()

    def test_outside_field_counts_as_blocked(self, empty_arena):
        sensor = ProjectionSensor(4, 4, 2.0, 5.0)
        view = np.zeros(sensor.size)
        sensor.sense(empty_arena, 190, 100, 0.0, view)
        rows = image(sensor, view)
        assert not rows[:2].any()
        assert rows[2:].all()

    def test_quad_geometry(self):
        sensor = ProjectionSensor(4, 4, 2.0, 5.0)
        a, b, c, d = sensor.quad(100, 100, 0.0)
        assert a == pytest.approx((100, 104))
        assert b == pytest.approx((100, 96))
        assert c == pytest.approx((120, 88))
        assert d == pytest.approx((120, 112))

    def test_rotated_heading_puts_column_zero_on_ray_zero_side(self, empty_arena):
        # Heading +y: the near edge runs from B (115, 100) to A (85, 100)
        empty_arena.fill_rect(105, 100, 40, 40)
        sensor = ProjectionSensor(3, 3, 10.0, 10.0)
        view = np.zeros(sensor.size)
        sensor.sense(empty_arena, 100, 100, math.pi / 2, view)
        rows = image(sensor, view)
        assert rows[:, 0].all()
        assert not rows[:, 1:].any()

        # Ray 0 of the fan also leans towards +x at this heading
        ray_zero = RaycastSensor(3, 3, 10.0, 10.0).ray_angles(math.pi / 2)[0]
        assert math.cos(ray_zero) > 0

    def test_reports_quad_to_sink(self, empty_arena):
        sensor = ProjectionSensor(4, 4, 2.0, 5.0)
        sink = RecordingSink()
        sensor.sense(empty_arena, 100, 100, 0.0, np.zeros(sensor.size), sink)
        assert len(sink.quads) == 1


def test_sensors_share_shape_and_polarity(empty_arena):
    empty_arena.fill_rect(120, 80, 30, 40)
    rays = RaycastSensor(4, 4, 2.0, 10.0)
    projection = ProjectionSensor(4, 4, 2.0, 10.0)
    ray_view = np.zeros(rays.size)
    projection_view = np.zeros(projection.size)
    rays.sense(empty_arena, 100, 100, 0.0, ray_view)
    projection.sense(empty_arena, 100, 100, 0.0, projection_view)

    assert ray_view.shape == projection_view.shape
    # Nearest band clear, farthest band blocked in the middle columns, for both
    for sensor, view in ((rays, ray_view), (projection, projection_view)):
        rows = image(sensor, view)
        assert not rows[0].any()
        assert rows[-1, 1:3].all()


def test_make_sensor():
    assert isinstance(make_sensor(VisionConfig(sensor="rays")), RaycastSensor)
    assert isinstance(make_sensor(VisionConfig(sensor="projection")), ProjectionSensor)
    with pytest.raises(ValueError):
        make_sensor(VisionConfig(sensor="sonar"))
