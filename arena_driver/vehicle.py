"""
Vehicle physics for the driving simulation
"""
import math

import numpy as np

from arena_driver.constants import MAX_TURN_RATE

TWO_PI = 2 * math.pi


def wrap_angle(theta):
    """Wrap an angle into [0, 2*pi)."""
    theta %= TWO_PI
    return 0.0 if theta >= TWO_PI else theta


class Vehicle:
    """Kinematic agent: pose, speed, controls and a vision buffer.

    Each step is ``integrate`` (physics + collision) followed by ``sense``
    (fill ``view`` through the configured sensor).
    """

    def __init__(self, arena, sensor, kinematics):
        self.arena = arena
        self.sensor = sensor
        self.kinematics = kinematics

        # Physics properties
        self.v_min = kinematics.v_min
        self.v_max = kinematics.v_max
        self.drag = kinematics.drag

        self.view = np.zeros(sensor.size, dtype=float)
        self.reset()

    def reset(self, speed=None):
        """Put the vehicle back at its spawn pose with the start speed."""
        k = self.kinematics
        self.x = float(k.start_x)
        self.y = float(k.start_y)
        self.theta = wrap_angle(float(k.start_theta))
        self.v = float(k.start_speed if speed is None else speed)
        self.v_theta = 0.0
        self.a = 0.0
        self.collision = False
        self.distance = 0.0

    def set_accel(self, acc):
        self.a = float(acc)

    def set_rotation(self, rot):
        """Set the turn rate, clamped to [-pi/3, pi/3]."""
        self.v_theta = max(-MAX_TURN_RATE, min(MAX_TURN_RATE, float(rot)))

    def integrate(self, dt, sink=None):
        """Advance heading, speed and position by ``dt``.

        On collision only the position is reverted, to the floored pre-step
        position; heading and speed keep their new values.
        """
        old_x = math.floor(self.x)
        old_y = math.floor(self.y)

        self.theta = wrap_angle(self.theta + self.v_theta * dt)

        self.v += (self.a - self.drag * self.v) * dt
        self.v = max(self.v_min, min(self.v_max, self.v))

        self.x += self.v * math.cos(self.theta) * dt
        self.y += self.v * math.sin(self.theta) * dt

        self.collision = self.arena.collide(math.floor(self.x), math.floor(self.y))
        if self.collision:
            self.x = float(old_x)
            self.y = float(old_y)

        if sink is not None:
            sink.trail((old_x, old_y), (self.x, self.y))

        # Position-weighted progress, never negative
        gain = self.v * dt * (self.x / self.arena.width) * (self.y / self.arena.height)
        self.distance += max(gain, 0.0)
        return self.collision

    def sense(self, sink=None):
        """Refresh ``view`` from the arena through the vehicle's sensor."""
        self.sensor.sense(self.arena, self.x, self.y, self.theta, self.view, sink)
        return self.view
