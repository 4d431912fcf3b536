"""
Vision sensors for the driving simulation.

Both sensors fill the same flat buffer of ``vision_x * vision_y`` cells indexed
``i + j * vision_x`` (column i across the field of view, row j = depth band,
nearest first) and use the same polarity: 1.0 means obstructed or out of reach,
0.0 means clear.
"""
import math

import numpy as np


class RaycastSensor:
    """Fan of ``vision_x`` rays, each thresholded into ``vision_y`` depth bands."""

    def __init__(self, vision_x, vision_y, factor_theta, factor_depth):
        self.vision_x = vision_x
        self.vision_y = vision_y
        self.factor_theta = factor_theta
        self.factor_depth = factor_depth
        self.step = (math.pi / 300) * factor_theta
        self.max_depth = vision_y * factor_depth
        self.reach = math.floor(self.max_depth)
        # Symmetric offsets around the heading
        self.offsets = (np.arange(vision_x) - (vision_x - 1) / 2.0) * self.step
        self._bands = np.arange(vision_y)[:, None]

    @property
    def size(self):
        return self.vision_x * self.vision_y

    def ray_angles(self, theta):
        return theta + self.offsets

    def sense(self, arena, x, y, theta, view, sink=None):
        angles = self.ray_angles(theta)
        depths = arena.cast_depths(x, y, angles, self.max_depth)

        # Bands nearer than the hit are clear, the rest are blocked
        first_blocked = np.floor(depths / self.factor_depth).astype(int)
        # A ray that ran its full length hit nothing in any band
        first_blocked[depths >= self.reach] = self.vision_y
        image = self._bands >= first_blocked[None, :]
        view[:] = image.ravel()

        if sink is not None:
            center = self.vision_x // 2
            for i, (angle, dist) in enumerate(zip(angles, depths)):
                end = (x + dist * math.cos(angle), y + dist * math.sin(angle))
                sink.ray((x, y), end, center=(i == center))
        return view


class ProjectionSensor:
    """Resample the arena inside a trapezoid ahead of the vehicle.

    The near edge is ``vision_x * factor_theta`` wide and centred on the vehicle,
    the far edge lies ``vision_y * factor_depth`` ahead and is three times as
    wide. Each output cell reads the arena at the matching point of the
    trapezoid; points outside the arena count as obstructed.
    """

    def __init__(self, vision_x, vision_y, factor_theta, factor_depth):
        self.vision_x = vision_x
        self.vision_y = vision_y
        self.factor_theta = factor_theta
        self.factor_depth = factor_depth
        self.depth = vision_y * factor_depth
        u = (np.arange(vision_x) + 0.5) / vision_x
        t = (np.arange(vision_y) + 0.5) / vision_y
        self._u, self._t = np.meshgrid(u, t)

    @property
    def size(self):
        return self.vision_x * self.vision_y

    def quad(self, x, y, theta):
        """Corners A, B (near edge) and C, D (far edge) of the viewing trapezoid."""
        s = math.sin(theta) * self.vision_x * self.factor_theta
        c = math.cos(theta) * self.vision_x * self.factor_theta
        fx = math.cos(theta) * self.depth
        fy = math.sin(theta) * self.depth
        a = (x - s / 2, y + c / 2)
        b = (x + s / 2, y - c / 2)
        d = (a[0] + fx - s, a[1] + fy + c)
        cc = (b[0] + fx + s, b[1] + fy - c)
        return a, b, cc, d

    def sample_points(self, x, y, theta):
        a, b, c, d = (np.array(p) for p in self.quad(x, y, theta))
        # Column 0 sits on the B side so columns sweep the same way as the ray fan
        near = b + self._u[..., None] * (a - b)
        far = c + self._u[..., None] * (d - c)
        points = near + self._t[..., None] * (far - near)
        return points[..., 0], points[..., 1]

    def sense(self, arena, x, y, theta, view, sink=None):
        xs, ys = self.sample_points(x, y, theta)
        view[:] = arena.blocked(xs, ys).ravel()
        if sink is not None:
            sink.quad(self.quad(x, y, theta))
        return view


def make_sensor(vision):
    """Build the sensor named by ``vision.sensor``."""
    args = (vision.vision_x, vision.vision_y, vision.factor_theta, vision.factor_depth)
    if vision.sensor == "rays":
        return RaycastSensor(*args)
    if vision.sensor == "projection":
        return ProjectionSensor(*args)
    raise ValueError(f"Unknown sensor {vision.sensor!r}")
