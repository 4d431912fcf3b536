"""
Occupancy arena for the driving simulation.
A binary obstacle field the vehicles drive in, collide against and ray-march through.
"""
import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


class OccupancyArena:
    """Rectangular field of occupied/free cells, row-major with the origin top-left.

    ``grid[y, x]`` is True where an obstacle covers cell (x, y). Queries outside
    the field are never an error: they report "no collision".
    """

    def __init__(self, width, height):
        if width <= 0 or height <= 0:
            raise ValueError(f"Arena size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=bool)

    def clear(self):
        self.grid[:, :] = False

    def stamp_border(self):
        """Mark the outermost ring of cells as occupied."""
        self.grid[0, :] = True
        self.grid[-1, :] = True
        self.grid[:, 0] = True
        self.grid[:, -1] = True

    def fill_rect(self, x, y, w, h):
        """Occupy the cells covered by an axis-aligned rectangle, clipped to the field."""
        x0 = max(int(math.floor(x)), 0)
        y0 = max(int(math.floor(y)), 0)
        x1 = min(int(math.floor(x + w)), self.width)
        y1 = min(int(math.floor(y + h)), self.height)
        if x1 > x0 and y1 > y0:
            self.grid[y0:y1, x0:x1] = True

    def generate(self, num_obstacles, obstacle_size, rng=None, clearance=40):
        """Rebuild the field: border plus ``num_obstacles`` random squares.

        A placement whose x and y both fall below ``clearance`` is redrawn so the
        spawn corner stays free. Obstacles may overlap one another.

        Raises ValueError when no placement can leave the spawn corner.
        """
        span_x = self.width - obstacle_size
        span_y = self.height - obstacle_size
        if num_obstacles > 0 and clearance > 0 and span_x <= clearance and span_y <= clearance:
            raise ValueError(
                f"No room for obstacles of size {obstacle_size} outside the spawn corner "
                f"({clearance}) of a {self.width}x{self.height} arena")
        rng = rng if rng is not None else np.random.default_rng()
        self.clear()
        self.stamp_border()
        for _ in range(num_obstacles):
            while True:
                x = rng.random() * span_x
                y = rng.random() * span_y
                if not (x < clearance and y < clearance):
                    break
            self.fill_rect(x, y, obstacle_size, obstacle_size)
        logger.info("Generated %dx%d arena with %d obstacles of size %d (%.1f%% occupied)",
                    self.width, self.height, num_obstacles, obstacle_size,
                    100.0 * self.grid.mean())

    def in_bounds(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    def collide(self, x, y):
        """Return whether the floored cell under (x, y) is occupied.

        Non-finite or out-of-range coordinates are reported as free.
        """
        try:
            x = float(x)
            y = float(y)
        except (TypeError, ValueError):
            return False
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        if not self.in_bounds(x, y):
            return False
        return bool(self.grid[int(math.floor(y)), int(math.floor(x))])

    def blocked(self, xs, ys):
        """Vectorized occupancy test that also treats points outside the field as blocked."""
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        inside = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        result = ~inside
        cols = np.floor(xs[inside]).astype(int)
        rows = np.floor(ys[inside]).astype(int)
        result[inside] = self.grid[rows, cols]
        return result

    def cast_depth(self, x, y, theta, max_depth):
        """March a unit-step ray from (x, y) along ``theta``.

        Returns the number of steps taken before the ray leaves the field, enters
        an occupied cell, or reaches ``max_depth``. No sub-step interpolation.
        """
        return int(self.cast_depths(x, y, np.array([theta]), max_depth)[0])

    def cast_depths(self, x, y, thetas, max_depth):
        """Ray march several headings from the same origin at once."""
        thetas = np.asarray(thetas, dtype=float)
        steps = int(math.floor(max_depth))
        if steps <= 0:
            return np.zeros(thetas.shape, dtype=int)
        k = np.arange(steps, dtype=float)
        xs = x + np.outer(np.cos(thetas), k)
        ys = y + np.outer(np.sin(thetas), k)
        hits = self.blocked(xs, ys)
        first = np.argmax(hits, axis=1)
        return np.where(hits.any(axis=1), first, steps)

    def snapshot(self):
        """Copy of the occupancy grid, for background compositing by a renderer."""
        return self.grid.copy()
