"""
Pygame rendering sink for the driving simulation
Draws the arena, the vehicle trail and the sensor overlay for animated replays
"""
import numpy as np
import pygame

from arena_driver.constants import BLACK, CENTER_RAY_GRAY, QUAD_GRAY, RAY_GRAY, TRAIL_GRAY, WHITE
from arena_driver.simulation_core import RenderSink


class PygameRenderer(RenderSink):
    def __init__(self, width, height, scale=1):
        self.width = width
        self.height = height
        self.scale = scale
        self.background_surface = pygame.Surface((width, height))
        self.background_surface.fill(WHITE)
        self.trails = pygame.Surface((width, height), pygame.SRCALPHA)
        self.rays = []
        self.quads = []

    def background(self, grid):
        """Paint occupied cells black on white and forget previous trails"""
        rgb = np.where(grid.T[..., None], np.array(BLACK), np.array(WHITE)).astype(np.uint8)
        self.background_surface = pygame.surfarray.make_surface(rgb)
        self.trails.fill((0, 0, 0, 0))

    def trail(self, start, end):
        pygame.draw.line(self.trails, TRAIL_GRAY, start, end, 1)

    def ray(self, start, end, center=False):
        self.rays.append((start, end, CENTER_RAY_GRAY if center else RAY_GRAY))

    def quad(self, corners):
        self.quads.append([tuple(p) for p in corners])

    def draw(self, screen):
        """Compose one frame onto ``screen`` and drop this frame's overlay"""
        frame = self.background_surface.copy()
        frame.blit(self.trails, (0, 0))
        for start, end, color in self.rays:
            pygame.draw.line(frame, color, start, end, 1)
        for corners in self.quads:
            pygame.draw.polygon(frame, QUAD_GRAY, corners, 1)
        self.rays.clear()
        self.quads.clear()

        if self.scale != 1:
            frame = pygame.transform.scale(frame, (self.width * self.scale, self.height * self.scale))
        screen.blit(frame, (0, 0))
        return frame
