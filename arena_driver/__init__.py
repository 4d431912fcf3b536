"""
Neuroevolution of vision-driven vehicles in a 2-D obstacle arena.
"""
from arena_driver.arena import OccupancyArena
from arena_driver.config import SimulationConfig, SimulationContext
from arena_driver.creature import Creature
from arena_driver.evolution import Population
from arena_driver.nn import DimensionMismatch, FeedForwardNetwork, Layer
from arena_driver.raycast import ProjectionSensor, RaycastSensor, make_sensor
from arena_driver.vehicle import Vehicle

__all__ = [
    "Creature",
    "DimensionMismatch",
    "FeedForwardNetwork",
    "Layer",
    "OccupancyArena",
    "Population",
    "ProjectionSensor",
    "RaycastSensor",
    "SimulationConfig",
    "SimulationContext",
    "Vehicle",
    "make_sensor",
]
