"""
Creature: one vehicle driven by one neural network, the unit of evolution.
"""
import logging
import math

import numpy as np

from arena_driver.nn import FeedForwardNetwork
from arena_driver.raycast import make_sensor
from arena_driver.vehicle import Vehicle

logger = logging.getLogger(__name__)

NUM_OUTPUTS = 2  # acceleration, turn rate


class Creature:
    """Vehicle + network + fitness state.

    ``needs_eval`` is set whenever the network or the arena changed since the
    last finished episode; ``score`` is only meaningful when it is False.
    """

    def __init__(self, context, rng=None):
        self.config = config = context.config
        self.rng = rng if rng is not None else np.random.default_rng()
        self.vehicle = Vehicle(context.arena, make_sensor(config.vision), config.kinematics)
        self.net = FeedForwardNetwork.build(
            config.num_inputs,
            config.network.hidden_layers,
            NUM_OUTPUTS,
            amplitude=config.network.init_amplitude,
            rng=self.rng,
        )
        self._inputs = np.zeros(config.num_inputs)
        self.score = 0.0
        self.time = 0
        self.alive = True
        self.needs_eval = True

    def reset(self):
        """Start a new episode: spawn pose, zero score, cleared network echoes."""
        self.time = 0
        self.alive = True
        self.score = 0.0
        self.vehicle.reset(self.config.kinematics.start_speed)
        self.net.outputs.outputs[:] = 0.0

    def copy(self, creature):
        """Take over ``creature``'s weights and episode state."""
        self.net.copy(creature.net)
        self.score = creature.score
        self.time = creature.time
        self.alive = creature.alive
        self.needs_eval = creature.needs_eval

    def mutate(self, percent, factor):
        self.needs_eval = True
        self.net.mutate(percent, factor)
        self.time = 0
        self.alive = True
        self.score = 0.0

    def median(self):
        return self.net.median()

    def _fill_inputs(self):
        vision = self.config.vision.size
        feedback = self.config.network.feedback
        feedback_speed = self.config.network.feedback_speed
        inputs = self._inputs

        inputs[:vision] = self.vehicle.view

        # Echo of the previous step's outputs, one group per output neuron
        if feedback:
            previous = self.net.outputs.outputs
            inputs[vision:vision + feedback] = previous[0]
            inputs[vision + feedback:vision + 2 * feedback] = previous[1]

        if feedback_speed:
            base = vision + 2 * feedback
            inputs[base:base + feedback_speed] = 0.0
            bucket = math.floor(self.vehicle.v * feedback_speed / self.config.kinematics.v_max)
            if 0 <= bucket < feedback_speed:
                inputs[base + bucket] = 1.0
        return inputs

    def step(self, dt, sink=None):
        """Advance the episode by one step; returns whether it should continue."""
        limit = self.config.evolution.step_limit
        if not self.alive or self.time >= limit:
            return False
        self.time += 1

        self.vehicle.sense(sink)
        self.net.set_inputs(self._fill_inputs())
        acceleration, turn = self.net.infer()
        self.vehicle.set_accel(acceleration * self.config.kinematics.max_acceleration)
        self.vehicle.set_rotation(turn)

        collided = self.vehicle.integrate(dt, sink)
        self.alive = not collided
        return self.alive and self.time < limit

    def finish(self):
        """Record the episode's fitness; the creature no longer needs evaluation."""
        self.score = self.vehicle.distance
        self.needs_eval = False
        return self.score

    def run_episode(self, dt=None, max_steps=None):
        """Run a whole headless episode and return its score."""
        dt = self.config.evolution.dt if dt is None else dt
        self.reset()
        steps = 0
        while self.step(dt):
            steps += 1
            if max_steps is not None and steps >= max_steps:
                break
        score = self.finish()
        logger.debug("Episode finished: score=%.4f steps=%d alive=%s", score, self.time, self.alive)
        return score
