"""

███████ ██ ███    ███ ██    ██ ██       █████  ████████ ██  ██████  ███    ██          ██████  ██████  ██████  ███████    ██████  ██    ██ 
██      ██ ████  ████ ██    ██ ██      ██   ██    ██    ██ ██    ██ ████   ██         ██      ██    ██ ██   ██ ██         ██   ██  ██  ██  
███████ ██ ██ ████ ██ ██    ██ ██      ███████    ██    ██ ██    ██ ██ ██  ██         ██      ██    ██ ██████  █████      ██████    ████   
     ██ ██ ██  ██  ██ ██    ██ ██      ██   ██    ██    ██ ██    ██ ██  ██ ██         ██      ██    ██ ██   ██ ██         ██         ██    
███████ ██ ██      ██  ██████  ███████ ██   ██    ██    ██  ██████  ██   ████ ███████  ██████  ██████  ██   ██ ███████ ██ ██         ██    
                                                                                                                                           
                                                                                                                                           
Drivers for the driving simulation.
A synchronous training loop for headless runs and a one-step-per-call adapter
for a host scheduler (a pygame frame loop, a GUI timer...). Both go through
Creature.step.
"""

import logging

logger = logging.getLogger(__name__)


class RenderSink:
    """Optional consumer of per-step drawing primitives. Every method is a no-op here."""

    def background(self, grid):
        """Full occupancy snapshot to composite behind the vehicle."""

    def trail(self, start, end):
        """Segment travelled by the vehicle during one step."""

    def ray(self, start, end, center=False):
        """One sensor ray, from the vehicle to where it stopped."""

    def quad(self, corners):
        """Viewing trapezoid of the projection sensor."""


class EpisodeStepper:
    """Run one creature's episode one step per ``advance`` call.

    While paused, ``advance`` does nothing but keeps reporting True so the
    host keeps scheduling it; after ``cancel`` or the end of the episode it
    reports False. The creature's score is recorded when the episode ends.
    """

    def __init__(self, creature, dt=None, sink=None):
        self.creature = creature
        self.dt = creature.config.evolution.display_dt if dt is None else dt
        self.sink = sink
        self.paused = False
        self.cancelled = False
        self.finished = False
        creature.reset()
        if sink is not None:
            sink.background(creature.vehicle.arena.snapshot())

    @property
    def running(self):
        return not (self.cancelled or self.finished)

    def advance(self):
        if not self.running:
            return False
        if self.paused:
            return True
        if not self.creature.step(self.dt, self.sink):
            self.finished = True
            self.creature.finish()
            logger.info("Replay finished: score %.4f in %d steps", self.creature.score, self.creature.time)
            return False
        return True

    def pause(self):
        """Toggle pause."""
        self.paused = not self.paused

    def resume(self):
        self.paused = False

    def cancel(self):
        self.cancelled = True


def train(population, generations, new_map_every=None, on_generation=None):
    """Advance ``population`` by ``generations`` generations, synchronously.

    With ``new_map_every`` the arena is regenerated (and the population
    re-ranked on it) before every k-th generation. ``on_generation`` is called
    with the population after each one.
    """
    for _ in range(generations):
        if new_map_every and population.generation and population.generation % new_map_every == 0:
            population.new_map()
        population.advance_generation()
        if on_generation is not None:
            on_generation(population)
    return population.best_creature()
