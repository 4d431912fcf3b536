"""


███████ ██    ██  ██████  ██      ██    ██ ████████ ██  ██████  ███    ██    ██████  ██    ██ 
██      ██    ██ ██    ██ ██      ██    ██    ██    ██ ██    ██ ████   ██    ██   ██  ██  ██  
█████   ██    ██ ██    ██ ██      ██    ██    ██    ██ ██    ██ ██ ██  ██    ██████    ████   
██       ██  ██  ██    ██ ██      ██    ██    ██    ██ ██    ██ ██  ██ ██    ██         ██    
███████   ████    ██████  ███████  ██████     ██    ██  ██████  ██   ████ ██ ██         ██    
                                                                                              
                                                                                              

Population management for the driving simulation.
Ranks creatures by episode score and refills the lower ranks with mutated
copies of the best ones, generation after generation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from arena_driver.arena import OccupancyArena
from arena_driver.config import SimulationContext
from arena_driver.creature import Creature

logger = logging.getLogger(__name__)


class Population:
    """Fixed-size set of creatures sharing one arena.

    ``scores`` is the current ranking: (creature index, score) pairs sorted by
    descending score, ties kept in index order.
    """

    def __init__(self, config, rng=None, arena=None, evaluate=True):
        self.config = config.validate()
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        a = config.arena
        self.arena = arena if arena is not None else OccupancyArena(a.width, a.height)
        self.context = SimulationContext(config, self.arena)

        self.nb_creatures = config.evolution.population_size
        self.creatures = [Creature(self.context, self.rng) for _ in range(self.nb_creatures)]
        self.scores = [(i, 0.0) for i in range(self.nb_creatures)]
        self.generation = 0
        self.best = 0.0
        self.time = 0
        self.history = []

        if evaluate:
            self.new_map()

    def __len__(self):
        return self.nb_creatures

    def ranked(self, rank):
        """Creature currently holding position ``rank`` of the ranking."""
        return self.creatures[self.scores[rank][0]]

    def best_creature(self):
        return self.ranked(0)

    def evaluate_all(self, dt=None, force=False):
        """Run an episode for every creature that needs one.

        Creatures are independent given the frozen arena, so with
        ``workers > 1`` they run in a thread pool; this returns only once all
        of them are done.
        """
        dt = self.config.evolution.dt if dt is None else dt
        pending = [c for c in self.creatures if force or c.needs_eval]
        workers = self.config.evolution.workers
        if workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                list(pool.map(lambda creature: creature.run_episode(dt), pending))
        else:
            for creature in pending:
                creature.run_episode(dt)
        logger.debug("Evaluated %d/%d creatures", len(pending), self.nb_creatures)
        return len(pending)

    def rank(self):
        """Rank creatures by descending score (stable on index) and record the best."""
        pairs = [(i, creature.score) for i, creature in enumerate(self.creatures)]
        self.scores = sorted(pairs, key=lambda pair: pair[1], reverse=True)
        leader = self.best_creature()
        self.best = leader.score
        self.time = leader.time
        self.history.append((self.generation, self.best, self.time))
        return self.scores

    def mutate_generation(self, mute_ratio, mute_factor):
        """Replace lower ranks with mutated copies of higher ones.

        Each of the top ``N // 10`` creatures is copied into two slots at the
        bottom of the ranking; ranks ``N // 10`` to ``N // 2 - N // 10`` are
        each copied into one slot of the second half. Copies are mutated, the
        sources are left untouched.
        """
        n = self.nb_creatures
        nb_first = n // 10
        nb_mid = n // 2

        for i in range(nb_first):
            parent = self.ranked(i)
            for target in (n - 2 * i - 1, n - 2 * i - 2):
                if target >= 0:
                    child = self.ranked(target)
                    child.copy(parent)
                    child.mutate(mute_ratio, mute_factor)

        for i in range(nb_first, nb_mid - nb_first):
            target = nb_mid + i - nb_first
            if target < n:
                child = self.ranked(target)
                child.copy(self.ranked(i))
                child.mutate(mute_ratio, mute_factor)

    def advance_generation(self, mute_ratio=None, mute_factor=None, dt=None):
        """One generation: mutate, evaluate, rank, count."""
        e = self.config.evolution
        mute_ratio = e.mutation_rate if mute_ratio is None else mute_ratio
        mute_factor = e.mutation_factor if mute_factor is None else mute_factor
        self.mutate_generation(mute_ratio, mute_factor)
        self.evaluate_all(dt)
        self.rank()
        self.generation += 1
        logger.info("Generation %d: best score %.4f in %d steps, median weight %.4f",
                    self.generation, self.best, self.time, self.best_creature().median())
        return self.best

    def regenerate_arena(self, num_obstacles=None, obstacle_size=None):
        """Rebuild the shared arena; every stored score is stale afterwards."""
        a = self.config.arena
        self.arena.generate(
            a.num_obstacles if num_obstacles is None else num_obstacles,
            a.obstacle_size if obstacle_size is None else obstacle_size,
            rng=self.rng,
            clearance=a.spawn_clearance,
        )
        for creature in self.creatures:
            creature.needs_eval = True

    def new_map(self, num_obstacles=None, obstacle_size=None, dt=None):
        """Regenerate the arena, then re-evaluate and re-rank the whole population."""
        self.regenerate_arena(num_obstacles, obstacle_size)
        self.evaluate_all(dt)
        self.rank()
        logger.info("New map: best score %.4f in %d steps", self.best, self.time)
        return self.best
