"""
Entry point: evolve drivers in an obstacle arena, optionally replay the best one.

    python main.py --generations 50 --population 40 --visual
"""
import argparse
import logging

from arena_driver import constants as C
from arena_driver.config import SimulationConfig
from arena_driver.evolution import Population
from arena_driver.logging_config import configure_logging
from arena_driver.simulation_core import EpisodeStepper, train

logger = logging.getLogger("arena_driver.main")


class ReplayWindow:
    """Pygame window that replays one creature, one simulation step per frame.

    SPACE pauses, R restarts the replay, ESC or closing the window quits.
    """

    def __init__(self, creature, scale=2):
        import pygame

        from arena_driver.renderer import PygameRenderer

        self.pygame = pygame
        self.creature = creature
        arena = creature.vehicle.arena
        pygame.init()
        self.screen = pygame.display.set_mode((arena.width * scale, arena.height * scale))
        pygame.display.set_caption("Driver Simulation")
        self.clock = pygame.time.Clock()
        self.renderer = PygameRenderer(arena.width, arena.height, scale)
        self.stepper = EpisodeStepper(creature, sink=self.renderer)
        self.running = True

    def handle_events(self):
        pygame = self.pygame
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.stepper.pause()
                elif event.key == pygame.K_r:
                    self.stepper.cancel()
                    self.stepper = EpisodeStepper(self.creature, sink=self.renderer)

    def run(self):
        """Main replay loop"""
        while self.running:
            self.handle_events()
            self.stepper.advance()
            self.renderer.draw(self.screen)
            self.pygame.display.flip()
            self.clock.tick(C.FPS)
        self.stepper.cancel()
        self.pygame.quit()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Neuroevolution of vision-driven vehicles in an obstacle arena")
    parser.add_argument("--generations", "-g", type=int, default=30, help="Generations to train (default: 30)")
    parser.add_argument("--population", "-p", type=int, default=C.POPULATION_SIZE,
                        help=f"Creatures per generation (default: {C.POPULATION_SIZE})")
    parser.add_argument("--seed", type=int, default=None, help="Seed for arenas, weights and mutations")
    parser.add_argument("--sensor", choices=("rays", "projection"), default=C.SENSOR,
                        help=f"Vision strategy (default: {C.SENSOR})")
    parser.add_argument("--workers", type=int, default=C.WORKERS,
                        help="Threads used to evaluate creatures (default: 1)")
    parser.add_argument("--new-map-every", type=int, default=0,
                        help="Regenerate the arena every K generations (default: never)")
    parser.add_argument("--visual", action="store_true", help="Replay the best creature in a pygame window")
    parser.add_argument("--log-level", default=None, help="Logging level (default: env or INFO)")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level)

    config = SimulationConfig.from_dict({
        "population_size": args.population,
        "sensor": args.sensor,
        "workers": args.workers,
        "seed": args.seed,
    })
    logger.info("Configuration: %s", config.to_dict())

    population = Population(config)
    best = train(population, args.generations, new_map_every=args.new_map_every)
    logger.info("Training done after %d generations: best score %.4f", population.generation, best.score)

    if args.visual:
        ReplayWindow(best).run()
    return population


if __name__ == "__main__":
    main()
