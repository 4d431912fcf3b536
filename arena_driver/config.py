"""
Configuration objects for the driving simulation.

The defaults live in arena_driver.constants; a SimulationConfig groups them so a
whole run can be described, validated and passed around explicitly instead of
being read from module globals.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

from arena_driver import constants as C
from arena_driver.arena import OccupancyArena

SENSORS = ("rays", "projection")


@dataclass
class ArenaConfig:
    """Size and obstacle density of the occupancy field."""

    width: int = C.ARENA_WIDTH
    height: int = C.ARENA_HEIGHT
    num_obstacles: int = C.NUM_OBSTACLES
    obstacle_size: int = C.OBSTACLE_SIZE
    spawn_clearance: int = C.SPAWN_CLEARANCE


@dataclass
class VisionConfig:
    vision_x: int = C.VISION_X
    vision_y: int = C.VISION_Y
    factor_theta: float = C.FACTOR_THETA
    factor_depth: float = C.FACTOR_DEPTH
    sensor: str = C.SENSOR

    @property
    def size(self) -> int:
        return self.vision_x * self.vision_y


@dataclass
class KinematicsConfig:
    """Spawn pose and speed envelope of every vehicle."""

    start_x: float = C.START_X
    start_y: float = C.START_Y
    start_theta: float = C.START_THETA
    start_speed: float = C.START_SPEED
    v_min: float = C.MIN_SPEED
    v_max: float = C.MAX_SPEED
    drag: float = C.DRAG
    max_acceleration: float = C.MAX_ACCELERATION


@dataclass
class NetworkConfig:
    feedback: int = C.FEEDBACK
    feedback_speed: int = C.FEEDBACK_SPEED
    hidden_layers: Tuple[int, ...] = C.HIDDEN_LAYERS
    init_amplitude: float = C.INIT_AMPLITUDE


@dataclass
class EvolutionConfig:
    population_size: int = C.POPULATION_SIZE
    mutation_rate: float = C.MUTATION_RATE
    mutation_factor: float = C.MUTATION_FACTOR
    step_limit: int = C.STEP_LIMIT
    dt: float = C.DT
    display_dt: float = C.DISPLAY_DT
    workers: int = C.WORKERS


@dataclass
class SimulationConfig:
    """Full description of a training run.

    Attributes:
        arena: Occupancy field bounds and generation parameters.
        vision: Sensor resolution, ray spread and strategy.
        kinematics: Spawn pose and speed envelope.
        network: Extra network inputs and hidden topology.
        evolution: Population size, mutation and episode settings.
        seed: Optional seed for the run's random generator.
    """

    arena: ArenaConfig = field(default_factory=ArenaConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)
    kinematics: KinematicsConfig = field(default_factory=KinematicsConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    evolution: EvolutionConfig = field(default_factory=EvolutionConfig)
    seed: Optional[int] = None

    @property
    def num_inputs(self) -> int:
        """Entry layer size: vision image, two echo groups, speed buckets."""
        return self.vision.size + 2 * self.network.feedback + self.network.feedback_speed

    def validate(self) -> "SimulationConfig":
        """Raise ValueError if any option is out of its legal range."""
        a, v, k, n, e = self.arena, self.vision, self.kinematics, self.network, self.evolution
        if a.width <= 0 or a.height <= 0:
            raise ValueError(f"Arena size must be positive, got {a.width}x{a.height}")
        if a.num_obstacles < 0 or a.obstacle_size <= 0:
            raise ValueError("Obstacle count must be >= 0 and obstacle size > 0")
        if a.obstacle_size > min(a.width, a.height):
            raise ValueError(f"Obstacle size {a.obstacle_size} does not fit in the arena")
        if a.spawn_clearance < 0:
            raise ValueError("spawn_clearance must be non-negative")
        span_x, span_y = a.width - a.obstacle_size, a.height - a.obstacle_size
        if a.num_obstacles and a.spawn_clearance and max(span_x, span_y) <= a.spawn_clearance:
            raise ValueError(
                f"Obstacles of size {a.obstacle_size} cannot be placed outside the spawn "
                f"corner ({a.spawn_clearance}) of a {a.width}x{a.height} arena")
        if v.vision_x <= 0 or v.vision_y <= 0:
            raise ValueError(f"Vision resolution must be positive, got {v.vision_x}x{v.vision_y}")
        if v.factor_theta <= 0 or v.factor_depth <= 0:
            raise ValueError("factor_theta and factor_depth must be positive")
        if v.sensor not in SENSORS:
            raise ValueError(f"Unknown sensor {v.sensor!r}, expected one of {SENSORS}")
        if k.v_max <= 0:
            raise ValueError(f"v_max must be positive, got {k.v_max}")
        if k.v_min > k.v_max:
            raise ValueError(f"v_min ({k.v_min}) exceeds v_max ({k.v_max})")
        if k.drag < 0:
            raise ValueError("drag must be non-negative")
        if n.feedback < 0 or n.feedback_speed < 0:
            raise ValueError("feedback counts must be non-negative")
        if any(size <= 0 for size in n.hidden_layers):
            raise ValueError(f"Hidden layer sizes must be positive, got {n.hidden_layers}")
        if e.population_size <= 0:
            raise ValueError("population_size must be positive")
        if not 0.0 <= e.mutation_rate <= 1.0:
            raise ValueError(f"mutation_rate must be in [0, 1], got {e.mutation_rate}")
        if e.step_limit <= 0 or e.dt <= 0 or e.display_dt <= 0:
            raise ValueError("step_limit, dt and display_dt must be positive")
        if e.workers < 1:
            raise ValueError("workers must be at least 1")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        """Build a config from a nested mapping or a flat one of field names.

        Flat keys are routed to whichever section declares them, so
        ``{"population_size": 50, "vision_x": 9}`` works as well as
        ``{"evolution": {"population_size": 50}}``.
        """
        sections = {
            "arena": ArenaConfig,
            "vision": VisionConfig,
            "kinematics": KinematicsConfig,
            "network": NetworkConfig,
            "evolution": EvolutionConfig,
        }
        owners = {f.name: name for name, klass in sections.items() for f in fields(klass)}
        values: Dict[str, Dict[str, Any]] = {name: {} for name in sections}
        seed = data.get("seed")
        for key, value in data.items():
            if key == "seed":
                continue
            if key in sections:
                values[key].update(value)
            elif key in owners:
                values[owners[key]][key] = value
            else:
                raise ValueError(f"Unknown configuration option {key!r}")
        if "hidden_layers" in values["network"]:
            values["network"]["hidden_layers"] = tuple(values["network"]["hidden_layers"])
        built = {name: klass(**values[name]) for name, klass in sections.items()}
        return cls(seed=seed, **built)


@dataclass(frozen=True)
class SimulationContext:
    """Read-only pairing of configuration and arena threaded through evaluation.

    The arena object itself is only regenerated between generations by the
    population; during an evaluation pass every creature reads the same one.
    """

    config: SimulationConfig
    arena: OccupancyArena
