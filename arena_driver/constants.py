"""

 ██████  ██████  ███    ██ ███████ ████████  █████  ███    ██ ████████ ███████    ██████  ██    ██ 
██      ██    ██ ████   ██ ██         ██    ██   ██ ████   ██    ██    ██         ██   ██  ██  ██  
██      ██    ██ ██ ██  ██ ███████    ██    ███████ ██ ██  ██    ██    ███████    ██████    ████   
██      ██    ██ ██  ██ ██      ██    ██    ██   ██ ██  ██ ██    ██         ██    ██         ██    
 ██████  ██████  ██   ████ ███████    ██    ██   ██ ██   ████    ██    ███████ ██ ██         ██    
                                                                                                   
                                                                                                   

Default constants for the obstacle-arena driving simulation.
Every value here seeds a field of arena_driver.config.SimulationConfig.
"""

import math

# Arena
ARENA_WIDTH = 300
ARENA_HEIGHT = 300
NUM_OBSTACLES = 30
OBSTACLE_SIZE = 20
SPAWN_CLEARANCE = 40  # obstacles never land with both coordinates below this

# Vision - VISION_X rays (columns) by VISION_Y depth bands (rows)
VISION_X = 15
VISION_Y = 10
FACTOR_THETA = 10.0  # angular step per ray is (pi / 300) * FACTOR_THETA
FACTOR_DEPTH = 10.0  # max ray depth is VISION_Y * FACTOR_DEPTH
SENSOR = "rays"  # "rays" or "projection"

# Kinematics
START_X = 10.0
START_Y = 10.0
START_THETA = math.pi / 4
START_SPEED = 20.0
MIN_SPEED = 0.0
MAX_SPEED = 60.0
DRAG = 0.5
MAX_ACCELERATION = 60.0
MAX_TURN_RATE = math.pi / 3

# Network inputs beyond the vision image
FEEDBACK = 0
FEEDBACK_SPEED = 0
HIDDEN_LAYERS = ()
INIT_AMPLITUDE = 0.2

# Episodes
STEP_LIMIT = 2000
DT = 0.1  # headless training step
DISPLAY_DT = 0.01  # animated replay step

# Population and mutation
POPULATION_SIZE = 20
MUTATION_RATE = 0.1
MUTATION_FACTOR = 1.0
WORKERS = 1

# Display
FPS = 60
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
TRAIL_GRAY = (94, 94, 94)
QUAD_GRAY = (62, 62, 62)
RAY_GRAY = (31, 31, 31)
CENTER_RAY_GRAY = (27, 27, 27)
