"""

 ██████  ██████  ███    ██ ███████ ████████  █████  ███    ██ ████████ ███████    ██████  ██    ██ 
██      ██    ██ ████   ██ ██         ██    ██   ██ ████   ██    ██    ██         ██   ██  ██  ██  
██      ██    ██ ██ ██  ██ ███████    ██    ███████ ██ ██  ██    ██    ███████    ██████    ████   
██      ██    ██ ██  ██ ██      ██    ██    ██   ██ ██  ██ ██    ██         ██    ██         ██    
 ██████  ██████  ██   ████ ███████    ██    ██   ██ ██   ████    ██    ███████ ██ ██         ██    
                                                                                                   
                                                                                                   

Default constants for the neuroevolution trainer.
Physics, radar, track and genetic algorithm defaults. A training session copies
these into a TrainingConfig; nothing here is mutated at runtime.
"""

# Simulation timing
FPS = 60
FRAME_DURATION = 1 / FPS
MAX_TICKS = 120 * FPS  # Safety cap: 2 minutes of simulated time per generation

# Vehicle physics (units are pixels per 60Hz frame)
MAX_SPEED = 6.0
SLIPPING_SPEED_RATIO = 0.75  # Grip starts fading above 75% of max speed
DECELERATION = 0.05  # Constant drag, applied every tick
ACCELERATION = 0.1
BRAKE_MULTIPLIER = 6.0
BRAKE_THRESHOLD = 0.5
TURN_GAIN = 3.0
COAST_DECAY = 0.05  # Fraction of speed lost per tick once the engine is off

# Radar configuration - five beams across a 140 degree forward arc
RADAR_ANGLES = (-70, -35, 0, 35, 70)
RADAR_MAX_LENGTH = 200
RADAR_STEP = 2
RADAR_OFFSET = 0.0  # Distance of the probe origin ahead of the car position
INITIAL_EDGE_DISTANCE = 100  # Reported when no radar came closer to an edge

# Track settings
ROAD_COLOR = (75, 75, 75, 255)
CHECKPOINT_RADIUS = 40
SPAWN_JITTER = 43  # Total vertical spread of spawn positions around checkpoint 0
TRACK_DIR = "assets/tracks"

# Network and population settings
NETWORK_DIMENSIONS = (5, 4, 3)  # radars -> hidden -> accel, steer, brake
EXTERNAL_MODEL_DIMENSIONS = (5, 4, 2)
POPULATION_SIZE = 10
KEEP_COUNT = 2
MAX_GENERATION_ITERATIONS = 10

# Genetic algorithm tuning
MUTATION_RATE = 0.05
MIN_RATE_FACTOR = 0.25
RATE_DECAY = 0.02
BASE_MUTATION_STRENGTH = 0.5
MIN_MUTATION_STRENGTH = 0.1
STRENGTH_DECAY = 0.05
HYPERMUTATION_RATE_FACTOR = 3.0
HYPERMUTATION_STRENGTH_FACTOR = 2.0
HYPERMUTATION_CAP = 0.8
REPLACEMENT_CHANCE = 0.15
HYPERMUTATION_REPLACEMENT_CHANCE = 0.30
IMMIGRANT_RATIO = 0.2
HYPERMUTATION_ENABLED = True
STAGNATION_THRESHOLD = 5  # Generations without a new checkpoint record

# Fitness weights
DISTANCE_WEIGHT = 1.0
SURVIVAL_WEIGHT = 5.0
WALL_PENALTY_WEIGHT = -10.0
AVG_SPEED_WEIGHT = 2.0
CHECKPOINT_BASE_REWARD = 100
CHECKPOINT_REWARD_GROWTH = 1.5

# Persistence
STORAGE_DIR = "trained_models"
STORAGE_KEY = "chromosomes"
STORAGE_PREFIX = "neuro_drive_"

# History length kept for fitness charts
FITNESS_HISTORY_LENGTH = 100
