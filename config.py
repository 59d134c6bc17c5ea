"""
Simulation tuning knobs.
"""

# Runtime pacing
FPS = 60
MS_PER_FRAME = 1000 / FPS
SIM_SPEED = 1  # simulation ticks per rendered frame

# Track / canvas
CANVAS_W, CANVAS_H = 600, 150
BOTTOM_PAD = 10
HORIZON_Y = 127

# Game speed + spawning
SPEED = 6.0
MAX_SPEED = 13.0
ACCELERATION = 0.001
CLEAR_TIME = 3000  # ms before obstacles spawn and collisions count
GAP_COEFFICIENT = 0.6
MAX_OBSTACLE_LENGTH = 3
MAX_OBSTACLE_DUPLICATION = 2
OBSTACLE_HISTORY_LEN = 3
OBSTACLE_PICK_RETRIES = 10
SCORE_COEFFICIENT = 0.025
ENABLE_NOCLIP = False

# Runner
RUNNER_START_X = 50
RUNNER_WIDTH = 44
RUNNER_WIDTH_DUCK = 59
RUNNER_HEIGHT = 47
RUNNER_HEIGHT_DUCK = 25
RUNNER_GRAVITY = 0.6
INITIAL_JUMP_VELOCITY = -10.0
DROP_VELOCITY = -5.0
MIN_JUMP_HEIGHT = 35
MAX_JUMP_HEIGHT = 30
DUCK_SAFETY_MARGIN = 50
DUCK_RELEASE_DISTANCE = 150

# Policy / sensing
CLOSE_DISTANCE = 100
DUCK_BOOST_DISTANCE = 80
DUCK_BOOST = 0.5
DUCK_SIGNAL_DISTANCE = 120
SENSE_RANGE = 300.0
PTERO_TOP_Y = 50
DDIST_NORM = 600.0

# Fitness
SURVIVAL_REWARD = 0.1  # per ms alive
SPEED_BONUS = 2.0
CACTUS_JUMP_TIME = 0.3  # seconds to impact
REWARD_DUCK_PTERO = 100.0
REWARD_CORRECT = 20.0
PENALTY_MISSED_DUCK = -50.0
PENALTY_WRONG = -15.0
PENALTY_IDLE_JUMP = -20.0
PENALTY_CLOSE_IDLE_DUCK = -2.0
PENALTY_IDLE_DUCK = -5.0
REWARD_CLEAR_RUN = 3.0
REWARD_PASS = 30.0

# Population + GA
POPULATION_SIZE = 200
MUTATION_RATE = 0.05
MUTATION_SIGMA = 0.02
CROSSOVER_RATE = 0.7  # recorded in checkpoints; crossover always applies
DIVERSITY_FRACTION = 0.1

# Persistence
DATA_DIR = "public"
CHECKPOINT_FILE = "training-checkpoint.json"
BEST_WEIGHTS_FILE = "neural-network-weights.json"
WEIGHTS_VERSION = "1.0.0"
SAVE_QUEUE_SIZE = 2

# Window
SCREEN_W, SCREEN_H = 980, 520
PANEL_H = 340
