# constants.py

"""
Application Constants

This module defines the static defaults used when a value is missing from
config.json. These are not expected to change between render runs.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Name of the dedicated application logger
LOGGER_NAME = "mirror_trails"

# Image dimensions
WIDTH = 1280  # Pixels
HEIGHT = 800  # Pixels

# Sampling
MULTI_SAMPLING = 8  # Launches per image column
CHUNK_SIZE = 512  # Launches drawn between two histogram folds

# Scene generation
NUMBER_OF_LINES = 50
LINE_LENGTH = 200.0  # Pixels, maximum extent of a mirror along each axis
ONE_WAY_MIRRORS = True
BOUNDS_MARGIN = 20.0  # Pixels around the image a particle may leave before it is dropped

# Tracing
GRAVITY = (0.0, -10.0)  # Pixels / s^2, world y axis points up
MAX_BOUNCES = 500
MAX_TIME = 30.0  # Seconds
TIME_EPSILON = 1e-9  # Seconds. Roots closer than this to the current bounce are ignored.

# Sampling of traced paths
DT = 1.0 / 20.0  # Seconds between two vertices
LINE_BOUND = 5000  # Maximum vertices per launch

# Tone mapping
EXPOSURE = 1.5  # higher is lighter
GAMMA = 2.0  # lower is lighter

# Pipeline
RESULT_TIMEOUT = 60.0  # Seconds the consumer waits for a single worker result

# Colors (RGB)
BLACK = (0, 0, 0)

# Output
OUTPUT_PATTERN = "out_{index}.png"
