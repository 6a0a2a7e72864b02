# scene.py

import logging

import numpy as np

import constants
from errors import ConfigurationError
from geometry import LineSegment

logger = logging.getLogger(constants.LOGGER_NAME)


def generate_mirrors(rng: np.random.Generator, width: float, height: float,
                     number_of_lines: int = constants.NUMBER_OF_LINES,
                     line_length: float = constants.LINE_LENGTH,
                     one_way: bool = constants.ONE_WAY_MIRRORS) -> list:
    """
    Scatters random mirrors over the image.

    Each mirror starts at a uniform point inside the image and extends by up
    to line_length/2 in either direction along both axes.

    Data Contract:
    - Inputs: rng (np.random.Generator) - the seeded generator for this image.
    - Outputs: list of LineSegment, never zero-length.
    - Side Effects: advances rng.
    """
    if not line_length > 0:
        raise ConfigurationError(f"line_length must be positive, got {line_length}")
    if number_of_lines < 0:
        raise ConfigurationError(f"number_of_lines must not be negative, got {number_of_lines}")

    starts = rng.random((number_of_lines, 2)) * np.array([width, height])
    directions = rng.random((number_of_lines, 2)) * line_length - 0.5 * line_length

    mirrors = []
    for start, direction in zip(starts, directions):
        while not np.any(direction):
            direction = rng.random(2) * line_length - 0.5 * line_length
        mirrors.append(LineSegment(start, direction, one_way=one_way))

    logger.info(f"Generated {len(mirrors)} mirrors (line_length={line_length}, one_way={one_way}).")
    return mirrors
