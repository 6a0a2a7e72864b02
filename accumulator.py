# accumulator.py

import logging

import numpy as np

import constants
from errors import ConfigurationError, EmptySceneError

logger = logging.getLogger(constants.LOGGER_NAME)


def tone_map(counts: np.ndarray, exposure: float = constants.EXPOSURE, gamma: float = constants.GAMMA) -> np.ndarray:
    """
    Maps accumulated counts to brightness values in [0, 1].

    power = -gamma / ln(avg / max), value = exposure * (count / max) ^ power.
    The curve puts the average pixel at exp(-gamma) of full brightness before
    exposure is applied.

    Data Contract:
    - Inputs: counts (array of non-negative integers), exposure (>= 0), gamma (> 0).
    - Outputs: a new float64 array of the same shape, clipped to [0, 1].
    - Side Effects: None. `counts` is not modified.
    - Raises: EmptySceneError when every count is zero.
    """
    if not gamma > 0:
        raise ConfigurationError(f"gamma must be positive, got {gamma}")
    if not exposure >= 0:
        raise ConfigurationError(f"exposure must not be negative, got {exposure}")

    counts = np.asarray(counts)
    maximum = float(counts.max()) if counts.size else 0.0
    if maximum == 0.0:
        raise EmptySceneError("histogram is empty, nothing was ever drawn")

    average = float(counts.mean())
    # a uniformly lit histogram has ln(1) == 0; every pixel is at max anyway
    if average == maximum:
        power = 1.0
    else:
        power = -gamma / np.log(average / maximum)

    values = exposure * np.power(counts / maximum, power)
    return np.clip(values, 0.0, 1.0)


class Histogram:
    """
    Running per-pixel sum of every surface readback.

    Data Contract:
    - Inputs: width, height (pixels).
    - Invariants: counts only ever grow; the grid is cleared only on
      construction. Addition is commutative, so the fold order of frames
      does not matter.
    """
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.counts = np.zeros((height, width), dtype=np.uint64)
        self.frames = 0

    def add(self, frame: np.ndarray):
        """Folds one (height, width) uint8 readback into the histogram."""
        frame = np.asarray(frame)
        if frame.shape != self.counts.shape:
            raise ValueError(f"frame shape {frame.shape} does not match histogram {self.counts.shape}")
        self.counts += frame.astype(np.uint64)
        self.frames += 1

    def tone_map(self, exposure: float = constants.EXPOSURE, gamma: float = constants.GAMMA) -> np.ndarray:
        values = tone_map(self.counts, exposure, gamma)
        logger.info(
            f"Tone mapped {self.frames} frames: max={int(self.counts.max())}, "
            f"mean={float(self.counts.mean()):.3f}, exposure={exposure}, gamma={gamma}"
        )
        return values
