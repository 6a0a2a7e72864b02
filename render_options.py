# render_options.py

import numpy as np

import constants
from errors import ConfigurationError


class RenderOptions:
    """
    Image size and how the launches are split into chunks.

    Data Contract:
    - Inputs: width, height (pixels), multi_sampling (launches per column),
      chunk_size (launches drawn between two readbacks).
    - Outputs: `samples` total launches, `chunks` number of readbacks and the
      paint intensity `color` every strip is drawn with.
    - Invariants: chunk_size divides samples.
    """
    def __init__(self, width: int = constants.WIDTH, height: int = constants.HEIGHT,
                 multi_sampling: int = constants.MULTI_SAMPLING, chunk_size: int = constants.CHUNK_SIZE):
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"image size must be positive, got {width}x{height}")
        if multi_sampling < 1:
            raise ConfigurationError(f"multi_sampling must be at least 1, got {multi_sampling}")
        if chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be at least 1, got {chunk_size}")

        self.width = int(width)
        self.height = int(height)
        self.samples = int(multi_sampling) * self.width
        self.chunk_size = int(chunk_size)

        if self.samples % self.chunk_size != 0:
            raise ConfigurationError(
                f"chunk_size {self.chunk_size} does not divide the {self.samples} samples"
            )
        self.chunks = self.samples // self.chunk_size

        # chunk_size * color stays close to the 256 levels of one readback
        self.color = min(255, max(1, 256 // self.chunk_size))

    @classmethod
    def from_config(cls, config: dict):
        return cls(
            width=config.get('width', constants.WIDTH),
            height=config.get('height', constants.HEIGHT),
            multi_sampling=config.get('multi_sampling', constants.MULTI_SAMPLING),
            chunk_size=config.get('chunk_size', constants.CHUNK_SIZE),
        )

    def launch_positions(self, chunk: int, launch_height: float) -> np.ndarray:
        """
        Launch points of one chunk. Chunk i, slot j starts at
        x = width * (i / samples + j / chunk_size), so the chunks interleave
        and together cover every sub-pixel offset of every column once.
        """
        j = np.arange(self.chunk_size, dtype=np.float64)
        positions = np.empty((self.chunk_size, 2), dtype=np.float64)
        positions[:, 0] = self.width * (chunk / self.samples + j / self.chunk_size)
        positions[:, 1] = launch_height
        return positions

    def __repr__(self):
        return (
            f"RenderOptions({self.width}x{self.height}, samples={self.samples}, "
            f"chunk_size={self.chunk_size}, chunks={self.chunks}, color={self.color})"
        )
