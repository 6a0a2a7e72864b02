# renderer.py

import logging

import numpy as np
import pygame

import constants
from errors import ResourceError

logger = logging.getLogger(constants.LOGGER_NAME)


class Canvas:
    """
    Offscreen pygame surface that line strips are added onto.

    World coordinates have y pointing up; pixel rows are counted from the
    top, so world (x, y) lands on pixel (x, height - y).

    Data Contract:
    - Inputs: width, height (pixels).
    - Outputs: `read()` returns a (height, width) uint8 copy of the surface.
    - Side Effects: owns two surfaces until `close()` (or leaving a `with`
      block) releases them.
    - Invariants: not thread-safe; only the consumer thread may touch it.
    """
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        try:
            self.surface = pygame.Surface((width, height), 0, 32)
            # Scratch surface for one strip, blitted onto the main surface with BLEND_ADD.
            self._strip = pygame.Surface((width, height), 0, 32)
        except (pygame.error, ValueError) as e:
            raise ResourceError(f"could not create a {width}x{height} drawing surface: {e}") from e
        self.clear()
        logger.debug(f"Canvas created ({width}x{height}).")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.surface = None
        self._strip = None

    def clear(self):
        self.surface.fill(constants.BLACK)
        self._strip.fill(constants.BLACK)

    def draw_strip(self, vertices: np.ndarray, color: int):
        """
        Draws the vertices as one connected line strip. Overlapping strips add
        up (saturating at 255) instead of overwriting each other.
        """
        if len(vertices) < 2:
            return

        points = np.empty((len(vertices), 2), dtype=np.float64)
        points[:, 0] = vertices[:, 0]
        points[:, 1] = self.height - vertices[:, 1]

        rgb = (color, color, color)
        rect = pygame.draw.lines(self._strip, rgb, False, points.tolist())
        rect = rect.clip(self._strip.get_rect())
        if rect.width == 0 or rect.height == 0:
            return

        self.surface.blit(self._strip, rect, area=rect, special_flags=pygame.BLEND_ADD)
        self._strip.fill(constants.BLACK, rect)

    def read(self) -> np.ndarray:
        """One unsigned byte per pixel, row-major."""
        # surfarray is indexed [x, y]
        return np.ascontiguousarray(pygame.surfarray.array_red(self.surface).T)


def write_png(values: np.ndarray, width: int, height: int, filename: str):
    """
    Writes normalised values in [0, 1] (row-major, one per pixel) as an
    8-bit grey PNG.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size != width * height:
        raise ValueError(f"expected {width * height} values for a {width}x{height} image, got {values.size}")

    grey = np.rint(np.clip(values.reshape(height, width), 0.0, 1.0) * 255.0).astype(np.uint8)
    rgb = np.repeat(grey.T[:, :, np.newaxis], 3, axis=2)

    try:
        surface = pygame.surfarray.make_surface(rgb)
        pygame.image.save(surface, filename)
    except pygame.error as e:
        raise ResourceError(f"could not write image {filename}: {e}") from e
    logger.info(f"Image written to {filename} ({width}x{height}).")
