# sampler.py

import logging
from typing import Iterator, Optional, Tuple

import numpy as np

import constants
from errors import ConfigurationError
from geometry import Bounds, as_vec2

logger = logging.getLogger(constants.LOGGER_NAME)


class Sampler:
    """
    Turns a traced path into the vertex list of a line strip.

    Data Contract:
    - Inputs:
        - gravity: the acceleration the path was traced with.
        - dt (float > 0): seconds between two samples.
        - max_time (float > 0): sampling stops before this time.
        - line_bound (int >= 2): maximum number of vertices per path.
        - bounds (Bounds | None): when set, sampling stops once the particle
          has left the box for good after its last bounce.
    - Outputs: a lazy generator of (x, y) world positions. Every bounce
      position is emitted exactly, in addition to the fixed-step samples.
    - Invariants: never yields more than line_bound vertices.
    """
    def __init__(self, gravity, dt: float, max_time: float, line_bound: int = constants.LINE_BOUND,
                 bounds: Optional[Bounds] = None):
        if not dt > 0:
            raise ConfigurationError(f"time step must be positive, got {dt}")
        if not max_time > 0:
            raise ConfigurationError(f"max_time must be positive, got {max_time}")
        if line_bound < 2:
            raise ConfigurationError(f"line_bound must allow at least two vertices, got {line_bound}")

        self.gravity = as_vec2(gravity)
        self.dt = float(dt)
        self.max_time = float(max_time)
        self.line_bound = int(line_bound)
        self.bounds = bounds

    @classmethod
    def from_config(cls, config: dict, trace_options):
        return cls(
            gravity=trace_options.gravity,
            dt=config.get('dt', constants.DT),
            max_time=trace_options.max_time,
            line_bound=config.get('line_bound', constants.LINE_BOUND),
            bounds=trace_options.bounds,
        )

    def _samples(self, bounces) -> Iterator[Tuple[float, float]]:
        gx, gy = self.gravity
        last = len(bounces) - 1
        current = 0
        step = 0

        while True:
            # step * dt rather than repeated addition, so long paths don't drift
            t = step * self.dt
            if t >= self.max_time:
                return

            while current < last and t > bounces[current + 1].time:
                current += 1
                x, y = bounces[current].position
                yield float(x), float(y)

            b = bounces[current]
            tau = t - b.time
            x = 0.5 * gx * tau * tau + b.velocity[0] * tau + b.position[0]
            y = 0.5 * gy * tau * tau + b.velocity[1] * tau + b.position[1]
            yield float(x), float(y)

            if self.bounds is not None and current == last:
                velocity = (gx * tau + b.velocity[0], gy * tau + b.velocity[1])
                if self.bounds.has_escaped((x, y), velocity, (gx, gy)):
                    return

            step += 1

    def vertices(self, bounces) -> Iterator[Tuple[float, float]]:
        """Lazily yields at most line_bound vertices for the given trace."""
        if not bounces:
            raise ValueError("a trace always contains at least the launch point")

        for emitted, vertex in enumerate(self._samples(bounces)):
            if emitted == self.line_bound:
                return
            yield vertex

    def sample(self, bounces) -> np.ndarray:
        """Materialises the vertices into a private (n, 2) float64 buffer."""
        buffer = np.fromiter(
            (c for vertex in self.vertices(bounces) for c in vertex),
            dtype=np.float64,
        )
        return buffer.reshape(-1, 2)
