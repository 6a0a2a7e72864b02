# tracer.py

import enum
import logging
from dataclasses import dataclass, field
from collections import namedtuple
from typing import Optional

import numpy as np
import numba

import constants
from collisions import COLLISION, first_collision_jit, kinematics_jit
from errors import ConfigurationError
from geometry import Bounds, as_vec2, dot_xy, pack_segments, SEG_NX, SEG_NY

logger = logging.getLogger(constants.LOGGER_NAME)

# Termination codes returned by the trace kernel.
NO_COLLISION = 0
MAX_BOUNCES = 1
MAX_TIME = 2

# Column layout of the bounce buffer filled by the trace kernel.
B_X, B_Y, B_VX, B_VY, B_TIME, B_SEGMENT = range(6)


@numba.njit(nogil=True)
def _trace_jit(gx, gy, px, py, vx, vy, max_bounces, max_time, min_time, segments, out):
    """
    Numba-accelerated bounce loop for a single launch.

    Each iteration tests every segment, keeps the earliest valid collision and
    reflects the velocity about that segment's normal. Ties go to the segment
    found first. Fills `out` row by row and returns (rows written, reason).
    """
    out[0, B_X] = px
    out[0, B_Y] = py
    out[0, B_VX] = vx
    out[0, B_VY] = vy
    out[0, B_TIME] = 0.0
    out[0, B_SEGMENT] = -1.0

    elapsed = 0.0
    count = 1
    for _ in range(max_bounces):
        best_t = np.inf
        best_k = -1
        for k in range(segments.shape[0]):
            status, t = first_collision_jit(gx, gy, vx, vy, px, py, segments, k, min_time)
            if status == COLLISION and t < best_t:
                best_t = t
                best_k = k

        # no bounce found, hence we can stop
        if best_k == -1:
            return count, NO_COLLISION
        if elapsed + best_t > max_time:
            return count, MAX_TIME

        px, py, ivx, ivy = kinematics_jit(gx, gy, vx, vy, px, py, best_t)
        nx = segments[best_k, SEG_NX]
        ny = segments[best_k, SEG_NY]
        reflect = 2.0 * dot_xy(ivx, ivy, nx, ny)
        vx = ivx - reflect * nx
        vy = ivy - reflect * ny
        elapsed += best_t

        out[count, B_X] = px
        out[count, B_Y] = py
        out[count, B_VX] = vx
        out[count, B_VY] = vy
        out[count, B_TIME] = elapsed
        out[count, B_SEGMENT] = best_k
        count += 1

    return count, MAX_BOUNCES


class TraceTermination(enum.Enum):
    NO_COLLISION = NO_COLLISION
    MAX_BOUNCES = MAX_BOUNCES
    MAX_TIME = MAX_TIME


@dataclass(frozen=True)
class TraceOptions:
    """
    Physics limits shared by every launch of a render.

    Data Contract:
    - gravity: constant acceleration, world y axis points up.
    - max_bounces (int >= 0): hard cap on reflections per launch.
    - max_time (float > 0): no bounce may happen later than this.
    - time_epsilon (float >= 0): roots this close to the current bounce are
      the bounce itself and are ignored.
    - bounds: optional box outside of which a falling particle is dropped by
      the sampler.
    """
    gravity: np.ndarray = field(default_factory=lambda: as_vec2(constants.GRAVITY))
    max_bounces: int = constants.MAX_BOUNCES
    max_time: float = constants.MAX_TIME
    time_epsilon: float = constants.TIME_EPSILON
    bounds: Optional[Bounds] = None

    def __post_init__(self):
        gravity = as_vec2(self.gravity).copy()
        gravity.flags.writeable = False
        object.__setattr__(self, "gravity", gravity)

        if int(self.max_bounces) != self.max_bounces or self.max_bounces < 0:
            raise ConfigurationError(f"max_bounces must be a non-negative integer, got {self.max_bounces}")
        object.__setattr__(self, "max_bounces", int(self.max_bounces))
        if not self.max_time > 0:
            raise ConfigurationError(f"max_time must be positive, got {self.max_time}")
        if not self.time_epsilon >= 0:
            raise ConfigurationError(f"time_epsilon must not be negative, got {self.time_epsilon}")

    @classmethod
    def from_config(cls, config: dict, bounds: Optional[Bounds] = None):
        return cls(
            gravity=config.get('gravity', constants.GRAVITY),
            max_bounces=config.get('max_bounces', constants.MAX_BOUNCES),
            max_time=config.get('max_time', constants.MAX_TIME),
            time_epsilon=config.get('time_epsilon', constants.TIME_EPSILON),
            bounds=bounds,
        )


@dataclass(frozen=True)
class BouncePoint:
    """State right after a bounce (or at launch): outgoing velocity, time since launch."""
    position: np.ndarray
    velocity: np.ndarray
    time: float
    segment: int = -1  # index of the mirror that was hit, -1 for the launch point


TraceResult = namedtuple('TraceResult', ['bounces', 'reason'])


class Tracer:
    """
    Traces launches through a fixed set of mirrors.

    The segment table is packed once and is read-only, so a single Tracer can
    be shared by any number of worker threads.
    """
    def __init__(self, segments, options: TraceOptions):
        self.segments = tuple(segments)
        self.options = options
        self.table = pack_segments(self.segments)
        logger.info(f"Tracer created for {len(self.segments)} mirrors, max_bounces={options.max_bounces}, max_time={options.max_time}.")

    def trace_array(self, position, velocity=(0.0, 0.0)):
        """Runs the kernel and returns the raw (n, 6) bounce buffer plus the termination code."""
        p = as_vec2(position)
        v = as_vec2(velocity)
        g = self.options.gravity
        out = np.empty((self.options.max_bounces + 1, 6), dtype=np.float64)
        count, reason = _trace_jit(
            g[0], g[1], p[0], p[1], v[0], v[1],
            self.options.max_bounces,
            self.options.max_time,
            self.options.time_epsilon,
            self.table,
            out,
        )
        return out[:count], TraceTermination(reason)

    def trace(self, position, velocity=(0.0, 0.0)) -> TraceResult:
        rows, reason = self.trace_array(position, velocity)
        bounces = [
            BouncePoint(
                position=row[B_X:B_Y + 1].copy(),
                velocity=row[B_VX:B_VY + 1].copy(),
                time=float(row[B_TIME]),
                segment=int(row[B_SEGMENT]),
            )
            for row in rows
        ]
        return TraceResult(bounces, reason)


def trace(options: TraceOptions, start: BouncePoint, segments) -> list:
    """Trace of all bounces for one launch state; the first element is `start` at time 0."""
    return Tracer(segments, options).trace(start.position, start.velocity).bounces
