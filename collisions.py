# collisions.py

import enum
from dataclasses import dataclass

import numpy as np
import numba

from geometry import (
    LineSegment, as_vec2, cross_xy, dot, dot_xy, pack_segments,
    SEG_PX, SEG_PY, SEG_DX, SEG_DY, SEG_NX, SEG_NY, SEG_CROSS, SEG_LENSQ, SEG_ONE_WAY,
)

# Status codes shared by the kernels. Numba freezes module-level ints as constants.
COLLISION = 0
DISCRIMINANT = 1
NO_VALID_ROOT = 2
PARALLEL = 3

# --- JIT-Compiled Collision Functions ---
# All of these take scalars and the packed segment table only, so they run in
# nopython mode and release the GIL for the worker threads.

@numba.njit(nogil=True)
def _collision_roots_jit(gx, gy, vx, vy, px, py, dx, dy, cross_length):
    """
    Times at which the parabola p + v*t + 0.5*g*t^2 crosses the infinite line
    through a segment. Returns (status, t1, t2); t1 == t2 for a single root.
    """
    a = 0.5 * cross_xy(gx, gy, dx, dy)
    b = cross_xy(vx, vy, dx, dy)
    c = cross_xy(px, py, dx, dy) - cross_length

    # no acceleration across the line, so the motion is linear
    if a == 0.0:
        if b == 0.0:
            return PARALLEL, np.nan, np.nan
        t = -c / b
        return COLLISION, t, t

    d = b * b - 4.0 * a * c
    if d < 0.0:
        return DISCRIMINANT, np.nan, np.nan

    d = np.sqrt(d)
    t1 = (-b + d) / (2.0 * a)
    t2 = (-b - d) / (2.0 * a)
    return COLLISION, t1, t2

@numba.njit(nogil=True)
def kinematics_jit(gx, gy, vx, vy, px, py, t):
    """Position and velocity after t seconds of free fall."""
    x = 0.5 * gx * t * t + vx * t + px
    y = 0.5 * gy * t * t + vy * t + py
    return x, y, gx * t + vx, gy * t + vy

@numba.njit(nogil=True)
def _accept_root_jit(t, best, min_time, gx, gy, vx, vy, px, py, segment):
    """True when root t is a valid bounce on the finite segment and earlier than best."""
    if t <= min_time or t >= best:
        return False

    x, y, ivx, ivy = kinematics_jit(gx, gy, vx, vy, px, py, t)

    # one-way mirrors only count when approached against the normal
    if segment[SEG_ONE_WAY] != 0.0:
        if dot_xy(ivx, ivy, segment[SEG_NX], segment[SEG_NY]) >= 0.0:
            return False

    d = dot_xy(x - segment[SEG_PX], y - segment[SEG_PY], segment[SEG_DX], segment[SEG_DY]) / segment[SEG_LENSQ]
    return 0.0 <= d <= 1.0

@numba.njit(nogil=True)
def first_collision_jit(gx, gy, vx, vy, px, py, segments, k, min_time):
    """Returns (status, t) of the earliest valid bounce against segment k."""
    segment = segments[k]
    status, t1, t2 = _collision_roots_jit(
        gx, gy, vx, vy, px, py, segment[SEG_DX], segment[SEG_DY], segment[SEG_CROSS]
    )
    if status != COLLISION:
        return status, np.inf

    best = np.inf
    if _accept_root_jit(t1, best, min_time, gx, gy, vx, vy, px, py, segment):
        best = t1
    if _accept_root_jit(t2, best, min_time, gx, gy, vx, vy, px, py, segment):
        best = t2

    if best == np.inf:
        return NO_VALID_ROOT, np.inf
    return COLLISION, best


class NoCollisionReason(enum.Enum):
    DISCRIMINANT = DISCRIMINANT
    NO_VALID_ROOT = NO_VALID_ROOT
    PARALLEL = PARALLEL


@dataclass(frozen=True)
class Collision:
    """A valid bounce: time from now, impact position and incoming velocity."""
    time: float
    position: np.ndarray
    velocity: np.ndarray


@dataclass(frozen=True)
class NoCollision:
    reason: NoCollisionReason


def collision_times(gravity, velocity, position, segment: LineSegment) -> list:
    """All (unfiltered) times at which the path crosses the line through segment."""
    g, v, p = as_vec2(gravity), as_vec2(velocity), as_vec2(position)
    status, t1, t2 = _collision_roots_jit(
        g[0], g[1], v[0], v[1], p[0], p[1],
        segment.direction[0], segment.direction[1], segment.cross_length
    )
    if status != COLLISION:
        return []
    if t1 == t2:
        return [t1]
    return [t1, t2]


def check_range(position, segment: LineSegment) -> bool:
    """True when position projects onto the finite segment rather than the infinite line."""
    d = dot(as_vec2(position) - segment.position, segment.direction) / segment.length_squared
    return 0.0 <= d <= 1.0


def check_velocity(velocity, segment: LineSegment) -> bool:
    """True when velocity approaches the segment from its permitted side."""
    return dot(as_vec2(velocity), segment.normal) < 0.0


def check_collision(gravity, velocity, position, segment: LineSegment, min_time: float = 0.0):
    """
    Earliest future bounce of a free-falling particle against one segment.

    Returns a Collision, or a NoCollision carrying the reason the segment
    cannot be hit. Pure function of its inputs.
    """
    g, v, p = as_vec2(gravity), as_vec2(velocity), as_vec2(position)
    status, t = first_collision_jit(
        g[0], g[1], v[0], v[1], p[0], p[1], pack_segments([segment]), 0, min_time
    )
    if status != COLLISION:
        return NoCollision(NoCollisionReason(status))

    x, y, ivx, ivy = kinematics_jit(g[0], g[1], v[0], v[1], p[0], p[1], t)
    return Collision(
        time=float(t),
        position=np.array([x, y], dtype=np.float64),
        velocity=np.array([ivx, ivy], dtype=np.float64),
    )
