# geometry.py

import numpy as np
import numba
from collections import namedtuple

from errors import ConfigurationError

# --- JIT-Compiled Vector Primitives ---
# The scalar forms are what the collision kernels use, so the hot loops never
# allocate. The array forms are thin wrappers for everything else.

@numba.njit(nogil=True)
def dot_xy(ax, ay, bx, by):
    return ax * bx + ay * by

@numba.njit(nogil=True)
def cross_xy(ax, ay, bx, by):
    """Length of the 2D cross product, x1*y2 - x2*y1."""
    return ax * by - bx * ay

@numba.njit(nogil=True)
def dot(a, b):
    return dot_xy(a[0], a[1], b[0], b[1])

@numba.njit(nogil=True)
def cross(a, b):
    return cross_xy(a[0], a[1], b[0], b[1])

@numba.njit(nogil=True)
def rotate_ccw(v):
    """Rotates a vector by 90 degrees counter-clockwise."""
    return np.array([-v[1], v[0]], dtype=np.float64)

@numba.njit(nogil=True)
def normalize(v):
    length = np.sqrt(v[0] * v[0] + v[1] * v[1])
    if length == 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return np.array([v[0] / length, v[1] / length], dtype=np.float64)


def vec2(x, y) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


def as_vec2(value) -> np.ndarray:
    """Converts any pair of numbers into a float64 vector of shape (2,)."""
    v = np.asarray(value, dtype=np.float64)
    if v.shape != (2,):
        raise ConfigurationError(f"expected a 2D vector, got shape {v.shape}")
    return v


def add(a, b) -> np.ndarray:
    return as_vec2(a) + as_vec2(b)


def scale(v, factor: float) -> np.ndarray:
    return as_vec2(v) * factor


def _readonly(v: np.ndarray) -> np.ndarray:
    v = as_vec2(v).copy()
    v.flags.writeable = False
    return v


class LineSegment:
    """
    A mirror: one endpoint plus the offset to the other endpoint.

    Data Contract:
    - Inputs:
        - position: first endpoint.
        - direction: endpoint2 - endpoint1, must not be zero.
        - one_way (bool): only collisions approaching against the normal count.
    - Outputs: derived `normal`, `length_squared` and `cross_length`,
      computed once here.
    - Invariants: immutable. All vectors are read-only arrays and attributes
      cannot be re-assigned.
    """
    __slots__ = ("position", "direction", "one_way", "normal", "length_squared", "cross_length")

    def __init__(self, position, direction, one_way: bool = False):
        position = _readonly(position)
        direction = _readonly(direction)

        length_squared = float(dot(direction, direction))
        if length_squared == 0.0:
            raise ConfigurationError(f"line segment at {position.tolist()} has zero length")

        normal = normalize(rotate_ccw(direction))
        normal.flags.writeable = False

        object.__setattr__(self, "position", position)
        object.__setattr__(self, "direction", direction)
        object.__setattr__(self, "one_way", bool(one_way))
        object.__setattr__(self, "normal", normal)
        object.__setattr__(self, "length_squared", length_squared)
        object.__setattr__(self, "cross_length", float(cross(position, direction)))

    @classmethod
    def from_endpoints(cls, start, end, one_way: bool = False):
        return cls(start, as_vec2(end) - as_vec2(start), one_way=one_way)

    @property
    def end(self) -> np.ndarray:
        return self.position + self.direction

    def __setattr__(self, name, value):
        raise AttributeError("LineSegment is immutable")

    def __delattr__(self, name):
        raise AttributeError("LineSegment is immutable")

    def __repr__(self):
        return (
            f"LineSegment(position={self.position.tolist()}, "
            f"direction={self.direction.tolist()}, one_way={self.one_way})"
        )


# Column layout of the packed segment table handed to the JIT kernels.
SEG_PX, SEG_PY, SEG_DX, SEG_DY, SEG_NX, SEG_NY, SEG_CROSS, SEG_LENSQ, SEG_ONE_WAY = range(9)
SEGMENT_COLUMNS = 9


def pack_segments(segments) -> np.ndarray:
    """
    Flattens a list of LineSegments into a read-only (n, 9) float64 table so
    the Numba kernels can iterate it without touching Python objects.
    """
    table = np.zeros((len(segments), SEGMENT_COLUMNS), dtype=np.float64)
    for i, s in enumerate(segments):
        table[i, SEG_PX:SEG_PY + 1] = s.position
        table[i, SEG_DX:SEG_DY + 1] = s.direction
        table[i, SEG_NX:SEG_NY + 1] = s.normal
        table[i, SEG_CROSS] = s.cross_length
        table[i, SEG_LENSQ] = s.length_squared
        table[i, SEG_ONE_WAY] = 1.0 if s.one_way else 0.0
    table.flags.writeable = False
    return table


# An axis-aligned box in world coordinates.
_BoundsBase = namedtuple('Bounds', ['xmin', 'ymin', 'xmax', 'ymax'])


class Bounds(_BoundsBase):
    __slots__ = ()

    @classmethod
    def around_image(cls, width: float, height: float, margin: float):
        return cls(-margin, -margin, width + margin, height + margin)

    def has_escaped(self, position, velocity, gravity) -> bool:
        """
        True when a free-falling particle is outside the box and moving away
        from it along an axis on which gravity can never turn it around.
        """
        x, y = position
        vx, vy = velocity
        gx, gy = gravity
        return (
            (x < self.xmin and vx <= 0.0 and gx <= 0.0)
            or (x > self.xmax and vx >= 0.0 and gx >= 0.0)
            or (y < self.ymin and vy <= 0.0 and gy <= 0.0)
            or (y > self.ymax and vy >= 0.0 and gy >= 0.0)
        )
