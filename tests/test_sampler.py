import types

import numpy as np
import pytest

from errors import ConfigurationError
from geometry import Bounds
from sampler import Sampler
from tracer import TraceOptions, Tracer


@pytest.fixture
def floor_trace(floor, options):
    return Tracer([floor], options).trace((5.0, 5.0)).bounces


def test_vertices_is_lazy_and_single_use(floor_trace):
    sampler = Sampler((0.0, -10.0), dt=0.25, max_time=2.0)
    vertices = sampler.vertices(floor_trace)
    assert isinstance(vertices, types.GeneratorType)
    assert next(vertices) == (5.0, 5.0)
    rest = list(vertices)
    assert len(rest) == 8
    assert list(vertices) == []


def test_bounce_point_is_emitted_exactly(floor_trace):
    sampler = Sampler((0.0, -10.0), dt=0.25, max_time=2.0)
    vertices = list(sampler.vertices(floor_trace))
    # samples at t = 0 .. 1.75 plus the bounce at t = 1
    assert len(vertices) == 9
    # sample at t=1.0 still belongs to the first arc, then the exact bounce point
    assert vertices[4] == pytest.approx((5.0, 0.0))
    assert vertices[5] == pytest.approx((5.0, 0.0))
    # t = 1.25: 0.25s after the bounce moving up at 10
    assert vertices[6] == pytest.approx((5.0, 10.0 * 0.25 - 5.0 * 0.25 ** 2))


def test_samples_follow_free_fall():
    no_mirrors = Tracer([], TraceOptions()).trace((0.0, 100.0), velocity=(2.0, 0.0)).bounces
    sampler = Sampler((0.0, -10.0), dt=0.5, max_time=3.0)
    vertices = np.array(list(sampler.vertices(no_mirrors)))
    t = np.arange(0.0, 3.0, 0.5)
    np.testing.assert_allclose(vertices[:, 0], 2.0 * t)
    np.testing.assert_allclose(vertices[:, 1], 100.0 - 5.0 * t ** 2)


def test_several_bounces_within_one_step(floor, options):
    bounces = Tracer([floor], options).trace((5.0, 5.0)).bounces
    sampler = Sampler((0.0, -10.0), dt=4.0, max_time=9.0)
    vertices = list(sampler.vertices(bounces))
    # samples at 0, 4, 8; bounces at 1, 3 | 5, 7 in between
    assert len(vertices) == 3 + 4
    assert vertices[1] == pytest.approx((5.0, 0.0))
    assert vertices[2] == pytest.approx((5.0, 0.0))


def test_line_bound_truncates(floor_trace):
    sampler = Sampler((0.0, -10.0), dt=0.01, max_time=30.0, line_bound=3)
    assert len(list(sampler.vertices(floor_trace))) == 3


def test_bounds_stop_sampling_after_escape():
    bounces = Tracer([], TraceOptions()).trace((5.0, 5.0)).bounces
    unbounded = Sampler((0.0, -10.0), dt=0.5, max_time=30.0)
    bounded = Sampler((0.0, -10.0), dt=0.5, max_time=30.0, bounds=Bounds(0.0, 0.0, 10.0, 10.0))
    assert len(list(unbounded.vertices(bounces))) == 60
    # t = 0, 0.5, 1.0 inside, t = 1.5 is the first sample below the box
    assert len(list(bounded.vertices(bounces))) == 4


def test_sample_returns_private_buffer(floor_trace):
    sampler = Sampler((0.0, -10.0), dt=0.25, max_time=2.0)
    buffer = sampler.sample(floor_trace)
    assert buffer.shape == (9, 2)
    assert buffer.dtype == np.float64
    np.testing.assert_allclose(buffer[0], [5.0, 5.0])


def test_from_config_uses_trace_options():
    options = TraceOptions(gravity=(0.0, -2.0), max_time=4.0, bounds=Bounds(0, 0, 1, 1))
    sampler = Sampler.from_config({'dt': 0.1, 'line_bound': 10}, options)
    np.testing.assert_allclose(sampler.gravity, [0.0, -2.0])
    assert sampler.max_time == 4.0
    assert sampler.line_bound == 10
    assert sampler.bounds == Bounds(0, 0, 1, 1)


@pytest.mark.parametrize("kwargs", [
    {'dt': 0.0},
    {'dt': -0.1},
    {'line_bound': 1},
    {'max_time': 0.0},
])
def test_invalid_configuration(kwargs):
    settings = {'gravity': (0.0, -10.0), 'dt': 0.1, 'max_time': 1.0}
    settings.update(kwargs)
    with pytest.raises(ConfigurationError):
        Sampler(**settings)
