import numpy as np
import pytest

from errors import ConfigurationError
from render_options import RenderOptions
from scene import generate_mirrors


def test_render_options_defaults():
    ro = RenderOptions(width=1280, height=800, multi_sampling=8, chunk_size=512)
    assert ro.samples == 10240
    assert ro.chunks == 20
    assert ro.color == 1


def test_color_depends_on_chunk_size():
    assert RenderOptions(width=64, height=8, multi_sampling=1, chunk_size=1).color == 255
    assert RenderOptions(width=64, height=8, multi_sampling=1, chunk_size=16).color == 16
    assert RenderOptions(width=64, height=8, multi_sampling=1, chunk_size=64).color == 4


def test_chunk_size_must_divide_samples():
    with pytest.raises(ConfigurationError):
        RenderOptions(width=10, height=10, multi_sampling=1, chunk_size=3)


@pytest.mark.parametrize("kwargs", [
    {'width': 0},
    {'height': -1},
    {'multi_sampling': 0},
    {'chunk_size': 0},
])
def test_invalid_render_options(kwargs):
    settings = {'width': 8, 'height': 8, 'multi_sampling': 1, 'chunk_size': 4}
    settings.update(kwargs)
    with pytest.raises(ConfigurationError):
        RenderOptions(**settings)


def test_launch_positions_cover_every_offset_once():
    ro = RenderOptions(width=4, height=3, multi_sampling=2, chunk_size=4)
    xs = np.concatenate([ro.launch_positions(chunk, 3.0)[:, 0] for chunk in range(ro.chunks)])
    np.testing.assert_allclose(np.sort(xs), np.arange(8) * 0.5)
    first = ro.launch_positions(0, 3.0)
    np.testing.assert_allclose(first[:, 0], [0.0, 1.0, 2.0, 3.0])
    np.testing.assert_allclose(first[:, 1], 3.0)


def test_from_config():
    ro = RenderOptions.from_config({'width': 16, 'height': 8, 'multi_sampling': 1, 'chunk_size': 8})
    assert (ro.width, ro.height, ro.samples, ro.chunks) == (16, 8, 16, 2)


def test_mirrors_are_reproducible():
    a = generate_mirrors(np.random.default_rng(7), 100, 50, number_of_lines=10, line_length=20.0)
    b = generate_mirrors(np.random.default_rng(7), 100, 50, number_of_lines=10, line_length=20.0)
    assert len(a) == 10
    for s, t in zip(a, b):
        np.testing.assert_array_equal(s.position, t.position)
        np.testing.assert_array_equal(s.direction, t.direction)


def test_mirrors_start_inside_the_image():
    mirrors = generate_mirrors(np.random.default_rng(1), 100, 50, number_of_lines=200, line_length=20.0, one_way=False)
    for s in mirrors:
        assert 0.0 <= s.position[0] <= 100.0
        assert 0.0 <= s.position[1] <= 50.0
        assert np.all(np.abs(s.direction) <= 10.0)
        assert not s.one_way


def test_invalid_scene():
    with pytest.raises(ConfigurationError):
        generate_mirrors(np.random.default_rng(0), 10, 10, line_length=0.0)
