import itertools

import numpy as np
import pytest

from accumulator import Histogram, tone_map
from errors import ConfigurationError, EmptySceneError


def test_tone_map_formula():
    counts = np.array([0, 1, 2, 3], dtype=np.uint64)
    power = -2.0 / np.log(1.5 / 3.0)
    expected = 1.0 * (counts / 3.0) ** power
    np.testing.assert_allclose(tone_map(counts, exposure=1.0, gamma=2.0), expected)


def test_tone_map_clips_to_unit_range():
    counts = np.array([0, 1, 2, 3], dtype=np.uint64)
    values = tone_map(counts, exposure=1.5, gamma=2.0)
    assert values.max() == 1.0
    assert values.min() == 0.0


def test_empty_histogram_is_an_error():
    with pytest.raises(EmptySceneError):
        tone_map(np.zeros((4, 4), dtype=np.uint64))
    with pytest.raises(EmptySceneError):
        Histogram(3, 2).tone_map()


def test_uniform_histogram_is_fully_exposed():
    values = tone_map(np.full((2, 2), 7, dtype=np.uint64), exposure=0.5, gamma=2.0)
    np.testing.assert_allclose(values, 0.5)
    assert not np.isnan(values).any()


def test_invalid_tone_parameters():
    counts = np.array([0, 1], dtype=np.uint64)
    with pytest.raises(ConfigurationError):
        tone_map(counts, gamma=0.0)
    with pytest.raises(ConfigurationError):
        tone_map(counts, exposure=-1.0)


def test_tone_map_is_deterministic_and_leaves_counts_alone():
    histogram = Histogram(2, 2)
    histogram.add(np.array([[0, 1], [2, 3]], dtype=np.uint8))
    before = histogram.counts.copy()
    first = histogram.tone_map(1.0, 2.0)
    second = histogram.tone_map(1.0, 2.0)
    np.testing.assert_array_equal(first, second)
    np.testing.assert_array_equal(histogram.counts, before)


def test_accumulation_does_not_overflow_bytes():
    histogram = Histogram(2, 1)
    frame = np.array([[255, 1]], dtype=np.uint8)
    for _ in range(10):
        histogram.add(frame)
    np.testing.assert_array_equal(histogram.counts, [[2550, 10]])
    assert histogram.frames == 10


def test_accumulation_is_order_independent():
    rng = np.random.default_rng(0)
    frames = [rng.integers(0, 256, size=(3, 4), dtype=np.uint8) for _ in range(4)]
    results = []
    for order in itertools.permutations(frames):
        histogram = Histogram(4, 3)
        for frame in order:
            histogram.add(frame)
        results.append(histogram.counts)
    for counts in results[1:]:
        np.testing.assert_array_equal(counts, results[0])


def test_frame_shape_must_match():
    with pytest.raises(ValueError):
        Histogram(4, 3).add(np.zeros((4, 3), dtype=np.uint8))
