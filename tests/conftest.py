import os

# Surfaces are created offscreen; never open a window during tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from geometry import LineSegment
from tracer import TraceOptions


@pytest.fixture
def floor():
    """Horizontal mirror from (0, 0) to (10, 0), normal pointing up."""
    return LineSegment.from_endpoints((0.0, 0.0), (10.0, 0.0))


@pytest.fixture
def options():
    return TraceOptions(gravity=(0.0, -10.0), max_bounces=500, max_time=30.0)


@pytest.fixture(scope="session", autouse=True)
def pygame_session():
    import pygame
    pygame.init()
    yield
    pygame.quit()
