# errors.py

"""
Exception types raised by the renderer.

Expected non-events (no collision found, bounce or time budget exhausted) are
not errors and never raise. Everything below aborts the object or run that
raised it.
"""


class RendererError(Exception):
    """Base class for all renderer failures."""


class ConfigurationError(RendererError, ValueError):
    """Invalid construction parameters (zero-length mirror, bad time step, ...)."""


class ResourceError(RendererError):
    """A drawing surface or output image could not be created."""


class EmptySceneError(RendererError):
    """Tone mapping was requested for a histogram that never received any light."""


class PipelineTimeoutError(RendererError):
    """No worker result arrived within the configured timeout."""
