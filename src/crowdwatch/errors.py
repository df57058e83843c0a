"""
Error Taxonomy
==============

Exceptions raised by the monitoring core.

Rules:
    - InvalidConfiguration is raised synchronously and leaves state unchanged
    - SampleUnavailable and CoordinateUnavailable only ever skip a tick
    - No error is fatal to a session; only stop() terminates it
"""


class CrowdWatchError(Exception):
    """Base class for all monitoring core errors."""


class InvalidConfiguration(CrowdWatchError, ValueError):
    """Unsupported radius or malformed coordinate."""


class SampleUnavailable(CrowdWatchError):
    """The sample source could not produce a sample this tick."""


class CoordinateUnavailable(CrowdWatchError):
    """No current coordinate is available this tick."""
