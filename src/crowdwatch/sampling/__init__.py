"""
Sampling Module
===============

Occupancy feeds for the monitoring engine.

Design Philosophy:
    The feed is a pluggable black box. Downstream components reason
    over Sample values only, so the simulated feed can be swapped for a
    real sensor or network feed without touching them.
"""

from crowdwatch.sampling.source import (
    SampleSource,
    ScriptedSampleSource,
    SimulatedSampleSource,
)

__all__ = [
    "SampleSource",
    "ScriptedSampleSource",
    "SimulatedSampleSource",
]
