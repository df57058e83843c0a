"""
Signals Module
==============

Signal processing for occupancy samples.

This module turns raw counts into a density tier and a trend/spike
signal suitable for the monitoring engine.
"""

from crowdwatch.signals.classifier import DensityClassifier, baseline_for
from crowdwatch.signals.trend import TrendResult, TrendTracker, format_time_label

__all__ = [
    "DensityClassifier",
    "baseline_for",
    "TrendResult",
    "TrendTracker",
    "format_time_label",
]
