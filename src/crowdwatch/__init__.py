"""
CrowdWatch
==========

Real-time crowd-density monitoring core.

This package ingests periodic occupancy samples around a user's
location, classifies density, detects trends and sudden spikes,
rate-limits user alerts and recommends a nearby safe zone while the
area is heavily crowded.

Components:
    - geometry: Haversine distance
    - sampling: Pluggable occupancy feeds
    - signals: Density classification and trend/spike tracking
    - alerts: Alert cooldown
    - advisor: Safe zone recommendation
    - engine: Per-session orchestration and public API
    - location: Coordinate providers and display labels

Example:
    from crowdwatch import CrowdMonitor, Coordinate
    
    monitor = CrowdMonitor()
    session = monitor.start(50, Coordinate.of(12.9716, 77.5946))
    monitor.on_snapshot(session, print)
"""

__version__ = "0.1.0"

from crowdwatch.engine import CrowdMonitor, MonitoringSession
from crowdwatch.errors import (
    CoordinateUnavailable,
    CrowdWatchError,
    InvalidConfiguration,
    SampleUnavailable,
)
from crowdwatch.models import Coordinate, DensityTier, MonitoringSnapshot, Radius, TrendDirection

__all__ = [
    "__version__",
    "CrowdMonitor",
    "MonitoringSession",
    "Coordinate",
    "DensityTier",
    "MonitoringSnapshot",
    "Radius",
    "TrendDirection",
    "CrowdWatchError",
    "InvalidConfiguration",
    "SampleUnavailable",
    "CoordinateUnavailable",
]
