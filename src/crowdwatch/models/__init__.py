"""
Data Models
===========

Typed data passed through the monitoring pipeline.

Models:
    Geo:
        - Coordinate: Validated latitude/longitude
    
    Sample:
        - Radius: Supported monitoring radii
        - Sample: Single occupancy observation
    
    Density:
        - DensityTier: Low / Medium / Heavy
        - TrendDirection: Up / Down / Stable
    
    Output:
        - MonitoringSnapshot: Per-tick engine output
        - SpikeEvent, AlertResult, CooldownState,
          HistoryEntry, SafeZoneRecommendation
"""

from crowdwatch.models.geo import Coordinate
from crowdwatch.models.sample import Radius, Sample
from crowdwatch.models.density import DensityTier, TrendDirection
from crowdwatch.models.snapshot import (
    AlertResult,
    CooldownState,
    HistoryEntry,
    MonitoringSnapshot,
    SafeZoneRecommendation,
    SpikeEvent,
)

__all__ = [
    "Coordinate",
    "Radius",
    "Sample",
    "DensityTier",
    "TrendDirection",
    "AlertResult",
    "CooldownState",
    "HistoryEntry",
    "MonitoringSnapshot",
    "SafeZoneRecommendation",
    "SpikeEvent",
]
