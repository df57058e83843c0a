"""
Safe Zone Advisor
=================

Proposes a nearby lower-density point while density is Heavy.

This module provides the SafeZoneAdvisor protocol and the
OffsetSafeZoneAdvisor placeholder implementation.

Design Rules:
    - Only recommends when density is HEAVY and a coordinate is known
    - Candidate generation is isolated behind the protocol so a real
      "nearest low-density cell" spatial query can replace it
    - Distance is always computed with the Haversine helper
"""

import logging
from typing import Optional, Protocol

from crowdwatch.geometry.distance import distance_meters
from crowdwatch.models.density import DensityTier
from crowdwatch.models.geo import Coordinate
from crowdwatch.models.snapshot import SafeZoneRecommendation


logger = logging.getLogger(__name__)


class SafeZoneAdvisor(Protocol):
    """
    Protocol for safe zone recommenders.
    
    This interface will be implemented by:
        - OffsetSafeZoneAdvisor (now, placeholder policy)
        - A spatial query against live occupancy cells (later)
    """
    
    def suggest(
        self,
        current: Optional[Coordinate],
        density: DensityTier,
    ) -> Optional[SafeZoneRecommendation]:
        """
        Recommend a safe zone, or None when no recommendation applies.
        
        Args:
            current: Current user coordinate, None if unavailable
            density: Density tier computed for this tick
        """
        ...


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class OffsetSafeZoneAdvisor:
    """
    Placeholder advisor that offsets the current coordinate.
    
    The candidate is the current position shifted by a fixed number of
    degrees in both latitude and longitude (≈0.002°, a few hundred meters).
    
    Attributes:
        offset_degrees: Offset applied to lat and lng
    """
    
    def __init__(self, offset_degrees: float = 0.002) -> None:
        if offset_degrees <= 0:
            raise ValueError("offset_degrees must be positive")
        self.offset_degrees = offset_degrees
    
    def suggest(
        self,
        current: Optional[Coordinate],
        density: DensityTier,
    ) -> Optional[SafeZoneRecommendation]:
        if current is None or density != DensityTier.HEAVY:
            return None
        
        # Near the poles or antimeridian step the other way
        lat_step = self.offset_degrees if current.lat + self.offset_degrees <= 90 else -self.offset_degrees
        lng_step = self.offset_degrees if current.lng + self.offset_degrees <= 180 else -self.offset_degrees
        
        candidate = Coordinate(
            lat=_clamp(current.lat + lat_step, -90.0, 90.0),
            lng=_clamp(current.lng + lng_step, -180.0, 180.0),
        )
        distance = int(round(distance_meters(current, candidate)))
        
        logger.debug(f"Safe zone candidate {candidate!r} at {distance}m")
        
        return SafeZoneRecommendation(location=candidate, distance_meters=distance)
