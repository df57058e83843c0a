"""
Coordinate Providers
====================

Adapters that expose "current coordinate, possibly absent" to the engine.

Two resolution modes exist upstream:
    - Live: a GPS-style stream of fixes
    - Manual: a single location chosen by the user (e.g. via search)

Both are callables returning Optional[Coordinate], so the engine treats
them uniformly. Mode switching is the caller's concern.

Address labels are display-only. Reverse geocoding is an external
collaborator; any failure falls back to a formatted "lat, lng" label and
never reaches the engine.
"""

import logging
import time
from typing import Callable, Optional

from crowdwatch.models.geo import Coordinate


logger = logging.getLogger(__name__)


def format_coordinate_label(coordinate: Coordinate) -> str:
    """Fallback display label for a coordinate."""
    return f"{coordinate.lat:.4f}, {coordinate.lng:.4f}"


def resolve_label(
    coordinate: Coordinate,
    lookup: Optional[Callable[[Coordinate], Optional[str]]] = None,
) -> str:
    """
    Resolve a human-readable label for a coordinate.
    
    Args:
        coordinate: Coordinate to label
        lookup: Reverse geocoding collaborator, may raise or return None
        
    Returns:
        Address label, or the formatted coordinate on any failure
    """
    if lookup is None:
        return format_coordinate_label(coordinate)
    
    try:
        label = lookup(coordinate)
    except Exception as e:
        logger.warning(f"Reverse geocoding failed for {coordinate!r}: {e}")
        return format_coordinate_label(coordinate)
    
    return label or format_coordinate_label(coordinate)


class ManualCoordinateProvider:
    """
    Holds a manually selected location.
    
    Example:
        provider = ManualCoordinateProvider()
        provider.set(Coordinate.of(12.97, 77.59))
        provider()  # Coordinate(...)
        provider.clear()
        provider()  # None
    """
    
    def __init__(self, coordinate: Optional[Coordinate] = None) -> None:
        self._coordinate = coordinate
    
    def set(self, coordinate: Coordinate) -> None:
        self._coordinate = coordinate
        logger.info(f"Manual location set: {format_coordinate_label(coordinate)}")
    
    def clear(self) -> None:
        self._coordinate = None
        logger.info("Manual location cleared")
    
    def __call__(self) -> Optional[Coordinate]:
        return self._coordinate


class LiveCoordinateProvider:
    """
    Tracks the latest fix from a live position stream.
    
    A fix older than max_age_seconds is treated as lost. A fix whose
    reported accuracy is worse than approximate_threshold_meters is still
    used but flagged as approximate (typically a network-derived position)
    so the presentation layer can warn the user.
    
    Attributes:
        max_age_seconds: Maximum fix age before the position is absent
        approximate_threshold_meters: Accuracy above which a fix is approximate
    """
    
    def __init__(
        self,
        max_age_seconds: float = 30.0,
        approximate_threshold_meters: float = 2000.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")
        if approximate_threshold_meters <= 0:
            raise ValueError("approximate_threshold_meters must be positive")
        
        self.max_age_seconds = max_age_seconds
        self.approximate_threshold_meters = approximate_threshold_meters
        self._clock = clock
        self._coordinate: Optional[Coordinate] = None
        self._fix_time: float = 0.0
        self._accuracy_meters: Optional[float] = None
    
    def update(
        self,
        coordinate: Coordinate,
        timestamp: Optional[float] = None,
        accuracy_meters: Optional[float] = None,
    ) -> None:
        """
        Record a new position fix.
        
        Args:
            coordinate: Reported position
            timestamp: Fix time; defaults to now
            accuracy_meters: Reported accuracy radius, if known
        """
        if accuracy_meters is not None and accuracy_meters < 0:
            raise ValueError("accuracy_meters must be non-negative")
        
        self._coordinate = coordinate
        self._fix_time = self._clock() if timestamp is None else timestamp
        self._accuracy_meters = accuracy_meters
        
        if self.approximate:
            logger.warning(
                f"Approximate location fix: accuracy {accuracy_meters / 1000:.1f}km"
            )
    
    @property
    def accuracy_meters(self) -> Optional[float]:
        return self._accuracy_meters
    
    @property
    def approximate(self) -> bool:
        """True when the current fix is coarser than the threshold."""
        return (
            self._coordinate is not None
            and self._accuracy_meters is not None
            and self._accuracy_meters > self.approximate_threshold_meters
        )
    
    def lose_fix(self) -> None:
        """Mark the position as unavailable (e.g. permission revoked)."""
        self._coordinate = None
        self._accuracy_meters = None
    
    def __call__(self) -> Optional[Coordinate]:
        if self._coordinate is None:
            return None
        if self._clock() - self._fix_time > self.max_age_seconds:
            return None
        return self._coordinate
