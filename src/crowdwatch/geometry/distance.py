"""
Geodesic Distance
=================

Great-circle distance between two coordinates using the Haversine formula.

Formula:
    h = sin²(Δφ/2) + cos(φ1)·cos(φ2)·sin²(Δλ/2)
    d = 2·R·atan2(√h, √(1-h))

Where R is the mean Earth radius (6,371,000 m).
"""

import math

from crowdwatch.models.geo import Coordinate


EARTH_RADIUS_METERS = 6_371_000.0


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Compute the great-circle distance in meters between two coordinates.
    
    Args:
        a: First coordinate
        b: Second coordinate
        
    Returns:
        Non-negative distance in meters (0 when a == b)
    """
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)
    
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push h marginally outside [0, 1]
    h = min(1.0, max(0.0, h))
    
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(h), math.sqrt(1 - h))
