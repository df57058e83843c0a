"""
Geometry Module
===============

Geodesic helpers for the monitoring core.
"""

from crowdwatch.geometry.distance import EARTH_RADIUS_METERS, distance_meters

__all__ = ["EARTH_RADIUS_METERS", "distance_meters"]
