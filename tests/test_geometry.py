"""
Geometry Tests
==============

Haversine distance properties.
"""

import pytest

from crowdwatch.geometry import EARTH_RADIUS_METERS, distance_meters
from crowdwatch.models.geo import Coordinate


class TestDistance:
    """Tests for distance_meters."""
    
    @pytest.mark.parametrize(
        "lat,lng",
        [(0.0, 0.0), (12.9716, 77.5946), (-33.8688, 151.2093), (90.0, 180.0)],
    )
    def test_identity_is_zero(self, lat, lng):
        """Distance from a point to itself is 0."""
        point = Coordinate(lat=lat, lng=lng)
        assert distance_meters(point, point) == 0
    
    def test_symmetry(self):
        """distance(a, b) == distance(b, a)."""
        a = Coordinate(lat=51.5074, lng=-0.1278)
        b = Coordinate(lat=48.8566, lng=2.3522)
        assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))
    
    def test_known_distance_london_paris(self):
        """London to Paris is roughly 343.5 km."""
        london = Coordinate(lat=51.5074, lng=-0.1278)
        paris = Coordinate(lat=48.8566, lng=2.3522)
        assert distance_meters(london, paris) == pytest.approx(343_500, rel=0.01)
    
    def test_one_degree_latitude(self):
        """One degree of latitude is R·π/180 meters."""
        a = Coordinate(lat=0.0, lng=0.0)
        b = Coordinate(lat=1.0, lng=0.0)
        expected = EARTH_RADIUS_METERS * 3.141592653589793 / 180
        assert distance_meters(a, b) == pytest.approx(expected, rel=1e-9)
    
    def test_antipodal_points(self):
        """Antipodal points are half the circumference apart."""
        a = Coordinate(lat=0.0, lng=0.0)
        b = Coordinate(lat=0.0, lng=180.0)
        assert distance_meters(a, b) == pytest.approx(EARTH_RADIUS_METERS * 3.141592653589793)
