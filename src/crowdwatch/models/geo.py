"""
Geographic Models
=================

Immutable geographic coordinate used throughout the monitoring core.

Coordinates arrive already resolved from a location collaborator (GPS
stream or manual search). The core never geocodes; it only validates
the range and treats the value as opaque otherwise.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crowdwatch.errors import InvalidConfiguration


class Coordinate(BaseModel):
    """
    WGS84 latitude/longitude pair in decimal degrees.
    
    Attributes:
        lat: Latitude in [-90, 90]
        lng: Longitude in [-180, 180]
    """
    
    model_config = ConfigDict(frozen=True)
    
    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude (degrees)")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Longitude (degrees)")
    
    def __init__(self, **data) -> None:
        """Validate, raising InvalidConfiguration when out of range."""
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise InvalidConfiguration(f"Malformed coordinate {data!r}: {e}") from e
    
    @classmethod
    def of(cls, lat: float, lng: float) -> "Coordinate":
        """
        Build a coordinate from positional lat/lng.
        
        Raises:
            InvalidConfiguration: if either value is out of range
        """
        return cls(lat=lat, lng=lng)
    
    def __repr__(self) -> str:
        return f"Coordinate(lat={self.lat:.6f}, lng={self.lng:.6f})"
