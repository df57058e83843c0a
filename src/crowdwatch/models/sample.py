"""
Sample Models
=============

Occupancy samples produced by a SampleSource and consumed by the engine.

A Sample is never mutated after creation. Radius is restricted to a
fixed enumerated set so that baselines are always well defined.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from crowdwatch.errors import InvalidConfiguration


class Radius(IntEnum):
    """Supported monitoring radii in meters."""
    
    NEAR = 25
    DEFAULT = 50
    WIDE = 100
    
    @classmethod
    def parse(cls, value: Union[int, str, "Radius"]) -> "Radius":
        """
        Coerce a raw value to a supported radius.
        
        Raises:
            InvalidConfiguration: if the value is not one of 25/50/100
        """
        if isinstance(value, bool):
            raise InvalidConfiguration(f"Unsupported radius: {value!r}")
        if isinstance(value, float) and not value.is_integer():
            raise InvalidConfiguration(f"Unsupported radius: {value!r}")
        try:
            return cls(int(value))
        except (TypeError, ValueError) as e:
            supported = ", ".join(str(r.value) for r in cls)
            raise InvalidConfiguration(
                f"Unsupported radius: {value!r} (expected one of {supported})"
            ) from e


@dataclass(frozen=True, slots=True)
class Sample:
    """
    Single occupancy observation for a location and radius.
    
    Attributes:
        timestamp: UNIX timestamp when the sample was taken
        count: Observed number of people (non-negative)
        radius: Radius the count was observed over
    """
    
    timestamp: float
    count: int
    radius: Radius
    
    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.count < 0:
            raise ValueError("count must be non-negative")
    
    def __repr__(self) -> str:
        return (
            f"Sample(count={self.count}, radius={int(self.radius)}m, "
            f"t={self.timestamp:.2f})"
        )
