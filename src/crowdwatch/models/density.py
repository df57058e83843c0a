"""
Density Models
==============

Derived classifications recomputed on every tick.
"""

from enum import Enum


class DensityTier(str, Enum):
    """
    Coarse occupancy classification relative to the radius baseline.
    
    Ordered by severity: LOW < MEDIUM < HEAVY.
    """
    
    LOW = "Low"
    MEDIUM = "Medium"
    HEAVY = "Heavy"
    
    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {DensityTier.LOW: 0, DensityTier.MEDIUM: 1, DensityTier.HEAVY: 2}


class TrendDirection(str, Enum):
    """Direction of the count change between consecutive samples."""
    
    UP = "Up"
    DOWN = "Down"
    STABLE = "Stable"
