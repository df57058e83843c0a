"""
Monitoring Output Models
========================

This module defines the output contract of the monitoring engine.

The presentation layer needs only MonitoringSnapshot; spike events are
emitted separately as plain data so a renderer can decide how to show
them (banner, toast, map overlay).

Snapshot Contract:
    {
        "density": "Heavy",
        "count": 82,
        "trend": "Up",
        "history": [{"time_label": "14:02:11", "count": 82}, ...],
        "last_spike_at": 1770500938.284,
        "cooldown": {"remaining_seconds": 25, "ready": false},
        "safe_zone": {
            "location": {"lat": 12.9736, "lng": 77.5966},
            "distance_meters": 301
        },
        "radius": 50,
        "timestamp": 1770500938.284
    }
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from crowdwatch.models.density import DensityTier, TrendDirection
from crowdwatch.models.geo import Coordinate
from crowdwatch.models.sample import Radius


class HistoryEntry(BaseModel):
    """One point of the recent-history sparkline."""
    
    model_config = ConfigDict(frozen=True)
    
    time_label: str = Field(..., description="Wall clock label (HH:MM:SS)")
    count: int = Field(..., ge=0, description="Observed count")


class CooldownState(BaseModel):
    """
    Alert cooldown state.
    
    Zero remaining seconds means ready; positive means suppressed.
    """
    
    model_config = ConfigDict(frozen=True)
    
    remaining_seconds: int = Field(default=0, ge=0)
    
    @computed_field
    @property
    def ready(self) -> bool:
        return self.remaining_seconds == 0


class SafeZoneRecommendation(BaseModel):
    """Nearby lower-density candidate offered while density is Heavy."""
    
    model_config = ConfigDict(frozen=True)
    
    location: Coordinate
    distance_meters: int = Field(..., ge=0)


class SpikeEvent(BaseModel):
    """
    Sudden single-tick increase in occupancy.
    
    Emitted on every spike regardless of alert cooldown.
    """
    
    model_config = ConfigDict(frozen=True)
    
    timestamp: float
    count: int = Field(..., ge=0)
    delta: int
    radius: Radius


class AlertResult(BaseModel):
    """Outcome of a user-raised alert."""
    
    model_config = ConfigDict(frozen=True)
    
    accepted: bool
    remaining_seconds: int = Field(..., ge=0)


class MonitoringSnapshot(BaseModel):
    """
    Consistent engine state published once per tick.
    
    Attributes:
        density: Density tier for this tick
        count: Raw count of the sample behind this snapshot
        trend: Direction relative to the previous sample
        history: Most recent counts, oldest first
        last_spike_at: Timestamp of the most recent spike, if any
        cooldown: Alert cooldown state at publish time
        safe_zone: Present iff density is Heavy and a coordinate was known
        radius: Radius the sample was taken over
        timestamp: Timestamp of the sample behind this snapshot
    """
    
    model_config = ConfigDict(frozen=True)
    
    density: DensityTier
    count: int = Field(..., ge=0)
    trend: TrendDirection
    history: List[HistoryEntry] = Field(default_factory=list)
    last_spike_at: Optional[float] = None
    cooldown: CooldownState = Field(default_factory=CooldownState)
    safe_zone: Optional[SafeZoneRecommendation] = None
    radius: Radius
    timestamp: float
