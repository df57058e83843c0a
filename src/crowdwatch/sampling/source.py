"""
Sample Sources
==============

Pluggable occupancy feed abstraction.

This module provides the SampleSource protocol and two implementations:
    - SimulatedSampleSource: baseline-plus-jitter placeholder feed
    - ScriptedSampleSource: replays a fixed sequence of counts

Design Rules:
    - fetch() is async so a slow or network-backed feed never blocks
      the tick scheduler
    - A feed that cannot produce a sample raises SampleUnavailable;
      retrying is the feed's own concern
    - Radius is passed on every fetch, so a radius change applies to the
      next sample only
"""

import logging
import random
import time
from typing import Callable, Iterable, List, Optional, Protocol

from crowdwatch.errors import SampleUnavailable
from crowdwatch.models.geo import Coordinate
from crowdwatch.models.sample import Radius, Sample
from crowdwatch.signals.classifier import baseline_for


logger = logging.getLogger(__name__)


class SampleSource(Protocol):
    """
    Protocol for occupancy feeds.
    
    All implementations must provide an async `fetch` method that
    returns a Sample for the given location and radius.
    
    This interface will be implemented by:
        - SimulatedSampleSource (now, no real feed)
        - Sensor or network-backed feeds (later)
    """
    
    async def fetch(self, coordinate: Coordinate, radius: Radius) -> Sample:
        """
        Produce the next sample.
        
        Args:
            coordinate: Current user coordinate
            radius: Active monitoring radius
            
        Returns:
            Sample for this tick
            
        Raises:
            SampleUnavailable: if no sample can be produced this tick
        """
        ...


class SimulatedSampleSource:
    """
    Placeholder feed: radius baseline plus bounded random jitter.
    
    The simulated count is:
        count = max(0, round(baseline_for(radius) + uniform(-jitter, +jitter)))
    
    Attributes:
        people_per_meter: Baseline people per meter of radius
        jitter: Maximum absolute jitter in people
    """
    
    def __init__(
        self,
        people_per_meter: float = 1.0,
        jitter: float = 20.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize simulated feed.
        
        Args:
            people_per_meter: Baseline density factor
            jitter: Max deviation from baseline, in people
            rng: Random generator (injectable for reproducibility)
            clock: Timestamp source
        """
        if people_per_meter <= 0:
            raise ValueError("people_per_meter must be positive")
        if jitter < 0:
            raise ValueError("jitter must be non-negative")
        
        self.people_per_meter = people_per_meter
        self.jitter = jitter
        self._rng = rng or random.Random()
        self._clock = clock
        
        logger.info(
            f"SimulatedSampleSource initialized: "
            f"people_per_meter={people_per_meter}, jitter=±{jitter}"
        )
    
    async def fetch(self, coordinate: Coordinate, radius: Radius) -> Sample:
        baseline = baseline_for(radius, self.people_per_meter)
        noise = self._rng.uniform(-self.jitter, self.jitter)
        count = max(0, int(round(baseline + noise)))
        
        return Sample(timestamp=self._clock(), count=count, radius=radius)


class ScriptedSampleSource:
    """
    Deterministic feed replaying a fixed list of counts.
    
    A None entry simulates an upstream hiccup and raises SampleUnavailable
    for that tick. Once the script is exhausted every fetch raises
    SampleUnavailable.
    
    Example:
        source = ScriptedSampleSource([50, 70, None, 52])
    """
    
    def __init__(
        self,
        counts: Iterable[Optional[int]],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._counts: List[Optional[int]] = list(counts)
        self._index: int = 0
        self._clock = clock
    
    @property
    def remaining(self) -> int:
        """Number of scripted entries not yet consumed."""
        return len(self._counts) - self._index
    
    async def fetch(self, coordinate: Coordinate, radius: Radius) -> Sample:
        if self._index >= len(self._counts):
            raise SampleUnavailable("Scripted feed exhausted")
        
        count = self._counts[self._index]
        self._index += 1
        
        if count is None:
            raise SampleUnavailable(f"Scripted gap at entry {self._index - 1}")
        
        return Sample(timestamp=self._clock(), count=count, radius=radius)
