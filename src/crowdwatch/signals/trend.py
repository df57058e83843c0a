"""
Trend Tracker
=============

Maintains a short rolling history of counts and derives trend and spikes.

Policy:
    delta = count - previous_count
    delta >  trend_threshold → UP
    delta < -trend_threshold → DOWN
    otherwise                → STABLE
    is_spike = delta > spike_threshold

A spike is always also UP but is a distinct, stronger signal. The first
observation has nothing to compare against and reports STABLE, no spike.

History:
    Each observation appends {time_label, count} to a FIFO window bounded
    to history_size entries. Insertion order is chronological order.
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Optional, Tuple

from crowdwatch.models.density import TrendDirection
from crowdwatch.models.snapshot import HistoryEntry


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TrendResult:
    """Result of a single observation."""
    
    trend: TrendDirection
    is_spike: bool
    delta: int


def format_time_label(timestamp: float) -> str:
    """Format a UNIX timestamp as a local HH:MM:SS label."""
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")


class TrendTracker:
    """
    Rolling trend and spike detector.
    
    Attributes:
        trend_threshold: Absolute delta above which the trend is UP/DOWN
        spike_threshold: Delta above which an increase is a spike
        history_size: Maximum number of history entries retained
        
    Example:
        tracker = TrendTracker()
        tracker.observe(50, ts)   # STABLE, no spike
        tracker.observe(70, ts2)  # UP, spike (delta=20)
    """
    
    def __init__(
        self,
        trend_threshold: int = 2,
        spike_threshold: int = 15,
        history_size: int = 20,
    ) -> None:
        if trend_threshold < 0:
            raise ValueError("trend_threshold must be non-negative")
        if spike_threshold < trend_threshold:
            raise ValueError("spike_threshold must be >= trend_threshold")
        if history_size < 1:
            raise ValueError("history_size must be >= 1")
        
        self.trend_threshold = trend_threshold
        self.spike_threshold = spike_threshold
        self.history_size = history_size
        
        self._previous_count: Optional[int] = None
        self._history: Deque[HistoryEntry] = deque(maxlen=history_size)
        self._observations: int = 0
    
    def observe(self, count: int, timestamp: float) -> TrendResult:
        """
        Record a new count and evaluate trend and spike.
        
        Args:
            count: Newly observed count
            timestamp: UNIX timestamp of the observation
            
        Returns:
            TrendResult with trend, spike flag and signed delta
        """
        self._observations += 1
        
        if self._previous_count is None:
            result = TrendResult(trend=TrendDirection.STABLE, is_spike=False, delta=0)
        else:
            delta = count - self._previous_count
            if delta > self.trend_threshold:
                trend = TrendDirection.UP
            elif delta < -self.trend_threshold:
                trend = TrendDirection.DOWN
            else:
                trend = TrendDirection.STABLE
            result = TrendResult(
                trend=trend,
                is_spike=delta > self.spike_threshold,
                delta=delta,
            )
        
        self._history.append(
            HistoryEntry(time_label=format_time_label(timestamp), count=count)
        )
        self._previous_count = count
        
        if result.is_spike:
            logger.debug(f"Spike observed: {count} (delta={result.delta:+d})")
        
        return result
    
    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        """Recent history, oldest first."""
        return tuple(self._history)
    
    @property
    def previous_count(self) -> Optional[int]:
        return self._previous_count
    
    def reset(self) -> None:
        """Reset tracker state."""
        self._previous_count = None
        self._history.clear()
        self._observations = 0
        logger.info("TrendTracker reset")
    
    def get_metrics(self) -> dict:
        """Get tracker metrics for observability."""
        return {
            "observations": self._observations,
            "previous_count": self._previous_count,
            "history_length": len(self._history),
            "history_size": self.history_size,
        }
