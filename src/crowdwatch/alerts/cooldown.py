"""
Cooldown Timer
==============

Rate-limits user-raised alerts behind a countdown.

States:
    IDLE     (0 seconds remaining) - alerts accepted
    COUNTING (N seconds remaining) - alerts suppressed

Transitions:
    arm(N) while IDLE     → COUNTING with N seconds
    arm(N) while COUNTING → no-op (countdown is not reset or extended)
    tick() while COUNTING → remaining - 1, reaching 0 returns to IDLE
    tick() while IDLE     → no-op

The timer is driven externally, one tick per elapsed second, so tests
can advance it deterministically. It only gates the manual alert action;
automatic spike reporting is never suppressed.
"""

import logging
from typing import Optional

from crowdwatch.models.snapshot import CooldownState


logger = logging.getLogger(__name__)


class CooldownTimer:
    """
    Discrete one-second countdown.
    
    Example:
        timer = CooldownTimer(default_seconds=30)
        timer.arm()        # True, 30s remaining
        timer.tick()       # 29s remaining
        timer.arm()        # False, still 29s
    """
    
    def __init__(self, default_seconds: int = 30) -> None:
        if default_seconds < 1:
            raise ValueError("default_seconds must be >= 1")
        
        self.default_seconds = default_seconds
        self._remaining: int = 0
    
    @property
    def remaining_seconds(self) -> int:
        return self._remaining
    
    @property
    def state(self) -> CooldownState:
        return CooldownState(remaining_seconds=self._remaining)
    
    def is_ready(self) -> bool:
        """True iff no countdown is running."""
        return self._remaining == 0
    
    def arm(self, seconds: Optional[int] = None) -> bool:
        """
        Start the countdown if idle.
        
        Args:
            seconds: Countdown length; defaults to default_seconds
            
        Returns:
            True if armed, False if a countdown was already running
        """
        if not self.is_ready():
            logger.debug(f"Cooldown already counting ({self._remaining}s left)")
            return False
        
        duration = self.default_seconds if seconds is None else seconds
        if duration < 1:
            raise ValueError("seconds must be >= 1")
        
        self._remaining = duration
        logger.info(f"Cooldown armed for {duration}s")
        return True
    
    def tick(self) -> int:
        """
        Advance the countdown by one second.
        
        Returns:
            Remaining seconds after the tick
        """
        if self._remaining > 0:
            self._remaining -= 1
            if self._remaining == 0:
                logger.info("Cooldown expired, alerts ready")
        return self._remaining
    
    def reset(self) -> None:
        """Return to IDLE immediately."""
        self._remaining = 0
