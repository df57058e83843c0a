"""
Cooldown Tests
==============

Alert cooldown state machine.
"""

import pytest

from crowdwatch.alerts import CooldownTimer


class TestCooldownTimer:
    """Tests for CooldownTimer transitions."""
    
    def test_starts_idle(self):
        timer = CooldownTimer()
        assert timer.is_ready()
        assert timer.state.remaining_seconds == 0
    
    def test_arm_from_idle(self):
        timer = CooldownTimer(default_seconds=30)
        assert timer.arm() is True
        assert timer.remaining_seconds == 30
        assert not timer.is_ready()
    
    def test_rearm_while_counting_is_noop(self):
        timer = CooldownTimer()
        timer.arm(30)
        for _ in range(5):
            timer.tick()
        assert timer.arm(30) is False
        assert timer.remaining_seconds == 25
    
    def test_expires_after_exact_duration(self):
        timer = CooldownTimer()
        timer.arm(10)
        for elapsed in range(1, 10):
            timer.tick()
            assert not timer.is_ready(), f"ready too early at {elapsed}s"
        timer.tick()
        assert timer.remaining_seconds == 0
        assert timer.is_ready()
    
    def test_frozen_at_zero(self):
        timer = CooldownTimer()
        timer.tick()
        timer.tick()
        assert timer.remaining_seconds == 0
    
    def test_rearm_after_expiry(self):
        timer = CooldownTimer()
        timer.arm(2)
        timer.tick()
        timer.tick()
        assert timer.arm(3) is True
        assert timer.remaining_seconds == 3
    
    def test_invalid_duration(self):
        with pytest.raises(ValueError):
            CooldownTimer().arm(0)
