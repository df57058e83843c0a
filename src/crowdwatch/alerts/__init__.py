"""
Alerts Module
=============

Rate limiting for user-raised alerts.
"""

from crowdwatch.alerts.cooldown import CooldownTimer

__all__ = ["CooldownTimer"]
