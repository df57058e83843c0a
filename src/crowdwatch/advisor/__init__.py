"""
Advisor Module
==============

Safe zone recommendation for heavy-density situations.
"""

from crowdwatch.advisor.safe_zone import OffsetSafeZoneAdvisor, SafeZoneAdvisor

__all__ = ["OffsetSafeZoneAdvisor", "SafeZoneAdvisor"]
