"""
Engine Module
=============

Orchestration of the monitoring pipeline.

Components:
    - MonitoringSession: per-session state, tick and timers
    - CrowdMonitor: start/stop/subscribe/command surface
"""

from crowdwatch.engine.monitor import CrowdMonitor
from crowdwatch.engine.session import MonitoringSession, SessionMetrics

__all__ = ["CrowdMonitor", "MonitoringSession", "SessionMetrics"]
