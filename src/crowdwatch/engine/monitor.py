"""
Crowd Monitor
=============

External call/callback surface of the monitoring core.

    start(radius, coordinate_provider) -> handle
    stop(handle)
    on_snapshot(handle, callback)
    on_spike(handle, callback)
    set_radius(handle, radius)
    raise_alert(handle) -> AlertResult
    snapshot(handle) -> MonitoringSnapshot | None

The handle is the MonitoringSession itself. Every session gets fresh
component instances, so sessions (e.g. one per radius) never share
mutable state.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from crowdwatch.advisor.safe_zone import OffsetSafeZoneAdvisor, SafeZoneAdvisor
from crowdwatch.alerts.cooldown import CooldownTimer
from crowdwatch.engine.session import (
    CoordinateProvider,
    MonitoringSession,
    SnapshotCallback,
    SpikeCallback,
)
from crowdwatch.errors import InvalidConfiguration
from crowdwatch.models.geo import Coordinate
from crowdwatch.models.sample import Radius
from crowdwatch.models.snapshot import AlertResult, MonitoringSnapshot
from crowdwatch.sampling.source import SampleSource, SimulatedSampleSource
from crowdwatch.signals.classifier import DensityClassifier
from crowdwatch.signals.trend import TrendTracker


logger = logging.getLogger(__name__)


class CrowdMonitor:
    """
    Factory and registry for monitoring sessions.
    
    Holds the tunable parameters; every start() builds an isolated
    session from them.
    
    Example:
        monitor = CrowdMonitor()
        session = monitor.start(50, Coordinate.of(12.97, 77.59))
        monitor.on_snapshot(session, render)
        monitor.raise_alert(session)
        await monitor.stop(session)
    """
    
    def __init__(
        self,
        source_factory: Optional[Callable[[], SampleSource]] = None,
        advisor_factory: Optional[Callable[[], SafeZoneAdvisor]] = None,
        medium_ratio: float = 1.1,
        heavy_ratio: float = 1.5,
        trend_delta: int = 2,
        spike_delta: int = 15,
        history_size: int = 20,
        people_per_meter: float = 1.0,
        sample_period_seconds: float = 3.0,
        cooldown_tick_seconds: float = 1.0,
        alert_cooldown_seconds: int = 30,
        log_every_n_ticks: int = 10,
    ) -> None:
        self._source_factory = source_factory or (
            lambda: SimulatedSampleSource(people_per_meter=people_per_meter)
        )
        self._advisor_factory = advisor_factory or OffsetSafeZoneAdvisor
        self.medium_ratio = medium_ratio
        self.heavy_ratio = heavy_ratio
        self.trend_delta = trend_delta
        self.spike_delta = spike_delta
        self.history_size = history_size
        self.people_per_meter = people_per_meter
        self.sample_period_seconds = sample_period_seconds
        self.cooldown_tick_seconds = cooldown_tick_seconds
        self.alert_cooldown_seconds = alert_cooldown_seconds
        self.log_every_n_ticks = log_every_n_ticks
        
        self._sessions: Dict[str, MonitoringSession] = {}
    
    @classmethod
    def from_settings(cls, settings) -> "CrowdMonitor":
        """
        Build a monitor from loaded Settings.
        
        Fails fast on an unknown sampling backend.
        """
        if settings.sampling.backend != "simulated":
            raise ValueError(f"Unknown sampling backend: {settings.sampling.backend}")
        
        return cls(
            source_factory=lambda: SimulatedSampleSource(
                people_per_meter=settings.sampling.people_per_meter,
                jitter=settings.sampling.jitter,
            ),
            advisor_factory=lambda: OffsetSafeZoneAdvisor(
                offset_degrees=settings.safe_zone.offset_degrees,
            ),
            medium_ratio=settings.thresholds.medium_ratio,
            heavy_ratio=settings.thresholds.heavy_ratio,
            trend_delta=settings.thresholds.trend_delta,
            spike_delta=settings.thresholds.spike_delta,
            history_size=settings.thresholds.history_size,
            people_per_meter=settings.sampling.people_per_meter,
            sample_period_seconds=settings.monitor.sample_period_seconds,
            cooldown_tick_seconds=settings.monitor.cooldown_tick_seconds,
            alert_cooldown_seconds=settings.monitor.alert_cooldown_seconds,
            log_every_n_ticks=settings.monitor.log_every_n_ticks,
        )
    
    @property
    def sessions(self) -> List[MonitoringSession]:
        return list(self._sessions.values())
    
    def start(
        self,
        radius: Union[Radius, int],
        coordinate_provider: Union[Coordinate, CoordinateProvider],
        source: Optional[SampleSource] = None,
        run_timers: bool = True,
    ) -> MonitoringSession:
        """
        Start a monitoring session.
        
        Args:
            radius: One of the supported radii
            coordinate_provider: Fixed Coordinate, or a callable returning
                the current Coordinate or None
            source: Sample source override for this session
            run_timers: Start the periodic tasks (requires a running loop);
                when False the caller drives tick() and tick_cooldown()
        
        Returns:
            The session handle
        
        Raises:
            InvalidConfiguration: unsupported radius or malformed provider
        """
        parsed_radius = Radius.parse(radius)
        provider = self._as_provider(coordinate_provider)
        
        session = MonitoringSession(
            radius=parsed_radius,
            coordinate_provider=provider,
            source=source if source is not None else self._source_factory(),
            classifier=DensityClassifier(
                medium_ratio=self.medium_ratio,
                heavy_ratio=self.heavy_ratio,
            ),
            tracker=TrendTracker(
                trend_threshold=self.trend_delta,
                spike_threshold=self.spike_delta,
                history_size=self.history_size,
            ),
            cooldown=CooldownTimer(default_seconds=self.alert_cooldown_seconds),
            advisor=self._advisor_factory(),
            sample_period_seconds=self.sample_period_seconds,
            cooldown_tick_seconds=self.cooldown_tick_seconds,
            alert_cooldown_seconds=self.alert_cooldown_seconds,
            people_per_meter=self.people_per_meter,
            log_every_n_ticks=self.log_every_n_ticks,
        )
        
        if run_timers:
            session.start()
        
        self._sessions[session.session_id] = session
        return session
    
    @staticmethod
    def _as_provider(
        coordinate_provider: Union[Coordinate, CoordinateProvider],
    ) -> CoordinateProvider:
        if isinstance(coordinate_provider, Coordinate):
            fixed = coordinate_provider
            return lambda: fixed
        if callable(coordinate_provider):
            return coordinate_provider
        raise InvalidConfiguration(
            f"coordinate_provider must be a Coordinate or a callable, "
            f"got {type(coordinate_provider).__name__}"
        )
    
    async def stop(self, handle: MonitoringSession) -> None:
        """Stop a session and forget it; idempotent."""
        self._sessions.pop(handle.session_id, None)
        await handle.stop()
    
    async def stop_all(self) -> None:
        """Stop every active session."""
        for session in list(self._sessions.values()):
            await self.stop(session)
    
    def on_snapshot(
        self,
        handle: MonitoringSession,
        callback: SnapshotCallback,
    ) -> Callable[[], None]:
        return handle.subscribe_snapshot(callback)
    
    def on_spike(
        self,
        handle: MonitoringSession,
        callback: SpikeCallback,
    ) -> Callable[[], None]:
        return handle.subscribe_spike(callback)
    
    def set_radius(self, handle: MonitoringSession, radius: Union[Radius, int]) -> None:
        handle.set_radius(radius)
    
    def raise_alert(self, handle: MonitoringSession) -> AlertResult:
        return handle.raise_alert()
    
    def snapshot(self, handle: MonitoringSession) -> Optional[MonitoringSnapshot]:
        return handle.snapshot
