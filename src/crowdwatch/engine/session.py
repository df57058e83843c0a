"""
Monitoring Session
==================

Single authoritative per-session state holder.

Each session advances the classifier, trend tracker, cooldown and safe
zone advisor once per tick and publishes one consistent snapshot.

Per-tick algorithm:
    1. Resolve current coordinate; if absent, skip (clearing any safe zone)
    2. Fetch the next Sample for the active radius
    3. Classify density against the radius baseline
    4. Observe the count for trend and spike
    5. On spike, record last_spike_at and emit a SpikeEvent (always)
    6. Ask the advisor for a safe zone
    7. Publish MonitoringSnapshot

Concurrency:
    - Two asyncio tasks: the sample loop and the 1s cooldown loop
    - Ticks are serialised by a lock, so snapshots publish in tick order
    - stop() marks the session stopped before cancelling, and every
      publish checks the flag, so nothing is emitted after stop returns
"""

import asyncio
import inspect
import logging
import time
import uuid
from typing import Any, Callable, List, Optional, Union

from crowdwatch.advisor.safe_zone import SafeZoneAdvisor
from crowdwatch.alerts.cooldown import CooldownTimer
from crowdwatch.errors import CoordinateUnavailable, SampleUnavailable
from crowdwatch.models.geo import Coordinate
from crowdwatch.models.sample import Radius
from crowdwatch.models.snapshot import AlertResult, MonitoringSnapshot, SpikeEvent
from crowdwatch.sampling.source import SampleSource
from crowdwatch.signals.classifier import DensityClassifier, baseline_for
from crowdwatch.signals.trend import TrendTracker


logger = logging.getLogger(__name__)


CoordinateProvider = Callable[[], Optional[Coordinate]]
SnapshotCallback = Callable[[MonitoringSnapshot], Any]
SpikeCallback = Callable[[SpikeEvent], Any]


class SessionMetrics:
    """Counters for session observability."""
    
    __slots__ = (
        "ticks",
        "snapshots_published",
        "skipped_no_coordinate",
        "skipped_no_sample",
        "spikes",
        "alerts_accepted",
        "alerts_suppressed",
        "callback_errors",
        "tick_errors",
    )
    
    def __init__(self) -> None:
        self.ticks: int = 0
        self.snapshots_published: int = 0
        self.skipped_no_coordinate: int = 0
        self.skipped_no_sample: int = 0
        self.spikes: int = 0
        self.alerts_accepted: int = 0
        self.alerts_suppressed: int = 0
        self.callback_errors: int = 0
        self.tick_errors: int = 0
    
    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {name: getattr(self, name) for name in self.__slots__}


class MonitoringSession:
    """
    Per-session monitoring state and tick loop.
    
    Created by CrowdMonitor.start(); the session object is the handle
    returned to callers. All state is owned by the session and never
    shared with other sessions.
    
    Example:
        session = MonitoringSession(
            radius=Radius.DEFAULT,
            coordinate_provider=provider,
            source=SimulatedSampleSource(),
            classifier=DensityClassifier(),
            tracker=TrendTracker(),
            cooldown=CooldownTimer(),
            advisor=OffsetSafeZoneAdvisor(),
        )
        session.subscribe_snapshot(print)
        session.start()
        ...
        await session.stop()
    """
    
    def __init__(
        self,
        radius: Radius,
        coordinate_provider: CoordinateProvider,
        source: SampleSource,
        classifier: DensityClassifier,
        tracker: TrendTracker,
        cooldown: CooldownTimer,
        advisor: SafeZoneAdvisor,
        sample_period_seconds: float = 3.0,
        cooldown_tick_seconds: float = 1.0,
        alert_cooldown_seconds: int = 30,
        people_per_meter: float = 1.0,
        log_every_n_ticks: int = 10,
        session_id: Optional[str] = None,
    ) -> None:
        if sample_period_seconds <= 0:
            raise ValueError("sample_period_seconds must be positive")
        if cooldown_tick_seconds <= 0:
            raise ValueError("cooldown_tick_seconds must be positive")
        
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.sample_period_seconds = sample_period_seconds
        self.cooldown_tick_seconds = cooldown_tick_seconds
        self.alert_cooldown_seconds = alert_cooldown_seconds
        self.people_per_meter = people_per_meter
        self.log_every_n_ticks = log_every_n_ticks
        
        self._radius = radius
        self._coordinate_provider = coordinate_provider
        self._source = source
        self._classifier = classifier
        self._tracker = tracker
        self._cooldown = cooldown
        self._advisor = advisor
        
        # State
        self._snapshot: Optional[MonitoringSnapshot] = None
        self._last_spike_at: Optional[float] = None
        self._had_coordinate: bool = False
        self._snapshot_callbacks: List[SnapshotCallback] = []
        self._spike_callbacks: List[SpikeCallback] = []
        self._tick_lock = asyncio.Lock()
        self._stopped: bool = False
        self._sample_task: Optional[asyncio.Task] = None
        self._cooldown_task: Optional[asyncio.Task] = None
        self._started_at: float = time.time()
        
        self.metrics = SessionMetrics()
    
    # -------------------------------------------------------------------------
    # Query API
    # -------------------------------------------------------------------------
    
    @property
    def radius(self) -> Radius:
        return self._radius
    
    @property
    def snapshot(self) -> Optional[MonitoringSnapshot]:
        """Most recently published snapshot."""
        return self._snapshot
    
    @property
    def last_spike_at(self) -> Optional[float]:
        return self._last_spike_at
    
    @property
    def cooldown(self) -> CooldownTimer:
        return self._cooldown
    
    @property
    def stopped(self) -> bool:
        return self._stopped
    
    @property
    def running(self) -> bool:
        """Whether the timer tasks are active."""
        return (
            not self._stopped
            and self._sample_task is not None
            and not self._sample_task.done()
        )
    
    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------
    
    def subscribe_snapshot(self, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Register a snapshot callback.
        
        Returns:
            Callable that removes the subscription
        """
        self._snapshot_callbacks.append(callback)
        return lambda: self._remove(self._snapshot_callbacks, callback)
    
    def subscribe_spike(self, callback: SpikeCallback) -> Callable[[], None]:
        """
        Register a spike callback.
        
        Returns:
            Callable that removes the subscription
        """
        self._spike_callbacks.append(callback)
        return lambda: self._remove(self._spike_callbacks, callback)
    
    @staticmethod
    def _remove(callbacks: list, callback: Callable) -> None:
        if callback in callbacks:
            callbacks.remove(callback)
    
    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------
    
    def set_radius(self, radius: Union[Radius, int]) -> None:
        """
        Change the active radius; applies to the next sample.
        
        Raises:
            InvalidConfiguration: for unsupported radii (state unchanged)
        """
        new_radius = Radius.parse(radius)
        if new_radius != self._radius:
            logger.info(
                f"Session {self.session_id}: radius {int(self._radius)}m -> "
                f"{int(new_radius)}m"
            )
        self._radius = new_radius
    
    def raise_alert(self) -> AlertResult:
        """
        Raise a user alert, gated by the cooldown.
        
        Returns:
            AlertResult; accepted only if the cooldown was idle
        """
        accepted = self._cooldown.arm(self.alert_cooldown_seconds)
        if accepted:
            self.metrics.alerts_accepted += 1
            logger.info(f"Session {self.session_id}: alert raised")
        else:
            self.metrics.alerts_suppressed += 1
            logger.info(
                f"Session {self.session_id}: alert suppressed "
                f"({self._cooldown.remaining_seconds}s cooldown left)"
            )
        return AlertResult(
            accepted=accepted,
            remaining_seconds=self._cooldown.remaining_seconds,
        )
    
    def tick_cooldown(self) -> int:
        """Advance the cooldown by one second."""
        return self._cooldown.tick()
    
    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------
    
    async def tick(self) -> Optional[MonitoringSnapshot]:
        """
        Run one monitoring tick.
        
        Returns:
            The published snapshot, or None if the tick was skipped
        """
        if self._stopped:
            return None
        
        async with self._tick_lock:
            if self._stopped:
                return None
            
            self.metrics.ticks += 1
            
            # 1. Coordinate
            coordinate = self._resolve_coordinate()
            if coordinate is None:
                self.metrics.skipped_no_coordinate += 1
                self._log_coordinate_skip()
                await self._clear_safe_zone()
                return None
            if not self._had_coordinate:
                logger.info(f"Session {self.session_id}: coordinate available")
                self._had_coordinate = True
            
            # 2. Sample
            radius = self._radius
            try:
                sample = await self._source.fetch(coordinate, radius)
            except SampleUnavailable as e:
                self.metrics.skipped_no_sample += 1
                logger.warning(f"Session {self.session_id}: sample unavailable ({e}), tick skipped")
                return None
            
            if self._stopped:
                return None
            
            # 3. Density
            baseline = baseline_for(sample.radius, self.people_per_meter)
            density = self._classifier.classify(sample.count, baseline)
            
            # 4. Trend
            result = self._tracker.observe(sample.count, sample.timestamp)
            
            # 5. Spike (never gated by cooldown)
            if result.is_spike:
                self._last_spike_at = sample.timestamp
                self.metrics.spikes += 1
                logger.warning(
                    f"Session {self.session_id}: spike detected, count={sample.count} "
                    f"(delta={result.delta:+d}, radius={int(sample.radius)}m)"
                )
                event = SpikeEvent(
                    timestamp=sample.timestamp,
                    count=sample.count,
                    delta=result.delta,
                    radius=sample.radius,
                )
                await self._dispatch(self._spike_callbacks, event)
            
            # 6. Safe zone
            safe_zone = self._advisor.suggest(coordinate, density)
            
            # 7. Publish
            snapshot = MonitoringSnapshot(
                density=density,
                count=sample.count,
                trend=result.trend,
                history=list(self._tracker.history),
                last_spike_at=self._last_spike_at,
                cooldown=self._cooldown.state,
                safe_zone=safe_zone,
                radius=sample.radius,
                timestamp=sample.timestamp,
            )
            await self._publish(snapshot)
            
            if self.metrics.ticks % self.log_every_n_ticks == 0:
                logger.info(
                    f"Snapshot [session {self.session_id}, tick {self.metrics.ticks}]: "
                    f"count={sample.count}, density={density.value}, "
                    f"trend={result.trend.value}"
                )
            
            return snapshot
    
    def _resolve_coordinate(self) -> Optional[Coordinate]:
        try:
            coordinate = self._coordinate_provider()
        except CoordinateUnavailable as e:
            logger.debug(f"Coordinate provider reported unavailable: {e}")
            return None
        
        if coordinate is not None and not isinstance(coordinate, Coordinate):
            logger.warning(
                f"Session {self.session_id}: provider returned "
                f"{type(coordinate).__name__}, treating as unavailable"
            )
            return None
        return coordinate
    
    def _log_coordinate_skip(self) -> None:
        """Warn only when a previously known coordinate is lost."""
        if self._had_coordinate:
            logger.warning(f"Session {self.session_id}: coordinate lost, ticks skipped")
        else:
            logger.debug(f"Session {self.session_id}: no coordinate, tick skipped")
        self._had_coordinate = False
    
    async def _clear_safe_zone(self) -> None:
        """Drop any recommendation from the held snapshot and re-publish it."""
        if self._snapshot is None or self._snapshot.safe_zone is None:
            return
        logger.info(f"Session {self.session_id}: coordinate lost, safe zone cleared")
        await self._publish(self._snapshot.model_copy(update={"safe_zone": None}))
    
    async def _publish(self, snapshot: MonitoringSnapshot) -> None:
        if self._stopped:
            return
        self._snapshot = snapshot
        self.metrics.snapshots_published += 1
        await self._dispatch(self._snapshot_callbacks, snapshot)
    
    async def _dispatch(self, callbacks: list, payload: Any) -> None:
        for callback in list(callbacks):
            if self._stopped:
                return
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.metrics.callback_errors += 1
                logger.error(f"Session {self.session_id}: subscriber error: {e}")
    
    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    
    def start(self) -> None:
        """
        Start the sample and cooldown timers.
        
        Must be called from within a running event loop.
        """
        if self._stopped:
            raise RuntimeError("Session already stopped")
        if self._sample_task is not None:
            return
        
        self._sample_task = asyncio.create_task(
            self._sample_loop(),
            name=f"crowdwatch_sample_{self.session_id}",
        )
        self._cooldown_task = asyncio.create_task(
            self._cooldown_loop(),
            name=f"crowdwatch_cooldown_{self.session_id}",
        )
        logger.info(
            f"Session {self.session_id} started: radius={int(self._radius)}m, "
            f"period={self.sample_period_seconds}s"
        )
    
    async def stop(self) -> None:
        """
        Stop the session; idempotent.
        
        No snapshot or spike is published once this returns.
        """
        if self._stopped:
            return
        self._stopped = True
        
        current = asyncio.current_task()
        tasks = [
            task for task in (self._sample_task, self._cooldown_task)
            if task is not None and not task.done()
        ]
        others = [task for task in tasks if task is not current]
        
        for task in others:
            task.cancel()
        for task in others:
            try:
                await task
            except asyncio.CancelledError:
                pass
        
        self._snapshot_callbacks.clear()
        self._spike_callbacks.clear()
        logger.info(
            f"Session {self.session_id} stopped after {self.metrics.ticks} ticks"
        )
        
        # Called from inside the sample loop (e.g. by a subscriber)
        if current in tasks:
            current.cancel()
    
    async def _sample_loop(self) -> None:
        while not self._stopped:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.metrics.tick_errors += 1
                logger.error(f"Session {self.session_id}: tick error: {e}")
            await asyncio.sleep(self.sample_period_seconds)
    
    async def _cooldown_loop(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.cooldown_tick_seconds)
            if not self._stopped:
                self._cooldown.tick()
    
    def get_metrics(self) -> dict:
        """Get session metrics for observability."""
        return {
            "session_id": self.session_id,
            "radius": int(self._radius),
            "running": self.running,
            "uptime_seconds": round(time.time() - self._started_at, 1),
            "cooldown_remaining": self._cooldown.remaining_seconds,
            "last_spike_at": self._last_spike_at,
            **self.metrics.to_dict(),
            "tracker": self._tracker.get_metrics(),
        }
