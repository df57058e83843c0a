"""
Engine Tests
============

Monitoring session tick semantics, commands and lifecycle.
"""

import asyncio
import logging

import pytest

from crowdwatch.engine import CrowdMonitor
from crowdwatch.errors import CoordinateUnavailable, InvalidConfiguration
from crowdwatch.location import ManualCoordinateProvider
from crowdwatch.models import DensityTier, Radius, TrendDirection
from crowdwatch.sampling import ScriptedSampleSource


def run_ticks(session, n):
    """Run n ticks and return the per-tick results."""
    async def _run():
        return [await session.tick() for _ in range(n)]
    return asyncio.run(_run())


class TestTick:
    """Tests for the per-tick algorithm."""
    
    def test_spike_scenario(self, monitor, coordinate, clock):
        """Baseline 50, samples [50, 70]: second tick is Up and a spike."""
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([50, 70], clock=clock), run_timers=False
        )
        spikes = []
        monitor.on_spike(session, spikes.append)
        
        first, second = run_ticks(session, 2)
        
        assert first.trend == TrendDirection.STABLE
        assert first.last_spike_at is None
        assert second.trend == TrendDirection.UP
        assert second.last_spike_at == second.timestamp == clock.last
        assert len(spikes) == 1
        assert spikes[0].delta == 20
        assert spikes[0].count == 70
    
    def test_density_tiers(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([80, 58, 52], clock=clock), run_timers=False
        )
        snapshots = run_ticks(session, 3)
        assert [s.density for s in snapshots] == [
            DensityTier.HEAVY,
            DensityTier.MEDIUM,
            DensityTier.LOW,
        ]
    
    def test_safe_zone_iff_heavy(self, monitor, coordinate, clock):
        session = monitor.start(
            50,
            coordinate,
            source=ScriptedSampleSource([80, 58, 90, 10], clock=clock),
            run_timers=False,
        )
        for snapshot in run_ticks(session, 4):
            assert (snapshot.safe_zone is not None) == (snapshot.density == DensityTier.HEAVY)
    
    def test_history_in_snapshot(self, monitor, coordinate, clock):
        counts = list(range(30, 55))
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource(counts, clock=clock), run_timers=False
        )
        last = run_ticks(session, len(counts))[-1]
        assert [entry.count for entry in last.history] == counts[-20:]
    
    def test_spike_reported_during_cooldown(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([50, 80], clock=clock), run_timers=False
        )
        spikes = []
        session.subscribe_spike(spikes.append)
        assert monitor.raise_alert(session).accepted
        
        snapshots = run_ticks(session, 2)
        
        assert len(spikes) == 1
        assert snapshots[1].cooldown.remaining_seconds == 30
        assert snapshots[1].cooldown.ready is False
    
    def test_radius_change_applies_to_next_sample(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([60, 60], clock=clock), run_timers=False
        )
        first = run_ticks(session, 1)[0]
        monitor.set_radius(session, 100)
        second = run_ticks(session, 1)[0]
        
        assert first.radius == Radius.DEFAULT
        assert first.density == DensityTier.MEDIUM
        assert second.radius == Radius.WIDE
        assert second.density == DensityTier.LOW
        assert [e.count for e in second.history] == [60, 60]


class TestSkippedTicks:
    """Tests for unavailable samples and coordinates."""
    
    def test_sample_unavailable_preserves_snapshot(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([50, None, 53], clock=clock), run_timers=False
        )
        first, skipped, third = run_ticks(session, 3)
        
        assert skipped is None
        assert third is session.snapshot
        assert third.trend == TrendDirection.UP
        assert session.metrics.skipped_no_sample == 1
    
    def test_no_coordinate_skips_without_advancing(self, monitor, clock):
        provider = ManualCoordinateProvider()
        source = ScriptedSampleSource([50], clock=clock)
        session = monitor.start(50, provider, source=source, run_timers=False)
        
        assert run_ticks(session, 1) == [None]
        assert source.remaining == 1
        assert session.snapshot is None
        assert session.metrics.skipped_no_coordinate == 1
    
    def test_provider_raising_unavailable(self, monitor, clock):
        def provider():
            raise CoordinateUnavailable("permission denied")
        
        session = monitor.start(
            50, provider, source=ScriptedSampleSource([50], clock=clock), run_timers=False
        )
        assert run_ticks(session, 1) == [None]
    
    def test_losing_coordinate_clears_safe_zone(self, monitor, coordinate, clock):
        provider = ManualCoordinateProvider(coordinate)
        session = monitor.start(
            50, provider, source=ScriptedSampleSource([90, 90], clock=clock), run_timers=False
        )
        published = []
        session.subscribe_snapshot(published.append)
        
        heavy = run_ticks(session, 1)[0]
        assert heavy.safe_zone is not None
        
        provider.clear()
        assert run_ticks(session, 1) == [None]
        
        assert session.snapshot.safe_zone is None
        assert session.snapshot.count == heavy.count
        assert published[-1].safe_zone is None
    
    def test_malformed_provider_value_treated_as_unavailable(self, monitor, clock):
        """A provider returning a bare (lat, lng) tuple never advances the tracker."""
        source = ScriptedSampleSource([50, 90], clock=clock)
        session = monitor.start(50, lambda: (12.0, 77.0), source=source, run_timers=False)
        spikes = []
        monitor.on_spike(session, spikes.append)
        
        assert run_ticks(session, 2) == [None, None]
        assert spikes == []
        assert session.snapshot is None
        assert source.remaining == 2
        assert session.metrics.skipped_no_coordinate == 2
        assert session.metrics.tick_errors == 0
    
    def test_malformed_provider_value_logs_warning(self, monitor, clock, caplog):
        session = monitor.start(
            50, lambda: (12.0, 77.0), source=ScriptedSampleSource([50], clock=clock), run_timers=False
        )
        with caplog.at_level(logging.WARNING, logger="crowdwatch.engine.session"):
            run_ticks(session, 1)
        assert any("tuple" in r.getMessage() for r in caplog.records)
    
    def test_never_located_skips_are_quiet(self, monitor, clock, caplog):
        session = monitor.start(
            50, ManualCoordinateProvider(), source=ScriptedSampleSource([50], clock=clock), run_timers=False
        )
        with caplog.at_level(logging.DEBUG, logger="crowdwatch.engine.session"):
            run_ticks(session, 3)
        warnings = [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert warnings == []
    
    def test_coordinate_loss_warns_once(self, monitor, coordinate, clock, caplog):
        provider = ManualCoordinateProvider(coordinate)
        session = monitor.start(
            50, provider, source=ScriptedSampleSource([50, 50], clock=clock), run_timers=False
        )
        run_ticks(session, 1)
        provider.clear()
        
        with caplog.at_level(logging.DEBUG, logger="crowdwatch.engine.session"):
            run_ticks(session, 3)
        warnings = [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert len(warnings) == 1
        assert "coordinate lost" in warnings[0].getMessage()


class TestCommands:
    """Tests for synchronous commands."""
    
    def test_raise_alert_twice(self, monitor, coordinate):
        """Second alert within 5s is suppressed and the countdown is not reset."""
        session = monitor.start(50, coordinate, run_timers=False)
        
        first = monitor.raise_alert(session)
        for _ in range(5):
            session.tick_cooldown()
        second = monitor.raise_alert(session)
        
        assert first.accepted is True
        assert first.remaining_seconds == 30
        assert second.accepted is False
        assert second.remaining_seconds == 25
    
    def test_invalid_radius_leaves_state(self, monitor, coordinate):
        session = monitor.start(25, coordinate, run_timers=False)
        with pytest.raises(InvalidConfiguration):
            monitor.set_radius(session, 75)
        assert session.radius == Radius.NEAR
    
    def test_fractional_radius_rejected(self, monitor, coordinate):
        session = monitor.start(50, coordinate, run_timers=False)
        with pytest.raises(InvalidConfiguration):
            monitor.set_radius(session, 50.7)
        with pytest.raises(InvalidConfiguration):
            monitor.start(25.5, coordinate, run_timers=False)
        assert session.radius == Radius.DEFAULT
    
    def test_start_rejects_invalid_radius(self, monitor, coordinate):
        with pytest.raises(InvalidConfiguration):
            monitor.start(10, coordinate, run_timers=False)
        assert monitor.sessions == []
    
    def test_start_rejects_malformed_provider(self, monitor):
        with pytest.raises(InvalidConfiguration):
            monitor.start(50, (12.0, 77.0), run_timers=False)
    
    def test_failing_subscriber_is_isolated(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([50], clock=clock), run_timers=False
        )
        received = []
        
        def broken(_):
            raise RuntimeError("render failed")
        
        monitor.on_snapshot(session, broken)
        monitor.on_snapshot(session, received.append)
        
        run_ticks(session, 1)
        assert len(received) == 1
        assert session.metrics.callback_errors == 1
    
    def test_async_subscriber_and_unsubscribe(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([50, 51], clock=clock), run_timers=False
        )
        received = []
        
        async def on_snapshot(snapshot):
            received.append(snapshot.count)
        
        unsubscribe = monitor.on_snapshot(session, on_snapshot)
        run_ticks(session, 1)
        unsubscribe()
        run_ticks(session, 1)
        
        assert received == [50]


class TestIsolation:
    """Tests for per-session state isolation."""
    
    def test_sessions_do_not_share_state(self, monitor, coordinate, clock):
        a = monitor.start(25, coordinate, source=ScriptedSampleSource([10, 40], clock=clock), run_timers=False)
        b = monitor.start(100, coordinate, source=ScriptedSampleSource([100], clock=clock), run_timers=False)
        
        run_ticks(a, 1)
        b_first = run_ticks(b, 1)[0]
        a_second = run_ticks(a, 1)[0]
        
        assert b_first.trend == TrendDirection.STABLE
        assert [e.count for e in b_first.history] == [100]
        assert a_second.trend == TrendDirection.UP
        assert [e.count for e in a_second.history] == [10, 40]
        
        monitor.raise_alert(a)
        assert b.cooldown.is_ready()


class TestLifecycle:
    """Tests for timers and stop semantics."""
    
    def test_timers_publish_and_stop(self, coordinate):
        monitor = CrowdMonitor(sample_period_seconds=0.01, cooldown_tick_seconds=0.01)
        
        async def scenario():
            session = monitor.start(50, coordinate)
            published = []
            monitor.on_snapshot(session, published.append)
            assert monitor.raise_alert(session).accepted
            
            await asyncio.sleep(0.1)
            await monitor.stop(session)
            count_at_stop = len(published)
            
            await asyncio.sleep(0.05)
            return session, published, count_at_stop
        
        session, published, count_at_stop = asyncio.run(scenario())
        
        assert count_at_stop > 0
        assert len(published) == count_at_stop
        assert session.stopped
        assert not session.running
        assert session.cooldown.remaining_seconds < 30
        assert monitor.sessions == []
    
    def test_tick_after_stop_is_noop(self, monitor, coordinate, clock):
        session = monitor.start(
            50, coordinate, source=ScriptedSampleSource([50, 60], clock=clock), run_timers=False
        )
        
        async def scenario():
            await session.tick()
            await monitor.stop(session)
            await monitor.stop(session)
            return await session.tick()
        
        assert asyncio.run(scenario()) is None
        assert session.snapshot.count == 50
    
    def test_stop_from_subscriber(self, coordinate):
        monitor = CrowdMonitor(sample_period_seconds=0.01)
        
        async def scenario():
            session = monitor.start(50, coordinate)
            published = []
            
            async def stop_on_first(snapshot):
                published.append(snapshot)
                await monitor.stop(session)
            
            monitor.on_snapshot(session, stop_on_first)
            await asyncio.sleep(0.1)
            return session, published
        
        session, published = asyncio.run(scenario())
        assert len(published) == 1
        assert session.stopped
