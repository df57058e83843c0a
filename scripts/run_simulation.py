#!/usr/bin/env python3
"""
Monitoring Simulation Script
============================

Standalone script to exercise the monitoring core end to end.

This script:
    1. Starts a session at a fixed coordinate with the simulated feed
    2. Runs for a configurable duration
    3. Logs each spike as it happens and a progress report periodically
    4. Optionally raises an alert mid-run to exercise the cooldown
    5. Reports a final summary

Usage:
    python scripts/run_simulation.py --duration 60
    python scripts/run_simulation.py --radius 100 --jitter 40 --period 1
"""

import argparse
import asyncio
import logging
import time

from crowdwatch.engine import CrowdMonitor
from crowdwatch.models import Coordinate, DensityTier, MonitoringSnapshot, SpikeEvent
from crowdwatch.sampling import SimulatedSampleSource


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_simulation(
    lat: float,
    lng: float,
    radius: int,
    duration: int,
    period: float,
    jitter: float,
    report_interval: int,
    alert_at: int,
) -> dict:
    """
    Run the simulation.
    
    Args:
        lat, lng: Monitored coordinate
        radius: Monitoring radius (25/50/100)
        duration: Run duration in seconds
        period: Sample period in seconds
        jitter: Simulated jitter in people
        report_interval: Seconds between progress reports
        alert_at: Seconds after start to raise an alert (0 = never)
        
    Returns:
        Final metrics dict
    """
    logger.info("=" * 60)
    logger.info("CrowdWatch Simulation")
    logger.info("=" * 60)
    logger.info(f"Location: {lat}, {lng}  Radius: {radius}m")
    logger.info(f"Duration: {duration}s  Period: {period}s  Jitter: ±{jitter}")
    logger.info("=" * 60)
    
    monitor = CrowdMonitor(
        source_factory=lambda: SimulatedSampleSource(jitter=jitter),
        sample_period_seconds=period,
    )
    session = monitor.start(radius, Coordinate.of(lat, lng))
    
    tiers = {tier: 0 for tier in DensityTier}
    
    def on_snapshot(snapshot: MonitoringSnapshot) -> None:
        tiers[snapshot.density] += 1
    
    def on_spike(event: SpikeEvent) -> None:
        logger.info(f"  SPIKE: count={event.count} (delta={event.delta:+d})")
    
    monitor.on_snapshot(session, on_snapshot)
    monitor.on_spike(session, on_spike)
    
    start_time = time.time()
    last_report_time = start_time
    alert_raised = False
    
    try:
        while True:
            elapsed = time.time() - start_time
            if elapsed >= duration:
                logger.info(f"Duration ({duration}s) reached")
                break
            
            if alert_at and not alert_raised and elapsed >= alert_at:
                first = monitor.raise_alert(session)
                second = monitor.raise_alert(session)
                logger.info(
                    f"Alert raised: accepted={first.accepted}; "
                    f"repeat accepted={second.accepted} "
                    f"({second.remaining_seconds}s cooldown)"
                )
                alert_raised = True
            
            if time.time() - last_report_time >= report_interval:
                snapshot = monitor.snapshot(session)
                logger.info("-" * 40)
                logger.info(f"Progress Report (elapsed: {elapsed:.0f}s)")
                if snapshot is not None:
                    logger.info(f"  Count: {snapshot.count} ({snapshot.density.value}, {snapshot.trend.value})")
                    logger.info(f"  Cooldown: {snapshot.cooldown.remaining_seconds}s")
                    if snapshot.safe_zone is not None:
                        logger.info(f"  Safe zone: {snapshot.safe_zone.distance_meters}m away")
                last_report_time = time.time()
            
            await asyncio.sleep(0.5)
            
    except KeyboardInterrupt:
        logger.info("Simulation interrupted by user")
    finally:
        await monitor.stop(session)
    
    total_time = time.time() - start_time
    metrics = session.get_metrics()
    
    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Snapshots: {metrics['snapshots_published']}")
    logger.info(f"Spikes: {metrics['spikes']}")
    for tier, count in tiers.items():
        logger.info(f"  {tier.value}: {count}")
    logger.info("=" * 60)
    
    return {
        "duration": total_time,
        "snapshots": metrics["snapshots_published"],
        "spikes": metrics["spikes"],
        "tiers": {tier.value: count for tier, count in tiers.items()},
    }


def main():
    parser = argparse.ArgumentParser(description="Run the monitoring core against the simulated feed")
    parser.add_argument("--lat", type=float, default=12.9716, help="Latitude")
    parser.add_argument("--lng", type=float, default=77.5946, help="Longitude")
    parser.add_argument("--radius", type=int, default=50, choices=[25, 50, 100], help="Radius in meters")
    parser.add_argument("--duration", type=int, default=60, help="Duration in seconds (default: 60)")
    parser.add_argument("--period", type=float, default=3.0, help="Sample period in seconds (default: 3)")
    parser.add_argument("--jitter", type=float, default=20.0, help="Simulated jitter (default: 20)")
    parser.add_argument("--report-interval", type=int, default=10, help="Seconds between reports")
    parser.add_argument("--alert-at", type=int, default=0, help="Raise an alert after N seconds (0 = never)")
    
    args = parser.parse_args()
    
    asyncio.run(run_simulation(
        lat=args.lat,
        lng=args.lng,
        radius=args.radius,
        duration=args.duration,
        period=args.period,
        jitter=args.jitter,
        report_interval=args.report_interval,
        alert_at=args.alert_at,
    ))


if __name__ == "__main__":
    main()
