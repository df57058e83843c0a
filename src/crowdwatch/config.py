"""
CrowdWatch Configuration
========================

This module handles configuration loading for the monitoring core.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    CROWDWATCH_DEFAULT_RADIUS  -> monitor.default_radius
    CROWDWATCH_SAMPLE_PERIOD   -> monitor.sample_period_seconds
    CROWDWATCH_SAMPLING_BACKEND -> sampling.backend
    CROWDWATCH_SPIKE_DELTA     -> thresholds.spike_delta
    CROWDWATCH_HEAVY_RATIO     -> thresholds.heavy_ratio
    CROWDWATCH_MEDIUM_RATIO    -> thresholds.medium_ratio
    CROWDWATCH_PORT            -> server.port
    CROWDWATCH_LOG_LEVEL       -> logging.level
    PORT                       -> server.port (Cloud Run)

Example:
    from crowdwatch.config import settings
    
    print(settings.monitor.sample_period_seconds)
    print(settings.thresholds.heavy_ratio)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from crowdwatch.models.sample import Radius


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""
    
    name: str = Field(default="crowdwatch-monitor", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class MonitorConfig(BaseModel):
    """Engine timing configuration."""
    
    default_radius: int = Field(
        default=50,
        description="Radius in meters used when monitoring starts",
    )
    sample_period_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Period between sample ticks",
    )
    cooldown_tick_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Period between cooldown decrements",
    )
    alert_cooldown_seconds: int = Field(
        default=30,
        ge=1,
        description="Cooldown armed by a user-raised alert",
    )
    log_every_n_ticks: int = Field(
        default=10,
        ge=1,
        description="Log a snapshot summary every N ticks",
    )
    
    @field_validator("default_radius")
    @classmethod
    def _supported_radius(cls, value: int) -> int:
        if value not in {r.value for r in Radius}:
            raise ValueError(f"default_radius must be one of {[r.value for r in Radius]}")
        return value


class SamplingConfig(BaseModel):
    """Sample feed configuration."""
    
    backend: str = Field(
        default="simulated",
        description="Sample backend: 'simulated'",
    )
    people_per_meter: float = Field(
        default=1.0,
        gt=0,
        description="Baseline people per meter of radius",
    )
    jitter: float = Field(
        default=20.0,
        ge=0,
        description="Maximum simulated deviation from baseline (people)",
    )


class ThresholdsConfig(BaseModel):
    """Classification and trend thresholds."""
    
    medium_ratio: float = Field(default=1.1, gt=0, description="MEDIUM above baseline × ratio")
    heavy_ratio: float = Field(default=1.5, gt=0, description="HEAVY above baseline × ratio")
    trend_delta: int = Field(default=2, ge=0, description="Delta for UP/DOWN trend")
    spike_delta: int = Field(default=15, ge=0, description="Delta for a spike")
    history_size: int = Field(default=20, ge=1, description="History window length")
    
    @model_validator(mode="after")
    def _ordered(self) -> "ThresholdsConfig":
        if self.heavy_ratio < self.medium_ratio:
            raise ValueError("heavy_ratio must be >= medium_ratio")
        if self.spike_delta < self.trend_delta:
            raise ValueError("spike_delta must be >= trend_delta")
        return self


class SafeZoneConfig(BaseModel):
    """Safe zone advisor configuration."""
    
    offset_degrees: float = Field(
        default=0.002,
        gt=0,
        le=1.0,
        description="Lat/lng offset of the placeholder candidate",
    )


class ServerConfig(BaseModel):
    """Server configuration."""
    
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8001, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for CrowdWatch.
    
    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """
    
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    safe_zone: SafeZoneConfig = Field(default_factory=SafeZoneConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.
    
    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values
        
    Args:
        config_path: Path to config.yaml. If None, searches common locations.
        
    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break
    
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")
    
    _apply_env_overrides(config_data)
    
    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""
    
    # Monitor settings
    if env_radius := os.environ.get("CROWDWATCH_DEFAULT_RADIUS"):
        config_data.setdefault("monitor", {})["default_radius"] = int(env_radius)
    if env_period := os.environ.get("CROWDWATCH_SAMPLE_PERIOD"):
        config_data.setdefault("monitor", {})["sample_period_seconds"] = float(env_period)
    
    # Sampling settings
    if env_backend := os.environ.get("CROWDWATCH_SAMPLING_BACKEND"):
        config_data.setdefault("sampling", {})["backend"] = env_backend
    
    # Threshold overrides
    if env_spike := os.environ.get("CROWDWATCH_SPIKE_DELTA"):
        config_data.setdefault("thresholds", {})["spike_delta"] = int(env_spike)
    if env_heavy := os.environ.get("CROWDWATCH_HEAVY_RATIO"):
        config_data.setdefault("thresholds", {})["heavy_ratio"] = float(env_heavy)
    if env_medium := os.environ.get("CROWDWATCH_MEDIUM_RATIO"):
        config_data.setdefault("thresholds", {})["medium_ratio"] = float(env_medium)
    
    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("CROWDWATCH_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    
    # Logging settings
    if env_log := os.environ.get("CROWDWATCH_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    
    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
