"""
TransitPulse Configuration
==========================

This module handles configuration loading for the TransitPulse service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    TRANSIT_CONFIG_PATH          -> path of the YAML file to load
    TRANSIT_DENSITY_MEDIUM       -> thresholds.density.medium
    TRANSIT_DENSITY_HIGH         -> thresholds.density.high
    TRANSIT_DENSITY_CRITICAL     -> thresholds.density.critical
    TRANSIT_DELAY_PENALTY        -> routing.delay_penalty_minutes
    TRANSIT_BASELINE_DURATION    -> routing.baseline_duration_minutes
    TRANSIT_MAX_READINGS         -> store.max_readings
    TRANSIT_SIMULATION_ENABLED   -> simulation.enabled
    TRANSIT_SIMULATION_SEED      -> simulation.seed
    TRANSIT_PORT                 -> server.port
    TRANSIT_LOG_LEVEL            -> logging.level
    PORT                         -> server.port (Cloud Run)

Example:
    from transit_pulse.config import settings

    print(settings.service.name)
    print(settings.thresholds.density.critical)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="transit-pulse", description="Service name")
    version: str = Field(default="v0.1.0", description="API version")


class DensityThresholds(BaseModel):
    """Occupancy percentage thresholds for density tiers (lower bound inclusive)."""

    medium: float = Field(default=30, ge=0, description="medium tier starts here")
    high: float = Field(default=60, ge=0, description="high tier starts here")
    critical: float = Field(default=85, ge=0, description="critical tier starts here")

    @model_validator(mode="after")
    def check_ordering(self) -> "DensityThresholds":
        if not self.medium <= self.high <= self.critical:
            raise ValueError("density thresholds must satisfy medium <= high <= critical")
        return self


class ThresholdsConfig(BaseModel):
    """All classification thresholds."""

    density: DensityThresholds = Field(default_factory=DensityThresholds)


class RiskConfig(BaseModel):
    """Risk assessment configuration."""

    avoid_above_percentage: float = Field(
        default=75,
        ge=0,
        description="Recommend avoiding locations above this occupancy percentage",
    )
    score_multiplier: float = Field(
        default=1.2,
        gt=0,
        description="Linear amplification from percentage to risk score",
    )


class RoutingConfig(BaseModel):
    """Route generation and adjustment configuration."""

    default_base_duration_minutes: int = Field(
        default=30,
        ge=1,
        description="Base duration when endpoint coordinates are unknown",
    )
    min_duration_minutes: int = Field(
        default=15,
        ge=1,
        description="Floor applied to every generated duration",
    )
    delay_penalty_minutes: int = Field(
        default=5,
        ge=0,
        description="Penalty added once when a delay-causing alert matches",
    )
    baseline_duration_minutes: int = Field(
        default=40,
        ge=1,
        description="Baseline used for savings annotations",
    )
    average_speed_kmh: float = Field(
        default=30.0,
        gt=0,
        description="Average in-vehicle speed for ETA estimates",
    )
    walking_overhead_minutes: int = Field(
        default=6,
        ge=0,
        description="Walking/access time added to the ETA estimate",
    )
    walking_meters_per_minute: float = Field(
        default=80.0,
        gt=0,
        description="Walking pace used to convert walking minutes to meters",
    )


class StoreConfig(BaseModel):
    """In-memory repository configuration."""

    max_readings: int = Field(default=100, ge=1, description="Crowd readings kept")
    retention_days: int = Field(default=7, ge=1, description="Crowd reading retention")
    recent_window_minutes: int = Field(
        default=30,
        ge=1,
        description="Window for 'current' crowd snapshots",
    )


class SimulationConfig(BaseModel):
    """Crowd simulation configuration."""

    enabled: bool = Field(default=False, description="Run the crowd simulator")
    interval_seconds: float = Field(default=15.0, gt=0, description="Tick interval")
    seed: Optional[int] = Field(default=None, description="RNG seed for reproducible runs")


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for TransitPulse.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
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
        config_path: Path to config.yaml. If None, uses TRANSIT_CONFIG_PATH
            or searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        config_path = os.environ.get("TRANSIT_CONFIG_PATH")

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

    # Density thresholds
    density = None
    for key in ("medium", "high", "critical"):
        if env_value := os.environ.get(f"TRANSIT_DENSITY_{key.upper()}"):
            if density is None:
                density = config_data.setdefault("thresholds", {}).setdefault("density", {})
            density[key] = float(env_value)

    # Routing
    if env_penalty := os.environ.get("TRANSIT_DELAY_PENALTY"):
        config_data.setdefault("routing", {})["delay_penalty_minutes"] = int(env_penalty)
    if env_baseline := os.environ.get("TRANSIT_BASELINE_DURATION"):
        config_data.setdefault("routing", {})["baseline_duration_minutes"] = int(env_baseline)

    # Store
    if env_max := os.environ.get("TRANSIT_MAX_READINGS"):
        config_data.setdefault("store", {})["max_readings"] = int(env_max)

    # Simulation
    if env_sim := os.environ.get("TRANSIT_SIMULATION_ENABLED"):
        config_data.setdefault("simulation", {})["enabled"] = env_sim.lower() in ("1", "true", "yes")
    if env_seed := os.environ.get("TRANSIT_SIMULATION_SEED"):
        config_data.setdefault("simulation", {})["seed"] = int(env_seed)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("TRANSIT_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("TRANSIT_LOG_LEVEL"):
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
