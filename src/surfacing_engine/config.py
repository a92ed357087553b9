"""
Surfacing Engine Configuration
==============================

This module handles configuration loading for the surfacing engine.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SURFACING_CONFIG_PATH         -> path of the YAML file
    SURFACING_WINDOW_MS           -> engine.window_ms
    SURFACING_PERSISTENCE_GAP_MS  -> engine.persistence_gap_ms
    SURFACING_CELL_DEG            -> engine.cell_deg
    SURFACING_FIRE_CONF           -> thresholds.fire.conf
    SURFACING_FIRE_AUTO_CONF      -> thresholds.fire.auto_conf
    SURFACING_PERSON_CONF         -> thresholds.person.conf
    SURFACING_CHEMICAL_CONF       -> thresholds.chemical.conf
    SURFACING_ASSET_RADIUS_M      -> thresholds.asset.radius_m
    SURFACING_DECISION_LOG_SIZE   -> session.decision_log_size
    SURFACING_PORT                -> server.port
    SURFACING_LOG_LEVEL           -> logging.level
    PORT                          -> server.port (Cloud Run)

Example:
    from surfacing_engine.config import settings

    print(settings.agent.name)
    print(settings.thresholds.fire.auto_conf)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AgentConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="drone-event-surfacing", description="Service name")
    version: str = Field(default="v0.1.0", description="Protocol version")


class EngineConfig(BaseModel):
    """History handling configuration."""

    cell_deg: float = Field(
        default=0.00035,
        gt=0,
        description="Grid cell size in degrees (~35 m at mid-latitudes)",
    )
    window_ms: int = Field(
        default=60_000,
        gt=0,
        description="Trailing event window retained for clustering (ms)",
    )
    persistence_gap_ms: int = Field(
        default=12_000,
        gt=0,
        description="Maximum gap between same-cell detections (ms)",
    )
    eviction_gap_multiple: int = Field(
        default=10,
        ge=1,
        description="Cells idle for this many persistence gaps are evicted",
    )
    eviction_interval_events: int = Field(
        default=500,
        ge=0,
        description="Run an eviction sweep every N processed events (0 = never)",
    )
    ignored_labels: List[str] = Field(
        default_factory=list,
        description="Labels always decided as ignore",
    )


class FireThresholds(BaseModel):
    """Fire thresholds."""

    conf: float = Field(default=0.88, ge=0, le=1.0, description="Minimum score to consider")
    auto_conf: float = Field(default=0.95, ge=0, le=1.0, description="Auto-dispatch score")
    persist_ticks: int = Field(default=2, ge=1, description="Detections required to persist")


class PersonThresholds(BaseModel):
    """Person/people thresholds (applied inside areas of interest)."""

    conf: float = Field(default=0.90, ge=0, le=1.0, description="Minimum score to consider")
    persist_ticks_aoi: int = Field(default=3, ge=1, description="Detections required to persist")


class ChemicalThresholds(BaseModel):
    """Chemical thresholds."""

    conf: float = Field(default=0.85, ge=0, le=1.0, description="Minimum score to consider")


class AssetThresholds(BaseModel):
    """Critical asset proximity thresholds."""

    radius_m: float = Field(default=60.0, gt=0, description="Proximity radius (meters)")
    fire_conf: float = Field(default=0.85, ge=0, le=1.0, description="Fire score near an asset")
    person_conf: float = Field(default=0.92, ge=0, le=1.0, description="Person score near an asset")


class ClusterThresholds(BaseModel):
    """Spatial clustering thresholds (person/people)."""

    count: int = Field(default=3, ge=1, description="Detections that form a cluster")
    radius_m: float = Field(default=100.0, gt=0, description="Cluster radius (meters)")
    window_ms: int = Field(default=30_000, gt=0, description="Cluster time window (ms)")


class ThresholdsConfig(BaseModel):
    """All decision thresholds."""

    fire: FireThresholds = Field(default_factory=FireThresholds)
    person: PersonThresholds = Field(default_factory=PersonThresholds)
    chemical: ChemicalThresholds = Field(default_factory=ChemicalThresholds)
    asset: AssetThresholds = Field(default_factory=AssetThresholds)
    cluster: ClusterThresholds = Field(default_factory=ClusterThresholds)


class SessionConfig(BaseModel):
    """Mission session configuration."""

    decision_log_size: int = Field(
        default=1000,
        ge=1,
        description="Maximum decisions kept per session for the timeline",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the surfacing engine.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    agent: AgentConfig = Field(default_factory=AgentConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
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
    # Find config file
    if config_path is None:
        config_path = os.environ.get("SURFACING_CONFIG_PATH")
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

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Engine settings
    if env_window := os.environ.get("SURFACING_WINDOW_MS"):
        config_data.setdefault("engine", {})["window_ms"] = int(env_window)
    if env_gap := os.environ.get("SURFACING_PERSISTENCE_GAP_MS"):
        config_data.setdefault("engine", {})["persistence_gap_ms"] = int(env_gap)
    if env_cell := os.environ.get("SURFACING_CELL_DEG"):
        config_data.setdefault("engine", {})["cell_deg"] = float(env_cell)

    # Threshold overrides
    thresholds = config_data.setdefault("thresholds", {})
    if env_fc := os.environ.get("SURFACING_FIRE_CONF"):
        thresholds.setdefault("fire", {})["conf"] = float(env_fc)
    if env_fa := os.environ.get("SURFACING_FIRE_AUTO_CONF"):
        thresholds.setdefault("fire", {})["auto_conf"] = float(env_fa)
    if env_pc := os.environ.get("SURFACING_PERSON_CONF"):
        thresholds.setdefault("person", {})["conf"] = float(env_pc)
    if env_cc := os.environ.get("SURFACING_CHEMICAL_CONF"):
        thresholds.setdefault("chemical", {})["conf"] = float(env_cc)
    if env_radius := os.environ.get("SURFACING_ASSET_RADIUS_M"):
        thresholds.setdefault("asset", {})["radius_m"] = float(env_radius)

    # Session settings
    if env_log_size := os.environ.get("SURFACING_DECISION_LOG_SIZE"):
        config_data.setdefault("session", {})["decision_log_size"] = int(env_log_size)

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("SURFACING_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("SURFACING_LOG_LEVEL"):
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
