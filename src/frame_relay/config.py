"""
frame-relay Configuration
=========================

This module handles configuration loading for the relay.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    PORT                 -> server.port
    WEBCAM_HOST          -> upstream.host
    WEBCAM_PORT          -> upstream.port
    WEBCAM_PATH          -> upstream.path
    UPSTREAM_TIMEOUT     -> upstream.timeout_seconds
    SLEEP_TIMEOUT        -> timing.sleep_timeout_ms
    WAKE_CHECK_INTERVAL  -> timing.wake_check_interval_ms
    BACKOFF_INTERVAL     -> timing.backoff_interval_ms
    REFRESH_INTERVAL     -> timing.refresh_interval_ms
    PRESENCE_MODE        -> presence.mode
    REDIS_URL            -> activity.redis_url (selects the redis backend)
    PUSH_PATH            -> push.path (enables push)
    WEB_ROOT             -> paths.web_root
    LOG_LEVEL            -> logging.level
    DEBUG=TRUE           -> logging.debug

Example:
    from frame_relay.config import settings

    print(settings.upstream.host)
    print(settings.timing.refresh_interval_ms)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServerConfig(BaseModel):
    """Viewer-facing HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")


class UpstreamConfig(BaseModel):
    """Upstream camera configuration."""

    host: str = Field(default="localhost", description="Camera host")
    port: int = Field(default=8080, ge=1, le=65535, description="Camera HTTP port")
    path: str = Field(default="/", description="Snapshot path on the camera")
    timeout_seconds: float = Field(
        default=10.0,
        ge=0,
        description="Per-request timeout (0 = no timeout)",
    )


class TimingConfig(BaseModel):
    """Fetch loop timing, in milliseconds."""

    sleep_timeout_ms: float = Field(
        default=2000,
        ge=0,
        description="Idle time since the last viewer request before sleeping",
    )
    wake_check_interval_ms: float = Field(
        default=2000,
        ge=0,
        description="How often to check for viewers while asleep",
    )
    backoff_interval_ms: float = Field(
        default=500,
        ge=0,
        description="Wait after a failed fetch",
    )
    refresh_interval_ms: float = Field(
        default=150,
        ge=0,
        description="Target period between fetches",
    )


class PresenceConfig(BaseModel):
    """Viewer presence policy."""

    mode: Literal["timeout", "connections"] = Field(
        default="timeout",
        description="Presence policy: 'timeout' or 'connections'",
    )


class ActivityConfig(BaseModel):
    """Viewer activity backend."""

    backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Activity backend: 'memory' or 'redis'",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for the shared viewer counter",
    )
    key_prefix: str = Field(default="frame_relay", description="Redis key prefix")


class PushConfig(BaseModel):
    """WebSocket push notifications."""

    enabled: bool = Field(default=False, description="Enable the push endpoint")
    path: str = Field(default="/ws", description="Push endpoint path")


class PathsConfig(BaseModel):
    """Filesystem locations."""

    web_root: str = Field(default="./httpdocs", description="Static file root")
    index_template: str = Field(
        default="./templates/index.html",
        description="Viewer page template",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")
    debug: bool = Field(default=False, description="Debug mode (forces DEBUG level)")


class Settings(BaseModel):
    """
    Main settings class for the relay.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    presence: PresenceConfig = Field(default_factory=PresenceConfig)
    activity: ActivityConfig = Field(default_factory=ActivityConfig)
    push: PushConfig = Field(default_factory=PushConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def check_presence_source(self) -> "Settings":
        # Connection counts only move through the push endpoint
        if self.presence.mode == "connections" and not self.push.enabled:
            raise ValueError(
                "presence.mode=connections requires push.enabled (set PUSH_PATH)"
            )
        return self


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
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
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
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Server
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Upstream camera
    if env_host := os.environ.get("WEBCAM_HOST"):
        config_data.setdefault("upstream", {})["host"] = env_host
    if env_wport := os.environ.get("WEBCAM_PORT"):
        config_data.setdefault("upstream", {})["port"] = int(env_wport)
    if env_path := os.environ.get("WEBCAM_PATH"):
        config_data.setdefault("upstream", {})["path"] = env_path
    if env_timeout := os.environ.get("UPSTREAM_TIMEOUT"):
        config_data.setdefault("upstream", {})["timeout_seconds"] = float(env_timeout)

    # Timing (milliseconds)
    timing_env = {
        "SLEEP_TIMEOUT": "sleep_timeout_ms",
        "WAKE_CHECK_INTERVAL": "wake_check_interval_ms",
        "BACKOFF_INTERVAL": "backoff_interval_ms",
        "REFRESH_INTERVAL": "refresh_interval_ms",
    }
    for env_name, field in timing_env.items():
        if env_value := os.environ.get(env_name):
            config_data.setdefault("timing", {})[field] = float(env_value)

    # Presence / activity
    if env_mode := os.environ.get("PRESENCE_MODE"):
        config_data.setdefault("presence", {})["mode"] = env_mode
    if env_redis := os.environ.get("REDIS_URL"):
        activity = config_data.setdefault("activity", {})
        activity["backend"] = "redis"
        activity["redis_url"] = env_redis

    # Push
    if env_push := os.environ.get("PUSH_PATH"):
        push = config_data.setdefault("push", {})
        push["enabled"] = True
        push["path"] = env_push

    # Paths
    if env_root := os.environ.get("WEB_ROOT"):
        config_data.setdefault("paths", {})["web_root"] = env_root

    # Logging
    if env_log := os.environ.get("LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if os.environ.get("DEBUG", "FALSE") == "TRUE":
        config_data.setdefault("logging", {})["debug"] = True


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    if settings.logging.debug:
        log_level = logging.DEBUG
    else:
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


def log_config_summary(settings: Settings) -> None:
    """Log the effective configuration (debug mode)."""
    logger.debug("===== Configuration Summary =====")
    logger.debug(f"          port: {settings.server.port}")
    logger.debug(f" sleep_timeout: {settings.timing.sleep_timeout_ms}ms")
    logger.debug(f"    wake_check: {settings.timing.wake_check_interval_ms}ms")
    logger.debug(f"       backoff: {settings.timing.backoff_interval_ms}ms")
    logger.debug(f"       refresh: {settings.timing.refresh_interval_ms}ms")
    logger.debug(f"      upstream: {settings.upstream.host}:{settings.upstream.port}{settings.upstream.path}")
    logger.debug(f"      presence: {settings.presence.mode}")
    logger.debug(f"      activity: {settings.activity.backend}")
    logger.debug(f"          push: {settings.push.path if settings.push.enabled else 'disabled'}")


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
