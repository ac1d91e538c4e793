"""
KestrelPay - Configuration Management
Loads the YAML configuration and applies environment overrides.
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from enum import Enum


class SnapshotSource(Enum):
    """Where market and network snapshots come from."""
    SIMULATED = "simulated"
    HTTP = "http"


@dataclass
class SwarmConfig:
    """Scorer population configuration."""
    population_size: int = 25
    confidence_threshold: float = 75.0
    seed: Optional[int] = None


@dataclass
class SnapshotConfig:
    """Snapshot provider configuration."""
    source: SnapshotSource = SnapshotSource.SIMULATED
    market_url: str = ""
    network_url: str = ""
    timeout: float = 5.0
    retry_attempts: int = 2
    retry_delay: float = 0.5
    fallback_to_default: bool = True


@dataclass
class IntentConfig:
    """Intent store configuration."""
    seed_sample_intent: bool = True
    default_sender: str = "0xUserAddress"
    default_token: str = "ETH"


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 3001
    debug: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class AppConfig:
    """Complete application configuration."""
    service_name: str = "KestrelPay Backend"
    version: str = "2.0.0"
    swarm: SwarmConfig = field(default_factory=SwarmConfig)
    snapshots: SnapshotConfig = field(default_factory=SnapshotConfig)
    intents: IntentConfig = field(default_factory=IntentConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    max_ram_percent: float = 85.0


class ConfigManager:
    """
    Manages configuration loading.

    Priority for each overridable setting:
    1. Environment variable (KESTRELPAY_*)
    2. config/default.yaml
    3. Dataclass defaults
    """

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.config_dir = self.base_path / "config"
        self._config: Optional[AppConfig] = None

    def load_yaml(self, filepath: Path) -> Dict[str, Any]:
        """Load a YAML configuration file."""
        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def detect_snapshot_source(self, configured: str) -> SnapshotSource:
        """
        Resolve the snapshot source:
        1. Environment variable
        2. Configured value
        """
        env_source = os.environ.get("KESTRELPAY_SNAPSHOT_SOURCE", "").lower()
        value = env_source or (configured or SnapshotSource.SIMULATED.value).lower()
        try:
            return SnapshotSource(value)
        except ValueError:
            raise ValueError(
                f"Unknown snapshot source '{value}'. Use 'simulated' or 'http'"
            )

    def build_config(self, data: Dict[str, Any]) -> AppConfig:
        """Build and validate an AppConfig from parsed YAML data."""
        snapshot_data = dict(data.get("snapshots", {}))
        snapshot_data["source"] = self.detect_snapshot_source(snapshot_data.get("source", ""))

        server = ServerConfig(**data.get("server", {}))
        if os.environ.get("KESTRELPAY_HOST"):
            server.host = os.environ["KESTRELPAY_HOST"]
        if os.environ.get("KESTRELPAY_PORT"):
            server.port = int(os.environ["KESTRELPAY_PORT"])
        if os.environ.get("KESTRELPAY_DEBUG"):
            server.debug = os.environ["KESTRELPAY_DEBUG"].lower() == "true"

        service = data.get("service", {})
        config = AppConfig(
            service_name=service.get("name", AppConfig.service_name),
            version=str(service.get("version", AppConfig.version)),
            swarm=SwarmConfig(**data.get("swarm", {})),
            snapshots=SnapshotConfig(**snapshot_data),
            intents=IntentConfig(**data.get("intents", {})),
            server=server,
            logging=LoggingConfig(**data.get("logging", {})),
            max_ram_percent=float(data.get("max_ram_percent", AppConfig.max_ram_percent))
        )
        validate_config(config)
        return config

    def load(self) -> AppConfig:
        """
        Load complete application configuration.

        Returns:
            Complete AppConfig instance.
        """
        data = self.load_yaml(self.config_dir / "default.yaml")
        self._config = self.build_config(data)
        return self._config

    @property
    def config(self) -> AppConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load()
        return self._config

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the active configuration."""
        config = self.config
        return {
            "service": config.service_name,
            "version": config.version,
            "population_size": config.swarm.population_size,
            "confidence_threshold": config.swarm.confidence_threshold,
            "snapshot_source": config.snapshots.source.value
        }


def validate_config(config: AppConfig):
    """Reject configuration values the engine cannot run with."""
    if config.swarm.population_size < 0:
        raise ValueError("swarm.population_size must be >= 0")
    if not 0 <= config.swarm.confidence_threshold <= 100:
        raise ValueError("swarm.confidence_threshold must be between 0 and 100")
    if config.snapshots.source is SnapshotSource.HTTP:
        if not config.snapshots.market_url or not config.snapshots.network_url:
            raise ValueError("snapshots.market_url and snapshots.network_url are required for http source")
    if config.snapshots.timeout <= 0:
        raise ValueError("snapshots.timeout must be positive")
    if config.snapshots.retry_delay < 0:
        raise ValueError("snapshots.retry_delay must be >= 0")
