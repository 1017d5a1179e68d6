"""Configuration management with dataclasses and YAML loading."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = "sqlite:///data/strideminder.db"
    echo: bool = False

    def __post_init__(self) -> None:
        """Allow the database URL to be overridden from the environment."""
        env_url = os.getenv("STRIDEMINDER_DATABASE_URL")
        if env_url:
            self.url = env_url


@dataclass
class ProcessingConfig:
    """Gait detection parameters."""

    # Determined experimentally: best ratio of correct detections to false alarms
    walking_rms_threshold: float = 0.25
    required_crossings: int = 5
    max_lag: int | None = None


@dataclass
class AcquisitionConfig:
    """Batching of the incoming sample stream."""

    batch_duration_ns: int = 10_000_000_000
    # ~10 s of samples 0.01 s apart, plus 50%
    batch_capacity: int = 1500
    workers: int = 2


@dataclass
class AggregationConfig:
    """Calendar used for hourly/daily/monthly buckets."""

    timezone: str = "UTC"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    acquisition: AcquisitionConfig = field(default_factory=AcquisitionConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from dictionary."""
        return cls(
            database=DatabaseConfig(**data.get("database", {})),
            processing=ProcessingConfig(**data.get("processing", {})),
            acquisition=AcquisitionConfig(**data.get("acquisition", {})),
            aggregation=AggregationConfig(**data.get("aggregation", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)

    def ensure_directories(self) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        prefix = "sqlite:///"
        url = self.database.url
        if url.startswith(prefix) and url != f"{prefix}:memory:":
            Path(url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Settings | None = None


def get_settings(config_path: str | Path | None = None) -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        if config_path is None:
            # Default config paths to check
            for candidate in [
                Path("config/settings.yaml"),
                Path.home() / ".config/strideminder/settings.yaml",
            ]:
                if candidate.exists():
                    config_path = candidate
                    break

        _settings = Settings.from_yaml(config_path) if config_path else Settings()

    return _settings


def reload_settings(config_path: str | Path | None = None) -> Settings:
    """Force reload settings from file."""
    global _settings
    _settings = None
    return get_settings(config_path)
