"""Tests for core module."""

from __future__ import annotations

import pytest


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_settings(self, monkeypatch):
        """Test default settings creation."""
        from strideminder.core.config import Settings

        monkeypatch.delenv("STRIDEMINDER_DATABASE_URL", raising=False)
        settings = Settings()

        assert settings.database.url == "sqlite:///data/strideminder.db"
        assert settings.processing.walking_rms_threshold == 0.25
        assert settings.processing.required_crossings == 5
        assert settings.acquisition.batch_duration_ns == 10_000_000_000
        assert settings.acquisition.batch_capacity == 1500
        assert settings.aggregation.timezone == "UTC"

    def test_settings_from_dict(self, monkeypatch):
        """Test settings from dictionary."""
        from strideminder.core.config import Settings

        monkeypatch.delenv("STRIDEMINDER_DATABASE_URL", raising=False)
        data = {
            "database": {"url": "sqlite:///custom.db"},
            "processing": {"walking_rms_threshold": 0.3},
            "aggregation": {"timezone": "Europe/Dublin"},
        }

        settings = Settings._from_dict(data)

        assert settings.database.url == "sqlite:///custom.db"
        assert settings.processing.walking_rms_threshold == 0.3
        assert settings.aggregation.timezone == "Europe/Dublin"
        assert settings.acquisition.workers == 2

    def test_settings_to_dict(self):
        """Test settings to dictionary conversion."""
        from strideminder.core.config import Settings

        data = Settings().to_dict()

        assert "database" in data
        assert "processing" in data
        assert "aggregation" in data
        assert data["processing"]["max_lag"] is None

    def test_settings_from_yaml(self, temp_dir, monkeypatch):
        """Test loading settings from a YAML file."""
        from strideminder.core.config import Settings

        monkeypatch.delenv("STRIDEMINDER_DATABASE_URL", raising=False)
        path = temp_dir / "settings.yaml"
        path.write_text("processing:\n  walking_rms_threshold: 0.4\nlogging:\n  level: DEBUG\n")

        settings = Settings.from_yaml(path)

        assert settings.processing.walking_rms_threshold == 0.4
        assert settings.logging.level == "DEBUG"
        assert settings.database.url == "sqlite:///data/strideminder.db"

    def test_settings_missing_yaml(self, temp_dir):
        """Test missing file falls back to defaults."""
        from strideminder.core.config import Settings

        settings = Settings.from_yaml(temp_dir / "missing.yaml")
        assert settings.processing.walking_rms_threshold == 0.25

    def test_database_url_env_override(self, monkeypatch):
        """Test environment variable overrides the database URL."""
        from strideminder.core.config import DatabaseConfig

        monkeypatch.setenv("STRIDEMINDER_DATABASE_URL", "sqlite:///env.db")
        assert DatabaseConfig().url == "sqlite:///env.db"

    def test_ensure_directories(self, temp_dir):
        """Test database directory creation."""
        from strideminder.core.config import DatabaseConfig, Settings

        db_path = temp_dir / "nested" / "gait.db"
        settings = Settings(database=DatabaseConfig(url=f"sqlite:///{db_path}"))

        settings.ensure_directories()

        assert db_path.parent.exists()


class TestDatabase:
    """Tests for database module."""

    def test_sqlite_engine_uses_wal(self, temp_dir):
        """Test file databases are opened in WAL mode."""
        from sqlalchemy import text

        from strideminder.core.database import build_engine

        engine = build_engine(f"sqlite:///{temp_dir / 'wal.db'}")
        try:
            with engine.connect() as conn:
                mode = conn.execute(text("PRAGMA journal_mode")).scalar()
        finally:
            engine.dispose()

        assert mode.lower() == "wal"

    def test_is_sqlite(self):
        """Test backend detection from the URL."""
        from strideminder.core.database import is_sqlite

        assert is_sqlite("sqlite:///data/strideminder.db")
        assert not is_sqlite("postgresql://user@localhost/gait")

    def test_tables_registered(self, test_db):
        """Test all four series tables are created."""
        from strideminder.core.database import Base

        assert {
            "gait_params_raw",
            "gait_params_hourly",
            "gait_params_daily",
            "gait_params_monthly",
        } <= set(Base.metadata.tables)

    def test_get_session_rolls_back(self, test_db):
        """Test session context manager rolls back on error."""
        from strideminder.aggregation.models import RawGaitParams
        from strideminder.core.database import get_session

        with pytest.raises(RuntimeError):
            with get_session(test_db) as session:
                session.add(
                    RawGaitParams(
                        timestamp_ms=1,
                        step_regularity=0.5,
                        stride_regularity=0.6,
                        step_symmetry=0.8,
                        cadence=55.0,
                    )
                )
                session.flush()
                raise RuntimeError("boom")

        with get_session(test_db) as session:
            assert session.query(RawGaitParams).count() == 0


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        """Test processing and storage errors share a base."""
        from strideminder.core.errors import (
            DegenerateSignalError,
            InsufficientDataError,
            ProcessingError,
            StorageError,
            StrideMinderError,
        )

        assert issubclass(InsufficientDataError, ProcessingError)
        assert issubclass(DegenerateSignalError, ProcessingError)
        assert issubclass(ProcessingError, StrideMinderError)
        assert issubclass(StorageError, StrideMinderError)
        assert not issubclass(StorageError, ProcessingError)

    def test_degenerate_reason(self):
        """Test DegenerateSignalError carries its reason."""
        from strideminder.core.errors import DegenerateSignalError

        err = DegenerateSignalError("flat", reason=DegenerateSignalError.ZERO_VARIANCE)
        assert err.reason == "zero_variance"
        assert str(err) == "flat"
