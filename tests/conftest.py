"""Pytest fixtures for strideminder tests."""

from __future__ import annotations

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from strideminder.core.config import DatabaseConfig, Settings
from strideminder.core.database import Base, build_engine, reset_engine
from strideminder.processing.samples import Batch

GRAVITY = 9.81


def ms(*args) -> int:
    """UTC datetime fields to milliseconds since epoch."""
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


def make_batch(
    vertical,
    rate_hz: float = 100.0,
    duration_s: float = 10.0,
    bias: tuple[float, float, float] = (GRAVITY, GRAVITY, GRAVITY),
    start_time_ms: int = 0,
    jitter_ns: float = 0.0,
    seed: int = 0,
) -> Batch:
    """
    Synthetic batch: ``vertical(t)`` added to the Z axis on top of a
    constant bias on every axis.
    """
    n = int(rate_hz * duration_s)
    t = np.arange(n) / rate_hz
    t_ns = t * 1e9
    if jitter_ns:
        rng = np.random.default_rng(seed)
        t_ns = t_ns + rng.uniform(0, jitter_ns, n)
        t_ns[0] = 0.0
        t_ns = np.sort(t_ns)
        t = t_ns / 1e9
    z = bias[2] + vertical(t)
    return Batch.from_arrays(
        start_time_ms,
        t_ns,
        np.full(n, bias[0]),
        np.full(n, bias[1]),
        z,
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with a temporary database."""
    return Settings(database=DatabaseConfig(url=f"sqlite:///{temp_dir / 'test.db'}"))


@pytest.fixture
def test_db(temp_dir: Path):
    """Create a test database and return its session factory."""
    from sqlalchemy.orm import sessionmaker

    from strideminder.aggregation import models as _  # noqa: F401

    db_path = temp_dir / "test.db"
    engine = build_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine, expire_on_commit=False)

    yield Session

    # Cleanup
    engine.dispose()
    reset_engine()


@pytest.fixture
def store(test_db):
    """AggregateStore on the test database."""
    from strideminder.aggregation import AggregateStore

    return AggregateStore(test_db)


@pytest.fixture
def aggregator(store):
    """TemporalAggregator using UTC buckets."""
    from strideminder.aggregation import BucketCalendar, TemporalAggregator

    return TemporalAggregator(store, BucketCalendar("UTC"))


@pytest.fixture
def walking_batch() -> Batch:
    """10 s at 100 Hz, 2 Hz vertical sinusoid on constant gravity bias."""
    return make_batch(lambda t: 2.0 * np.sin(2 * np.pi * 2.0 * t), start_time_ms=ms(2024, 3, 5, 9, 0))


@pytest.fixture
def flat_batch() -> Batch:
    """Stationary device: identical reading for every sample."""
    return make_batch(lambda t: np.zeros_like(t))
