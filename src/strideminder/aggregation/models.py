"""SQLAlchemy models for the four gait parameter series."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import BigInteger, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from strideminder.core.database import Base


class Granularity(Enum):
    """Time resolution of a series."""

    RAW = "raw"
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"


class GaitParamsMixin:
    """Columns shared by every series."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp_ms: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    step_regularity: Mapped[float] = mapped_column(Float, nullable=False)
    stride_regularity: Mapped[float] = mapped_column(Float, nullable=False)
    step_symmetry: Mapped[float] = mapped_column(Float, nullable=False)
    cadence: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, timestamp_ms={self.timestamp_ms})>"


class RawGaitParams(GaitParamsMixin, Base):
    """One row per analyzed walking batch."""

    __tablename__ = "gait_params_raw"


class HourlyGaitParams(GaitParamsMixin, Base):
    """Mean of the raw rows within one hour."""

    __tablename__ = "gait_params_hourly"


class DailyGaitParams(GaitParamsMixin, Base):
    """Mean of the hourly rows within one day."""

    __tablename__ = "gait_params_daily"


class MonthlyGaitParams(GaitParamsMixin, Base):
    """Mean of the daily rows within one month."""

    __tablename__ = "gait_params_monthly"


MODELS: dict[Granularity, type[GaitParamsMixin]] = {
    Granularity.RAW: RawGaitParams,
    Granularity.HOURLY: HourlyGaitParams,
    Granularity.DAILY: DailyGaitParams,
    Granularity.MONTHLY: MonthlyGaitParams,
}


@dataclass(frozen=True)
class AggregateRecord:
    """Detached copy of a row from any series."""

    timestamp_ms: int
    step_regularity: float
    stride_regularity: float
    step_symmetry: float
    cadence: float
    id: int | None = None

    @classmethod
    def from_row(cls, row: GaitParamsMixin) -> AggregateRecord:
        return cls(
            timestamp_ms=row.timestamp_ms,
            step_regularity=row.step_regularity,
            stride_regularity=row.stride_regularity,
            step_symmetry=row.step_symmetry,
            cadence=row.cadence,
            id=row.id,
        )

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return {
            "timestamp_ms": self.timestamp_ms,
            "step_regularity": self.step_regularity,
            "stride_regularity": self.stride_regularity,
            "step_symmetry": self.step_symmetry,
            "cadence": self.cadence,
        }
