"""Read access to the gait parameter series."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from strideminder.core.database import get_session, get_session_factory
from strideminder.core.errors import StorageError

from .models import MODELS, AggregateRecord, Granularity

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

ONE_HOUR_MS = 3_600_000
ONE_DAY_MS = ONE_HOUR_MS * 24
ONE_MONTH_MS = ONE_DAY_MS * 31
ONE_YEAR_MS = ONE_DAY_MS * 365

HISTORY_WINDOWS: dict[str, int] = {
    "day": ONE_DAY_MS,
    "month": ONE_MONTH_MS,
    "year": ONE_YEAR_MS,
}


class AggregateStore:
    """
    Range queries over the raw, hourly, daily and monthly series.

    Every public method runs in its own session and sees a consistent
    snapshot of the database.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    def session(self):
        """Open a transactional session on the store's database."""
        return get_session(self.session_factory)

    # ------------------------------------------------------------------
    # Public queries
    # ------------------------------------------------------------------

    def query(
        self,
        granularity: Granularity,
        start: int,
        end: int,
    ) -> list[AggregateRecord]:
        """Records with ``start <= timestamp_ms <= end``, oldest first."""
        try:
            with self.session() as session:
                return self.select_range(session, granularity, start, end, inclusive_end=True)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to query {granularity.value} records: {e}") from e

    def last_timestamp(self, granularity: Granularity = Granularity.RAW) -> int | None:
        """Timestamp of the most recent record, or None if the series is empty."""
        try:
            with self.session() as session:
                return self.select_last_timestamp(session, granularity)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read last {granularity.value} timestamp: {e}") from e

    def history(self, granularity: Granularity, window_ms: int) -> list[AggregateRecord]:
        """Records in the ``window_ms`` leading up to the last raw timestamp."""
        last = self.last_timestamp(Granularity.RAW)
        if last is None:
            return []
        return self.query(granularity, last - window_ms, last)

    def count(self, granularity: Granularity) -> int:
        """Number of records in a series."""
        model = MODELS[granularity]
        try:
            with self.session() as session:
                return session.scalar(select(func.count()).select_from(model)) or 0
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count {granularity.value} records: {e}") from e

    # ------------------------------------------------------------------
    # Session-level helpers shared with the aggregator
    # ------------------------------------------------------------------

    @staticmethod
    def select_range(
        session: Session,
        granularity: Granularity,
        start: int,
        end: int,
        inclusive_end: bool = False,
    ) -> list[AggregateRecord]:
        model = MODELS[granularity]
        upper = model.timestamp_ms <= end if inclusive_end else model.timestamp_ms < end
        stmt = (
            select(model)
            .where(model.timestamp_ms >= start, upper)
            .order_by(model.timestamp_ms, model.id)
        )
        return [AggregateRecord.from_row(row) for row in session.scalars(stmt)]

    @staticmethod
    def select_last_timestamp(session: Session, granularity: Granularity) -> int | None:
        model = MODELS[granularity]
        return session.scalar(select(func.max(model.timestamp_ms)))

    @staticmethod
    def append(session: Session, granularity: Granularity, record: AggregateRecord) -> int:
        """Insert a record and return its id."""
        row = MODELS[granularity](
            timestamp_ms=record.timestamp_ms,
            step_regularity=record.step_regularity,
            stride_regularity=record.stride_regularity,
            step_symmetry=record.step_symmetry,
            cadence=record.cadence,
        )
        session.add(row)
        session.flush()
        return row.id
