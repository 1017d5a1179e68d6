"""Calendar bucket boundaries for hourly, daily and monthly rollups."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


class BucketCalendar:
    """
    Start of the hour, day or month containing a timestamp.

    Timestamps are milliseconds since the epoch. Boundaries are computed in an
    explicit timezone (UTC unless configured otherwise), so results do not
    depend on the host's local time.
    """

    def __init__(self, tz: str = "UTC"):
        self.tz_name = tz
        self.tz = timezone.utc if tz.upper() == "UTC" else ZoneInfo(tz)

    def _to_datetime(self, timestamp_ms: int) -> datetime:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=self.tz)

    @staticmethod
    def _to_millis(dt: datetime) -> int:
        return int(dt.timestamp() * 1000)

    def hour_start(self, timestamp_ms: int) -> int:
        dt = self._to_datetime(timestamp_ms)
        return self._to_millis(dt.replace(minute=0, second=0, microsecond=0))

    def day_start(self, timestamp_ms: int) -> int:
        dt = self._to_datetime(timestamp_ms)
        return self._to_millis(dt.replace(hour=0, minute=0, second=0, microsecond=0))

    def month_start(self, timestamp_ms: int) -> int:
        """First day of the containing month, at midnight."""
        dt = self._to_datetime(timestamp_ms)
        return self._to_millis(dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0))
