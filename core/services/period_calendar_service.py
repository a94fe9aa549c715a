from __future__ import annotations

from typing import Dict

from core.domain.errors import UnsupportedPeriod

PERIOD_SECONDS: Dict[str, int] = {
    "1m": 60,
    "5m": 300,
    "15m": 900,
    "1h": 3600,
    "4h": 14400,
    "1d": 86400,
    "1w": 604800,
}


class PeriodCalendarService:
    """
    Maps timestamps to left-aligned, fixed-width period buckets.

    Buckets are aligned on the Unix epoch, so "1w" buckets start on Thursdays
    00:00 UTC (1970-01-01 was a Thursday).
    """

    @staticmethod
    def width_seconds(period_id: str) -> int:
        key = (period_id or "").strip().lower()
        try:
            return PERIOD_SECONDS[key]
        except KeyError:
            raise UnsupportedPeriod(
                f"Unsupported period: {period_id}. Supported: {', '.join(PERIOD_SECONDS)}"
            ) from None

    @staticmethod
    def bucket_start_for_width(timestamp_sec: int, width_seconds: int) -> int:
        w = int(width_seconds)
        return (int(timestamp_sec) // w) * w

    @classmethod
    def bucket_start(cls, timestamp_sec: int, period_id: str) -> int:
        """
        Return the start (epoch seconds) of the bucket containing timestamp_sec.
        """
        return cls.bucket_start_for_width(timestamp_sec, cls.width_seconds(period_id))

    @staticmethod
    def normalize(period_id: str) -> str:
        """
        Canonical (lower-cased) period id; raises UnsupportedPeriod when unknown.
        """
        key = (period_id or "").strip().lower()
        PeriodCalendarService.width_seconds(key)
        return key
