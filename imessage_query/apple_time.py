"""
Conversion between Apple's chat.db timestamps and ordinary time.

The Messages database stores ``message.date`` as nanoseconds since
2001-01-01 00:00:00 UTC (the Cocoa / Core Data reference date).
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

# Seconds between the Unix epoch (1970) and the Apple epoch (2001)
APPLE_EPOCH_OFFSET = 978307200
NANOSECONDS_PER_SECOND = 1_000_000_000
NANOSECONDS_PER_MILLISECOND = 1_000_000
SECONDS_PER_DAY = 24 * 60 * 60

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


class AppleTimeCodec:
    """
    Converts between native chat.db timestamps and Unix time.

    Args:
        clock: Callable returning the current Unix time in seconds.
            Defaults to ``time.time``; tests pass a fixed clock.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.time

    def now_minus(self, days: float) -> int:
        """
        Native timestamp for ``days`` before now.

        ``days`` may be fractional so hour-based callers can pass
        ``hours / 24``.
        """
        now_seconds = int(self.clock())
        duration_ns = round(days * SECONDS_PER_DAY * NANOSECONDS_PER_SECOND)
        return (now_seconds - APPLE_EPOCH_OFFSET) * NANOSECONDS_PER_SECOND - duration_ns

    def hours_back(self, hours: float) -> int:
        return self.now_minus(hours / 24)


def to_display_timestamp(native: int) -> int:
    """Native nanoseconds -> Unix milliseconds (truncating)."""
    return native // NANOSECONDS_PER_MILLISECOND + APPLE_EPOCH_OFFSET * 1000


def from_display_timestamp(millis: int) -> int:
    """Unix milliseconds -> native nanoseconds."""
    return (millis - APPLE_EPOCH_OFFSET * 1000) * NANOSECONDS_PER_MILLISECOND


def from_unix_seconds(seconds: float) -> int:
    return round((seconds - APPLE_EPOCH_OFFSET) * NANOSECONDS_PER_SECOND)


def to_datetime(native: int) -> datetime:
    """Native timestamp as an aware UTC datetime."""
    return datetime.fromtimestamp(to_display_timestamp(native) / 1000, tz=timezone.utc)


def to_iso(native: Optional[int]) -> Optional[str]:
    """ISO-8601 UTC string, or None when there is no timestamp."""
    if native is None:
        return None
    return to_datetime(native).isoformat()


def format_local(native: Optional[int]) -> Optional[str]:
    """Render a native timestamp in local time as ``YYYY-MM-DD HH:MM:SS``."""
    if native is None:
        return None
    return to_datetime(native).astimezone().strftime(DISPLAY_FORMAT)
