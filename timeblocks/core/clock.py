# timeblocks/core/clock.py

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    # Naive UTC, matching the DateTime columns.
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)
