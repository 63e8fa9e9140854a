from __future__ import annotations

from datetime import datetime, timezone

from .clock import Clock


class SystemClock(Clock):
    """
    SystemClock — platform implementation of `Clock` backed by system UTC time.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
