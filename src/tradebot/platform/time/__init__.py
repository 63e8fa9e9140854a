from .clock import Clock
from .system_clock import SystemClock

__all__ = [
    "Clock",
    "SystemClock",
]
