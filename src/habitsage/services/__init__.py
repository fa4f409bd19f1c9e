"""Service module exports."""

from . import completion, habits, periods, recording, reports, streaks

__all__ = [
    "completion",
    "habits",
    "periods",
    "recording",
    "reports",
    "streaks",
]
