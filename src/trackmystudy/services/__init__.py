"""Service module exports."""

from . import achievements, analytics, challenges, store, streaks, tracker

__all__ = [
    "achievements",
    "analytics",
    "challenges",
    "store",
    "streaks",
    "tracker",
]
