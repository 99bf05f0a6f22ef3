"""Challenge creation and progress evaluation."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Optional

from ..config import BaseConfig
from ..models.challenge import CHALLENGE_TYPES, Challenge
from ..models.user_data import UserData
from .analytics import percent
from .streaks import qualifying_run

CHALLENGE_PRESETS: dict[str, dict] = {
    "daily": {
        "name": "5-Day Daily Challenge",
        "description": "Study at least 30 minutes every day for 5 days in a row.",
        "target": 5,
    },
    "weekly": {
        "name": "Weekly Challenge: 7 Sessions",
        "description": "Finish 7 study sessions this week.",
        "target": 7,
    },
}


def new_challenge(kind: str, *, now: datetime) -> Challenge:
    """Return a fresh active challenge of the given type."""

    if kind not in CHALLENGE_TYPES:
        raise ValueError(f"Invalid challenge type: {kind}")
    preset = CHALLENGE_PRESETS[kind]
    return Challenge(
        id=uuid.uuid4().hex,
        type=kind,
        progress=0,
        active=True,
        started_at=now,
        completed=False,
        **preset,
    )


def week_start(day: date) -> date:
    """Most recent Sunday on or before ``day``."""

    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def compute_progress(
    challenge: Challenge,
    data: UserData,
    *,
    today: date,
    min_minutes: int = BaseConfig.MIN_DAILY_MINUTES,
) -> int:
    if challenge.type == "daily":
        return qualifying_run(
            data.daily_stats, today=today, limit=challenge.target, min_minutes=min_minutes
        )

    start = week_start(today)
    end = start + timedelta(days=7)
    return sum(
        1 for s in data.study_sessions if s.completed and start <= s.occurred_on < end
    )


def evaluate_challenge(
    challenge: Optional[Challenge],
    data: UserData,
    *,
    now: datetime,
    min_minutes: int = BaseConfig.MIN_DAILY_MINUTES,
) -> Optional[Challenge]:
    """Return an updated challenge when its progress changed, else None.

    Finished or inactive challenges are never re-evaluated.
    """
    if challenge is None or not challenge.active or challenge.completed:
        return None

    progress = compute_progress(challenge, data, today=now.date(), min_minutes=min_minutes)
    if progress == challenge.progress and progress < challenge.target:
        return None

    update: dict = {"progress": progress}
    if progress >= challenge.target:
        update.update(completed=True, active=False, completed_at=now)
    return challenge.model_copy(update=update)


def challenge_percent(challenge: Optional[Challenge]) -> int:
    if challenge is None or not challenge.target:
        return 0
    return min(100, percent(challenge.progress, challenge.target))


__all__ = [
    "CHALLENGE_PRESETS",
    "challenge_percent",
    "compute_progress",
    "evaluate_challenge",
    "new_challenge",
    "week_start",
]
