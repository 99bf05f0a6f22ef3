"""The optional ``Challenge`` aggregate, persisted under its own key."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel

CHALLENGE_TYPES: tuple[str, ...] = ("daily", "weekly")


class Challenge(SQLModel):
    """A time-boxed study challenge; at most one exists at a time."""

    id: str
    name: str
    description: str = ""
    type: str
    target: int
    progress: int = 0
    active: bool = True
    started_at: datetime
    completed: bool = False
    completed_at: Optional[datetime] = None


__all__ = ["CHALLENGE_TYPES", "Challenge"]
