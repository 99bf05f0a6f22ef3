"""TrackMyStudy: study-tracking state and analytics core."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .context import AppContext, create_app_context
from .services.tracker import StudyTracker

__all__ = [
    "AppContext",
    "BaseConfig",
    "DevConfig",
    "StudyTracker",
    "TestConfig",
    "create_app_context",
]
