"""Concrete repository implementations using SQLModel."""

from .kv import SQLModelKeyValueStore

__all__ = ["SQLModelKeyValueStore"]
