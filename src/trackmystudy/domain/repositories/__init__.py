"""Repository protocol definitions for domain layer."""

from .kv import KeyValueStore

__all__ = ["KeyValueStore"]
