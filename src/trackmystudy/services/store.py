"""State store for the two persisted aggregates.

``UserDataStore`` owns the canonical in-memory ``UserData`` and ``Challenge``
snapshots. Each aggregate is serialized to JSON and written wholesale under
its own key; ``save_user_data`` is the only durable write path for
``UserData``.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..config import BaseConfig
from ..domain.repositories.kv import KeyValueStore
from ..logging_config import get_logger
from ..models.challenge import Challenge
from ..models.user_data import UserData

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class UserDataStore:
    """Load, merge, save and clear the persisted aggregates."""

    def __init__(
        self,
        kv_store: KeyValueStore,
        *,
        config: BaseConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.kv_store = kv_store
        self.user_data_key = config.USER_DATA_KEY if config else BaseConfig.USER_DATA_KEY
        self.challenge_key = config.CHALLENGE_KEY if config else BaseConfig.CHALLENGE_KEY
        self._clock = clock or datetime.now
        self._user_data = self.defaults()
        self._challenge: Optional[Challenge] = None

    @property
    def user_data(self) -> UserData:
        return self._user_data

    @property
    def challenge(self) -> Optional[Challenge]:
        return self._challenge

    def defaults(self) -> UserData:
        """Return the hard-coded default template stamped with the current time."""
        return UserData(last_updated=self._clock())

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self) -> UserData:
        """Hydrate both aggregates from the key-value store.

        Stored user data is merged over the defaults so fields missing from an
        older blob are filled in. Unreadable blobs fall back to defaults.
        """
        self._user_data = self._load_user_data()
        self._challenge = self._load_challenge()
        return self._user_data

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.kv_store.get(key)
        except SQLAlchemyError:
            logger.exception("Failed to read stored record", extra={"key": key})
            return None

    def _load_user_data(self) -> UserData:
        raw = self._read(self.user_data_key)
        if raw is None:
            return self.defaults()
        try:
            stored = json.loads(raw)
            if not isinstance(stored, dict):
                raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
            merged = self.defaults().model_dump()
            merged.update(
                {
                    key: value
                    for key, value in stored.items()
                    if key in UserData.model_fields and value is not None
                }
            )
            return UserData.model_validate(merged)
        except (ValidationError, ValueError):
            logger.exception("Error parsing stored user data; using defaults")
            return self.defaults()

    def _load_challenge(self) -> Optional[Challenge]:
        raw = self._read(self.challenge_key)
        if raw is None:
            return None
        try:
            return Challenge.model_validate_json(raw)
        except ValidationError:
            logger.exception("Error parsing stored challenge; ignoring it")
            return None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def _write(self, key: str, value: str) -> None:
        try:
            self.kv_store.set(key, value)
        except SQLAlchemyError:
            logger.exception("Failed to persist record", extra={"key": key})

    def _remove(self, key: str) -> None:
        try:
            self.kv_store.delete(key)
        except SQLAlchemyError:
            logger.exception("Failed to delete record", extra={"key": key})

    def save_user_data(self, **changes: Any) -> UserData:
        """Shallow-merge ``changes`` over the current state, stamp and persist it.

        Raises:
            ValueError: if a key is not a ``UserData`` field
        """
        unknown = set(changes) - set(UserData.model_fields)
        if unknown:
            raise ValueError(f"Unknown user data fields: {', '.join(sorted(unknown))}")

        merged: dict[str, Any] = {
            name: getattr(self._user_data, name) for name in UserData.model_fields
        }
        merged.update(changes)
        merged["last_updated"] = self._clock()

        updated = UserData.model_validate(merged)
        self._user_data = updated
        self._write(self.user_data_key, updated.model_dump_json())
        return updated

    def clear_user_data(self) -> UserData:
        """Reset to the default template and drop the persisted blob."""
        self._remove(self.user_data_key)
        self._user_data = self.defaults()
        logger.info("User data cleared")
        return self._user_data

    def save_challenge(self, challenge: Challenge) -> Challenge:
        self._challenge = challenge
        self._write(self.challenge_key, challenge.model_dump_json())
        return challenge

    def clear_challenge(self) -> None:
        self._remove(self.challenge_key)
        self._challenge = None


__all__ = ["Clock", "UserDataStore"]
