"""Key-value storage table holding serialized aggregates."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel


class StoredRecord(SQLModel, table=True):
    """One serialized blob per key; overwritten wholesale on every write."""

    __tablename__: ClassVar[str] = "kv_store"

    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
