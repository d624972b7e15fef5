"""Shared Pydantic base models and utilities."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    from datetime import timezone

    return datetime.now(timezone.utc)


class ShetrackBase(BaseModel):
    """Base model with shared config for all persisted SheTrack entities.

    Field names are snake_case in Python and camelCase on disk
    (``start_date`` is stored as ``startDate``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    def to_storage(self) -> dict:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
