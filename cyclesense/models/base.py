"""Shared Pydantic base model for CycleSense record schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CycleSenseBase(BaseModel):
    """Base model with shared config for all CycleSense schemas.

    Records arrive from the storage layer with camelCase keys
    (``startDate``, ``periodDays``); both spellings are accepted.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        frozen=True,
    )
