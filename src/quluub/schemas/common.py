"""Shared Pydantic schemas and types for common API elements."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quluub.db.time import as_utc

# SQLite hands back naive datetimes; the API always speaks UTC.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON names while accepting snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement carrying a human-readable message."""

    message: str = Field(..., description="Outcome of the operation")
