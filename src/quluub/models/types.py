"""Column types shared across models."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum


def string_enum(enum_cls: type[Enum], length: int = 16) -> SAEnum:
    """Store an Enum by value in a plain VARCHAR column with a CHECK constraint."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=True,
        length=length,
        name=f"{enum_cls.__name__.lower()}_enum",
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
