"""
Base model class for all SQLAlchemy models.

WHY: Centralizing the declarative base and the clock used for timestamps
keeps every table and every write on the same conventions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Type, TypeVar

from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import DeclarativeBase

from helpdesk.core.exceptions import InvalidEnumValueError


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    WHY: DeclarativeBase provides the foundation for SQLAlchemy 2.0 models
    with improved type hints and async support.
    """

    pass


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    WHY: Columns are plain DateTime (no timezone), so every timestamp is
    stored as naive UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Largest value an Integer primary key can hold (PostgreSQL int4)
MAX_ID = 2**31 - 1


EnumType = TypeVar("EnumType", bound=Enum)


def enum_column(enum_cls: Type[Enum], name: str) -> SQLEnum:
    """
    Build an SQLAlchemy Enum type that persists member values.

    WHY: SQLAlchemy stores enum member *names* by default ("IN_PROGRESS");
    the API and the database both use the lowercase values ("in_progress").
    """
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


def coerce_enum(enum_cls: Type[EnumType], value: Any, field: str) -> EnumType:
    """
    Convert a raw value into a member of a closed set.

    Args:
        enum_cls: Target enum class
        value: Enum member or its string value
        field: Field name reported in the error

    Returns:
        The enum member

    Raises:
        InvalidEnumValueError: If value is not a member of the set
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidEnumValueError(
            message=f"Invalid value for {field}",
            field=field,
            value=str(value),
            allowed=[m.value for m in enum_cls],
        )
