"""Declarative base and shared column types."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID, uuid4

from sqlalchemy import DateTime, MetaData, Numeric, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Surrogate key, generated client side so rows can be linked before flush
UUIDPK = Annotated[UUID, mapped_column(primary_key=True, default=uuid4)]

# Dollar amounts; rates and percentages declare their own precision
Money = Annotated[Decimal, mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))]

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all ORM models.

    UUIDs map to the portable ``Uuid`` type (native on PostgreSQL, CHAR(32) on
    SQLite) and datetimes are always timezone aware.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map = {
        UUID: Uuid(as_uuid=True),
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Mixin for models with created_at timestamp."""

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
