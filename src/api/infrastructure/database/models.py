"""SQLAlchemy declarative base for the tenant registry tables.

The registry tables are owned by another service; these models only
describe them for reads. Migrations are not managed here, so column
defaults live on the server side.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, MetaData, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

REGISTRY_NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for registry ORM models."""

    metadata = MetaData(naming_convention=REGISTRY_NAMING_CONVENTION)
    type_annotation_map = {str: String(255)}


class TimestampMixin:
    """Audit columns maintained by the registry's owner."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
