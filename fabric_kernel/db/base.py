"""
Module: fabric_kernel.db.base
Responsibility: Declarative base for the SQLAlchemy models backing the record
    store.  Provides the string-UUID primary key convention and audit
    timestamps.
Architecture position: Kernel > DB.  Lowest-level import target for models.
    MUST NOT import from models/, domain/ or outer layers.
"""

from datetime import datetime
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """
    Declarative base for all models.

    Guarantees:
        - id is a uuid4 string, assigned on insert when not supplied.
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_new_id,
    )


class TimestampedBase(Base):
    """Abstract base adding created_at / updated_at columns."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        onupdate=func.now(),
    )
