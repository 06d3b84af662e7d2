"""
SVG Holder Backend — SvgRecord SQLAlchemy Model
=================================================

What:  ORM model representing the `svgs` table.
Who:   Used by SvgStore for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key, generated in Python (portable across PostgreSQL and SQLite)
    - name, description, original_name, content: unbounded TEXT (no length cap)
    - content: the uploaded SVG markup, stored verbatim
    - created_at / updated_at: UTC, timezone-aware
    - Index on created_at DESC: every list and search is ordered newest first
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UTCDateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SvgRecord(Base):
    """
    One uploaded SVG file with its metadata.

    Lifecycle:
        1. Created by SvgStore.insert() after validation passed
        2. Only name/description change afterwards (SvgStore.update_by_id)
        3. Hard-deleted by SvgStore.delete_by_id()

    Invariant: created_at <= updated_at.
    """

    __tablename__ = "svgs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier, assigned at creation",
    )

    name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Display name (trimmed, non-empty)",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Free-text description (trimmed, non-empty)",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="SVG markup exactly as uploaded",
    )

    file_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Size of the original upload in bytes",
    )

    original_name: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Filename at upload time",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        comment="When this record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        comment="When name/description last changed (UTC)",
    )

    __table_args__ = (
        Index("idx_svgs_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<SvgRecord(id={self.id}, name='{self.name}', "
            f"created_at='{self.created_at}')>"
        )
