"""
SVG Holder Backend — Record Store
===================================

What:  Persistence operations over the `svgs` table.
How:   Wraps one AsyncSession; every method is a single query (plus a flush
       for writes). Commit/rollback belongs to the caller's unit of work.
Who:   Used by SvgService inside `Database.session()`.

Absence is reported as a value, not an exception:
    find_by_id / update_by_id → None
    delete_by_id              → False
Malformed identifiers are treated exactly like unknown ones.
"""

import logging
import uuid
from datetime import timedelta
from typing import List, Optional, Union

from sqlalchemy import delete, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.svg import SvgRecord, utcnow

logger = logging.getLogger(__name__)

SvgId = Union[str, uuid.UUID]

LIKE_ESCAPE = "\\"


def parse_svg_id(svg_id: SvgId) -> Optional[uuid.UUID]:
    """Coerce a path/query identifier to a UUID; None when it is not one."""
    if isinstance(svg_id, uuid.UUID):
        return svg_id
    try:
        return uuid.UUID(str(svg_id).strip())
    except (ValueError, TypeError, AttributeError):
        return None


def escape_like(query: str) -> str:
    """Escape LIKE wildcards so the query matches as a literal substring."""
    return (
        query.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class SvgStore:
    """
    Record store bound to one session.

    Query Patterns:
        - List:   SELECT ... ORDER BY created_at DESC
        - Get:    primary key lookup
        - Search: WHERE name ILIKE :p OR description ILIKE :p ORDER BY created_at DESC
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert(self, record: SvgRecord) -> SvgRecord:
        """Assign id and timestamps, persist, and return the record."""
        now = utcnow()
        record.id = uuid.uuid4()
        record.created_at = now
        record.updated_at = now
        self.session.add(record)
        await self.session.flush()
        logger.info("SVG record inserted: %s (%d bytes)", record.id, record.file_size)
        return record

    async def list_all(self) -> List[SvgRecord]:
        """All records, newest first. Runs a fresh query on every call."""
        result = await self.session.execute(
            select(SvgRecord).order_by(desc(SvgRecord.created_at))
        )
        return list(result.scalars().all())

    async def find_by_id(self, svg_id: SvgId) -> Optional[SvgRecord]:
        record_id = parse_svg_id(svg_id)
        if record_id is None:
            logger.debug("Malformed SVG id: %r", svg_id)
            return None
        return await self.session.get(SvgRecord, record_id)

    async def update_by_id(
        self,
        svg_id: SvgId,
        name: str,
        description: str,
    ) -> Optional[SvgRecord]:
        """
        Replace name and description and refresh updated_at.

        content, file_size and created_at are never touched. updated_at is
        kept strictly increasing even when the clock has not advanced since
        the previous write.
        """
        record = await self.find_by_id(svg_id)
        if record is None:
            return None

        now = utcnow()
        if now <= record.updated_at:
            now = record.updated_at + timedelta(microseconds=1)

        record.name = name
        record.description = description
        record.updated_at = now
        await self.session.flush()
        logger.info("SVG record updated: %s", record.id)
        return record

    async def delete_by_id(self, svg_id: SvgId) -> bool:
        """Hard delete; True only if a record was actually removed."""
        record_id = parse_svg_id(svg_id)
        if record_id is None:
            return False
        result = await self.session.execute(
            delete(SvgRecord).where(SvgRecord.id == record_id)
        )
        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info("SVG record deleted: %s", record_id)
        return deleted

    async def search(self, query: str) -> List[SvgRecord]:
        """
        Case-insensitive substring match on name OR description, newest first.

        An empty query matches every record.
        """
        pattern = f"%{escape_like(query)}%"
        result = await self.session.execute(
            select(SvgRecord)
            .where(
                or_(
                    SvgRecord.name.ilike(pattern, escape=LIKE_ESCAPE),
                    SvgRecord.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
            .order_by(desc(SvgRecord.created_at))
        )
        return list(result.scalars().all())
