"""
SVG Holder Backend — SVG Service (Business Logic Orchestrator)
================================================================

What:  The six CRUD+search operations, composed from SvgValidator and SvgStore.
How:   Each call validates first, then opens one session from the Database it
       was constructed with, runs the store operation, and converts ORM rows
       into SvgResponse models before the session closes.
Who:   Called by route handlers; the instance lives on `app.state.svg_service`.

Outcome classes:
    ValidationError → client input is malformed (400)
    NotFoundError   → the referenced id has no record (404)
    InternalError   → the store failed; original exception kept as `cause` (500)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from app.database import Database
from app.exceptions import InternalError, NotFoundError, SvgHolderError, ValidationError
from app.models.svg import SvgRecord
from app.schemas.svg import SvgResponse
from app.services.svg_store import SvgId, SvgStore
from app.services.validation import SvgValidator, UploadCandidate

logger = logging.getLogger(__name__)

SEARCH_REQUIRED_MESSAGE = "Search query is required"


class SvgService:
    """
    Business logic layer for SVG records.

    Responsibilities:
        - create_svg():  validate upload → insert
        - list_svgs():   every record, newest first
        - get_svg():     one record or NotFoundError
        - search_svgs(): non-blank query → case-insensitive substring search
        - update_svg():  validate name/description → update
        - delete_svg():  hard delete or NotFoundError
    """

    def __init__(self, database: Database, validator: Optional[SvgValidator] = None):
        self.database = database
        self.validator = validator or SvgValidator(database.config.max_file_size)

    @asynccontextmanager
    async def _store(self, action: str) -> AsyncIterator[SvgStore]:
        """
        One unit of work against the store.

        Application errors pass through untouched; anything else raised by
        the session or driver becomes InternalError("Failed to <action>").
        """
        try:
            async with self.database.session() as session:
                yield SvgStore(session)
        except SvgHolderError:
            raise
        except Exception as e:
            logger.error("Store failure while trying to %s: %s", action, str(e), exc_info=True)
            raise InternalError(message=f"Failed to {action}", cause=e)

    async def create_svg(
        self,
        name: Optional[str],
        description: Optional[str],
        upload: Optional[UploadCandidate],
    ) -> SvgResponse:
        """
        Validate an upload and persist it as a new record.

        Raises:
            ValidationError: any upload rule failed (nothing is written)
            InternalError:   the insert failed
        """
        validated = self.validator.validate_create(name, description, upload)

        async with self._store("upload SVG") as store:
            record = await store.insert(
                SvgRecord(
                    name=validated.name,
                    description=validated.description,
                    content=validated.content,
                    file_size=validated.file_size,
                    original_name=validated.original_name,
                )
            )
            return SvgResponse.model_validate(record)

    async def list_svgs(self) -> List[SvgResponse]:
        async with self._store("fetch SVGs") as store:
            records = await store.list_all()
            return [SvgResponse.model_validate(r) for r in records]

    async def get_svg(self, svg_id: SvgId) -> SvgResponse:
        async with self._store("fetch SVG") as store:
            record = await store.find_by_id(svg_id)
            if record is None:
                raise NotFoundError(resource="SVG", resource_id=str(svg_id))
            return SvgResponse.model_validate(record)

    async def search_svgs(self, query: Optional[str]) -> List[SvgResponse]:
        """
        Search name and description.

        A missing or empty query is rejected here; the store itself would
        treat an empty pattern as match-all. Whitespace is searched as given.
        """
        if not query:
            raise ValidationError(message=SEARCH_REQUIRED_MESSAGE, field="q")

        async with self._store("search SVGs") as store:
            records = await store.search(query)
            logger.debug("Search %r matched %d records", query, len(records))
            return [SvgResponse.model_validate(r) for r in records]

    async def update_svg(
        self,
        svg_id: SvgId,
        name: Optional[str],
        description: Optional[str],
    ) -> SvgResponse:
        """Change name/description only; content and created_at are preserved."""
        clean_name, clean_description = self.validator.validate_update(name, description)

        async with self._store("update SVG") as store:
            record = await store.update_by_id(svg_id, clean_name, clean_description)
            if record is None:
                raise NotFoundError(resource="SVG", resource_id=str(svg_id))
            return SvgResponse.model_validate(record)

    async def delete_svg(self, svg_id: SvgId) -> None:
        async with self._store("delete SVG") as store:
            deleted = await store.delete_by_id(svg_id)
            if not deleted:
                raise NotFoundError(resource="SVG", resource_id=str(svg_id))
