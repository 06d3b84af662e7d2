"""
SVG Holder — Gallery View-Model
=================================

What:  In-memory mirror of the record list plus the views derived from it.
How:   GalleryState wraps an SvgApiClient. Every state transition fetches from
       the server and replaces local state; the server stays the source of
       truth and nothing is changed optimistically.

State:
    records          current list (newest first, as the server returns it)
    search_query     text of the last search
    selected         record open in the detail view, or None
    loading          a list fetch is in flight
    error            message of the last failure, or None
    pending_deletes  ids with a delete request in flight

Transitions:
    load()       fetch all → replace list
    search(q)    non-blank → fetch filtered list; blank → load()
    delete(id)   success → drop locally (and deselect); failure → keep, set error
    retry()      repeat the last list fetch (user-triggered only)
    refresh_selected()  re-read the open record from the server
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Set

from app.client.api_client import ApiError, SvgApiClient, check_svg_file
from app.schemas.svg import SvgResponse

logger = logging.getLogger(__name__)


@dataclass
class DateGroup:
    """Records uploaded on one UTC calendar day."""

    date: date
    label: str
    records: List[SvgResponse] = field(default_factory=list)


def format_file_size(num_bytes: int) -> str:
    """Human-readable size: 512 B, 1.5 KB, 2.0 MB."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


def relative_day_label(day: date, today: date) -> str:
    """Today, Yesterday, N days/weeks/months ago, or 'Month YYYY' past a year."""
    diff_days = abs((today - day).days)
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days <= 7:
        return f"{diff_days} days ago"
    if diff_days <= 30:
        weeks = math.ceil(diff_days / 7)
        return f"{weeks} week{'s' if weeks != 1 else ''} ago"
    if diff_days <= 365:
        months = math.ceil(diff_days / 30)
        return f"{months} month{'s' if months != 1 else ''} ago"
    return day.strftime("%B %Y")


def upload_day(record: SvgResponse) -> date:
    created = record.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.astimezone(timezone.utc).date()


def group_by_date(records: List[SvgResponse], today: Optional[date] = None) -> List[DateGroup]:
    """
    Bucket records by the calendar day of createdAt (UTC).

    Groups are ordered newest day first; records inside a group newest first.
    """
    today = today or datetime.now(timezone.utc).date()
    buckets: Dict[date, List[SvgResponse]] = {}
    for record in records:
        buckets.setdefault(upload_day(record), []).append(record)

    return [
        DateGroup(
            date=day,
            label=relative_day_label(day, today),
            records=sorted(buckets[day], key=lambda r: r.created_at, reverse=True),
        )
        for day in sorted(buckets, reverse=True)
    ]


class GalleryState:
    """
    View-model for the gallery page.

    Example:
        async with SvgApiClient(base_url) as api:
            gallery = GalleryState(api)
            await gallery.load()
            for group in gallery.grouped():
                ...
    """

    def __init__(self, api: SvgApiClient):
        self.api = api
        self.records: List[SvgResponse] = []
        self.search_query: str = ""
        self.selected: Optional[SvgResponse] = None
        self.loading: bool = False
        self.error: Optional[str] = None
        self.pending_deletes: Set[str] = set()
        self._last_fetch: Optional[Callable[[], Awaitable[None]]] = None

    # ── List fetches ──────────────────────────────────────────────────────

    async def _fetch_list(
        self,
        fetch: Callable[[], Awaitable[List[SvgResponse]]],
        fallback_message: str,
    ) -> None:
        self.loading = True
        self.error = None
        try:
            self.records = await fetch()
        except ApiError as e:
            logger.warning("%s: %s", fallback_message, e.message)
            self.error = e.message or fallback_message
        finally:
            self.loading = False

    async def load(self) -> None:
        """Fetch every record and replace the local list."""
        self._last_fetch = self.load
        await self._fetch_list(self.api.list_svgs, "Failed to load SVGs")

    async def search(self, text: str) -> None:
        """Filter on the server; blank text falls back to the full list."""
        self.search_query = text
        query = text.strip()
        if not query:
            await self.load()
            return

        async def again() -> None:
            await self.search(text)

        self._last_fetch = again
        await self._fetch_list(lambda: self.api.search_svgs(query), "Search failed")

    async def retry(self) -> None:
        """Repeat the last list fetch; a first call behaves like load()."""
        await (self._last_fetch or self.load)()

    # ── Selection ─────────────────────────────────────────────────────────

    def find(self, svg_id: str) -> Optional[SvgResponse]:
        return next((r for r in self.records if str(r.id) == str(svg_id)), None)

    async def select(self, svg_id: str) -> Optional[SvgResponse]:
        """Open a record in the detail view, fetching it if it is not listed."""
        record = self.find(svg_id)
        if record is None:
            try:
                record = await self.api.get_svg(str(svg_id))
            except ApiError as e:
                self.error = e.message
                return None
        self.selected = record
        return record

    def clear_selection(self) -> None:
        self.selected = None

    async def refresh_selected(self) -> Optional[SvgResponse]:
        """Re-read the selected record; it is deselected if the server no longer has it."""
        if self.selected is None:
            return None
        try:
            record = await self.api.get_svg(str(self.selected.id))
        except ApiError as e:
            self.error = e.message
            return self.selected

        if record is None:
            self.records = [r for r in self.records if r.id != self.selected.id]
        else:
            self.records = [record if r.id == record.id else r for r in self.records]
        self.selected = record
        return record

    # ── Mutations ─────────────────────────────────────────────────────────

    async def delete(self, svg_id: str) -> bool:
        """
        Delete a record on the server, then drop it locally.

        Returns False (list unchanged, error set) when the server refuses
        or cannot be reached.
        """
        key = str(svg_id)
        if key in self.pending_deletes:
            return False

        self.pending_deletes.add(key)
        try:
            await self.api.delete_svg(key)
        except ApiError as e:
            logger.warning("Failed to delete SVG %s: %s", key, e.message)
            self.error = "Failed to delete SVG"
            return False
        finally:
            self.pending_deletes.discard(key)

        self.records = [r for r in self.records if str(r.id) != key]
        if self.selected is not None and str(self.selected.id) == key:
            self.selected = None
        return True

    async def upload(
        self,
        name: str,
        description: str,
        filename: str,
        content: bytes,
        content_type: str = "image/svg+xml",
    ) -> Optional[SvgResponse]:
        """Pre-check, upload, then reload the list. None when anything failed."""
        problem = check_svg_file(filename, content, content_type)
        if problem is None and (not name.strip() or not description.strip()):
            problem = "Name, description, and SVG file are required"
        if problem is not None:
            self.error = problem
            return None

        try:
            record = await self.api.upload_svg(name, description, filename, content, content_type)
        except ApiError as e:
            self.error = e.message
            return None

        await self.load()
        return record

    async def rename(self, svg_id: str, name: str, description: str) -> Optional[SvgResponse]:
        """Update name/description and swap the refreshed record in locally."""
        try:
            updated = await self.api.update_svg(str(svg_id), name, description)
        except ApiError as e:
            self.error = e.message
            return None

        self.records = [updated if str(r.id) == str(svg_id) else r for r in self.records]
        if self.selected is not None and str(self.selected.id) == str(svg_id):
            self.selected = updated
        return updated

    # ── Derived views ─────────────────────────────────────────────────────

    def grouped(self, today: Optional[date] = None) -> List[DateGroup]:
        return group_by_date(self.records, today)
