"""Waiting list service."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from ulid import ULID

from eventdesk.database import execute_with_retry
from eventdesk.errors import ConflictError, NotFoundError
from eventdesk.models.event import Event
from eventdesk.models.waiting_list import WaitingListEntry, WaitingListStatus
from eventdesk.schemas.waiting_list import WaitingListCreate, WaitingListStatusUpdate

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Already registered on the waiting list for this event"


class WaitingListService:
    """Service for waiting list registrations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def generate_reference() -> str:
        """Generate unique entry reference using ULID."""
        return f"WL-{str(ULID())}"

    async def register(self, data: WaitingListCreate) -> WaitingListEntry:
        """
        Register an email for an event's waiting list.

        Raises:
            NotFoundError: If the event does not exist.
            ConflictError: If the email is already registered for the event.
        """
        event = await self.db.get(Event, data.event)
        if event is None:
            raise NotFoundError("Event not found")

        email = data.email.lower()
        existing = await execute_with_retry(
            self.db,
            select(WaitingListEntry.entry_id).where(
                WaitingListEntry.email == email,
                WaitingListEntry.event_id == data.event,
            ),
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(DUPLICATE_MESSAGE)

        entry = WaitingListEntry(
            reference=self.generate_reference(),
            name=data.name,
            email=email,
            phone="-",
            event_id=data.event,
            status=WaitingListStatus.PENDING,
        )
        self.db.add(entry)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Concurrent registration won the unique constraint
            await self.db.rollback()
            raise ConflictError(DUPLICATE_MESSAGE) from exc

        logger.info(f"Waiting list entry {entry.reference} created for event {data.event}")
        return await self.get_entry(entry.entry_id)

    async def get_entry(self, entry_id: int) -> WaitingListEntry:
        """
        Get an entry with its event.

        Raises:
            NotFoundError: If the entry does not exist.
        """
        result = await execute_with_retry(
            self.db,
            select(WaitingListEntry)
            .options(joinedload(WaitingListEntry.event))
            .where(WaitingListEntry.entry_id == entry_id)
            .execution_options(populate_existing=True),
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Waiting list entry not found")
        return entry

    async def list_for_email(self, email: str) -> list[WaitingListEntry]:
        """Entries registered with ``email`` (case-insensitive), newest first."""
        result = await execute_with_retry(
            self.db,
            select(WaitingListEntry)
            .options(joinedload(WaitingListEntry.event))
            .where(func.lower(WaitingListEntry.email) == email.lower())
            .order_by(WaitingListEntry.registered_at.desc(), WaitingListEntry.entry_id.desc()),
        )
        return list(result.scalars().all())

    async def list_entries(
        self,
        event_id: int | None = None,
        status: WaitingListStatus | None = None,
    ) -> list[WaitingListEntry]:
        """All entries, optionally filtered by event and status, newest first."""
        query = select(WaitingListEntry).options(joinedload(WaitingListEntry.event))

        if event_id is not None:
            query = query.where(WaitingListEntry.event_id == event_id)

        if status is not None:
            query = query.where(WaitingListEntry.status == status)

        query = query.order_by(
            WaitingListEntry.registered_at.desc(), WaitingListEntry.entry_id.desc()
        )
        result = await execute_with_retry(self.db, query)
        return list(result.scalars().all())

    async def update_status(
        self,
        entry_id: int,
        data: WaitingListStatusUpdate,
    ) -> WaitingListEntry:
        """Change an entry's status and, when given, its notes."""
        entry = await self.get_entry(entry_id)
        entry.status = WaitingListStatus(data.status.value)
        if data.notes is not None:
            entry.notes = data.notes

        await self.db.commit()
        logger.info(f"Waiting list entry {entry.reference} set to {entry.status.value}")
        return entry

    async def delete_entry(self, entry_id: int) -> None:
        """Delete an entry by id."""
        entry = await self.get_entry(entry_id)
        await self.db.delete(entry)
        await self.db.commit()
        logger.info(f"Waiting list entry {entry.reference} deleted")

    async def delete_own_entry(self, entry_id: int, email: str) -> None:
        """
        Delete an entry on behalf of the person who registered it.

        Raises:
            NotFoundError: If no entry with that id belongs to ``email``.
        """
        result = await execute_with_retry(
            self.db,
            select(WaitingListEntry).where(
                WaitingListEntry.entry_id == entry_id,
                func.lower(WaitingListEntry.email) == email.lower(),
            ),
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Waiting list entry not found")

        await self.db.delete(entry)
        await self.db.commit()
        logger.info(f"Waiting list entry {entry.reference} withdrawn by registrant")
