"""Property event log and timeline assembly."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.document import Document
from passport.models.enums import FlagStatus
from passport.models.event import PropertyEvent
from passport.models.flag import PropertyFlag
from passport.models.media import Media
from passport.models.property import Property

logger = logging.getLogger(__name__)

COMMENT_EVENT = "comment.added"

# Free-text note categories and the event type each one is recorded as
NOTE_CATEGORY_EVENTS = {
    "legal": "note_added",
    "survey": "note_added",
    "agent": "note_added",
    "general": "note_added",
    "doc": "document_uploaded",
}


def build_event(
    property_id: UUID,
    actor_user_id: Optional[UUID],
    event_type: str,
    payload: Optional[dict[str, Any]] = None,
) -> PropertyEvent:
    return PropertyEvent(
        property_id=property_id,
        actor_user_id=actor_user_id,
        event_type=event_type,
        event_payload=payload or {},
    )


async def record_event(
    db: AsyncSession,
    property_id: UUID,
    actor_user_id: Optional[UUID],
    event_type: str,
    payload: Optional[dict[str, Any]] = None,
) -> Optional[PropertyEvent]:
    """Commit an event after the primary write has already been committed.

    Failures are logged and swallowed: the write the event describes stands.
    """
    event = build_event(property_id, actor_user_id, event_type, payload)
    try:
        db.add(event)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"[EVENTS] Failed to record {event_type} for property {property_id}: {e}")
        return None
    return event


@dataclass
class TimelineEntry:
    id: str
    kind: str
    title: str
    occurred_at: datetime
    actor_user_id: Optional[UUID] = None
    details: dict[str, Any] = field(default_factory=dict)


def event_to_entry(event: PropertyEvent) -> TimelineEntry:
    payload = event.event_payload or {}
    message = payload.get("message") if isinstance(payload.get("message"), str) else None
    return TimelineEntry(
        id=f"event-{event.id}",
        kind="event",
        title=message or event.event_type,
        occurred_at=event.created_at,
        actor_user_id=event.actor_user_id,
        details={"event_type": event.event_type, "payload": payload},
    )


async def build_timeline(db: AsyncSession, prop: Property) -> list[TimelineEntry]:
    """Merge the property's evidence rows into one newest-first timeline."""
    entries: list[TimelineEntry] = [
        TimelineEntry(
            id=f"property-{prop.id}",
            kind="property",
            title="Passport created",
            occurred_at=prop.created_at,
            actor_user_id=prop.created_by_user_id,
            details={"address": prop.display_address},
        )
    ]

    events = await db.execute(select(PropertyEvent).where(PropertyEvent.property_id == prop.id))
    entries.extend(event_to_entry(event) for event in events.scalars())

    documents = await db.execute(
        select(Document).where(Document.property_id == prop.id, Document.deleted_at.is_(None))
    )
    for doc in documents.scalars():
        entries.append(
            TimelineEntry(
                id=f"document-{doc.id}",
                kind="document",
                title=f"Document added: {doc.title}",
                occurred_at=doc.created_at,
                actor_user_id=doc.uploaded_by_user_id,
                details={"document_type": doc.document_type.value, "version": doc.version},
            )
        )

    media = await db.execute(
        select(Media).where(Media.property_id == prop.id, Media.deleted_at.is_(None))
    )
    for item in media.scalars():
        entries.append(
            TimelineEntry(
                id=f"media-{item.id}",
                kind="media",
                title=f"{item.media_type.value.capitalize()} added: {item.title}",
                occurred_at=item.created_at,
                actor_user_id=item.uploaded_by_user_id,
                details={"media_type": item.media_type.value},
            )
        )

    flags = await db.execute(
        select(PropertyFlag).where(PropertyFlag.property_id == prop.id, PropertyFlag.deleted_at.is_(None))
    )
    for flag in flags.scalars():
        entries.append(
            TimelineEntry(
                id=f"flag-{flag.id}",
                kind="flag",
                title=f"Flag raised: {flag.flag_type.value}",
                occurred_at=flag.created_at,
                actor_user_id=flag.created_by_user_id,
                details={"severity": flag.severity.value, "status": flag.status.value},
            )
        )
        if flag.status in (FlagStatus.RESOLVED, FlagStatus.DISMISSED) and flag.resolved_at:
            entries.append(
                TimelineEntry(
                    id=f"flag-{flag.id}-{flag.status.value}",
                    kind="flag",
                    title=f"Flag {flag.status.value}: {flag.flag_type.value}",
                    occurred_at=flag.resolved_at,
                    actor_user_id=flag.resolved_by_user_id,
                    details={"severity": flag.severity.value, "status": flag.status.value},
                )
            )

    entries.sort(key=lambda entry: entry.occurred_at, reverse=True)
    return entries
