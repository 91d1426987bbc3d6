"""Events router - property timeline, notes and comments."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.event import PropertyEvent
from passport.policies.roles import UserSession
from passport.schemas.event import (
    CommentCreate,
    EventCreate,
    EventResponse,
    NoteCreate,
    TimelineEntryResponse,
)
from passport.services.access import editable_property, viewable_property
from passport.services.events import (
    COMMENT_EVENT,
    NOTE_CATEGORY_EVENTS,
    build_timeline,
    event_to_entry,
    record_event,
)

router = APIRouter(prefix="/properties/{property_id}", tags=["events"])


def _recorded(event) -> PropertyEvent:
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create event",
        )
    return event


@router.get("/timeline", response_model=List[TimelineEntryResponse])
async def get_timeline(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Everything that happened to a property, newest first."""
    prop = await viewable_property(db, current_user, property_id)
    entries = await build_timeline(db, prop)
    return [TimelineEntryResponse.model_validate(entry) for entry in entries]


@router.get("/events", response_model=List[EventResponse])
async def list_events(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await viewable_property(db, current_user, property_id)
    result = await db.execute(
        select(PropertyEvent)
        .where(PropertyEvent.property_id == prop.id)
        .order_by(PropertyEvent.created_at.desc())
    )
    return [EventResponse.model_validate(event) for event in result.scalars()]


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    property_id: UUID,
    data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await editable_property(db, current_user, property_id, message="No permission")
    event = _recorded(await record_event(db, prop.id, current_user.id, data.event_type, data.payload))
    return EventResponse.model_validate(event)


@router.post("/notes", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def add_note(
    property_id: UUID,
    data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """File a note; the category decides which event type it is recorded as."""
    prop = await editable_property(db, current_user, property_id)
    event_type = NOTE_CATEGORY_EVENTS.get(data.category, "note_added")
    event = _recorded(
        await record_event(
            db, prop.id, current_user.id, event_type,
            {
                "title": data.title,
                "category": data.category,
                "note": data.description,
                "message": data.description or data.title,
            },
        )
    )
    return EventResponse.model_validate(event)


@router.post("/comments", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    property_id: UUID,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    prop = await editable_property(db, current_user, property_id, message="No permission to comment")
    event = _recorded(
        await record_event(
            db, prop.id, current_user.id, COMMENT_EVENT,
            {"target_id": data.target_id, "target_type": data.target_type, "message": data.message},
        )
    )
    return EventResponse.model_validate(event)


@router.get("/comments", response_model=List[TimelineEntryResponse])
async def list_comments(
    property_id: UUID,
    target_type: str = Query(..., min_length=1),
    target_id: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Comments attached to one target (a document, flag, ...) on the property."""
    prop = await viewable_property(db, current_user, property_id)
    result = await db.execute(
        select(PropertyEvent)
        .where(PropertyEvent.property_id == prop.id, PropertyEvent.event_type == COMMENT_EVENT)
        .order_by(PropertyEvent.created_at.desc())
    )
    return [
        TimelineEntryResponse.model_validate(event_to_entry(event))
        for event in result.scalars()
        if (event.event_payload or {}).get("target_id") == target_id
        and (event.event_payload or {}).get("target_type") == target_type
    ]
