"""Watchlist router - properties the caller is following."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.property import Property
from passport.models.watchlist import WatchlistEntry
from passport.policies.roles import UserSession
from passport.schemas.base import ActionResult
from passport.schemas.watchlist import WatchlistAdd, WatchlistResponse, WatchlistUpdate
from passport.services.access import viewable_property

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


async def _get_entry(db: AsyncSession, user_id: UUID, property_id: UUID) -> WatchlistEntry:
    result = await db.execute(
        select(WatchlistEntry).where(
            WatchlistEntry.user_id == user_id,
            WatchlistEntry.property_id == property_id,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise LookupError("Watchlist entry not found")
    return entry


@router.get("", response_model=List[WatchlistResponse])
async def list_watchlist(
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    result = await db.execute(
        select(WatchlistEntry, Property.display_address)
        .join(Property, WatchlistEntry.property_id == Property.id)
        .where(WatchlistEntry.user_id == current_user.id, Property.deleted_at.is_(None))
        .order_by(WatchlistEntry.created_at.desc())
    )
    items = []
    for entry, address in result.all():
        item = WatchlistResponse.model_validate(entry)
        item.address = address
        items.append(item)
    return items


@router.post("", response_model=WatchlistResponse, status_code=status.HTTP_201_CREATED)
async def add_to_watchlist(
    data: WatchlistAdd,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    """Follow a property. Adding it again refreshes notes and alert settings."""
    prop = await viewable_property(db, current_user, data.property_id)

    result = await db.execute(
        select(WatchlistEntry).where(
            WatchlistEntry.user_id == current_user.id,
            WatchlistEntry.property_id == prop.id,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        entry = WatchlistEntry(user_id=current_user.id, property_id=prop.id)
        db.add(entry)
    entry.notes = data.notes
    entry.alert_on_changes = data.alert_on_changes

    await db.commit()
    await db.refresh(entry)

    item = WatchlistResponse.model_validate(entry)
    item.address = prop.display_address
    return item


@router.patch("/{property_id}", response_model=WatchlistResponse)
async def update_watchlist_entry(
    property_id: UUID,
    data: WatchlistUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    entry = await _get_entry(db, current_user.id, property_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(entry, field, value)
    await db.commit()
    await db.refresh(entry)
    return WatchlistResponse.model_validate(entry)


@router.delete("/{property_id}", response_model=ActionResult)
async def remove_from_watchlist(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
):
    entry = await _get_entry(db, current_user.id, property_id)
    await db.delete(entry)
    await db.commit()
    return ActionResult()
