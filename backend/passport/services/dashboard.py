"""Dashboard aggregation: access map, stats, featured images and recent activity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import get_settings
from passport.models.document import Document
from passport.models.enums import FlagStatus, MediaType, PropertyPermission, PropertyStatus
from passport.models.event import PropertyEvent
from passport.models.flag import PropertyFlag
from passport.models.media import Media
from passport.models.property import Property
from passport.models.stakeholder import PropertyStakeholder
from passport.policies.dashboard import (
    DashboardRole,
    can_see_admin_panel,
    can_view_documents_ui,
    can_view_issues_ui,
    can_view_media_ui,
    dashboard_widgets,
    default_dashboard_tabs,
    resolve_dashboard_role,
)
from passport.policies.roles import UserSession
from passport.services.properties import completion_scores
from passport.services.signed_urls import PLACEHOLDER_IMAGE, get_batch_signed_urls
from passport.services.storage import StorageService

settings = get_settings()

ACTIVITY_LIMIT = 100


@dataclass
class AccessEntry:
    property: Property
    statuses: list[PropertyStatus] = field(default_factory=list)
    permission: Optional[PropertyPermission] = None
    access_expires_at: Optional[datetime] = None


def merge_access(
    access: dict[UUID, AccessEntry],
    prop: Property,
    status: Optional[PropertyStatus],
    permission: Optional[PropertyPermission],
    expires_at: Optional[datetime],
) -> None:
    """Fold a stakeholder row into the access map.

    Editor overrides viewer, and the earliest expiry across rows wins.
    """
    entry = access.setdefault(prop.id, AccessEntry(property=prop))
    if status is not None and status not in entry.statuses:
        entry.statuses.append(status)

    if permission == PropertyPermission.EDITOR or PropertyStatus.OWNER in entry.statuses:
        entry.permission = PropertyPermission.EDITOR
    elif permission == PropertyPermission.VIEWER and entry.permission != PropertyPermission.EDITOR:
        entry.permission = PropertyPermission.VIEWER

    if expires_at is not None:
        if entry.access_expires_at is None or expires_at < entry.access_expires_at:
            entry.access_expires_at = expires_at


async def build_access_map(
    db: AsyncSession,
    user_id: UUID,
    now: Optional[datetime] = None,
) -> dict[UUID, AccessEntry]:
    """Created properties plus live, unexpired stakeholder grants."""
    now = now or datetime.utcnow()
    access: dict[UUID, AccessEntry] = {}

    owned = await db.execute(
        select(Property).where(
            Property.created_by_user_id == user_id,
            Property.deleted_at.is_(None),
        )
    )
    for prop in owned.scalars():
        access[prop.id] = AccessEntry(
            property=prop,
            statuses=[PropertyStatus.OWNER],
            permission=PropertyPermission.EDITOR,
        )

    rows = await db.execute(
        select(PropertyStakeholder, Property)
        .join(Property, PropertyStakeholder.property_id == Property.id)
        .where(
            PropertyStakeholder.user_id == user_id,
            PropertyStakeholder.deleted_at.is_(None),
            or_(
                PropertyStakeholder.expires_at.is_(None),
                PropertyStakeholder.expires_at > now,
            ),
            Property.deleted_at.is_(None),
        )
    )
    for stakeholder, prop in rows.all():
        merge_access(access, prop, stakeholder.status, stakeholder.permission, stakeholder.expires_at)

    return access


async def featured_image_urls(
    db: AsyncSession,
    storage: StorageService,
    property_ids: Iterable[UUID],
) -> dict[UUID, str]:
    """First photo (oldest) per property, signed in batches; placeholder otherwise."""
    ids = list(property_ids)
    if not ids:
        return {}

    result = await db.execute(
        select(Media)
        .where(
            Media.property_id.in_(ids),
            Media.media_type == MediaType.PHOTO,
            Media.deleted_at.is_(None),
        )
        .order_by(Media.created_at.asc())
    )
    featured: dict[UUID, Media] = {}
    for media in result.scalars():
        featured.setdefault(media.property_id, media)

    by_bucket: dict[str, list[Media]] = {}
    for media in featured.values():
        by_bucket.setdefault(media.storage_bucket or settings.photos_bucket, []).append(media)

    urls = {property_id: PLACEHOLDER_IMAGE for property_id in ids}
    for bucket, items in by_bucket.items():
        signed = await get_batch_signed_urls(
            storage,
            bucket,
            [media.storage_path for media in items],
            concurrency_limit=settings.signed_url_concurrency,
        )
        for media, url in zip(items, signed):
            if url:
                urls[media.property_id] = url
    return urls


async def recent_activity(db: AsyncSession, property_ids: list[UUID]) -> list[dict]:
    if not property_ids:
        return []
    result = await db.execute(
        select(PropertyEvent, Property.display_address)
        .join(Property, PropertyEvent.property_id == Property.id)
        .where(PropertyEvent.property_id.in_(property_ids))
        .order_by(PropertyEvent.created_at.desc())
        .limit(ACTIVITY_LIMIT)
    )
    return [
        {
            "property_id": event.property_id,
            "property_address": address or "Unknown property",
            "event_type": event.event_type,
            "created_at": event.created_at,
        }
        for event, address in result.all()
    ]


async def build_dashboard(db: AsyncSession, storage: StorageService, session: UserSession) -> dict:
    access = await build_access_map(db, session.id)
    entries = list(access.values())
    property_ids = [entry.property.id for entry in entries]

    documents_count = 0
    unresolved_flags = 0
    if property_ids:
        documents_count = (
            await db.execute(
                select(func.count(Document.id)).where(
                    Document.property_id.in_(property_ids),
                    Document.deleted_at.is_(None),
                )
            )
        ).scalar() or 0
        unresolved_flags = (
            await db.execute(
                select(func.count(PropertyFlag.id)).where(
                    PropertyFlag.property_id.in_(property_ids),
                    PropertyFlag.status.in_([FlagStatus.OPEN, FlagStatus.IN_REVIEW]),
                    PropertyFlag.deleted_at.is_(None),
                )
            )
        ).scalar() or 0

    completion = await completion_scores(db, [entry.property for entry in entries])
    images = await featured_image_urls(db, storage, property_ids)
    activity = await recent_activity(db, property_ids)

    role: DashboardRole = resolve_dashboard_role(session)
    return {
        "role": role,
        "tabs": default_dashboard_tabs(role),
        "widgets": dashboard_widgets(role),
        "capabilities": {
            "documents": can_view_documents_ui(role),
            "media": can_view_media_ui(role),
            "issues": can_view_issues_ui(role),
            "admin_panel": can_see_admin_panel(role),
        },
        "stats": {
            "owned_properties": sum(1 for e in entries if PropertyStatus.OWNER in e.statuses),
            "accessible_properties": len(entries),
            "unresolved_flags": unresolved_flags,
            "total_documents": documents_count,
        },
        "properties": [
            {
                "id": entry.property.id,
                "address": entry.property.display_address,
                "status": entry.property.status,
                "public_slug": entry.property.public_slug,
                "statuses": entry.statuses,
                "permission": entry.permission,
                "access_expires_at": entry.access_expires_at,
                "completion": completion.get(entry.property.id, 0),
                "image_url": images.get(entry.property.id, PLACEHOLDER_IMAGE),
            }
            for entry in entries
        ],
        "activity": activity,
    }
