"""Property helpers: visibility scoping, public slugs and passport completion."""

import re
import uuid
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import Select, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.document import Document
from passport.models.enums import DocumentStatus, MediaType, PrimaryRole
from passport.models.media import Media
from passport.models.property import Property
from passport.policies.dashboard import is_any_owner
from passport.policies.roles import UserSession, is_admin

COMPLETION_CHECKS = 6


def can_create_property(session: UserSession) -> bool:
    """Admins, agents, conveyancers and existing owners may create passports."""
    if is_admin(session):
        return True
    if session.primary_role in (PrimaryRole.AGENT, PrimaryRole.CONVEYANCER):
        return True
    return is_any_owner(session)


def visible_properties(session: Optional[UserSession]) -> Select:
    """Live properties the caller may read: public ones plus any they hold a role on."""
    stmt = select(Property).where(Property.deleted_at.is_(None))
    if is_admin(session):
        return stmt
    if session is None:
        return stmt.where(Property.public_visibility.is_(True))

    role_ids = list(session.property_roles)
    return stmt.where(
        or_(
            Property.public_visibility.is_(True),
            Property.created_by_user_id == session.id,
            Property.id.in_(role_ids) if role_ids else false(),
        )
    )


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:80].rstrip("-") or "property"


def generate_public_slug(address: str) -> str:
    """e.g. '12 High St, Leeds' -> '12-high-st-leeds-3f9a1c2b'."""
    return f"{slugify(address)}-{uuid.uuid4().hex[:8]}"


def ensure_public_slug(prop: Property) -> None:
    """Give a property a slug the first time it is published. Existing slugs are kept."""
    if prop.public_visibility and not prop.public_slug:
        prop.public_slug = generate_public_slug(prop.display_address)


def compute_completion(prop: Property, photo_count: int, document_count: int) -> int:
    checks = [
        bool(prop.display_address),
        bool(prop.uprn),
        bool(prop.property_type),
        bool(prop.tenure),
        photo_count > 0,
        document_count > 0,
    ]
    return round(100 * sum(checks) / COMPLETION_CHECKS)


async def photo_counts(db: AsyncSession, property_ids: Iterable[UUID]) -> dict[UUID, int]:
    ids = list(property_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Media.property_id, func.count(Media.id))
        .where(
            Media.property_id.in_(ids),
            Media.media_type == MediaType.PHOTO,
            Media.deleted_at.is_(None),
        )
        .group_by(Media.property_id)
    )
    return {row[0]: row[1] for row in result.all()}


async def media_counts(db: AsyncSession, property_ids: Iterable[UUID]) -> dict[UUID, int]:
    ids = list(property_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Media.property_id, func.count(Media.id))
        .where(Media.property_id.in_(ids), Media.deleted_at.is_(None))
        .group_by(Media.property_id)
    )
    return {row[0]: row[1] for row in result.all()}


async def active_document_counts(db: AsyncSession, property_ids: Iterable[UUID]) -> dict[UUID, int]:
    ids = list(property_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Document.property_id, func.count(Document.id))
        .where(
            Document.property_id.in_(ids),
            Document.status == DocumentStatus.ACTIVE,
            Document.deleted_at.is_(None),
        )
        .group_by(Document.property_id)
    )
    return {row[0]: row[1] for row in result.all()}


async def completion_scores(db: AsyncSession, properties: list[Property]) -> dict[UUID, int]:
    """Completion percentage for each property, computed in two grouped queries."""
    ids = [prop.id for prop in properties]
    photos = await photo_counts(db, ids)
    documents = await active_document_counts(db, ids)
    return {
        prop.id: compute_completion(prop, photos.get(prop.id, 0), documents.get(prop.id, 0))
        for prop in properties
    }
