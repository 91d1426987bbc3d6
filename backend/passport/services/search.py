"""Property search over the caller's visible properties."""

import logging
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.models.enums import FlagStatus
from passport.models.flag import PropertyFlag
from passport.models.property import Property
from passport.policies.dashboard import DashboardRole, resolve_dashboard_role
from passport.policies.roles import UserSession
from passport.schemas.search import SearchFilters, SearchResult
from passport.services.dashboard import featured_image_urls
from passport.services.properties import (
    active_document_counts,
    completion_scores,
    media_counts,
    visible_properties,
)
from passport.services.storage import StorageService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


def _passes(
    prop: Property,
    filters: SearchFilters,
    documents: int,
    media: int,
    issues: int,
) -> bool:
    """Unset filters pass; a property missing a filtered attribute passes type/tenure/EPC checks."""
    if filters.bedrooms and (prop.bedrooms or 0) < filters.bedrooms:
        return False
    if filters.bathrooms and (prop.bathrooms or 0) < filters.bathrooms:
        return False
    if filters.property_type and prop.property_type and prop.property_type != filters.property_type:
        return False
    if filters.tenure and prop.tenure and prop.tenure != filters.tenure:
        return False
    if filters.min_price and (prop.price or 0) < filters.min_price:
        return False
    if filters.max_price and (prop.price or 0) > filters.max_price:
        return False
    # EPC bands compare alphabetically: A is best
    if filters.min_epc and prop.epc_rating and prop.epc_rating < filters.min_epc.upper():
        return False
    if filters.max_epc and prop.epc_rating and prop.epc_rating > filters.max_epc.upper():
        return False
    if filters.has_documents and not documents:
        return False
    if filters.has_media and not media:
        return False
    if filters.has_issues and not issues:
        return False
    return True


async def open_flag_counts(db: AsyncSession, property_ids: list) -> dict:
    if not property_ids:
        return {}
    result = await db.execute(
        select(PropertyFlag.property_id, func.count(PropertyFlag.id))
        .where(
            PropertyFlag.property_id.in_(property_ids),
            PropertyFlag.status.in_([FlagStatus.OPEN, FlagStatus.IN_REVIEW]),
            PropertyFlag.deleted_at.is_(None),
        )
        .group_by(PropertyFlag.property_id)
    )
    return {row[0]: row[1] for row in result.all()}


async def run_search(
    db: AsyncSession,
    storage: StorageService,
    session: Optional[UserSession],
    text: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    filters: Optional[SearchFilters] = None,
) -> list[SearchResult]:
    """One page of results. Filters apply to the fetched page."""
    page_size = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
    page = page if page and page > 0 else 1
    filters = filters or SearchFilters()
    text = (text or "").strip()

    stmt = visible_properties(session)
    if text:
        pattern = f"%{text}%"
        stmt = stmt.where(
            or_(
                Property.title.ilike(pattern),
                Property.display_address.ilike(pattern),
                Property.uprn.ilike(pattern),
            )
        )
    stmt = stmt.order_by(Property.updated_at.desc()).offset((page - 1) * page_size).limit(page_size)

    rows = list((await db.execute(stmt)).scalars())
    ids = [prop.id for prop in rows]

    documents = await active_document_counts(db, ids)
    media = await media_counts(db, ids)
    issues = await open_flag_counts(db, ids)

    matched = [
        prop
        for prop in rows
        if _passes(prop, filters, documents.get(prop.id, 0), media.get(prop.id, 0), issues.get(prop.id, 0))
    ]

    # Buyers only see their own passports and public ones
    if session is not None and resolve_dashboard_role(session) == DashboardRole.BUYER:
        matched = [
            prop for prop in matched
            if prop.created_by_user_id == session.id or prop.public_visibility
        ]

    completion = await completion_scores(db, matched)
    images = await featured_image_urls(db, storage, [prop.id for prop in matched])
    logger.debug(f"[SEARCH] '{text}' page {page}: {len(matched)} of {len(rows)} rows")

    return [
        SearchResult(
            id=prop.id,
            address=prop.display_address or "Unknown address",
            slug=prop.public_slug,
            image_url=images.get(prop.id),
            completion=completion.get(prop.id),
            epc_rating=prop.epc_rating,
            flagged_issue_count=issues.get(prop.id, 0),
            updated_at=prop.updated_at or prop.created_at,
        )
        for prop in matched
    ]
