"""Public router - anonymous view of published property passports."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import get_settings
from passport.core.database import get_db
from passport.models.document import Document
from passport.models.enums import DocumentStatus, MediaType
from passport.models.media import Media
from passport.models.property import Property
from passport.schemas.property import PublicDocument, PublicPassportResponse
from passport.services.signed_urls import PLACEHOLDER_IMAGE, signed_urls_for
from passport.services.storage import StorageService, get_storage_service

settings = get_settings()

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/{slug}", response_model=PublicPassportResponse)
async def get_public_passport(
    slug: str,
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    result = await db.execute(
        select(Property).where(
            Property.public_slug == slug,
            Property.public_visibility.is_(True),
            Property.deleted_at.is_(None),
        )
    )
    prop = result.scalar_one_or_none()
    if prop is None:
        raise LookupError("Property not found")

    photos = list(
        (
            await db.execute(
                select(Media)
                .where(
                    Media.property_id == prop.id,
                    Media.media_type == MediaType.PHOTO,
                    Media.deleted_at.is_(None),
                )
                .order_by(Media.created_at.asc())
            )
        ).scalars()
    )
    documents = list(
        (
            await db.execute(
                select(Document)
                .where(
                    Document.property_id == prop.id,
                    Document.status == DocumentStatus.ACTIVE,
                    Document.deleted_at.is_(None),
                )
                .order_by(Document.created_at.desc())
            )
        ).scalars()
    )

    urls = await signed_urls_for(
        storage,
        photos + documents,
        settings.signed_url_ttl_seconds,
        settings.signed_url_concurrency,
    )
    gallery = [urls[photo.id] for photo in photos if urls.get(photo.id)]

    return PublicPassportResponse(
        id=prop.id,
        title=prop.title,
        address=prop.display_address,
        uprn=prop.uprn,
        property_type=prop.property_type,
        tenure=prop.tenure,
        status=prop.status,
        featured_image=gallery[0] if gallery else PLACEHOLDER_IMAGE,
        gallery=gallery,
        documents=[
            PublicDocument(id=doc.id, title=doc.title, document_type=doc.document_type, url=urls.get(doc.id))
            for doc in documents
        ],
        updated_at=prop.updated_at,
    )
