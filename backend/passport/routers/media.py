"""Media router - property photos and floorplans."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import get_settings
from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.models.enums import DocumentStatus
from passport.models.media import Media
from passport.policies.roles import MEDIA_DELETE_ROLES, MEDIA_UPLOAD_ROLES, UserSession
from passport.schemas.base import ActionResult, parse_model
from passport.schemas.evidence import MediaResponse, MediaUpload, UploadResult
from passport.services.access import get_property, require_role, viewable_property
from passport.services.events import record_event
from passport.services.signed_urls import signed_urls_for
from passport.services.storage import MEDIA_UPLOADS, StorageService, get_storage_service

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/properties/{property_id}/media", tags=["media"])


@router.post("", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
async def upload_media(
    property_id: UUID,
    file: Optional[UploadFile] = File(None),
    media_type: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    """Upload a photo or floorplan. Title is the description, else the file name."""
    content = await file.read() if file else b""
    file_name = file.filename if file else None
    mime_type = file.content_type if file else None
    StorageService.validate_upload(MEDIA_UPLOADS, file_name, mime_type, len(content))

    fields = {"description": description or None}
    if media_type:
        fields["media_type"] = media_type
    form = parse_model(MediaUpload, fields)

    prop = await get_property(db, property_id)
    require_role(
        current_user, prop.id, MEDIA_UPLOAD_ROLES,
        "You do not have permission to upload photos for this property",
    )

    bucket = settings.photos_bucket
    object_path = StorageService.generate_object_path(prop.id, file_name)
    try:
        await storage.upload(bucket, object_path, content, mime_type)
    except Exception as e:
        logger.error(f"[MEDIA] Storage upload failed for {object_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Upload failed: {e}",
        )

    media = Media(
        property_id=prop.id,
        uploaded_by_user_id=current_user.id,
        media_type=form.media_type,
        title=form.description or file_name,
        description=form.description,
        storage_bucket=bucket,
        storage_path=object_path,
        mime_type=mime_type,
        size_bytes=len(content),
        status=DocumentStatus.ACTIVE,
    )
    db.add(media)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[MEDIA] Insert failed, removing {object_path}: {e}")
        await storage.remove(bucket, object_path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save photo: {e}",
        )
    await db.refresh(media)

    await record_event(
        db, prop.id, current_user.id, "media_uploaded",
        {
            "media_id": str(media.id),
            "media_type": media.media_type.value,
            "file_name": file_name,
            "description": form.description,
        },
    )

    return UploadResult(id=media.id, storage_path=object_path, uploaded_at=media.created_at)


@router.get("", response_model=List[MediaResponse])
async def list_media(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    prop = await viewable_property(db, current_user, property_id)
    result = await db.execute(
        select(Media)
        .where(Media.property_id == prop.id, Media.deleted_at.is_(None))
        .order_by(Media.created_at.asc())
    )
    items = list(result.scalars())
    urls = await signed_urls_for(
        storage,
        items,
        expires_in=settings.signed_url_ttl_seconds,
        concurrency_limit=settings.signed_url_concurrency,
    )

    responses = []
    for item in items:
        response = MediaResponse.model_validate(item)
        response.url = urls.get(item.id)
        responses.append(response)
    return responses


@router.delete("/{media_id}", response_model=ActionResult)
async def delete_media(
    property_id: UUID,
    media_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    prop = await get_property(db, property_id)
    require_role(
        current_user, prop.id, MEDIA_DELETE_ROLES,
        "You do not have permission to delete media for this property",
    )

    result = await db.execute(
        select(Media).where(Media.id == media_id, Media.property_id == prop.id)
    )
    media = result.scalar_one_or_none()
    if media is None:
        raise LookupError("Media file not found")

    await storage.remove(media.storage_bucket, media.storage_path)

    payload = {
        "action": "deleted",
        "title": media.title,
        "media_type": media.media_type.value,
        "mime_type": media.mime_type,
        "storage_path": media.storage_path,
    }
    await db.delete(media)
    await db.commit()

    await record_event(db, prop.id, current_user.id, "media_uploaded", payload)
    return ActionResult()
