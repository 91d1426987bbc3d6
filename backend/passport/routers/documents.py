"""Documents router - upload, list and delete property documents."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.config import get_settings
from passport.core.database import get_db
from passport.core.security import compute_file_hash, get_current_user
from passport.models.document import Document
from passport.models.enums import DocumentStatus
from passport.policies.roles import DOCUMENT_DELETE_ROLES, UserSession
from passport.schemas.base import ActionResult, parse_model
from passport.schemas.evidence import DocumentResponse, DocumentUpload, UploadResult
from passport.services.access import get_property, require_role, viewable_property
from passport.services.events import record_event
from passport.services.signed_urls import signed_urls_for
from passport.services.storage import DOCUMENT_UPLOADS, StorageService, get_storage_service

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/properties/{property_id}/documents", tags=["documents"])

DOCUMENT_UPLOAD_ROLES = ("owner", "editor")


@router.post("", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
async def upload_document(
    property_id: UUID,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    document_type: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    version: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    """Upload a document to storage, then record it.

    If the row cannot be saved the stored object is removed again.
    """
    content = await file.read() if file else b""
    file_name = file.filename if file else None
    mime_type = file.content_type if file else None
    StorageService.validate_upload(DOCUMENT_UPLOADS, file_name, mime_type, len(content))

    form = parse_model(
        DocumentUpload,
        {"title": title, "document_type": document_type, "description": description, "version": version},
    )

    prop = await get_property(db, property_id)
    require_role(
        current_user, prop.id, DOCUMENT_UPLOAD_ROLES,
        "You do not have permission to upload documents for this property",
    )

    bucket = settings.documents_bucket
    object_path = StorageService.generate_object_path(prop.id, file_name)
    try:
        await storage.upload(bucket, object_path, content, mime_type)
    except Exception as e:
        logger.error(f"[DOCUMENTS] Storage upload failed for {object_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Upload failed: {e}",
        )

    document = Document(
        property_id=prop.id,
        uploaded_by_user_id=current_user.id,
        title=form.title,
        description=form.description,
        document_type=form.document_type,
        storage_bucket=bucket,
        storage_path=object_path,
        mime_type=mime_type,
        size_bytes=len(content),
        checksum=compute_file_hash(content),
        version=form.version,
        status=DocumentStatus.ACTIVE,
    )
    db.add(document)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[DOCUMENTS] Insert failed, removing {object_path}: {e}")
        await storage.remove(bucket, object_path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save document: {e}",
        )
    await db.refresh(document)

    await record_event(
        db, prop.id, current_user.id, "document_uploaded",
        {
            "document_id": str(document.id),
            "title": document.title,
            "document_type": document.document_type.value,
            "version": document.version,
            "file_name": file_name,
            "file_size": document.size_bytes,
            "mime_type": mime_type,
        },
    )

    return UploadResult(id=document.id, storage_path=object_path, uploaded_at=document.created_at)


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    """Documents newest first, each with a signed download URL."""
    prop = await viewable_property(db, current_user, property_id)
    result = await db.execute(
        select(Document)
        .where(Document.property_id == prop.id, Document.deleted_at.is_(None))
        .order_by(Document.created_at.desc())
    )
    documents = list(result.scalars())
    urls = await signed_urls_for(
        storage,
        documents,
        expires_in=settings.signed_url_ttl_seconds,
        concurrency_limit=settings.signed_url_concurrency,
    )

    responses = []
    for doc in documents:
        response = DocumentResponse.model_validate(doc)
        response.url = urls.get(doc.id)
        responses.append(response)
    return responses


@router.delete("/{document_id}", response_model=ActionResult)
async def delete_document(
    property_id: UUID,
    document_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    prop = await get_property(db, property_id)
    require_role(
        current_user, prop.id, DOCUMENT_DELETE_ROLES,
        "You do not have permission to delete documents for this property",
    )

    result = await db.execute(
        select(Document).where(Document.id == document_id, Document.property_id == prop.id)
    )
    document = result.scalar_one_or_none()
    if document is None:
        raise LookupError("Document not found")

    # Storage failures are logged only; the row goes regardless
    await storage.remove(document.storage_bucket, document.storage_path)

    payload = {
        "action": "deleted",
        "document_id": str(document.id),
        "title": document.title,
        "document_type": document.document_type.value,
        "storage_path": document.storage_path,
        "deleted_at": datetime.utcnow().isoformat(),
    }
    await db.delete(document)
    await db.commit()

    await record_event(db, prop.id, current_user.id, "document_uploaded", payload)
    return ActionResult()
