"""Dashboard router - per-persona overview of the caller's properties."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_current_user
from passport.policies.roles import UserSession
from passport.services.dashboard import build_dashboard
from passport.services.storage import StorageService, get_storage_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: UserSession = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service),
):
    """Dashboard data for the caller.

    Returns:
    - role, tabs and widgets for the resolved dashboard persona
    - capability switches for the documents, media, issues and admin panels
    - stats (owned, accessible, unresolved flags, documents)
    - accessible properties with completion and featured image
    - the latest activity across those properties
    """
    return await build_dashboard(db, storage, current_user)
