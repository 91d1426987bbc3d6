"""Search router - text search and filters over visible properties."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from passport.core.database import get_db
from passport.core.security import get_optional_user
from passport.policies.roles import UserSession
from passport.schemas.base import parse_model
from passport.schemas.search import SearchFilters, SearchResponse
from passport.services.search import run_search
from passport.services.storage import StorageService, get_storage_service

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
async def search_properties(
    q: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(5, ge=1, le=100),
    bedrooms: Optional[int] = Query(None),
    bathrooms: Optional[int] = Query(None),
    property_type: Optional[str] = Query(None),
    tenure: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None),
    max_price: Optional[int] = Query(None),
    min_epc: Optional[str] = Query(None),
    max_epc: Optional[str] = Query(None),
    has_documents: Optional[bool] = Query(None),
    has_media: Optional[bool] = Query(None),
    has_issues: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: Optional[UserSession] = Depends(get_optional_user),
    storage: StorageService = Depends(get_storage_service),
):
    """Anonymous callers search public passports only."""
    filters = parse_model(
        SearchFilters,
        {
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "property_type": property_type,
            "tenure": tenure,
            "min_price": min_price,
            "max_price": max_price,
            "min_epc": min_epc,
            "max_epc": max_epc,
            "has_documents": has_documents,
            "has_media": has_media,
            "has_issues": has_issues,
        },
    )
    results = await run_search(db, storage, current_user, q, page, page_size, filters)
    return SearchResponse(results=results)
