"""Quotely API — Proverb Routes (GET /api/proverbs, GET /api/proverbs/random)"""

from fastapi import APIRouter, Depends, Query

from quotely.config import settings
from quotely.dependencies import get_proverb_service
from quotely.exceptions import failure_message
from quotely.schemas.common import ErrorResponse
from quotely.schemas.proverb import ProverbListResponse, ProverbResponse
from quotely.services.proverb_service import ProverbService
from quotely.store import total_pages

router = APIRouter(prefix="/api/proverbs", tags=["Proverbs"])


@router.get(
    "",
    response_model=ProverbListResponse,
    response_model_by_alias=True,
    summary="List proverbs, most liked first",
)
@failure_message("Failed to fetch proverbs")
async def list_proverbs(
    category: str | None = Query(default=None, max_length=100),
    origin: str | None = Query(default=None, max_length=120),
    search: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    service: ProverbService = Depends(get_proverb_service),
) -> ProverbListResponse:
    rows, total = await service.list_proverbs(
        category=category, origin=origin, search=search, page=page, limit=limit
    )
    return ProverbListResponse(
        proverbs=rows, total=total, page=page, total_pages=total_pages(total, limit)
    )


@router.get(
    "/random",
    response_model=ProverbResponse,
    responses={404: {"model": ErrorResponse, "description": "No proverbs yet"}},
    summary="Random proverb",
)
@failure_message("Failed to get random proverb")
async def random_proverb(service: ProverbService = Depends(get_proverb_service)) -> ProverbResponse:
    return ProverbResponse(proverb=await service.random_proverb())
