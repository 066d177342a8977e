"""
Quotely API — Favorites Routes
===============================

What:  The authenticated user's favorites. Every route is scoped to the
       caller's own user id (from the bearer token); no route takes a user id.

Routes:
    GET    /api/favorites                       paginated list with items attached
    POST   /api/favorites                       add → 201 | 400 "Already favorited"
    POST   /api/favorites/toggle                add or remove → {action}
    DELETE /api/favorites/{item_id}             remove (idempotent) → {removed}
    GET    /api/favorites/check/{item_id}       → {is_favorited}

The service reports duplicates as a value; only POST /api/favorites turns
that into a 400, to keep the established client contract.
"""

import logging
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from quotely.config import settings
from quotely.dependencies import get_current_user, get_favorites_service
from quotely.exceptions import AlreadyExistsError, failure_message
from quotely.schemas.common import ErrorResponse, Pagination
from quotely.schemas.favorite import (
    FavoriteCheckResponse,
    FavoriteCreatedResponse,
    FavoriteListResponse,
    FavoriteRemovedResponse,
    FavoriteRequest,
    FavoriteToggleResponse,
)
from quotely.services.favorites_service import FavoritesService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/favorites",
    tags=["Favorites"],
    responses={401: {"model": ErrorResponse, "description": "Missing or invalid token"}},
)

ItemTypeQuery = Literal["quote", "proverb"]


@router.get("", response_model=FavoriteListResponse, summary="List my favorites")
@failure_message("Failed to fetch favorites")
async def list_favorites(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    item_type: ItemTypeQuery | None = Query(default=None),
    user_id: UUID = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteListResponse:
    items, total = await service.list_favorites(user_id, page=page, limit=limit, item_type=item_type)
    return FavoriteListResponse(
        data=items,
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.post(
    "",
    response_model=FavoriteCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Already favorited"}},
    summary="Add a favorite",
)
@failure_message("Failed to add favorite")
async def add_favorite(
    body: FavoriteRequest,
    user_id: UUID = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteCreatedResponse:
    item_id, item_type = body.target()
    result = await service.add_favorite(user_id, item_id, item_type)
    if not result.created:
        raise AlreadyExistsError(
            message="Already favorited",
            context={"item_id": str(item_id), "item_type": item_type},
        )
    return FavoriteCreatedResponse(data=result.favorite)


@router.post("/toggle", response_model=FavoriteToggleResponse, summary="Toggle a favorite")
@failure_message("Failed to update favorites")
async def toggle_favorite(
    body: FavoriteRequest,
    user_id: UUID = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteToggleResponse:
    item_id, item_type = body.target()
    action = await service.toggle_favorite(user_id, item_id, item_type)
    return FavoriteToggleResponse(action=action)


@router.delete(
    "/{item_id}",
    response_model=FavoriteRemovedResponse,
    summary="Remove a favorite",
    description="Removing something that is not a favorite succeeds with removed=false.",
)
@failure_message("Failed to remove favorite")
async def remove_favorite(
    item_id: UUID,
    item_type: ItemTypeQuery = Query(default="quote"),
    user_id: UUID = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteRemovedResponse:
    result = await service.remove_favorite(user_id, item_id, item_type)
    return FavoriteRemovedResponse(removed=result.removed)


@router.get("/check/{item_id}", response_model=FavoriteCheckResponse, summary="Is this a favorite?")
@failure_message("Failed to check favorite status")
async def check_favorite(
    item_id: UUID,
    item_type: ItemTypeQuery = Query(default="quote"),
    user_id: UUID = Depends(get_current_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteCheckResponse:
    return FavoriteCheckResponse(
        is_favorited=await service.is_favorited(user_id, item_id, item_type)
    )
