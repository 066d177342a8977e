"""
Quotely API — Dashboard Routes
===============================

Routes:
    GET /api/dashboard            (auth) site counts, my stats, recent quotes
    GET /api/dashboard/trending   (auth) recent quotes ranked by like count

All reads behind one response are issued concurrently and fail together:
a store error yields a 500, never a dashboard with silently zeroed numbers.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from quotely.config import settings
from quotely.dependencies import get_aggregation_service, get_current_user
from quotely.exceptions import failure_message
from quotely.schemas.common import ErrorResponse
from quotely.schemas.dashboard import DashboardData, DashboardResponse, TrendingResponse, UserStatsOut
from quotely.services.aggregation_service import AggregationService

router = APIRouter(
    prefix="/api/dashboard",
    tags=["Dashboard"],
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        500: {"model": ErrorResponse, "description": "Store error"},
    },
)


@router.get("", response_model=DashboardResponse, summary="Dashboard stats")
@failure_message("Failed to fetch dashboard stats")
async def dashboard(
    user_id: UUID = Depends(get_current_user),
    service: AggregationService = Depends(get_aggregation_service),
) -> DashboardResponse:
    result = await service.dashboard(user_id)
    return DashboardResponse(
        data=DashboardData(
            total_quotes=result.counts.total_quotes,
            total_users=result.counts.total_users,
            total_favorites=result.counts.total_favorites,
            total_likes=result.counts.total_likes,
            user_stats=UserStatsOut(
                favorites_count=result.user_stats.favorites_count,
                submitted_quotes=result.user_stats.submitted_quotes_count,
            ),
            recent_quotes=result.recent_quotes,
        )
    )


@router.get("/trending", response_model=TrendingResponse, summary="Trending quotes")
@failure_message("Failed to fetch trending quotes")
async def trending(
    limit: int = Query(default=settings.trending_limit, ge=1, le=50),
    _user_id: UUID = Depends(get_current_user),
    service: AggregationService = Depends(get_aggregation_service),
) -> TrendingResponse:
    return TrendingResponse(data=await service.trending(limit=limit))
