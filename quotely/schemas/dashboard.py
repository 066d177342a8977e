"""Quotely API — Dashboard Schemas"""

from typing import List

from pydantic import BaseModel, Field

from quotely.schemas.quote import QuoteOut, TrendingQuoteOut


class UserStatsOut(BaseModel):
    favorites_count: int
    submitted_quotes: int


class DashboardData(BaseModel):
    total_quotes: int = Field(description="Approved quotes")
    total_users: int
    total_favorites: int
    total_likes: int
    user_stats: UserStatsOut
    recent_quotes: List[QuoteOut]


class DashboardResponse(BaseModel):
    success: bool = True
    data: DashboardData


class TrendingResponse(BaseModel):
    success: bool = True
    data: List[TrendingQuoteOut]
