"""
Quotely API — Quote Schemas
============================

What:  Request/response models for /api/quotes and the quote payloads reused
       by the dashboard and favorites endpoints.

Moderation:
    QuoteSubmitRequest has no `approved` field. Unknown keys are ignored,
    so a client sending approved=true still gets a pending quote.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class QuoteOut(BaseModel):
    id: uuid.UUID
    text: str
    author: str
    category: str
    tags: List[str] = Field(default_factory=list)
    source: Optional[str] = None
    submitted_by: Optional[uuid.UUID] = None
    approved: bool = False
    created_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def none_tags_to_empty(cls, v):
        return v or []


class SubmitterOut(BaseModel):
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class TrendingQuoteOut(QuoteOut):
    """A recent quote with its derived like count and submitter profile."""
    like_count: int = Field(default=0, description="Number of likes (derived from quote_likes)")
    submitter: Optional[SubmitterOut] = None


class QuoteListResponse(BaseModel):
    success: bool = True
    quotes: List[QuoteOut]
    total: int
    page: int
    total_pages: int = Field(serialization_alias="totalPages")


class QuoteResponse(BaseModel):
    success: bool = True
    quote: QuoteOut


class QuoteSubmitRequest(BaseModel):
    text: str = Field(min_length=1, max_length=2000)
    author: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    source: Optional[str] = Field(default=None, max_length=300)
    tags: List[str] = Field(default_factory=list, max_length=20)
    user_id: uuid.UUID = Field(alias="userId", description="Submitting user's ID")

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @field_validator("text", "author", "category")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be blank")
        return v


class QuoteSubmitResponse(BaseModel):
    success: bool = True
    message: str = "Quote submitted for review"
    quote: QuoteOut


class LikeResponse(BaseModel):
    success: bool = True
    action: str = Field(description="added | removed")
    like_count: int
