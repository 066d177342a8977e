"""
Quotely API — Favorite Schemas
===============================

Request bodies accept either the legacy quote-only shape `{quote_id}` or
the general `{item_id, item_type}` shape; `target()` resolves both to an
(item_id, item_type) pair.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from quotely.schemas.common import Pagination
from quotely.schemas.proverb import ProverbOut
from quotely.schemas.quote import QuoteOut

ItemType = Literal["quote", "proverb"]


class FavoriteRequest(BaseModel):
    quote_id: Optional[uuid.UUID] = Field(default=None, description="Shorthand for item_type=quote")
    item_id: Optional[uuid.UUID] = None
    item_type: ItemType = "quote"

    @model_validator(mode="after")
    def require_item(self) -> "FavoriteRequest":
        if self.item_id is None and self.quote_id is None:
            raise ValueError("quote_id or item_id is required")
        return self

    def target(self) -> Tuple[uuid.UUID, str]:
        if self.item_id is not None:
            return self.item_id, self.item_type
        return self.quote_id, "quote"


class FavoriteOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    item_id: uuid.UUID
    item_type: str
    created_at: datetime


class FavoriteWithItem(FavoriteOut):
    """A favorite with its quote/proverb attached; item is null when the target was deleted."""
    item: Optional[Union[QuoteOut, ProverbOut]] = None


class FavoriteListResponse(BaseModel):
    success: bool = True
    data: List[FavoriteWithItem]
    pagination: Pagination


class FavoriteCreatedResponse(BaseModel):
    success: bool = True
    data: FavoriteOut
    message: str = "Added to favorites"


class FavoriteToggleResponse(BaseModel):
    success: bool = True
    action: str = Field(description="added | removed")


class FavoriteRemovedResponse(BaseModel):
    success: bool = True
    message: str = "Removed from favorites"
    removed: bool


class FavoriteCheckResponse(BaseModel):
    success: bool = True
    is_favorited: bool
