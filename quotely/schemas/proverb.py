"""Quotely API — Proverb Schemas"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProverbOut(BaseModel):
    id: uuid.UUID
    content: str
    origin: str
    category: Optional[str] = None
    meaning: Optional[str] = None
    translation: Optional[str] = None
    likes_count: int = 0
    created_at: datetime


class ProverbListResponse(BaseModel):
    success: bool = True
    proverbs: List[ProverbOut]
    total: int
    page: int
    total_pages: int = Field(serialization_alias="totalPages")


class ProverbResponse(BaseModel):
    success: bool = True
    proverb: ProverbOut
