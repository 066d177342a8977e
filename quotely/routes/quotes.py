"""
Quotely API — Quote Routes
===========================

What:  Public quote catalogue, submissions and likes.

Routes:
    GET  /api/quotes                   list/search approved quotes
    GET  /api/quotes/random            one random approved quote
    GET  /api/quotes/{quote_id}        one approved quote | 404
    POST /api/quotes/submit            queue a quote (always approved=false)
    POST /api/quotes/{quote_id}/like   (auth) toggle like → {action, like_count}

/random is registered before /{quote_id} so the literal path wins.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from quotely.config import settings
from quotely.dependencies import get_current_user, get_like_service, get_quote_service
from quotely.exceptions import failure_message
from quotely.schemas.common import ErrorResponse
from quotely.schemas.quote import (
    LikeResponse,
    QuoteListResponse,
    QuoteResponse,
    QuoteSubmitRequest,
    QuoteSubmitResponse,
)
from quotely.services.like_service import LikeService
from quotely.services.quote_service import QuoteService
from quotely.store import total_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quotes", tags=["Quotes"])


@router.get(
    "",
    response_model=QuoteListResponse,
    response_model_by_alias=True,
    summary="List approved quotes",
    description=(
        "Newest first. `category` is an exact match, `author` a case-insensitive "
        "substring, and `search` matches text or author."
    ),
)
@failure_message("Failed to fetch quotes")
async def list_quotes(
    category: str | None = Query(default=None, max_length=100),
    author: str | None = Query(default=None, max_length=200),
    search: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    service: QuoteService = Depends(get_quote_service),
) -> QuoteListResponse:
    rows, total = await service.list_quotes(
        category=category, author=author, search=search, page=page, limit=limit
    )
    return QuoteListResponse(
        quotes=rows, total=total, page=page, total_pages=total_pages(total, limit)
    )


@router.get(
    "/random",
    response_model=QuoteResponse,
    responses={404: {"model": ErrorResponse, "description": "No approved quotes yet"}},
    summary="Random approved quote",
)
@failure_message("Failed to get random quote")
async def random_quote(service: QuoteService = Depends(get_quote_service)) -> QuoteResponse:
    return QuoteResponse(quote=await service.random_quote())


@router.post(
    "/submit",
    response_model=QuoteSubmitResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Submit a quote for moderation",
)
@failure_message("Failed to submit quote")
async def submit_quote(
    body: QuoteSubmitRequest,
    service: QuoteService = Depends(get_quote_service),
) -> QuoteSubmitResponse:
    quote = await service.submit_quote(
        text=body.text,
        author=body.author,
        category=body.category,
        user_id=body.user_id,
        source=body.source,
        tags=body.tags,
    )
    return QuoteSubmitResponse(quote=quote)


@router.get(
    "/{quote_id}",
    response_model=QuoteResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one quote",
)
@failure_message("Failed to fetch quote")
async def get_quote(
    quote_id: UUID,
    service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse:
    return QuoteResponse(quote=await service.get_quote(quote_id))


@router.post(
    "/{quote_id}/like",
    response_model=LikeResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Like or unlike a quote",
)
@failure_message("Failed to update like")
async def toggle_like(
    quote_id: UUID,
    user_id: UUID = Depends(get_current_user),
    service: LikeService = Depends(get_like_service),
) -> LikeResponse:
    result = await service.toggle_like(user_id, quote_id)
    return LikeResponse(action=result.action, like_count=result.like_count)
