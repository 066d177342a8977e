"""
Quotely API — FastAPI Dependencies
===================================

What:  Request-scoped providers for the store handle, the authenticated
       user, and each service.
How:   The StoreAdapter lives on app.state (set by create_app() or the
       lifespan). Services are cheap wrappers around it and are built per
       request, so there is no module-level client anywhere.
Who:   Route handlers, via Depends(...).
"""

from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quotely.exceptions import AuthError, StoreUnavailableError
from quotely.security import decode_token
from quotely.services.aggregation_service import AggregationService
from quotely.services.auth_service import AuthService
from quotely.services.contact_service import ContactService
from quotely.services.favorites_service import FavoritesService
from quotely.services.like_service import LikeService
from quotely.services.proverb_service import ProverbService
from quotely.services.quote_service import QuoteService
from quotely.store import StoreAdapter

# auto_error=False so a missing header becomes our 401 envelope, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> StoreAdapter:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreUnavailableError(context={"reason": "store not initialized"})
    return store


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> UUID:
    """Resolve `Authorization: Bearer <jwt>` to the caller's user id."""
    if credentials is None or not credentials.credentials:
        raise AuthError(message="Authentication required")
    return decode_token(credentials.credentials)


# ── Service Providers ─────────────────────────────────────────────────────


def get_favorites_service(store: StoreAdapter = Depends(get_store)) -> FavoritesService:
    return FavoritesService(store)


def get_like_service(store: StoreAdapter = Depends(get_store)) -> LikeService:
    return LikeService(store)


def get_aggregation_service(store: StoreAdapter = Depends(get_store)) -> AggregationService:
    return AggregationService(store)


def get_quote_service(store: StoreAdapter = Depends(get_store)) -> QuoteService:
    return QuoteService(store)


def get_proverb_service(store: StoreAdapter = Depends(get_store)) -> ProverbService:
    return ProverbService(store)


def get_auth_service(store: StoreAdapter = Depends(get_store)) -> AuthService:
    return AuthService(store)


def get_contact_service(store: StoreAdapter = Depends(get_store)) -> ContactService:
    return ContactService(store)
