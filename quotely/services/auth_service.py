"""
Quotely API — Auth & Profile Service
=====================================

What:  Account signup, password login and profile read/update.
How:   Users live in the `users` entity; passwords are bcrypt-hashed and
       never leave this module; sessions are stateless JWTs.
Who:   /api/auth and /api/user routes.

Profile updates are whitelisted: only PROFILE_FIELDS can change. id,
email, created_at and password_hash are never writable through the API.

bcrypt hashing and checking run in a worker thread (about 250ms each at 12
rounds).
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote
from uuid import UUID

from quotely.exceptions import AuthError, ConstraintViolationError, NoRowsError, NotFoundError, ValidationError
from quotely.security import hash_password, issue_token, verify_password
from quotely.store import Eq, Row, StoreAdapter

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "username", "avatar_url", "bio")

INVALID_CREDENTIALS = "Invalid credentials"


def avatar_url_for(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=4A90E2&color=fff"


def public_user(row: Row) -> Dict[str, Any]:
    """User row without secrets."""
    return {key: value for key, value in row.items() if key != "password_hash"}


class AuthService:
    def __init__(self, store: StoreAdapter):
        self.store = store

    async def signup(
        self,
        email: str,
        password: str,
        name: str,
        username: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], str]:
        """
        Create an account and return (user, access token).

        Raises:
            ValidationError: email or username already taken
        """
        email = email.strip().lower()
        username = (username or email.split("@", 1)[0]).strip()
        password_hash = await asyncio.to_thread(hash_password, password)

        try:
            row = await self.store.insert(
                "users",
                {
                    "email": email,
                    "password_hash": password_hash,
                    "name": name,
                    "username": username,
                    "avatar_url": avatar_url_for(name),
                    "created_at": datetime.now(timezone.utc),
                },
            )
        except ConstraintViolationError as exc:
            if exc.is_duplicate_key:
                raise ValidationError(
                    message="An account with this email or username already exists",
                    field="email",
                )
            raise

        logger.info("New account %s (%s)", row["id"], username)
        return public_user(row), issue_token(row["id"])

    async def login(self, email: str, password: str) -> Tuple[Dict[str, Any], str]:
        """
        Raises:
            AuthError: unknown email or wrong password (same message for both)
        """
        try:
            row = await self.store.find_one("users", [Eq("email", email.strip().lower())])
        except NoRowsError:
            raise AuthError(message=INVALID_CREDENTIALS)

        if not await asyncio.to_thread(verify_password, password, row.get("password_hash")):
            logger.info("Failed login for user %s", row["id"])
            raise AuthError(message=INVALID_CREDENTIALS)

        return public_user(row), issue_token(row["id"])

    async def get_profile(self, user_id: UUID) -> Dict[str, Any]:
        try:
            row = await self.store.find_one("users", [Eq("id", user_id)])
        except NoRowsError:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return public_user(row)

    async def update_profile(self, user_id: UUID, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply whitelisted profile changes; unknown and None-valued keys are ignored.

        Raises:
            NotFoundError: user does not exist
            ValidationError: username already taken
        """
        values = {k: v for k, v in changes.items() if k in PROFILE_FIELDS and v is not None}
        if not values:
            return await self.get_profile(user_id)

        try:
            rows = await self.store.update("users", [Eq("id", user_id)], values)
        except ConstraintViolationError as exc:
            if exc.is_duplicate_key:
                raise ValidationError(message="Username is already taken", field="username")
            raise

        if not rows:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        logger.info("Profile %s updated (%s)", user_id, ", ".join(sorted(values)))
        return public_user(rows[0])
