"""
Quotely API — Contact & Newsletter Service
===========================================

Both tables are append-only. Contact messages are stored, not e-mailed.
A repeated newsletter signup is a normal outcome (created=False), not an error.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from quotely.exceptions import ConstraintViolationError, ValidationError
from quotely.store import Row, StoreAdapter

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "General Inquiry"


@dataclass
class SubscribeResult:
    created: bool
    subscriber: Optional[Row] = None


class ContactService:
    def __init__(self, store: StoreAdapter):
        self.store = store

    async def submit_contact(
        self,
        name: str,
        email: str,
        message: str,
        subject: Optional[str] = None,
        user_id: Optional[UUID] = None,
    ) -> Row:
        try:
            row = await self.store.insert(
                "contact_submissions",
                {
                    "name": name,
                    "email": email,
                    "subject": subject or DEFAULT_SUBJECT,
                    "message": message,
                    "user_id": user_id,
                    "created_at": datetime.now(timezone.utc),
                },
            )
        except ConstraintViolationError as exc:
            if exc.is_foreign_key:
                raise ValidationError(message="Unknown user", field="userId")
            raise
        logger.info("Contact submission %s received", row.get("id"))
        return row

    async def subscribe(self, email: str, name: Optional[str] = None) -> SubscribeResult:
        try:
            row = await self.store.insert(
                "newsletter_subscribers",
                {
                    "email": email.strip().lower(),
                    "name": name or None,
                    "created_at": datetime.now(timezone.utc),
                },
            )
        except ConstraintViolationError as exc:
            if exc.is_duplicate_key:
                return SubscribeResult(created=False)
            raise
        return SubscribeResult(created=True, subscriber=row)
