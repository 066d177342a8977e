"""Quotely API — Contact Form & Newsletter Schemas"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from quotely.schemas.auth import check_email


class ContactRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(max_length=320)
    subject: Optional[str] = Field(default=None, max_length=200)
    message: str = Field(min_length=1, max_length=5000)
    user_id: Optional[uuid.UUID] = Field(default=None, alias="userId")

    model_config = {"populate_by_name": True}

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)


class ContactSubmissionOut(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    subject: str
    message: str
    user_id: Optional[uuid.UUID] = None
    created_at: datetime


class ContactResponse(BaseModel):
    success: bool = True
    message: str = "Message received successfully"
    submission: ContactSubmissionOut


class NewsletterRequest(BaseModel):
    email: str = Field(max_length=320)
    name: Optional[str] = Field(default=None, max_length=120)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)
