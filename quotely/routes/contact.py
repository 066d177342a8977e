"""
Quotely API — Contact Form & Newsletter Routes
===============================================

Routes:
    POST /api/contact                 store a contact message
    POST /api/newsletter/subscribe    add an email; repeats succeed with "Already subscribed"
"""

from fastapi import APIRouter, Depends

from quotely.dependencies import get_contact_service
from quotely.exceptions import failure_message
from quotely.schemas.common import ErrorResponse, MessageResponse
from quotely.schemas.contact import ContactRequest, ContactResponse, NewsletterRequest
from quotely.services.contact_service import ContactService

router = APIRouter(prefix="/api", tags=["Contact"])


@router.post(
    "/contact",
    response_model=ContactResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Send a contact message",
)
@failure_message("Failed to submit contact form")
async def contact(
    body: ContactRequest,
    service: ContactService = Depends(get_contact_service),
) -> ContactResponse:
    submission = await service.submit_contact(
        name=body.name,
        email=body.email,
        message=body.message,
        subject=body.subject,
        user_id=body.user_id,
    )
    return ContactResponse(submission=submission)


@router.post(
    "/newsletter/subscribe",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Subscribe to the newsletter",
)
@failure_message("Failed to subscribe to newsletter")
async def subscribe(
    body: NewsletterRequest,
    service: ContactService = Depends(get_contact_service),
) -> MessageResponse:
    result = await service.subscribe(email=body.email, name=body.name)
    if not result.created:
        return MessageResponse(message="Already subscribed")
    return MessageResponse(message="Successfully subscribed to newsletter")
