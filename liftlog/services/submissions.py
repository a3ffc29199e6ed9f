from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models import Record
from .documents_client import DocumentsClient

router = APIRouter()

CONTACTS = "CONTACTS"
SUBSCRIBERS = "SUBSCRIBERS"
SOURCE = "homepage"

SUCCESS_MESSAGE = "Our team will get back to you shortly."
DUPLICATE_MESSAGE = "Already subscribed!"
FAILURE_MESSAGE = "An error occurred"


class SubmissionResult(BaseModel):
    success: bool
    message: str


class ContactForm(Record):
    email: str
    phone: str = ""
    name: str = ""
    country: str = ""
    is_first: bool = False
    is_second: bool = False
    is_third: bool = False
    is_others: bool = False
    is_others_text: str = ""


class NewsletterForm(Record):
    email: str
    name: str = ""


async def claim_email(
    email: str,
    phone: str,
    name: str,
    country: str,
    is_first: bool,
    is_second: bool,
    is_third: bool,
    is_others: bool,
    is_others_text: str,
    client: Optional[DocumentsClient] = None,
) -> SubmissionResult:
    """Record a contact/lead request. Never raises; failures come back as ``success=False``."""
    owned = client is None
    client = client or DocumentsClient()
    try:
        await client.insert_one(CONTACTS, {
            "email": email,
            "phone": phone,
            "name": name,
            "country": country,
            "isFirst": is_first,
            "isSecond": is_second,
            "isThird": is_third,
            "isOthers": is_others,
            "isOthersText": is_others_text,
            "claimedAt": datetime.now(timezone.utc),
            "from": SOURCE,
        })
        print(f"[liftlog] submissions: contact stored for {email}")
        return SubmissionResult(success=True, message=SUCCESS_MESSAGE)
    except Exception as e:
        print(f"[liftlog] submissions: contact failed: {e}")
        return SubmissionResult(success=False, message=FAILURE_MESSAGE)
    finally:
        if owned:
            await client.close()


async def subscribe_newsletter(email: str, name: str, client: Optional[DocumentsClient] = None) -> SubmissionResult:
    """Add a newsletter subscriber unless the email is already on the list."""
    owned = client is None
    client = client or DocumentsClient()
    try:
        existing = await client.find_one(SUBSCRIBERS, {"email": email})
        if existing:
            return SubmissionResult(success=False, message=DUPLICATE_MESSAGE)
        await client.insert_one(SUBSCRIBERS, {
            "email": email,
            "name": name,
            "subscribedAt": datetime.now(timezone.utc),
            "from": SOURCE,
        })
        print(f"[liftlog] submissions: subscribed {email}")
        return SubmissionResult(success=True, message=SUCCESS_MESSAGE)
    except Exception as e:
        print(f"[liftlog] submissions: newsletter failed: {e}")
        return SubmissionResult(success=False, message=FAILURE_MESSAGE)
    finally:
        if owned:
            await client.close()


async def get_documents_client() -> AsyncIterator[DocumentsClient]:
    client = DocumentsClient()
    try:
        yield client
    finally:
        await client.close()


@router.post("/contact")
async def contact(form: ContactForm, client: DocumentsClient = Depends(get_documents_client)) -> SubmissionResult:
    return await claim_email(
        form.email,
        form.phone,
        form.name,
        form.country,
        form.is_first,
        form.is_second,
        form.is_third,
        form.is_others,
        form.is_others_text,
        client=client,
    )


@router.post("/newsletter")
async def newsletter(form: NewsletterForm, client: DocumentsClient = Depends(get_documents_client)) -> SubmissionResult:
    return await subscribe_newsletter(form.email, form.name, client=client)
