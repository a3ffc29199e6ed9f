"""
Tests for contact and newsletter submissions against an in-memory MongoDB fake.
"""
from datetime import datetime

import pytest
import pytest_asyncio

from liftlog.services.documents_client import DocumentsClient
from liftlog.services.submissions import claim_email, subscribe_newsletter


def stored(mongo, collection):
    return mongo["VISAWISE"][collection].docs


@pytest_asyncio.fixture
async def documents(mongo):
    client = DocumentsClient(uri="mongodb://example.test", client=mongo)
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_subscribe_inserts_new_email(mongo, documents):
    result = await subscribe_newsletter("a@example.com", "Ann", client=documents)

    assert result.success is True
    assert result.message == "Our team will get back to you shortly."
    subscribers = stored(mongo, "SUBSCRIBERS")
    assert len(subscribers) == 1
    assert subscribers[0]["email"] == "a@example.com"
    assert subscribers[0]["from"] == "homepage"
    assert isinstance(subscribers[0]["subscribedAt"], datetime)
    assert subscribers[0]["subscribedAt"].tzinfo is not None


@pytest.mark.asyncio
async def test_subscribe_rejects_duplicate(mongo, documents):
    await subscribe_newsletter("a@example.com", "Ann", client=documents)
    result = await subscribe_newsletter("a@example.com", "Ann again", client=documents)

    assert result.success is False
    assert result.message == "Already subscribed!"
    assert len(stored(mongo, "SUBSCRIBERS")) == 1


@pytest.mark.asyncio
async def test_writes_go_to_configured_database(mongo):
    client = DocumentsClient(uri="mongodb://example.test", database="STAGING", client=mongo)
    await subscribe_newsletter("a@example.com", "Ann", client=client)
    assert list(mongo.databases) == ["STAGING"]
    assert len(mongo["STAGING"]["SUBSCRIBERS"].docs) == 1


@pytest.mark.asyncio
async def test_insert_returns_id_as_string(documents):
    assert await documents.insert_one("SUBSCRIBERS", {"email": "a@example.com"}) == "1"


@pytest.mark.asyncio
async def test_claim_email_stores_contact(mongo, documents):
    result = await claim_email(
        "b@example.com", "+1 555", "Bo", "NL", True, False, True, False, "", client=documents,
    )

    assert result.success is True
    contact = stored(mongo, "CONTACTS")[0]
    assert contact["isFirst"] is True
    assert contact["isThird"] is True
    assert contact["country"] == "NL"
    assert isinstance(contact["claimedAt"], datetime)


@pytest.mark.asyncio
async def test_claim_email_allows_repeat_contacts(mongo, documents):
    await claim_email("b@example.com", "", "Bo", "NL", False, False, False, True, "powerlifting", client=documents)
    await claim_email("b@example.com", "", "Bo", "NL", False, False, False, True, "powerlifting", client=documents)
    assert len(stored(mongo, "CONTACTS")) == 2


@pytest.mark.asyncio
async def test_remote_failure_is_generic_message(failing_mongo):
    client = DocumentsClient(uri="mongodb://example.test", client=failing_mongo)
    try:
        result = await subscribe_newsletter("a@example.com", "Ann", client=client)
        contact = await claim_email("a@example.com", "", "", "", False, False, False, False, "", client=client)
    finally:
        await client.close()

    assert result.success is False
    assert result.message == "An error occurred"
    assert contact.success is False


@pytest.mark.asyncio
async def test_unconfigured_uri_fails_softly():
    client = DocumentsClient()
    try:
        result = await subscribe_newsletter("a@example.com", "Ann", client=client)
    finally:
        await client.close()
    assert result.success is False
    assert result.message == "An error occurred"


@pytest.mark.asyncio
async def test_close_closes_driver(mongo):
    client = DocumentsClient(uri="mongodb://example.test", client=mongo)
    await client.close()
    assert mongo.closed is True
