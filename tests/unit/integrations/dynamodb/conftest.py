"""Fixtures for DynamoDB unit tests.

A real aiobotocore client is created and its DynamoDB operations are routed
to an in-process FakeDynamoDB, so the client's paginator and waiter code
runs unchanged without any network access.
"""

import pytest
import pytest_asyncio
from aiobotocore.session import get_session

from eventrepo.integrations.dynamodb import DynamoDBEventRepository
from tests.fixtures.fake_dynamodb import FakeDynamoDB

# Nothing listens here; requests that reach the network fail immediately.
UNREACHABLE_ENDPOINT = "http://127.0.0.1:1"


@pytest.fixture
def fake_dynamodb() -> FakeDynamoDB:
    """Create a fake DynamoDB with the book and author tables."""
    fake = FakeDynamoDB(page_size=2)
    fake.add_table("bookEvent", hash_key="bookId")
    fake.add_table("authorEvent", hash_key="authorId")
    return fake


@pytest_asyncio.fixture
async def dynamodb_client(fake_dynamodb: FakeDynamoDB):
    """Create an aiobotocore DynamoDB client bound to the fake."""
    session = get_session()
    async with session.create_client(
        "dynamodb",
        region_name="us-east-1",
        endpoint_url=UNREACHABLE_ENDPOINT,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    ) as client:
        fake_dynamodb.bind(client)
        yield client


@pytest.fixture
def repository(dynamodb_client, aggregates) -> DynamoDBEventRepository:
    """Create a DynamoDB event repository on the fake client."""
    return DynamoDBEventRepository(dynamodb_client, aggregates)
