"""Unit tests for DynamoDBEventRepository against the fake DynamoDB."""

from unittest.mock import AsyncMock

import pytest
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError

from eventrepo import InvalidEventError, UnknownAggregateError, new_event_id
from eventrepo.domain import timestamp_ms
from eventrepo.integrations.dynamodb import (
    DynamoDBConfig,
    DynamoDBConnectionManager,
    DynamoDBEventRepository,
)
from tests.fixtures.events import (
    make_set_author_event,
    make_set_publisher_event,
    make_set_title_event,
    without_timestamps,
)
from tests.fixtures.fake_dynamodb import FakeDynamoDB, client_error


@pytest.mark.asyncio
async def test_append_valid_events(repository, book_id):
    """Test that consecutive events are stored and read back in order."""
    event1 = make_set_author_event(book_id, 1)
    event2 = make_set_title_event(book_id, 2)

    assert await repository.append(event1) is True
    assert await repository.append(event2) is True

    events = await repository.list("book", book_id)

    assert without_timestamps(events) == [event1, event2]


@pytest.mark.asyncio
async def test_append_accepts_mapping(repository, book_id):
    """Test that an event shaped mapping is validated and stored."""
    event = make_set_author_event(book_id, 1)

    assert await repository.append(event.to_wire()) is True

    events = await repository.list("book", book_id)
    assert without_timestamps(events) == [event]


@pytest.mark.asyncio
async def test_append_stale_sequence_number_returns_false(repository, book_id):
    """Test that a taken sequence number is reported as False, not raised."""
    event1 = make_set_author_event(book_id, 1)
    event2 = make_set_title_event(book_id, 1)

    await repository.append(event1)
    result = await repository.append(event2)

    assert result is False
    events = await repository.list("book", book_id)
    assert without_timestamps(events) == [event1]


@pytest.mark.asyncio
async def test_append_invalid_event_raises(repository, fake_dynamodb, book_id):
    """Test that an event missing its type is rejected before any write."""
    with pytest.raises(InvalidEventError) as exc_info:
        await repository.append(
            {
                "aggregateName": "book",
                "aggregateId": book_id,
                "eventId": new_event_id(),
                "metadata": {},
                "payload": {},
                "sequenceNumber": 1,
            }
        )

    assert exc_info.value.errors[0]["loc"] == ("type",)
    assert not [call for call in fake_dynamodb.calls if call[0] == "PutItem"]
    assert await repository.list("book", book_id) == []


@pytest.mark.asyncio
async def test_append_unknown_aggregate_raises(repository, book_id):
    """Test that appending to an unregistered aggregate fails."""
    event = make_set_author_event(book_id, 1).model_copy(update={"aggregate_name": "film"})

    with pytest.raises(UnknownAggregateError, match='append: unknown aggregate "film"'):
        await repository.append(event)


@pytest.mark.asyncio
async def test_append_unknown_aggregate_checked_before_validation(
    repository, fake_dynamodb, book_id
):
    """Test that an unknown aggregate is reported even for a malformed event."""
    with pytest.raises(UnknownAggregateError, match='append: unknown aggregate "film"'):
        await repository.append(
            {
                "aggregateName": "film",
                "aggregateId": book_id,
                "eventId": new_event_id(),
                "metadata": {},
                "payload": {},
                "sequenceNumber": 1,
            }
        )

    assert not [call for call in fake_dynamodb.calls if call[0] == "PutItem"]


@pytest.mark.asyncio
async def test_append_without_aggregate_name_is_invalid(repository, book_id):
    """Test that a missing aggregate name is reported by validation."""
    candidate = make_set_author_event(book_id, 1).to_wire()
    del candidate["aggregateName"]

    with pytest.raises(InvalidEventError) as exc_info:
        await repository.append(candidate)

    assert exc_info.value.errors[0]["loc"] == ("aggregateName",)


@pytest.mark.asyncio
async def test_list_ignores_foreign_attributes(repository, fake_dynamodb, book_id):
    """Test that stored attributes outside the event fields are skipped on read."""
    event = make_set_author_event(book_id, 1)
    await repository.append(event)
    [item] = fake_dynamodb.tables["bookEvent"].items.values()
    item["expiresAt"] = {"N": "1700000000"}

    loaded = await repository.list("book", book_id)

    assert without_timestamps(loaded) == [event]


@pytest.mark.asyncio
async def test_append_uses_conditional_put(repository, fake_dynamodb, book_id):
    """Test the physical record and the write condition sent to DynamoDB."""
    event = make_set_author_event(book_id, 1)

    await repository.append(event)

    operation, params = fake_dynamodb.calls[-1]
    assert operation == "PutItem"
    assert params["TableName"] == "bookEvent"
    assert params["ConditionExpression"] == "attribute_not_exists(#attr0)"
    assert params["ExpressionAttributeNames"] == {"#attr0": "bookId"}
    assert "ExpressionAttributeValues" not in params

    item = params["Item"]
    assert item["bookId"] == {"S": book_id}
    assert item["sequenceNumber"] == {"N": "1"}
    assert "aggregateName" not in item
    assert "aggregateId" not in item


@pytest.mark.asyncio
async def test_append_with_nested_metadata(repository, book_id):
    """Test that nested and empty maps in metadata survive storage."""
    event = make_set_author_event(book_id, 1).model_copy(
        update={"metadata": {"user": {"username": "foo", "groups": {}}}}
    )

    assert await repository.append(event) is True

    events = await repository.list("book", book_id)
    assert without_timestamps(events) == [event]


@pytest.mark.asyncio
async def test_append_adds_timestamp(repository, book_id):
    """Test that persisted events carry the time they were written."""
    start = timestamp_ms()

    await repository.append(make_set_author_event(book_id, 1))
    events = await repository.list("book", book_id)

    assert len(events) == 1
    assert start <= events[0].event_timestamp <= timestamp_ms()


@pytest.mark.asyncio
async def test_append_uses_injected_clock(dynamodb_client, aggregates, book_id):
    """Test that the clock used for timestamps can be replaced."""
    repository = DynamoDBEventRepository(dynamodb_client, aggregates, clock=lambda: 42)

    await repository.append(make_set_author_event(book_id, 1))
    events = await repository.list("book", book_id)

    assert events[0].event_timestamp == 42


@pytest.mark.asyncio
async def test_list_empty_stream(repository, book_id):
    """Test that an aggregate without events yields an empty list."""
    assert await repository.list("book", book_id) == []


@pytest.mark.asyncio
async def test_list_all_events_across_pages(repository, fake_dynamodb, book_id):
    """Test that multiple query pages are combined transparently."""
    events = [
        make_set_author_event(book_id, 1),
        make_set_title_event(book_id, 2),
        make_set_publisher_event(book_id, 3),
    ]
    for event in events:
        await repository.append(event)

    loaded = await repository.list("book", book_id)

    assert without_timestamps(loaded) == events
    queries = [call for call in fake_dynamodb.calls if call[0] == "Query"]
    assert len(queries) == 2  # page size of the fake is 2


@pytest.mark.asyncio
async def test_list_greater_than_version(repository, book_id):
    """Test that only events above the watermark are returned."""
    event1 = make_set_author_event(book_id, 1)
    event2 = make_set_title_event(book_id, 2)
    event3 = make_set_publisher_event(book_id, 3)
    for event in (event1, event2, event3):
        await repository.append(event)

    assert without_timestamps(await repository.list("book", book_id, 2)) == [event3]
    assert without_timestamps(await repository.list("book", book_id, 1)) == [event2, event3]
    assert await repository.list("book", book_id, 3) == []
    assert await repository.list("book", book_id, 4) == []


@pytest.mark.asyncio
async def test_list_key_condition(repository, fake_dynamodb, book_id):
    """Test the key condition sent to DynamoDB."""
    await repository.list("book", book_id, 5)

    operation, params = fake_dynamodb.calls[-1]
    assert operation == "Query"
    assert params["TableName"] == "bookEvent"
    assert params["KeyConditionExpression"] == "#attr0 = :val1 and #attr2 >= :val3"
    assert params["ExpressionAttributeNames"] == {"#attr0": "bookId", "#attr2": "sequenceNumber"}
    assert params["ExpressionAttributeValues"] == {":val1": {"S": book_id}, ":val3": {"N": "6"}}
    assert "ConsistentRead" not in params


@pytest.mark.asyncio
async def test_list_read_options(dynamodb_client, fake_dynamodb, aggregates, book_id):
    """Test that consistent reads and page size are forwarded."""
    repository = DynamoDBEventRepository(
        dynamodb_client, aggregates, consistent_read=True, page_size=1
    )
    for sequence_number in (1, 2, 3):
        await repository.append(make_set_author_event(book_id, sequence_number))

    loaded = await repository.list("book", book_id)

    assert [event.sequence_number for event in loaded] == [1, 2, 3]
    queries = [params for operation, params in fake_dynamodb.calls if operation == "Query"]
    assert len(queries) == 3
    assert all(params["ConsistentRead"] is True for params in queries)
    assert all(params["Limit"] == 1 for params in queries)


@pytest.mark.asyncio
async def test_list_is_scoped_to_aggregate_instance(repository, book_id):
    """Test that streams of other instances do not leak into a read."""
    other_id = new_event_id()
    await repository.append(make_set_author_event(book_id, 1))
    await repository.append(make_set_author_event(other_id, 1))

    loaded = await repository.list("book", book_id)

    assert [event.aggregate_id for event in loaded] == [book_id]


@pytest.mark.asyncio
async def test_aggregates_use_their_own_tables(repository, fake_dynamodb, book_id):
    """Test that each aggregate type is routed to its table and id field."""
    author_event = make_set_author_event(book_id, 1).model_copy(
        update={"aggregate_name": "author"}
    )

    await repository.append(author_event)

    assert len(fake_dynamodb.tables["authorEvent"].items) == 1
    assert fake_dynamodb.tables["bookEvent"].items == {}
    assert await repository.list("book", book_id) == []
    loaded = await repository.list("author", book_id)
    assert without_timestamps(loaded) == [author_event]


@pytest.mark.asyncio
async def test_iter_events(repository, book_id):
    """Test lazy iteration of a stream."""
    for sequence_number in (1, 2, 3):
        await repository.append(make_set_author_event(book_id, sequence_number))

    sequence_numbers = [
        event.sequence_number async for event in repository.iter_events("book", book_id, 1)
    ]

    assert sequence_numbers == [2, 3]


@pytest.mark.asyncio
async def test_list_unknown_aggregate_raises(repository, book_id):
    """Test that reading an unregistered aggregate fails."""
    with pytest.raises(UnknownAggregateError, match='list: unknown aggregate "film"'):
        await repository.list("film", book_id)


@pytest.mark.asyncio
async def test_list_rejects_malformed_arguments(repository, book_id):
    """Test that empty ids and negative watermarks are refused."""
    with pytest.raises(ValueError):
        await repository.list("book", "")
    with pytest.raises(ValueError):
        await repository.list("book", book_id, -1)


@pytest.mark.asyncio
async def test_transport_error_is_not_a_conflict(repository, dynamodb_client, book_id):
    """Test that network failures propagate instead of returning False."""
    dynamodb_client.put_item = AsyncMock(
        side_effect=EndpointConnectionError(endpoint_url="http://127.0.0.1:1")
    )

    with pytest.raises(BotoCoreError):
        await repository.append(make_set_author_event(book_id, 1))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code",
    [
        "ProvisionedThroughputExceededException",
        "AccessDeniedException",
        "ResourceNotFoundException",
        "ValidationException",
    ],
)
async def test_store_errors_propagate_unchanged(repository, dynamodb_client, book_id, code):
    """Test that only the failed write condition is translated to False."""
    error = client_error(code, "PutItem")
    dynamodb_client.put_item = AsyncMock(side_effect=error)

    with pytest.raises(ClientError) as exc_info:
        await repository.append(make_set_author_event(book_id, 1))

    assert exc_info.value is error


@pytest.mark.asyncio
async def test_query_errors_propagate(repository, dynamodb_client, book_id):
    """Test that read failures reach the caller."""
    dynamodb_client.query = AsyncMock(side_effect=client_error("AccessDeniedException", "Query"))

    with pytest.raises(ClientError):
        await repository.list("book", book_id)


@pytest.mark.asyncio
async def test_unreachable_endpoint_raises(aggregates, book_id):
    """Test that an unreachable endpoint surfaces as a transport error."""
    config = DynamoDBConfig(
        endpoint_url="http://127.0.0.1:1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        connect_timeout=1,
        read_timeout=1,
        max_attempts=1,
    )
    async with DynamoDBConnectionManager(config) as manager:
        repository = manager.repository(aggregates)

        with pytest.raises(BotoCoreError):
            await repository.append(make_set_author_event(book_id, 1))


@pytest.mark.asyncio
async def test_initialize_schema_creates_tables(dynamodb_client, aggregates):
    """Test that every registered aggregate gets its table."""
    fake = FakeDynamoDB()
    fake.bind(dynamodb_client)
    repository = DynamoDBEventRepository(dynamodb_client, aggregates)

    await repository.initialize_schema()

    assert fake.tables["bookEvent"].hash_key == "bookId"
    assert fake.tables["bookEvent"].range_key == "sequenceNumber"
    assert fake.tables["authorEvent"].hash_key == "authorId"


@pytest.mark.asyncio
async def test_initialize_schema_tolerates_existing_tables(repository, fake_dynamodb, book_id):
    """Test that existing tables and their events are left untouched."""
    await repository.append(make_set_author_event(book_id, 1))

    await repository.initialize_schema()

    assert len(await repository.list("book", book_id)) == 1
