"""DynamoDB implementation of EventRepository for event sourcing.

This module provides a DynamoDB-backed event repository using aiobotocore for
durable event persistence with optimistic concurrency control.
"""

from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

from aiobotocore.client import AioBaseClient

from ...aggregates import AggregateConfig, AggregateRegistry
from ...domain import ConfigurationError, Event, EventValidator, timestamp_ms, validate_event
from ...events import EventRepository
from .reader import EventReader
from .schema import create_table
from .writer import EventWriter


def _is_dynamodb_client(client: Any) -> bool:
    return (
        isinstance(client, AioBaseClient)
        and client.meta.service_model.service_name == "dynamodb"
    )


class DynamoDBEventRepository(EventRepository):
    """DynamoDB implementation of the EventRepository interface.

    This implementation stores each aggregate type in its own table with:
    - The aggregate id attribute as partition key (string)
    - ``sequenceNumber`` as sort key (number)
    - Conditional puts for optimistic concurrency control
    - Paginated key condition queries for ordered stream reads

    Attributes:
        aggregates: The validated aggregate registry

    Examples:
        >>> session = aiobotocore.session.get_session()
        >>> async with session.create_client("dynamodb") as client:
        ...     repository = DynamoDBEventRepository(
        ...         client,
        ...         {"book": {"table_name": "bookEvent", "aggregate_id_field": "bookId"}},
        ...     )
        ...     await repository.initialize_schema()
        ...
        ...     # Append events
        ...     await repository.append(event)
        ...
        ...     # Load events
        ...     events = await repository.list("book", book_id)
    """

    def __init__(
        self,
        client: AioBaseClient | None = None,
        aggregates: Mapping[str, AggregateConfig | Mapping[str, Any]] | None = None,
        *,
        validator: EventValidator = validate_event,
        consistent_read: bool = False,
        page_size: int | None = None,
        clock: Callable[[], int] = timestamp_ms,
        wait_delay: int = 1,
        wait_max_attempts: int = 60,
    ):
        """Initialize the DynamoDB event repository.

        Args:
            client: aiobotocore DynamoDB client
            aggregates: Mapping of aggregate name to its configuration
            validator: Validation applied to every event before it is written
            consistent_read: Request strongly consistent reads when listing
            page_size: Maximum number of items per query page
            clock: Source of epoch millisecond timestamps for written events
            wait_delay: Seconds between polls while waiting for new tables
            wait_max_attempts: Polls before giving up on a new table

        Raises:
            ConfigurationError: If the aggregate configuration is invalid or
                the client is missing or not a DynamoDB client
        """
        self.aggregates = AggregateRegistry(aggregates)

        if client is None:
            raise ConfigurationError("client required")
        if not _is_dynamodb_client(client):
            raise ConfigurationError("invalid client: expected an aiobotocore DynamoDB client")

        self.client = client
        self._wait_delay = wait_delay
        self._wait_max_attempts = wait_max_attempts
        self._writer = EventWriter(client, self.aggregates, validator, clock)
        self._reader = EventReader(
            client,
            self.aggregates,
            consistent_read=consistent_read,
            page_size=page_size,
        )

    async def initialize_schema(self) -> None:
        """Create the event table of every registered aggregate.

        Tables that already exist are left as they are.

        Examples:
            >>> await repository.initialize_schema()
        """
        for _, config in self.aggregates.items():
            await create_table(
                self.client,
                config,
                wait_delay=self._wait_delay,
                wait_max_attempts=self._wait_max_attempts,
            )

    async def append(self, event: Event | Mapping[str, Any]) -> bool:
        """Append one event with optimistic concurrency control.

        Args:
            event: The event to persist

        Returns:
            True once stored, False if its sequence number is already taken

        Raises:
            InvalidEventError: If validation fails; nothing is written
            UnknownAggregateError: If the aggregate name is not registered
            botocore.exceptions.ClientError: For store errors other than the
                failed write condition
            botocore.exceptions.BotoCoreError: For transport failures

        Examples:
            >>> if not await repository.append(event):
            ...     # Lost the race, reload and retry with a fresh sequence number
            ...     ...
        """
        return await self._writer.append(event)

    def iter_events(
        self,
        aggregate_name: str,
        aggregate_id: str,
        greater_than_version: int = 0,
    ) -> AsyncIterator[Event]:
        """Lazily iterate an aggregate instance's events in sequence order.

        Examples:
            >>> async for event in repository.iter_events("book", book_id):
            ...     book.apply(event)
        """
        return self._reader.iter_events(aggregate_name, aggregate_id, greater_than_version)

    async def list(
        self,
        aggregate_name: str,
        aggregate_id: str,
        greater_than_version: int = 0,
    ) -> list[Event]:
        """Load an aggregate instance's events above a sequence number.

        Args:
            aggregate_name: The aggregate type name
            aggregate_id: The aggregate instance id
            greater_than_version: Exclusive lower bound on sequence numbers

        Returns:
            Events ordered by ascending sequence number

        Examples:
            >>> # Load all events
            >>> events = await repository.list("book", book_id)
            >>>
            >>> # Load events after a snapshot taken at version 10
            >>> events = await repository.list("book", book_id, greater_than_version=10)
        """
        return await self._reader.list(aggregate_name, aggregate_id, greater_than_version)
