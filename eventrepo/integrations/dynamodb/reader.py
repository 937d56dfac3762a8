"""Ordered event stream reads for DynamoDB."""

import logging
from collections.abc import AsyncIterator
from typing import Any

from aiobotocore.client import AioBaseClient

from ...aggregates import AggregateRegistry
from ...domain import Event
from ...events.store import check_stream_arguments
from .expressions import key_condition
from .records import RecordTransformer

LOGGER = logging.getLogger(__name__)


class EventReader:
    """Reads the event stream of an aggregate instance.

    A stream is one partition of the aggregate's table. DynamoDB returns a
    partition's items sorted by ascending sort key, which is the sequence
    number, so pages arrive already in stream order. Pagination is driven by
    the client's ``query`` paginator and never surfaces to callers.
    """

    def __init__(
        self,
        client: AioBaseClient,
        registry: AggregateRegistry,
        *,
        consistent_read: bool = False,
        page_size: int | None = None,
    ):
        """Initialize the reader.

        Args:
            client: aiobotocore DynamoDB client
            registry: Aggregate routing
            consistent_read: Request strongly consistent reads
            page_size: Maximum number of items per query page, None lets
                DynamoDB size the pages
        """
        self._client = client
        self._registry = registry
        self._consistent_read = consistent_read
        self._page_size = page_size
        self._transformers = {
            name: RecordTransformer(name, config) for name, config in registry.items()
        }

    async def iter_events(
        self,
        aggregate_name: str,
        aggregate_id: str,
        greater_than_version: int = 0,
    ) -> AsyncIterator[Event]:
        """Lazily yield the events above the watermark in sequence order.

        Pages are requested from the store as iteration progresses.

        Raises:
            UnknownAggregateError: If the aggregate name is not registered
            ValueError: If the aggregate id or the watermark is malformed
        """
        config = self._registry.resolve(aggregate_name, "list")
        check_stream_arguments(aggregate_id, greater_than_version)
        transformer = self._transformers[aggregate_name]

        params: dict[str, Any] = {
            "TableName": config.table_name,
            **key_condition(config.aggregate_id_field, aggregate_id, greater_than_version + 1),
        }
        if self._consistent_read:
            params["ConsistentRead"] = True
        if self._page_size is not None:
            params["PaginationConfig"] = {"PageSize": self._page_size}

        paginator = self._client.get_paginator("query")
        async for page in paginator.paginate(**params):
            for item in page.get("Items", []):
                yield transformer.from_item(item)

    async def list(
        self,
        aggregate_name: str,
        aggregate_id: str,
        greater_than_version: int = 0,
    ) -> list[Event]:
        """Load every event above the watermark in sequence order.

        Returns:
            The complete stream above ``greater_than_version``, possibly
            empty

        Raises:
            UnknownAggregateError: If the aggregate name is not registered
            botocore.exceptions.ClientError: For errors reported by DynamoDB
            botocore.exceptions.BotoCoreError: For transport failures
        """
        events = [
            event
            async for event in self.iter_events(aggregate_name, aggregate_id, greater_than_version)
        ]
        LOGGER.debug(
            "Loaded events",
            extra={
                "aggregate_name": aggregate_name,
                "aggregate_id": aggregate_id,
                "greater_than_version": greater_than_version,
                "event_count": len(events),
            },
        )
        return events
