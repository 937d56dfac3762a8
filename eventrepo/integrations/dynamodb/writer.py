"""Conditional event writes for DynamoDB."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from aiobotocore.client import AioBaseClient
from botocore.exceptions import ClientError

from ...aggregates import AggregateRegistry
from ...domain import (
    Event,
    EventValidator,
    candidate_aggregate_name,
    timestamp_ms,
    validate_event,
)
from .expressions import not_exists_condition
from .records import RecordTransformer

LOGGER = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def is_conditional_check_failure(err: ClientError) -> bool:
    """Whether a client error reports a failed write condition."""
    return err.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


class EventWriter:
    """Appends events with optimistic concurrency control.

    Every event is written with a put conditioned on no item existing at the
    same (aggregate id, sequence number) key. DynamoDB evaluates the
    condition atomically with the write, so of all concurrent appends for one
    key exactly one succeeds. The writer itself holds no locks.
    """

    def __init__(
        self,
        client: AioBaseClient,
        registry: AggregateRegistry,
        validator: EventValidator = validate_event,
        clock: Callable[[], int] = timestamp_ms,
    ):
        self._client = client
        self._registry = registry
        self._validator = validator
        self._clock = clock
        self._transformers = {
            name: RecordTransformer(name, config) for name, config in registry.items()
        }

    async def append(self, event: Event | Mapping[str, Any]) -> bool:
        """Write one event unless its key is already taken.

        Args:
            event: The event to persist

        Returns:
            True once the event is stored, False if an event already exists
            at its sequence number for the aggregate instance

        Raises:
            UnknownAggregateError: If the aggregate name is not registered,
                checked before the event itself is validated
            InvalidEventError: If validation fails; nothing is written
            botocore.exceptions.ClientError: For any store error other than
                the failed write condition
            botocore.exceptions.BotoCoreError: For transport failures such
                as unreachable endpoints and timeouts
        """
        aggregate_name = candidate_aggregate_name(event)
        if aggregate_name is not None:
            self._registry.resolve(aggregate_name, "append")

        candidate = self._validator(event)
        config = self._registry.resolve(candidate.aggregate_name, "append")
        transformer = self._transformers[candidate.aggregate_name]

        stamped = candidate.model_copy(update={"event_timestamp": self._clock()})
        params = {
            "TableName": config.table_name,
            "Item": transformer.to_item(stamped),
            **not_exists_condition(config.aggregate_id_field),
        }

        extra = {
            "aggregate_name": candidate.aggregate_name,
            "aggregate_id": candidate.aggregate_id,
            "sequence_number": candidate.sequence_number,
            "table_name": config.table_name,
        }

        try:
            await self._client.put_item(**params)
        except ClientError as err:
            if not is_conditional_check_failure(err):
                raise
            LOGGER.info("Sequence number already taken", extra=extra)
            return False

        LOGGER.debug("Appended event", extra=extra)
        return True
