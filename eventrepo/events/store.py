"""Event repository interface and in-memory implementation."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any

from ..aggregates import AggregateConfig, AggregateRegistry
from ..domain import (
    Event,
    EventValidator,
    candidate_aggregate_name,
    timestamp_ms,
    validate_event,
)

LOGGER = logging.getLogger(__name__)


class EventRepository(ABC):
    """Abstract interface for durable event persistence.

    EventRepository persists events as an immutable, append-only log per
    aggregate instance. Each stream can be read back in order to rebuild the
    aggregate's state.

    Key responsibilities:
    - **Routing**: Events are stored per aggregate type
    - **Ordering**: Streams are returned by ascending sequence number
    - **Concurrency Control**: Optimistic, keyed on the sequence number
    - **Immutability**: Stored events are never updated or deleted
    """

    @abstractmethod
    async def append(self, event: Event | Mapping[str, Any]) -> bool:
        """Append one event to its aggregate's stream.

        Args:
            event: The event to persist, as an Event or an event shaped
                mapping. It is validated before anything is written.

        Returns:
            True if the event was stored. False if another event already
            occupies ``sequence_number`` for the aggregate instance; the
            caller should derive a fresh sequence number and retry.

        Raises:
            InvalidEventError: If the event fails validation
            UnknownAggregateError: If the aggregate name is not registered
        """
        ...

    @abstractmethod
    async def list(
        self,
        aggregate_name: str,
        aggregate_id: str,
        greater_than_version: int = 0,
    ) -> list[Event]:
        """Load the events of an aggregate instance.

        Args:
            aggregate_name: The aggregate type name
            aggregate_id: The aggregate instance id
            greater_than_version: Only events with a sequence number strictly
                greater than this value are returned. Use 0 for all events,
                or a snapshot version to load only the newer events.

        Returns:
            Events ordered by ascending sequence number. Empty if the
            aggregate instance has no events above the watermark.

        Raises:
            UnknownAggregateError: If the aggregate name is not registered
        """
        ...


def check_stream_arguments(aggregate_id: Any, greater_than_version: Any) -> None:
    """Reject stream lookups that could never match a stored event.

    Raises:
        ValueError: If the aggregate id is not a non-empty string or the
            watermark is not a non-negative integer
    """
    if not isinstance(aggregate_id, str) or not aggregate_id:
        raise ValueError("aggregate_id must be a non-empty string")
    if (
        not isinstance(greater_than_version, int)
        or isinstance(greater_than_version, bool)
        or greater_than_version < 0
    ):
        raise ValueError("greater_than_version must be a non-negative integer")


class InMemoryEventRepository(EventRepository):
    """Dictionary-based in-memory event repository for testing.

    Stores events in a dictionary keyed by (table name, aggregate id). Each
    stream is kept as a dictionary of sequence number to event, so the
    conflict check mirrors the conditional write of a real store.

    This implementation is suitable for:
    - Unit tests (fast, no external dependencies)
    - Development and experimentation
    - Examples and documentation

    **NOT suitable for production** due to:
    - No durability (data lost on restart)
    - No distributed coordination
    - Memory usage grows unbounded

    Examples:
        >>> repository = InMemoryEventRepository(
        ...     {"book": {"table_name": "bookEvent", "aggregate_id_field": "bookId"}}
        ... )
        >>> await repository.append(event)
        True
        >>> await repository.list("book", event.aggregate_id)
        [Event(...)]
    """

    def __init__(
        self,
        aggregates: Mapping[str, AggregateConfig | Mapping[str, Any]],
        *,
        validator: EventValidator = validate_event,
        clock: Callable[[], int] = timestamp_ms,
    ) -> None:
        """Initialize an empty in-memory repository.

        Args:
            aggregates: Mapping of aggregate name to its configuration
            validator: Validation applied to every event before it is stored
            clock: Source of epoch millisecond timestamps for stored events

        Raises:
            ConfigurationError: If the aggregate configuration is invalid
        """
        self.aggregates = AggregateRegistry(aggregates)
        self._validator = validator
        self._clock = clock
        self._streams: dict[tuple[str, str], dict[int, Event]] = defaultdict(dict)

    async def append(self, event: Event | Mapping[str, Any]) -> bool:
        """Store the event unless its sequence number is already taken."""
        aggregate_name = candidate_aggregate_name(event)
        if aggregate_name is not None:
            self.aggregates.resolve(aggregate_name, "append")

        candidate = self._validator(event)
        config = self.aggregates.resolve(candidate.aggregate_name, "append")

        stream = self._streams[(config.table_name, candidate.aggregate_id)]
        if candidate.sequence_number in stream:
            LOGGER.info(
                "Sequence number already taken",
                extra={
                    "aggregate_name": candidate.aggregate_name,
                    "aggregate_id": candidate.aggregate_id,
                    "sequence_number": candidate.sequence_number,
                },
            )
            return False

        stream[candidate.sequence_number] = candidate.model_copy(
            update={"event_timestamp": self._clock()}
        )
        return True

    async def list(
        self,
        aggregate_name: str,
        aggregate_id: str,
        greater_than_version: int = 0,
    ) -> list[Event]:
        """Return the stored events above the watermark in sequence order.

        Streams are kept per table, so the requested aggregate name is
        reattached to every event read, as a table read does.
        """
        config = self.aggregates.resolve(aggregate_name, "list")
        check_stream_arguments(aggregate_id, greater_than_version)

        stream = self._streams.get((config.table_name, aggregate_id), {})
        return [
            stream[sequence_number].model_copy(update={"aggregate_name": aggregate_name})
            for sequence_number in sorted(stream)
            if sequence_number > greater_than_version
        ]
