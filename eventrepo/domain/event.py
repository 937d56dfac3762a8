import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from ulid import ULID


def new_event_id() -> str:
    """Generate a new unique event identifier.

    Returns:
        A ULID rendered as a 26 character string

    Note:
        ULIDs sort lexicographically by creation time, which keeps event ids
        roughly ordered when inspecting a table by hand.
    """
    return str(ULID())


def timestamp_ms() -> int:
    """Get the current wall clock time in epoch milliseconds.

    Used as the default clock for stamping ``eventTimestamp`` when an event
    is persisted.
    """
    return time.time_ns() // 1_000_000


class Event(BaseModel):
    """Immutable record of a state change in an aggregate instance.

    Event is the unit of persistence of the repository. Each event is a fact
    produced by a command handler for one aggregate instance and is:

    - **Immutable**: Once created, events cannot be modified
    - **Ordered**: ``sequence_number`` positions the event in its stream
    - **Routed**: ``aggregate_name`` selects the table the event lives in
    - **Identifiable**: Each event carries a caller supplied unique id

    The model uses snake_case attributes in Python and camelCase names on the
    wire (``aggregateName``, ``sequenceNumber``...), which is the shape of the
    physical records as well as of mapping input.

    Attributes:
        aggregate_name: Aggregate type name, selects the storage table
        aggregate_id: Identifies the aggregate instance (partition key)
        event_id: Unique identifier for this event instance
        type: Discriminator used to interpret the payload
        metadata: Arbitrary contextual data (may be empty)
        payload: Event specific data (may be empty)
        sequence_number: Position in the aggregate's stream (1-indexed)
        event_timestamp: Epoch milliseconds assigned when the event was
            persisted; ``None`` until the event has been written

    Examples:
        >>> event = Event(
        ...     aggregate_name="book",
        ...     aggregate_id="b-1",
        ...     event_id=new_event_id(),
        ...     type="AUTHOR_SET",
        ...     metadata={"userId": 1234},
        ...     payload={"author": "Fitzgerald"},
        ...     sequence_number=1,
        ... )
        >>> event.to_wire()["sequenceNumber"]
        1
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    aggregate_name: str = Field(min_length=1, description="Aggregate type name")
    aggregate_id: str = Field(min_length=1, description="Aggregate instance identifier")
    event_id: str = Field(min_length=1, description="Unique identifier for this event")
    type: str = Field(min_length=1, description="Event type discriminator")
    metadata: dict[str, Any] = Field(description="Contextual data, may be empty")
    payload: dict[str, Any] = Field(description="Event specific data")
    sequence_number: int = Field(
        strict=True,
        ge=1,
        description="Position in aggregate's event stream (1-indexed, monotonically increasing)",
    )
    event_timestamp: int | None = Field(
        default=None,
        description="Epoch milliseconds assigned when the event was persisted",
    )

    def to_wire(self) -> dict[str, Any]:
        """Render the event as a camelCase mapping.

        ``eventTimestamp`` is omitted until the event has been persisted.
        """
        exclude = {"event_timestamp"} if self.event_timestamp is None else None
        return self.model_dump(by_alias=True, exclude=exclude)

    def without_timestamp(self) -> "Event":
        """Return a copy of the event as it was before it was persisted."""
        return self.model_copy(update={"event_timestamp": None})
