"""Storage configuration for a single aggregate type."""

from dataclasses import dataclass

# Attributes written on every physical record; an aggregate id attribute with
# one of these names would be overwritten by event data.
RESERVED_RECORD_FIELDS = frozenset(
    {"eventId", "type", "metadata", "payload", "sequenceNumber", "eventTimestamp"}
)

SEQUENCE_NUMBER_FIELD = "sequenceNumber"


@dataclass(frozen=True)
class AggregateConfig:
    """Where and how the events of one aggregate type are stored.

    Each aggregate type gets its own table. The table is keyed on the
    aggregate id (partition key, string) and ``sequenceNumber`` (sort key,
    number). The attribute holding the aggregate id is configurable so each
    table can use a meaningful name such as ``bookId``.

    Attributes:
        table_name: Name of the table holding the aggregate's events
        aggregate_id_field: Attribute name used for the aggregate id

    Examples:
        >>> AggregateConfig(table_name="bookEvent", aggregate_id_field="bookId")
    """

    table_name: str
    aggregate_id_field: str
