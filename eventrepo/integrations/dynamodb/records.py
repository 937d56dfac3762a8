"""Conversion between domain events and DynamoDB items.

Two layers are involved:

- Marshalling between plain Python values and DynamoDB AttributeValues
  (``{"S": "..."}``, ``{"N": "..."}``...), using boto3's type serializer.
- RecordTransformer, which maps an Event to the physical record of its
  aggregate's table and back. The aggregate id is stored under the
  aggregate's own attribute name and the aggregate name is implied by the
  table, so neither ``aggregateName`` nor ``aggregateId`` is written.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from pydantic.alias_generators import to_camel

from ...aggregates import AggregateConfig
from ...domain import Event

_SERIALIZER = TypeSerializer()
_DESERIALIZER = TypeDeserializer()

# Attribute names an Event is rebuilt from; other stored attributes are ignored.
_EVENT_ATTRIBUTES = frozenset(
    field.alias or to_camel(name) for name, field in Event.model_fields.items()
)


def _to_store_value(value: Any) -> Any:
    # DynamoDB numbers are decimals; the serializer refuses floats.
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, Mapping):
        return {key: _to_store_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_store_value(item) for item in value]
    return value


def _from_store_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, dict):
        return {key: _from_store_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_store_value(item) for item in value]
    if isinstance(value, set):
        return {_from_store_value(item) for item in value}
    return value


def serialize_value(value: Any) -> dict[str, Any]:
    """Marshal one Python value into a DynamoDB AttributeValue."""
    return _SERIALIZER.serialize(_to_store_value(value))


def serialize_item(record: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Marshal a plain record into a DynamoDB item."""
    return {key: serialize_value(value) for key, value in record.items()}


def deserialize_item(item: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Unmarshal a DynamoDB item into a plain record.

    Numbers are unwrapped: integral values become ``int`` and the rest
    ``float``, including inside nested maps and lists.
    """
    return {
        key: _from_store_value(_DESERIALIZER.deserialize(value))
        for key, value in item.items()
    }


class RecordTransformer:
    """Maps events of one aggregate type to and from physical records.

    Examples:
        >>> transformer = RecordTransformer("book", AggregateConfig("bookEvent", "bookId"))
        >>> record = transformer.to_record(event)
        >>> record["bookId"] == event.aggregate_id
        True
        >>> transformer.from_record(record) == event
        True
    """

    def __init__(self, aggregate_name: str, config: AggregateConfig):
        self.aggregate_name = aggregate_name
        self.config = config

    def to_record(self, event: Event) -> dict[str, Any]:
        """Convert an event into the physical record of its table."""
        record = event.to_wire()
        del record["aggregateName"]
        del record["aggregateId"]
        record[self.config.aggregate_id_field] = event.aggregate_id
        return record

    def from_record(self, record: Mapping[str, Any]) -> Event:
        """Convert a physical record back into an event.

        The aggregate id attribute is removed and reinstated as
        ``aggregate_id``, and the aggregate name is reattached. Attributes
        that are not part of an event, such as a TTL attribute, are dropped.
        """
        aggregate_id = record[self.config.aggregate_id_field]
        fields = {key: value for key, value in record.items() if key in _EVENT_ATTRIBUTES}
        fields["aggregateName"] = self.aggregate_name
        fields["aggregateId"] = aggregate_id
        return Event.model_validate(fields)

    def to_item(self, event: Event) -> dict[str, dict[str, Any]]:
        """Convert an event into a marshalled DynamoDB item."""
        return serialize_item(self.to_record(event))

    def from_item(self, item: Mapping[str, Mapping[str, Any]]) -> Event:
        """Convert a marshalled DynamoDB item back into an event."""
        return self.from_record(deserialize_item(item))
