"""Builders for DynamoDB condition and key condition expressions.

Attribute names are always bound through ``#`` placeholders and values
through ``:`` placeholders. Aggregate id attributes are user configured and
may collide with DynamoDB reserved words (``name``, ``key``, ``owner``...),
which are only legal in expressions as placeholders.
"""

from typing import Any

from ...aggregates import SEQUENCE_NUMBER_FIELD
from .records import serialize_value


class ExpressionAttributes:
    """Placeholder table for one DynamoDB request.

    Names and values share one counter so every placeholder in a request is
    unique. Binding the same attribute name twice reuses its placeholder.

    Examples:
        >>> attributes = ExpressionAttributes()
        >>> attributes.add_name("bookId")
        '#attr0'
        >>> attributes.add_value("b-1")
        ':val1'
        >>> attributes.names
        {'#attr0': 'bookId'}
        >>> attributes.values
        {':val1': {'S': 'b-1'}}
    """

    def __init__(self) -> None:
        self.names: dict[str, str] = {}
        self.values: dict[str, dict[str, Any]] = {}
        self._placeholders: dict[str, str] = {}
        self._counter = 0

    def _next(self) -> int:
        index = self._counter
        self._counter += 1
        return index

    def add_name(self, name: str) -> str:
        """Bind an attribute name and return its placeholder."""
        if name not in self._placeholders:
            placeholder = f"#attr{self._next()}"
            self._placeholders[name] = placeholder
            self.names[placeholder] = name
        return self._placeholders[name]

    def add_value(self, value: Any) -> str:
        """Bind a value and return its placeholder."""
        placeholder = f":val{self._next()}"
        self.values[placeholder] = serialize_value(value)
        return placeholder

    def as_params(self, expression_key: str, expression: str) -> dict[str, Any]:
        """Render request parameters for an expression built on this table.

        Args:
            expression_key: Request parameter receiving the expression, e.g.
                ``KeyConditionExpression`` or ``ConditionExpression``
            expression: The expression text

        Returns:
            Keyword arguments for the client call. The value map is left out
            when empty, since DynamoDB rejects an empty
            ``ExpressionAttributeValues``.
        """
        params: dict[str, Any] = {
            expression_key: expression,
            "ExpressionAttributeNames": dict(self.names),
        }
        if self.values:
            params["ExpressionAttributeValues"] = dict(self.values)
        return params


def key_condition(
    aggregate_id_field: str,
    aggregate_id: str,
    min_sequence_number: int,
) -> dict[str, Any]:
    """Key condition selecting one stream from a sequence number onwards.

    Args:
        aggregate_id_field: Partition key attribute of the table
        aggregate_id: The aggregate instance id
        min_sequence_number: Lowest sequence number to return (inclusive)

    Returns:
        ``KeyConditionExpression`` query parameters
    """
    attributes = ExpressionAttributes()
    id_name = attributes.add_name(aggregate_id_field)
    id_value = attributes.add_value(aggregate_id)
    sequence_name = attributes.add_name(SEQUENCE_NUMBER_FIELD)
    sequence_value = attributes.add_value(min_sequence_number)

    expression = f"{id_name} = {id_value} and {sequence_name} >= {sequence_value}"
    return attributes.as_params("KeyConditionExpression", expression)


def not_exists_condition(aggregate_id_field: str) -> dict[str, Any]:
    """Condition that holds only if no item occupies the written key.

    A put is evaluated against the item with the exact same partition and
    sort key, so checking the partition key attribute is enough.

    Returns:
        ``ConditionExpression`` put parameters
    """
    attributes = ExpressionAttributes()
    id_name = attributes.add_name(aggregate_id_field)
    return attributes.as_params("ConditionExpression", f"attribute_not_exists({id_name})")
