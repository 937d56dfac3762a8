"""DynamoDB integration for the eventrepo event repository.

This module provides a DynamoDB implementation of the EventRepository
interface using the async aiobotocore client.

Installation:
    pip install eventrepo

Usage:
    >>> from eventrepo.integrations.dynamodb import (
    ...     DynamoDBConfig,
    ...     DynamoDBConnectionManager,
    ...     DynamoDBEventRepository,
    ... )
    >>>
    >>> config = DynamoDBConfig(region_name="eu-west-1")
    >>> async with DynamoDBConnectionManager(config) as manager:
    ...     repository = manager.repository({
    ...         "book": {"table_name": "bookEvent", "aggregate_id_field": "bookId"},
    ...     })
    ...     await repository.initialize_schema()
    ...     await repository.append(event)
    ...     events = await repository.list("book", book_id)
"""

from .config import DynamoDBConfig
from .connection import DynamoDBConnectionManager
from .event_repository import DynamoDBEventRepository
from .expressions import ExpressionAttributes, key_condition, not_exists_condition
from .reader import EventReader
from .records import RecordTransformer, deserialize_item, serialize_item
from .schema import create_table, table_definition
from .writer import EventWriter

__all__ = [
    "DynamoDBConfig",
    "DynamoDBConnectionManager",
    "DynamoDBEventRepository",
    "EventReader",
    "EventWriter",
    "RecordTransformer",
    "ExpressionAttributes",
    "key_condition",
    "not_exists_condition",
    "serialize_item",
    "deserialize_item",
    "create_table",
    "table_definition",
]
