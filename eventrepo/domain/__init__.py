"""Domain primitives for the event repository.

- Event: The immutable unit of persistence
- EventValidator / validate_event: Validation capability applied before writes
- Exceptions: Configuration, unknown aggregate and invalid event errors
"""

from .event import Event, new_event_id, timestamp_ms
from .exceptions import (
    ConfigurationError,
    EventRepositoryError,
    InvalidEventError,
    UnknownAggregateError,
)
from .validation import EventValidator, candidate_aggregate_name, validate_event

__all__ = [
    "Event",
    "new_event_id",
    "timestamp_ms",
    "EventValidator",
    "validate_event",
    "candidate_aggregate_name",
    "EventRepositoryError",
    "ConfigurationError",
    "UnknownAggregateError",
    "InvalidEventError",
]
