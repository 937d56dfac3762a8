"""eventrepo: event repository for event-sourced aggregates.

Appends immutable domain events with optimistic concurrency control and reads
ordered event streams back to rebuild aggregate state.
"""

from .aggregates import AggregateConfig, AggregateRegistry
from .domain import (
    ConfigurationError,
    Event,
    EventRepositoryError,
    EventValidator,
    InvalidEventError,
    UnknownAggregateError,
    new_event_id,
    validate_event,
)
from .events import EventRepository, InMemoryEventRepository

__all__ = [
    "AggregateConfig",
    "AggregateRegistry",
    "Event",
    "EventValidator",
    "validate_event",
    "new_event_id",
    "EventRepository",
    "InMemoryEventRepository",
    "EventRepositoryError",
    "ConfigurationError",
    "UnknownAggregateError",
    "InvalidEventError",
]
