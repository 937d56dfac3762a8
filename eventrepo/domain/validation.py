"""Event validation performed before any write reaches the store."""

from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from .event import Event
from .exceptions import InvalidEventError


class EventValidator(Protocol):
    """Capability that turns a candidate event into a validated Event.

    Implementations raise InvalidEventError when a required field is missing
    or malformed. Repositories depend only on this contract, so applications
    can plug in stricter rules (payload schemas per event type, for example)
    without touching the storage code.
    """

    def __call__(self, candidate: Event | Mapping[str, Any]) -> Event: ...


def validate_event(candidate: Event | Mapping[str, Any]) -> Event:
    """Validate a candidate event against the Event model.

    Args:
        candidate: An Event instance or an event shaped mapping using either
            the camelCase wire names or the snake_case attribute names.

    Returns:
        The validated Event

    Raises:
        InvalidEventError: If the candidate is not a mapping or any field is
            missing or malformed. ``errors`` lists every problem found.

    Examples:
        >>> validate_event({"aggregateName": "book", ...})
        Event(aggregate_name='book', ...)
    """
    if isinstance(candidate, Event):
        return candidate

    if not isinstance(candidate, Mapping):
        raise InvalidEventError(
            f"invalid event: expected a mapping, got {type(candidate).__name__}",
            [{"loc": (), "msg": "must be a mapping", "type": "mapping_type"}],
        )

    try:
        return Event.model_validate(dict(candidate))
    except ValidationError as err:
        errors = [
            {"loc": error["loc"], "msg": error["msg"], "type": error["type"]}
            for error in err.errors()
        ]
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in errors
        )
        raise InvalidEventError(f"invalid event: {problems}", errors) from err


def candidate_aggregate_name(candidate: Any) -> str | None:
    """Read the aggregate name of an unvalidated candidate event.

    Returns None when the candidate carries no usable name, leaving the
    problem for the validator to report.
    """
    if isinstance(candidate, Event):
        return candidate.aggregate_name
    if not isinstance(candidate, Mapping):
        return None
    name = candidate.get("aggregateName", candidate.get("aggregate_name"))
    if isinstance(name, str) and name:
        return name
    return None
