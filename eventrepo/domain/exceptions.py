"""Exceptions raised by the event repository."""

from typing import Any


class EventRepositoryError(Exception):
    """Base class for errors raised by the event repository itself.

    Errors reported by the backing store are not wrapped and do not derive
    from this class.
    """

    pass


class ConfigurationError(EventRepositoryError, ValueError):
    """Raised when a repository is constructed with invalid parameters.

    Covers a missing or malformed aggregate configuration and a missing or
    unsupported store client. Never retried.
    """

    pass


class UnknownAggregateError(EventRepositoryError, LookupError):
    """Raised when an operation references an unregistered aggregate name."""

    def __init__(self, operation: str, aggregate_name: str):
        self.operation = operation
        self.aggregate_name = aggregate_name
        super().__init__(
            f'event repository: {operation}: unknown aggregate "{aggregate_name}"'
        )


class InvalidEventError(EventRepositoryError, ValueError):
    """Raised when a candidate event fails validation.

    The write is never attempted for an invalid event.

    Attributes:
        errors: Structured description of every failed check, one mapping
            per problem with ``loc``, ``msg`` and ``type`` keys.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.errors = errors or []
        super().__init__(message)
