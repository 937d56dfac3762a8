"""Event persistence interfaces.

- EventRepository: Append and ordered read of aggregate event streams
- InMemoryEventRepository: Dictionary-backed implementation for tests
"""

from .store import EventRepository, InMemoryEventRepository, check_stream_arguments

__all__ = [
    "EventRepository",
    "InMemoryEventRepository",
    "check_stream_arguments",
]
