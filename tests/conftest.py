"""Central test fixtures."""

import pytest

from eventrepo import InMemoryEventRepository, new_event_id
from tests.fixtures.events import BOOK_AGGREGATES


@pytest.fixture
def book_id() -> str:
    """Generate a unique book aggregate ID."""
    return new_event_id()


@pytest.fixture
def aggregates() -> dict[str, dict[str, str]]:
    """Aggregate configuration for the book and author aggregates."""
    return {name: dict(config) for name, config in BOOK_AGGREGATES.items()}


@pytest.fixture
def in_memory_repository(aggregates) -> InMemoryEventRepository:
    """Create an in-memory event repository."""
    return InMemoryEventRepository(aggregates)
