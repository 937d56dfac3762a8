"""Aggregate routing: which table stores each aggregate type's events."""

from .config import SEQUENCE_NUMBER_FIELD, AggregateConfig
from .registry import AggregateRegistry

__all__ = [
    "AggregateConfig",
    "AggregateRegistry",
    "SEQUENCE_NUMBER_FIELD",
]
