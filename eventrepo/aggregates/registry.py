"""Registry resolving aggregate type names to their storage configuration."""

from collections.abc import ItemsView, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from ..domain.exceptions import ConfigurationError, UnknownAggregateError
from .config import RESERVED_RECORD_FIELDS, AggregateConfig

# Accepted spellings for each AggregateConfig field in mapping input.
_FIELD_KEYS = {
    "table_name": ("table_name", "tableName"),
    "aggregate_id_field": ("aggregate_id_field", "aggregateIdField"),
}


def _lookup(entry: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        if key in entry:
            return entry[key]
    return None


def _invalid(name: str, msg: str) -> ConfigurationError:
    return ConfigurationError(f'invalid aggregate configuration for "{name}": {msg}')


def _build_config(name: str, entry: Any) -> AggregateConfig:
    """Validate one registry entry and convert it to an AggregateConfig."""
    if isinstance(entry, AggregateConfig):
        table_name, id_field = entry.table_name, entry.aggregate_id_field
    elif isinstance(entry, Mapping):
        table_name = _lookup(entry, "table_name")
        id_field = _lookup(entry, "aggregate_id_field")
    else:
        raise _invalid(name, "must be a mapping")

    if not isinstance(table_name, str) or not table_name:
        raise _invalid(name, "bad/missing table_name")
    if not isinstance(id_field, str) or not id_field:
        raise _invalid(name, "bad/missing aggregate_id_field")
    if id_field in RESERVED_RECORD_FIELDS:
        raise _invalid(
            name, f'aggregate_id_field "{id_field}" collides with an event attribute'
        )

    return AggregateConfig(table_name=table_name, aggregate_id_field=id_field)


class AggregateRegistry:
    """Read-only mapping from aggregate type name to AggregateConfig.

    The registry is built once, validated eagerly and exhaustively, and never
    mutated afterwards. Entries may be AggregateConfig instances or mappings
    with ``table_name``/``aggregate_id_field`` keys (the camelCase spellings
    ``tableName``/``aggregateIdField`` are accepted too).

    Examples:
        >>> registry = AggregateRegistry({
        ...     "book": {"table_name": "bookEvent", "aggregate_id_field": "bookId"},
        ...     "author": AggregateConfig("authorEvent", "authorId"),
        ... })
        >>> registry.resolve("book", "append").table_name
        'bookEvent'
        >>> registry.resolve("film", "list")
        Traceback (most recent call last):
        UnknownAggregateError: event repository: list: unknown aggregate "film"
    """

    def __init__(self, aggregates: Mapping[str, AggregateConfig | Mapping[str, Any]]):
        """Build and validate the registry.

        Args:
            aggregates: Mapping of aggregate name to its configuration

        Raises:
            ConfigurationError: On the first invalid entry, naming the
                offending aggregate and the defect found
        """
        if not aggregates:
            raise ConfigurationError("aggregates required")
        if not isinstance(aggregates, Mapping):
            raise ConfigurationError("aggregates must be a mapping")

        configs = {name: _build_config(name, entry) for name, entry in aggregates.items()}
        self._configs: Mapping[str, AggregateConfig] = MappingProxyType(configs)

    def resolve(self, aggregate_name: str, operation: str) -> AggregateConfig:
        """Get the configuration of an aggregate type.

        Args:
            aggregate_name: The aggregate type name
            operation: Name of the operation performing the lookup, reported
                in the error message

        Returns:
            The aggregate's configuration

        Raises:
            UnknownAggregateError: If the name is not registered
        """
        try:
            return self._configs[aggregate_name]
        except KeyError:
            raise UnknownAggregateError(operation, aggregate_name) from None

    @property
    def names(self) -> frozenset[str]:
        """Names of all registered aggregate types."""
        return frozenset(self._configs)

    def items(self) -> ItemsView[str, AggregateConfig]:
        return self._configs.items()

    def __contains__(self, aggregate_name: object) -> bool:
        return aggregate_name in self._configs

    def __iter__(self) -> Iterator[str]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __repr__(self) -> str:
        return f"AggregateRegistry({dict(self._configs)!r})"
