"""Connection management for the DynamoDB integration.

This module owns the aiobotocore session and the async DynamoDB client used
by the event repository.
"""

from collections.abc import Mapping
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any

from aiobotocore.client import AioBaseClient
from aiobotocore.session import AioSession, get_session
from botocore.exceptions import BotoCoreError, ClientError

from ...aggregates import AggregateConfig
from .config import DynamoDBConfig

if TYPE_CHECKING:
    from .event_repository import DynamoDBEventRepository


class DynamoDBConnectionManager:
    """Manages the DynamoDB client asynchronously.

    aiobotocore clients hold an HTTP connection pool that must be opened and
    closed inside the event loop, so the client is created by ``connect()``
    (or on entering the async context manager) rather than on first access.

    Attributes:
        config: DynamoDB configuration object

    Examples:
        >>> config = DynamoDBConfig(endpoint_url="http://localhost:8000")
        >>> manager = DynamoDBConnectionManager(config)
        >>> client = await manager.connect()
        >>> await client.list_tables()
        >>> await manager.close()

        >>> # Using async context manager
        >>> async with DynamoDBConnectionManager(config) as manager:
        ...     repository = manager.repository(aggregates)
        ...     await repository.append(event)
    """

    def __init__(self, config: DynamoDBConfig, session: AioSession | None = None):
        """Initialize the connection manager.

        Args:
            config: DynamoDB configuration object
            session: Optional aiobotocore session to create the client from
        """
        self.config = config
        self._session = session or get_session()
        self._exit_stack: AsyncExitStack | None = None
        self._client: AioBaseClient | None = None

    @property
    def client(self) -> AioBaseClient:
        """Get the connected DynamoDB client.

        Raises:
            RuntimeError: If ``connect()`` has not been awaited yet
        """
        if self._client is None:
            raise RuntimeError(
                "DynamoDB client is not connected; await connect() or use 'async with'"
            )
        return self._client

    async def connect(self) -> AioBaseClient:
        """Create the DynamoDB client if needed and return it."""
        if self._client is None:
            exit_stack = AsyncExitStack()
            self._client = await exit_stack.enter_async_context(
                self._session.create_client("dynamodb", **self.config.client_kwargs())
            )
            self._exit_stack = exit_stack
        return self._client

    def repository(
        self,
        aggregates: Mapping[str, AggregateConfig | Mapping[str, Any]],
        **kwargs: Any,
    ) -> "DynamoDBEventRepository":
        """Build an event repository bound to the connected client.

        Read options default to the values in ``config``; explicit keyword
        arguments take precedence.

        Args:
            aggregates: Mapping of aggregate name to its configuration
            **kwargs: Extra DynamoDBEventRepository keyword arguments
        """
        from .event_repository import DynamoDBEventRepository

        kwargs.setdefault("consistent_read", self.config.consistent_read)
        kwargs.setdefault("page_size", self.config.page_size)
        kwargs.setdefault("wait_delay", self.config.table_wait_delay)
        kwargs.setdefault("wait_max_attempts", self.config.table_wait_max_attempts)
        return DynamoDBEventRepository(self.client, aggregates, **kwargs)

    async def verify_connectivity(self) -> bool:
        """Verify that the DynamoDB endpoint answers requests.

        Returns:
            True if connection is successful, False otherwise

        Examples:
            >>> if await manager.verify_connectivity():
            ...     print("Connected to DynamoDB")
        """
        try:
            client = await self.connect()
            await client.list_tables(Limit=1)
            return True
        except (BotoCoreError, ClientError):
            return False

    async def close(self) -> None:
        """Close the client and its connection pool."""
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
        self._exit_stack = None
        self._client = None

    async def __aenter__(self) -> "DynamoDBConnectionManager":
        """Async context manager entry - connects the client."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - ensures client is closed."""
        await self.close()
        return False
