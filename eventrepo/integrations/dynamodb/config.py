"""DynamoDB configuration using pydantic-settings."""

from typing import Any

from aiobotocore.config import AioConfig
from pydantic import Field
from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """Configuration for the DynamoDB client used by the event repository.

    All settings can be configured via environment variables with the
    EVENTREPO_DYNAMODB_ prefix. For example:
    - EVENTREPO_DYNAMODB_REGION_NAME=eu-west-1
    - EVENTREPO_DYNAMODB_ENDPOINT_URL=http://localhost:8000
    - EVENTREPO_DYNAMODB_CONSISTENT_READ=true

    Credentials left unset are resolved by botocore's default provider chain
    (environment, shared config files, instance metadata).

    Attributes:
        region_name: AWS region of the tables
        endpoint_url: Override endpoint, e.g. DynamoDB Local
        aws_access_key_id: Explicit access key id
        aws_secret_access_key: Explicit secret access key
        connect_timeout: Connection timeout in seconds
        read_timeout: Read timeout in seconds
        max_attempts: Total attempts botocore makes per request
        consistent_read: Use strongly consistent reads when listing events
        page_size: Maximum items requested per query page
        table_wait_delay: Seconds between table status polls
        table_wait_max_attempts: Polls before giving up on a new table

    Examples:
        >>> config = DynamoDBConfig(
        ...     endpoint_url="http://localhost:8000",
        ...     aws_access_key_id="local",
        ...     aws_secret_access_key="local",
        ... )
        >>> async with DynamoDBConnectionManager(config) as manager:
        ...     repository = manager.repository(aggregates)
    """

    region_name: str = Field(default="us-east-1", description="AWS region of the tables")
    endpoint_url: str | None = Field(
        default=None,
        description="Override endpoint URL",
        examples=["http://localhost:8000"],
    )
    aws_access_key_id: str | None = Field(default=None, description="AWS access key id")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    connect_timeout: float = Field(default=5.0, description="Connection timeout in seconds", ge=0)
    read_timeout: float = Field(default=30.0, description="Read timeout in seconds", ge=0)
    max_attempts: int = Field(
        default=3,
        description="Total attempts per request, including the first one",
        ge=1,
    )
    consistent_read: bool = Field(
        default=False,
        description="Use strongly consistent reads when listing events",
    )
    page_size: int | None = Field(
        default=None,
        description="Maximum number of items requested per query page",
        ge=1,
    )
    table_wait_delay: int = Field(
        default=1,
        description="Seconds between table status polls while creating tables",
        ge=1,
    )
    table_wait_max_attempts: int = Field(
        default=60,
        description="Status polls before giving up on a table becoming active",
        ge=1,
    )

    model_config = {"env_prefix": "EVENTREPO_DYNAMODB_"}

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``AioSession.create_client("dynamodb", ...)``."""
        kwargs: dict[str, Any] = {
            "region_name": self.region_name,
            "config": AioConfig(
                connect_timeout=self.connect_timeout,
                read_timeout=self.read_timeout,
                retries={"max_attempts": self.max_attempts, "mode": "standard"},
            ),
        }

        if self.endpoint_url is not None:
            kwargs["endpoint_url"] = self.endpoint_url

        if self.aws_access_key_id is not None:
            kwargs["aws_access_key_id"] = self.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.aws_secret_access_key

        return kwargs
