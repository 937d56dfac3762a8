"""Pytest fixtures for DynamoDB integration tests.

A DynamoDB Local container is started once per module. Tests are skipped
when Docker is not available.
"""

import pytest
import pytest_asyncio
from docker.errors import DockerException
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from eventrepo.integrations.dynamodb import DynamoDBConfig, DynamoDBConnectionManager

DYNAMODB_LOCAL_IMAGE = "amazon/dynamodb-local:latest"
DYNAMODB_LOCAL_PORT = 8000


@pytest.fixture(scope="module")
def dynamodb_container():
    """Start DynamoDB Local for tests."""
    try:
        container = DockerContainer(DYNAMODB_LOCAL_IMAGE).with_exposed_ports(DYNAMODB_LOCAL_PORT)
        container.start()
    except DockerException as err:
        pytest.skip(f"Docker is not available: {err}")
    try:
        wait_for_logs(container, "Initializing DynamoDB Local", timeout=60)
        yield container
    finally:
        container.stop()


@pytest.fixture
def dynamodb_config(dynamodb_container) -> DynamoDBConfig:
    """Create a DynamoDBConfig pointing to the container."""
    host = dynamodb_container.get_container_host_ip()
    port = dynamodb_container.get_exposed_port(DYNAMODB_LOCAL_PORT)
    return DynamoDBConfig(
        endpoint_url=f"http://{host}:{port}",
        aws_access_key_id="local",
        aws_secret_access_key="local",
        consistent_read=True,
        max_attempts=1,
    )


@pytest_asyncio.fixture
async def connection_manager(dynamodb_config):
    """Create connection manager for the container."""
    async with DynamoDBConnectionManager(dynamodb_config) as manager:
        yield manager


@pytest_asyncio.fixture
async def repository(connection_manager, aggregates):
    """Create an event repository with its tables in place."""
    repository = connection_manager.repository(aggregates)
    await repository.initialize_schema()
    return repository
