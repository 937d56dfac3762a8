"""Table definitions for aggregate event tables."""

import logging
from typing import Any

from aiobotocore.client import AioBaseClient
from botocore.exceptions import ClientError

from ...aggregates import SEQUENCE_NUMBER_FIELD, AggregateConfig

LOGGER = logging.getLogger(__name__)

RESOURCE_IN_USE = "ResourceInUseException"


def table_definition(config: AggregateConfig) -> dict[str, Any]:
    """CreateTable parameters for an aggregate's event table.

    The partition key is the aggregate id attribute (string) and the sort key
    is ``sequenceNumber`` (number). Tables use on-demand billing.
    """
    return {
        "TableName": config.table_name,
        "AttributeDefinitions": [
            {"AttributeName": config.aggregate_id_field, "AttributeType": "S"},
            {"AttributeName": SEQUENCE_NUMBER_FIELD, "AttributeType": "N"},
        ],
        "KeySchema": [
            {"AttributeName": config.aggregate_id_field, "KeyType": "HASH"},
            {"AttributeName": SEQUENCE_NUMBER_FIELD, "KeyType": "RANGE"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }


async def create_table(
    client: AioBaseClient,
    config: AggregateConfig,
    *,
    wait_delay: int = 1,
    wait_max_attempts: int = 60,
) -> bool:
    """Create an aggregate's event table and wait until it is active.

    An existing table with the same name is left untouched; its key schema
    is not compared against the expected one.

    Returns:
        True if the table was created, False if it already existed
    """
    try:
        await client.create_table(**table_definition(config))
        created = True
        LOGGER.info("Created event table", extra={"table_name": config.table_name})
    except ClientError as err:
        if err.response.get("Error", {}).get("Code") != RESOURCE_IN_USE:
            raise
        created = False

    waiter = client.get_waiter("table_exists")
    await waiter.wait(
        TableName=config.table_name,
        WaiterConfig={"Delay": wait_delay, "MaxAttempts": wait_max_attempts},
    )
    return created
