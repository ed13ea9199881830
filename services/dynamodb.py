"""
DynamoDB storage gateway for the task tracker.

Wraps the primitive table operations (get, put, conditional patch, delete,
prefix queries on the primary key and on the secondary index, partition
scans) behind one class. Query and scan methods follow LastEvaluatedKey
until the result set is exhausted and return fully materialized lists.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from utils.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

PARTITION_KEY = "pk"
SORT_KEY = "sk"
INDEX_SORT_KEY = "queryable"


def _error_details(err: Exception) -> tuple:
    if isinstance(err, ClientError):
        return err.response["Error"]["Code"], err.response["Error"]["Message"]
    return type(err).__name__, str(err)


class TaskTrackerTable:
    """
    Encapsulates operations on the single task tracker table.

    The table name and secondary index name are passed in explicitly;
    nothing here reads process-wide configuration.
    """

    def __init__(
        self,
        table_name: str,
        index_name: str,
        resource: Any = None,
        page_size: Optional[int] = None,
    ):
        """
        :param table_name: Name of the DynamoDB table.
        :param index_name: Name of the owner/checked secondary index.
        :param resource: Optional boto3 DynamoDB resource to reuse.
        :param page_size: Optional Limit applied to every query/scan page.
        """
        if resource is None:
            resource = boto3.resource("dynamodb")

        self.table = resource.Table(table_name)
        self.index_name = index_name
        self.page_size = page_size

    def _storage_error(self, operation: str, err: Exception, **context) -> StorageError:
        code, message = _error_details(err)
        logger.error(
            "DynamoDB %s failed on table %s (%s). Error: %s: %s",
            operation,
            self.table.name,
            context,
            code,
            message,
        )
        return StorageError(f"Storage {operation} failed: {code}")

    def get(self, partition: str, sort_key: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one item by its full key.

        :return: The item, or None when no item has that key.
        """
        try:
            response = self.table.get_item(
                Key={PARTITION_KEY: partition, SORT_KEY: sort_key}
            )
        except (ClientError, BotoCoreError) as err:
            raise self._storage_error("get", err, sk=sort_key) from err

        return response.get("Item")

    def put(
        self, partition: str, sort_key: str, attributes: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Unconditionally write a whole item, replacing any existing one.

        :return: The written item.
        """
        item = {**attributes, PARTITION_KEY: partition, SORT_KEY: sort_key}
        try:
            self.table.put_item(Item=item)
        except (ClientError, BotoCoreError) as err:
            raise self._storage_error("put", err, sk=sort_key) from err

        return item

    def patch(
        self, partition: str, sort_key: str, changed_fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Set only the given attributes on an existing item.

        The write is conditional on the item existing, so patching a missing
        key raises NotFoundError instead of creating a partial item.

        :return: The item with all attributes after the update.
        """
        if not changed_fields:
            raise ValueError("patch requires at least one field")

        names = {}
        values = {}
        assignments = []
        for index, (field, value) in enumerate(changed_fields.items()):
            if field in (PARTITION_KEY, SORT_KEY):
                raise ValueError(f"Key attribute {field!r} cannot be patched")
            names[f"#attr{index}"] = field
            values[f":val{index}"] = value
            assignments.append(f"#attr{index} = :val{index}")

        try:
            response = self.table.update_item(
                Key={PARTITION_KEY: partition, SORT_KEY: sort_key},
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression=Attr(PARTITION_KEY).exists(),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as err:
            if err.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise NotFoundError(f"Item '{sort_key}' not found") from err
            raise self._storage_error("patch", err, sk=sort_key) from err
        except BotoCoreError as err:
            raise self._storage_error("patch", err, sk=sort_key) from err

        return response["Attributes"]

    def delete(self, partition: str, sort_key: str) -> None:
        """Delete an item. Deleting a missing key succeeds."""
        try:
            self.table.delete_item(Key={PARTITION_KEY: partition, SORT_KEY: sort_key})
        except (ClientError, BotoCoreError) as err:
            raise self._storage_error("delete", err, sk=sort_key) from err

    def _collect(self, operation: str, method, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Run a query or scan page by page until no continuation key is left."""
        if self.page_size:
            params["Limit"] = self.page_size

        items: List[Dict[str, Any]] = []
        pages = 0
        while True:
            try:
                response = method(**params)
            except (ClientError, BotoCoreError) as err:
                raise self._storage_error(operation, err, pages_read=pages) from err

            items.extend(response.get("Items", []))
            pages += 1

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key

        logger.debug("%s returned %d items in %d pages", operation, len(items), pages)
        return items

    def query_by_prefix(self, partition: str, sort_key_prefix: str) -> List[Dict[str, Any]]:
        """All items of ``partition`` whose sort key starts with the prefix, in key order."""
        return self._collect(
            "query",
            self.table.query,
            {
                "KeyConditionExpression": Key(PARTITION_KEY).eq(partition)
                & Key(SORT_KEY).begins_with(sort_key_prefix),
            },
        )

    def query_by_index_prefix(
        self, index_name: str, partition: str, index_value_prefix: str
    ) -> List[Dict[str, Any]]:
        """All items in ``index_name`` whose index value starts with the prefix."""
        return self._collect(
            "index query",
            self.table.query,
            {
                "IndexName": index_name,
                "KeyConditionExpression": Key(PARTITION_KEY).eq(partition)
                & Key(INDEX_SORT_KEY).begins_with(index_value_prefix),
            },
        )

    def scan_partition(self, partition: str) -> List[Dict[str, Any]]:
        """Every item of one partition, read with a full table scan."""
        return self._collect(
            "scan",
            self.table.scan,
            {"FilterExpression": Attr(PARTITION_KEY).eq(partition)},
        )
