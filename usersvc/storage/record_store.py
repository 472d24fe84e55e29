from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from usersvc.config import get_settings
from usersvc.storage.errors import StorageError

_resource: Any | None = None


def set_dynamodb_resource(resource: Any | None) -> None:
    global _resource
    _resource = resource


def get_dynamodb_resource() -> Any:
    global _resource
    if _resource is None:
        settings = get_settings()
        _resource = boto3.resource("dynamodb", region_name=settings.aws_region)
    return _resource


class RecordStore:
    """Items in a single DynamoDB table."""

    def __init__(self, table_name: str, resource: Any | None = None) -> None:
        self.table_name = table_name
        self._resource = resource

    @property
    def table(self) -> Any:
        resource = self._resource if self._resource is not None else get_dynamodb_resource()
        return resource.Table(self.table_name)

    def put(self, item: dict[str, Any]) -> None:
        try:
            self.table.put_item(Item=item)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Error saving record to DynamoDB: {exc}") from exc

    def get(self, key: dict[str, Any]) -> dict[str, Any] | None:
        try:
            response = self.table.get_item(Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Error fetching record from DynamoDB: {exc}") from exc
        return response.get("Item")
