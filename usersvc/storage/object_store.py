from __future__ import annotations

import json
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from usersvc.config import get_settings
from usersvc.storage.errors import StorageError

_client: Any | None = None


def set_s3_client(client: Any | None) -> None:
    global _client
    _client = client


def get_s3_client() -> Any:
    global _client
    if _client is None:
        settings = get_settings()
        _client = boto3.client("s3", region_name=settings.aws_region)
    return _client


def profile_key(user_id: str) -> str:
    return f"users/{user_id}/profile.json"


class ObjectStore:
    """JSON documents in a single S3 bucket."""

    def __init__(self, bucket: str, client: Any | None = None) -> None:
        self.bucket = bucket
        self._client = client

    @property
    def client(self) -> Any:
        return self._client if self._client is not None else get_s3_client()

    def put_json(self, key: str, document: Any) -> None:
        body = json.dumps(document).encode("utf-8")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Error uploading profile to S3: {exc}") from exc

    def get_json(self, key: str) -> Any:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Error fetching profile from S3: {exc}") from exc

        try:
            return json.loads(body)
        except ValueError as exc:
            raise StorageError(f"Error decoding profile from S3: {exc}") from exc
