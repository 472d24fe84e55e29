from __future__ import annotations

from collections.abc import AsyncIterator
from decimal import Decimal
from typing import Any

import pytest
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from usersvc.config import get_settings
from usersvc.main import create_app
from usersvc.observability.tracing import TracingManager
from usersvc.storage.object_store import set_s3_client
from usersvc.storage.record_store import set_dynamodb_resource


class _StreamingBody:
    def __init__(self, data: bytes) -> None:
        self._data = data

    def read(self) -> bytes:
        return self._data


class MockS3Client:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}

    def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str) -> dict:
        self.objects[(Bucket, Key)] = {"Body": Body, "ContentType": ContentType}
        return {}

    def get_object(self, Bucket: str, Key: str) -> dict:
        stored = self.objects.get((Bucket, Key))
        if stored is None:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "The specified key does not exist."}},
                "GetObject",
            )
        return {"Body": _StreamingBody(stored["Body"]), "ContentType": stored["ContentType"]}


def _to_dynamodb(value: Any) -> Any:
    # Mirror boto3's resource layer, which stores numbers as Decimal.
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, dict):
        return {k: _to_dynamodb(v) for k, v in value.items()}
    return value


class MockTable:
    def __init__(self, key_name: str = "userId") -> None:
        self.key_name = key_name
        self.items: dict[str, dict] = {}

    def put_item(self, Item: dict) -> dict:
        self.items[Item[self.key_name]] = _to_dynamodb(Item)
        return {}

    def get_item(self, Key: dict) -> dict:
        item = self.items.get(Key[self.key_name])
        return {"Item": item} if item is not None else {}


class MockDynamoDBResource:
    def __init__(self) -> None:
        self.tables: dict[str, MockTable] = {}

    def Table(self, name: str) -> MockTable:
        return self.tables.setdefault(name, MockTable())


@pytest.fixture
def mock_s3() -> MockS3Client:
    return MockS3Client()


@pytest.fixture
def mock_dynamodb() -> MockDynamoDBResource:
    return MockDynamoDBResource()


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, mock_s3, mock_dynamodb) -> None:
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("OTEL_API_KEY", "test-key")
    monkeypatch.setenv("OTEL_CONSOLE_EXPORT", "false")
    monkeypatch.setenv("TRACING_ENABLED", "false")
    get_settings.cache_clear()

    set_s3_client(mock_s3)
    set_dynamodb_resource(mock_dynamodb)

    yield

    set_s3_client(None)
    set_dynamodb_resource(None)
    get_settings.cache_clear()


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracing(span_exporter):
    manager = TracingManager(get_settings(), exporters=[span_exporter])
    manager.setup(set_global=False)
    yield manager
    manager.shutdown()


@pytest.fixture
async def traced_client(tracing) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=create_app(tracing=tracing))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
