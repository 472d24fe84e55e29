from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from usersvc.config import get_settings
from usersvc.models.schemas import UserData
from usersvc.storage.object_store import ObjectStore, profile_key
from usersvc.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def _profile_store() -> ObjectStore:
    return ObjectStore(bucket=get_settings().profile_bucket)


def _record_store() -> RecordStore:
    return RecordStore(table_name=get_settings().users_table)


def _from_dynamodb(value: Any) -> Any:
    # The DynamoDB resource layer hands numbers back as Decimal.
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamodb(v) for v in value]
    return value


def save_user(user_id: str, profile: dict[str, Any], data: UserData) -> None:
    """Store the profile document in S3, then the structured record in DynamoDB.

    Raises StorageError on the first failing call; nothing is retried or rolled back.
    """

    _profile_store().put_json(profile_key(user_id), profile)
    _record_store().put(
        {
            "userId": user_id,
            "Data": {
                "Age": data.age,
                "LoyaltyPoints": data.loyalty_points,
            },
        }
    )
    logger.info("user_data.saved", extra={"user_id": user_id})


def get_user(user_id: str) -> tuple[Any, dict[str, Any] | None]:
    profile = _profile_store().get_json(profile_key(user_id))
    record = _record_store().get({"userId": user_id})
    return profile, _from_dynamodb(record) if record is not None else None
