from decimal import Decimal

from botocore.exceptions import ClientError

from usersvc.storage.object_store import set_s3_client


def _payload(user_id: str = "u1") -> dict:
    return {
        "userId": user_id,
        "profile": {"displayName": "Una", "tags": ["gold"]},
        "data": {"age": 30, "loyaltyPoints": 5},
    }


class _FailingS3Client:
    def put_object(self, **kwargs) -> dict:
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject")

    def get_object(self, **kwargs) -> dict:
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "GetObject")


async def test_save_then_get_user_round_trip(api_client) -> None:
    save = await api_client.post("/user", json=_payload())
    assert save.status_code == 200
    assert save.json() == {"message": "User data saved successfully"}

    resp = await api_client.get("/user/u1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "User data retrieved successfully"
    assert body["profile"] == {"displayName": "Una", "tags": ["gold"]}
    assert body["record"] == {"userId": "u1", "Data": {"Age": 30, "LoyaltyPoints": 5}}


async def test_save_user_writes_profile_document_and_record(api_client, mock_s3, mock_dynamodb) -> None:
    resp = await api_client.post("/user", json=_payload("u2"))
    assert resp.status_code == 200

    stored = mock_s3.objects[("user-profiles", "users/u2/profile.json")]
    assert stored["ContentType"] == "application/json"

    item = mock_dynamodb.Table("Users").items["u2"]
    assert item["Data"] == {"Age": Decimal(30), "LoyaltyPoints": Decimal(5)}


async def test_get_unknown_user_reports_storage_error(api_client) -> None:
    resp = await api_client.get("/user/missing")
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Error fetching profile from S3:")
    assert "NoSuchKey" in resp.json()["error"]


async def test_get_user_without_record_returns_null_record(api_client, mock_s3) -> None:
    mock_s3.put_object(
        Bucket="user-profiles",
        Key="users/u3/profile.json",
        Body=b'{"displayName": "Three"}',
        ContentType="application/json",
    )

    resp = await api_client.get("/user/u3")
    assert resp.status_code == 200
    assert resp.json()["profile"] == {"displayName": "Three"}
    assert resp.json()["record"] is None


async def test_save_user_storage_failure_returns_500(api_client, mock_dynamodb) -> None:
    set_s3_client(_FailingS3Client())

    resp = await api_client.post("/user", json=_payload())
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Error uploading profile to S3:")

    # The record is not written once the profile upload failed.
    assert mock_dynamodb.Table("Users").items == {}


async def test_save_user_without_user_id_returns_400(api_client, mock_s3) -> None:
    resp = await api_client.post("/user", json={"profile": {}, "data": {}})
    assert resp.status_code == 400
    assert set(resp.json()) == {"error"}
    assert resp.json()["error"].startswith("userId:")
    assert mock_s3.objects == {}
