from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    id: int
    name: str


class UserCreateRequest(BaseModel):
    name: str | None = None


class UserData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    age: int | None = None
    loyalty_points: int | None = Field(default=None, alias="loyaltyPoints")


class SaveUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    profile: dict[str, Any] = Field(default_factory=dict)
    data: UserData = Field(default_factory=UserData)


class SaveUserResponse(BaseModel):
    message: str


class UserDetailsResponse(BaseModel):
    message: str
    profile: Any
    record: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: str
