from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from usersvc.api.errors import error_response
from usersvc.models.schemas import ErrorResponse, SaveUserRequest, SaveUserResponse, UserDetailsResponse
from usersvc.services import profile_service
from usersvc.storage.errors import StorageError

router = APIRouter(tags=["profiles"], responses={500: {"model": ErrorResponse}})

logger = logging.getLogger(__name__)


@router.get("/user/{user_id}", response_model=UserDetailsResponse)
def get_user(user_id: str) -> UserDetailsResponse | JSONResponse:
    try:
        profile, record = profile_service.get_user(user_id)
    except StorageError as exc:
        logger.error("user_data.fetch_failed", extra={"user_id": user_id, "error": str(exc)})
        return error_response(500, str(exc))

    return UserDetailsResponse(message="User data retrieved successfully", profile=profile, record=record)


@router.post("/user", response_model=SaveUserResponse, responses={400: {"model": ErrorResponse}})
def save_user(payload: SaveUserRequest) -> SaveUserResponse | JSONResponse:
    try:
        profile_service.save_user(user_id=payload.user_id, profile=payload.profile, data=payload.data)
    except StorageError as exc:
        logger.error("user_data.save_failed", extra={"user_id": payload.user_id, "error": str(exc)})
        return error_response(500, str(exc))

    return SaveUserResponse(message="User data saved successfully")
