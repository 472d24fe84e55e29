from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from usersvc.api.errors import error_response
from usersvc.models.schemas import ErrorResponse, User, UserCreateRequest
from usersvc.services.user_store import UserStore, get_user_store

router = APIRouter(tags=["users"])


@router.get("/users", response_model=list[User])
async def list_users(store: UserStore = Depends(get_user_store)) -> list[User]:
    return store.list_users()


@router.post("/users", status_code=201, response_model=User, responses={400: {"model": ErrorResponse}})
async def create_user(
    payload: UserCreateRequest | None = None,
    store: UserStore = Depends(get_user_store),
) -> User | JSONResponse:
    # A missing or null body is treated like an empty object.
    if payload is None or not payload.name:
        return error_response(400, "Name is required")
    return store.create_user(payload.name)
