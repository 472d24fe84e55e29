from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from usersvc.models.schemas import ErrorResponse


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _describe(error: dict) -> str:
    # "body" is where FastAPI puts every JSON payload error; the field path is what matters.
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed or incomplete request bodies as 400 ``{"error": ...}``."""

    errors = exc.errors()
    message = "; ".join(_describe(error) for error in errors) if errors else "Invalid request"
    return error_response(400, message)
