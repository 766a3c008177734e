"""
Custom exception hierarchy for Habitflow.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from habitflow.schemas.common import ErrorDetail

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class HabitflowException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class HabitNotFoundError(HabitflowException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "HABIT_NOT_FOUND"

    def __init__(self, habit_id: int):
        super().__init__(
            message=f"Habit {habit_id} not found.",
            details={"habit_id": habit_id},
        )


class CategoryNotFoundError(HabitflowException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: int):
        super().__init__(
            message=f"Category {category_id} not found.",
            details={"category_id": category_id},
        )


class InvalidScheduleError(HabitflowException):
    """Raised at write time when schedule_config does not fit schedule_mode."""
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_SCHEDULE"

    def __init__(self, message: str, schedule_mode: str | None = None):
        super().__init__(
            message=message,
            details={"schedule_mode": schedule_mode} if schedule_mode else {},
        )


class InvalidTimezoneError(HabitflowException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_TIMEZONE"

    def __init__(self, tz_name: str):
        super().__init__(
            message=f"Unknown timezone {tz_name!r}.",
            details={"timezone": tz_name},
        )


class InvalidDateRangeError(HabitflowException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_DATE_RANGE"

    def __init__(self, start: date, end: date):
        super().__init__(
            message=f"Start date {start} is after end date {end}.",
            details={"start": str(start), "end": str(end)},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def habitflow_exception_handler(
    request: Request, exc: HabitflowException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append(ErrorDetail(
            field=".".join(str(loc) for loc in error["loc"] if loc != "body"),
            message=error["msg"],
            type=error["type"],
        ).model_dump())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
