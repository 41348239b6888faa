import logging
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

FETCH_TASKS_ERROR = "Failed to fetch tasks"
CREATE_TASK_ERROR = "Failed to create task"


class PersistenceError(Exception):
    """The document store could not be reached or rejected an operation."""


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Invalid request to {request.method} {request.url.path}: {exc}")

    def loc_to_dot_sep(loc: tuple[Any, ...]) -> str:
        return ".".join(str(part) for part in loc)

    errors = [
        {
            "loc": loc_to_dot_sep(error["loc"]),
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    message = CREATE_TASK_ERROR if request.method == "POST" else "Invalid request"
    return error_response(
        status.HTTP_400_BAD_REQUEST, message, detail=jsonable_encoder(errors)
    )


def unexpected_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
    )


# Response definitions for OpenAPI documentation
ResponseDict = dict[int | str, dict[str, Any]]


def error_example(status_code: int, description: str, message: str) -> ResponseDict:
    return {
        status_code: {
            "description": description,
            "content": {"application/json": {"example": {"error": message}}},
        }
    }


fetch_tasks_error_response = error_example(
    500, "Document store unavailable", FETCH_TASKS_ERROR
)
create_task_error_response = error_example(
    400, "Invalid task or document store unavailable", CREATE_TASK_ERROR
)
