"""Error taxonomy for form operations and the FastAPI handlers that render it"""

from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ez_forms.logging_config import get_logger

logger = get_logger(__name__)


class FormsError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    summary = "Request failed"

    def __init__(self, messages: Optional[List[str] | str] = None):
        if messages is None:
            messages = []
        elif isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages) or self.summary)


class ValidationFailed(FormsError):
    """One or more submitted values were rejected; carries every failure"""

    status_code = status.HTTP_400_BAD_REQUEST
    summary = "Validation failed"


class NotFound(FormsError):
    status_code = status.HTTP_404_NOT_FOUND
    summary = "Form not found"


class AccessDenied(FormsError):
    status_code = status.HTTP_403_FORBIDDEN
    summary = "Access denied"


class Conflict(FormsError):
    status_code = status.HTTP_409_CONFLICT
    summary = "Conflict"


class InternalError(FormsError):
    """Persistence or transport failure; detail is logged, never returned"""

    summary = "Internal server error"


async def forms_error_handler(request: Request, exc: FormsError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(
            "Internal error on %s %s: %s", request.method, request.url.path, exc
        )
        return JSONResponse(
            status_code=exc.status_code, content={"error": exc.summary}
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.summary, "details": exc.messages},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed bodies as 400 with one message per offending location"""
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        message = err.get("msg", "Invalid value")
        details.append(f"{location}: {message}" if location else message)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s: %s", request.method, request.url.path, exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": InternalError.summary},
    )


def register_exception_handlers(app: FastAPI):
    """Attach the error taxonomy to a FastAPI application"""
    app.add_exception_handler(FormsError, forms_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
