# user_registration/api/v1/errors.py
"""
Central translation of errors into HTTP responses.

Every error leaves the API as the standard envelope
``{"success": false, "message": ..., "errors": [...]}``:

    ValidationError / request parsing errors -> 400 (+ field errors)
    AuthenticationError                      -> 401
    NotFoundError                            -> 404
    ConflictError                            -> 409
    HTTPException (guards)                   -> its own status
    anything else                            -> 500, generic message, logged here
"""
import logging
from typing import Any, Iterable, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_registration.core.errors import FieldError, InternalError, ServiceError, ValidationError
from user_registration.schemas.common import ApiResponse, FieldErrorOut
from user_registration.services.validation import SECRET_FIELDS

logger = logging.getLogger("uvicorn.error")


def envelope(
    success: bool,
    message: str,
    data: Any = None,
    errors: Optional[Iterable[FieldError]] = None,
) -> dict:
    """Build the response body; ``data`` and ``errors`` are omitted when empty."""
    fields: dict = {"success": success, "message": message}
    if data is not None:
        fields["data"] = jsonable_encoder(data)
    if errors:
        fields["errors"] = [FieldErrorOut(**jsonable_encoder(e.to_dict())) for e in errors]
    return ApiResponse(**fields).model_dump(exclude_unset=True)


def _field_errors(exc: RequestValidationError) -> list[FieldError]:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        rejected = None if field in SECRET_FIELDS else err.get("input")
        errors.append(FieldError(field, err.get("msg", "Invalid value"), rejected))
    return errors


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Service failure on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("Rejected %s %s (%s): %s", request.method, request.url.path, type(exc).__name__, exc.message)
    errors = exc.errors if isinstance(exc, ValidationError) else None
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(False, exc.message, errors=errors),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=envelope(False, "Validation failed", errors=_field_errors(exc)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(False, message),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @app.middleware("http")
    async def unexpected_error_middleware(request: Request, call_next):
        # Last line of defence: details go to the log, never to the client
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unexpected error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=envelope(False, InternalError.default_message),
            )
