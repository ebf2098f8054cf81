from typing import List, Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import NoResultFound

from pulse.schemas.response import ErrorDetail, ErrorResponse
from pulse.logs import api_logger, debug_logger


def error_body(
    error: str,
    message: Optional[str] = None,
    details: Optional[List[ErrorDetail]] = None
) -> dict:
    """Serialize the error envelope, leaving out unset fields"""
    response = ErrorResponse(error=error, message=message, details=details)
    return response.model_dump(exclude_none=True)


def _validation_details(exc: RequestValidationError) -> List[ErrorDetail]:
    details = []
    for error in exc.errors():
        # Drop the "body"/"path"/"query" prefix so the path names the field
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "path", "query", "header"):
            loc = loc[1:]
        details.append(ErrorDetail(path=".".join(loc), message=error.get("msg", "Invalid value")))
    return details


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _validation_details(exc)
    debug_logger.debug(f"Validation failed for {request.method} {request.url.path}: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", details=details),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    api_logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("Duplicate entry", "A record with this value already exists"),
    )


async def no_result_handler(request: Request, exc: NoResultFound) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_body("Not found", "The requested record was not found"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    debug_logger.log_exception(f"Unhandled error on {request.method} {request.url.path}")
    api_logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")

    settings = request.app.state.settings
    message = str(exc) if settings.is_development else "Something went wrong"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(NoResultFound, no_result_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
