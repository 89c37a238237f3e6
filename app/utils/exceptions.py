import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from app.utils.response import error_response

logger = logging.getLogger(__name__)


class AppException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AppException):
    """A submission is missing a required field (image or description)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=422)


class TriageUnavailable(AppException):
    """The external model failed, timed out or returned unusable content."""

    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class PersistenceError(AppException):
    """The report store could not be read or written."""

    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class ReportNotFound(AppException):
    def __init__(self, report_id: int):
        super().__init__(f"Report {report_id} not found", status_code=404)
        self.report_id = report_id


class InvalidTransition(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=error_response("Invalid request body", data=jsonable_errors(exc)),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error"),
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
