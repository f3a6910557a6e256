import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responses import error_response

logger = logging.getLogger(__name__)


class DumperError(Exception):
    status_code = 500


class ConfigurationError(DumperError):
    """Raised at startup when the configuration cannot be served."""


class InvalidRequestError(DumperError):
    status_code = 400


class CommandLaunchError(DumperError):
    """The external program could not be started at all."""


class DumpNotFoundError(DumperError):
    status_code = 404


class DumpFileError(DumperError):
    """A filesystem operation on the dump directory failed."""


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DumperError)
    async def dumper_exception_handler(request: Request, exc: DumperError) -> PlainTextResponse:  # type: ignore[override]
        return error_response(exc.status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:  # type: ignore[override]
        return error_response(400, f"Invalid request for {request.url.path}: {exc.errors()}")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:  # type: ignore[override]
        response = error_response(exc.status_code, str(exc.detail or "HTTP error."))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:  # type: ignore[override]
        logger.exception("Unhandled error while serving %s", request.url.path)
        return error_response(500, "Internal server error.")
