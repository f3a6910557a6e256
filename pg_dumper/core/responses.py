"""Plain-text response contract shared by every endpoint.

The first line of each body is a literal marker (``SUCCESS``, ``ERROR`` or
``OK``) that calling scripts parse on; any detail follows on the next lines.
"""

import logging

from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "SUCCESS"
ERROR_MARKER = "ERROR"
OK_MARKER = "OK"


def success_response(message: str = "") -> PlainTextResponse:
    body = f"{SUCCESS_MARKER}\n"
    if message:
        logger.info(message)
        body += f"{message}\n"
    return PlainTextResponse(body, status_code=200)


def error_response(status_code: int, message: str) -> PlainTextResponse:
    logger.error(message)
    return PlainTextResponse(f"{ERROR_MARKER}\n{message}\n", status_code=status_code)


def outcome_response(outcome) -> PlainTextResponse:
    """Format a command outcome; every execution failure is a 500."""
    if outcome.success:
        return success_response(outcome.message)
    return error_response(500, outcome.message)
