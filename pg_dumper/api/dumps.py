import os

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, PlainTextResponse, Response, StreamingResponse

from ..core.responses import OK_MARKER, error_response, outcome_response
from ..services.dumps import DumpService
from .dependencies import get_dump_service, require_name

router = APIRouter()

METHODS = ["GET", "POST"]


@router.api_route("/list", methods=METHODS)
def list_dumps(service: DumpService = Depends(get_dump_service)) -> StreamingResponse:
    return StreamingResponse(service.list_dumps(), media_type="text/plain; charset=utf-8")


@router.api_route("/dump", methods=METHODS)
def create_dump(
    name: str = Depends(require_name),
    service: DumpService = Depends(get_dump_service),
) -> PlainTextResponse:
    return outcome_response(service.create_dump(name))


@router.api_route("/restore", methods=METHODS)
def restore_dump(
    name: str = Depends(require_name),
    service: DumpService = Depends(get_dump_service),
) -> PlainTextResponse:
    return outcome_response(service.restore_dump(name))


@router.api_route("/delete", methods=METHODS)
def delete_dump(
    name: str = Depends(require_name),
    service: DumpService = Depends(get_dump_service),
) -> Response:
    service.delete_dump(name)
    return Response(status_code=200)


@router.api_route("/download", methods=METHODS)
def download_dump(
    name: str = Depends(require_name),
    service: DumpService = Depends(get_dump_service),
) -> FileResponse:
    path = service.download_path(name)
    return FileResponse(path, media_type="application/octet-stream", filename=os.path.basename(path))


@router.api_route("/health", methods=METHODS)
def health(service: DumpService = Depends(get_dump_service)) -> PlainTextResponse:
    """Report the pg_dump version and whether the database accepts connections."""
    report = service.check_health()
    if not report.healthy:
        return error_response(500, report.message)
    return PlainTextResponse(f"{OK_MARKER}\n{report.message}")
