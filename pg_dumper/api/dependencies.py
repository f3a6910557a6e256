from typing import Optional

from fastapi import Depends, Query, Request

from ..config import DumperConfig
from ..core.errors import InvalidRequestError
from ..services.dumps import DumpService
from ..services.executor import ProcessExecutor
from ..services.naming import validate_dump_name


def get_config(request: Request) -> DumperConfig:
    return request.app.state.config


def get_executor(config: DumperConfig = Depends(get_config)) -> ProcessExecutor:
    return ProcessExecutor(timeout=config.command_timeout)


def get_dump_service(
    config: DumperConfig = Depends(get_config),
    executor: ProcessExecutor = Depends(get_executor),
) -> DumpService:
    return DumpService(config, executor)


def require_name(
    name: Optional[str] = Query(None),
    config: DumperConfig = Depends(get_config),
) -> str:
    if not name:
        raise InvalidRequestError("No value provided for query parameter 'name'")
    return validate_dump_name(name, reject_unsafe=config.reject_unsafe_names)
