import logging
import socket
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .api import dumps
from .config import DumperConfig, get_settings, resolve_config
from .core.errors import ConfigurationError, register_exception_handlers
from .core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(config: Optional[DumperConfig] = None) -> FastAPI:
    """Build the HTTP wrapper around pg_dump for one resolved configuration."""
    if config is None:
        config = resolve_config(get_settings())

    app = FastAPI(title="pg_dumper", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    register_exception_handlers(app)
    app.include_router(dumps.router)
    return app


def listen_all_host() -> str:
    """Wildcard address for an empty HOST.

    "::" covers IPv6 and, on dual-stack hosts, IPv4 as well; hosts without a
    usable IPv6 stack fall back to "0.0.0.0".
    """
    if socket.has_ipv6:
        try:
            with socket.socket(socket.AF_INET6, socket.SOCK_STREAM) as sock:
                sock.bind(("::", 0))
        except OSError as exc:
            logger.debug("IPv6 wildcard unavailable (%s); using 0.0.0.0", exc)
        else:
            return "::"
    return "0.0.0.0"


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format, settings.access_log)
    try:
        config = resolve_config(settings)
    except ConfigurationError as exc:
        logger.critical("%s", exc)
        sys.exit(1)

    host = config.host or listen_all_host()
    logger.info("Starting (binding to '%s:%s', config = %s)", host, config.port, config)
    uvicorn.run(
        create_app(config),
        host=host,
        port=config.port,
        log_config=None,
        access_log=settings.access_log,
    )


if __name__ == "__main__":
    run()
