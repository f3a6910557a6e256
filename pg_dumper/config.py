# pg_dumper/config.py
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.errors import ConfigurationError

logger = logging.getLogger(__name__)

FORMAT_ARG_PATTERN = re.compile(r"^--format=(.*)$")

DUMPFILE_EXTENSIONS = {
    "plain": "dump.sql",
    "custom": "dump.custom",
    "tar": "dump.tar",
}


class Settings(BaseSettings):
    # --- Listener ---
    host: str = ""
    port: int = 8090

    # --- Storage ---
    dir: str = Field(default_factory=tempfile.gettempdir)

    # --- pg_dump / pg_restore ---
    pg_dump_data_args: str = "--clean --format=plain"
    pg_restore_args: str = ""
    pg_dump_bin: str = "pg_dump"
    pg_restore_bin: str = "pg_restore"
    psql_bin: str = "psql"
    pg_isready_bin: str = "pg_isready"
    command_timeout: Optional[float] = None

    # --- Dump names ---
    reject_unsafe_names: bool = True

    # --- Logging ---
    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    access_log: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )


@dataclass(frozen=True)
class DumperConfig:
    """Resolved, read-only configuration shared by every request."""

    host: str
    port: int
    dir: str
    dumpfile_ext: str
    dump_args: Tuple[str, ...]
    restore_args: Tuple[str, ...]
    pg_dump_bin: str = "pg_dump"
    pg_restore_bin: str = "pg_restore"
    psql_bin: str = "psql"
    pg_isready_bin: str = "pg_isready"
    command_timeout: Optional[float] = None
    reject_unsafe_names: bool = True


def determine_dumpfile_extension(dump_args) -> str:
    """Map the first ``--format=<fmt>`` dump argument onto a file extension."""
    dump_format = None
    for dump_arg in dump_args:
        match = FORMAT_ARG_PATTERN.match(dump_arg)
        if match:
            dump_format = match.group(1)
            break
    try:
        return DUMPFILE_EXTENSIONS[dump_format]
    except KeyError:
        raise ConfigurationError(
            "No output format specified for dumping. "
            "Please provide '--format=plain', '--format=custom' or '--format=tar'"
        ) from None


def _normalize_dir(directory: str) -> str:
    if directory.endswith(os.sep) or (os.altsep and directory.endswith(os.altsep)):
        return directory
    return directory + os.sep


def _log_defaults(settings: Settings) -> None:
    for name in type(settings).model_fields:
        if name not in settings.model_fields_set:
            logger.info(
                "No value for environment variable '%s' using default value '%s'",
                name.upper(),
                getattr(settings, name),
            )


def resolve_config(settings: Settings) -> DumperConfig:
    _log_defaults(settings)
    dump_args = tuple(settings.pg_dump_data_args.split())
    restore_args = tuple(settings.pg_restore_args.split())
    return DumperConfig(
        host=settings.host,
        port=settings.port,
        dir=_normalize_dir(settings.dir),
        dumpfile_ext=determine_dumpfile_extension(dump_args),
        dump_args=dump_args,
        restore_args=restore_args,
        pg_dump_bin=settings.pg_dump_bin,
        pg_restore_bin=settings.pg_restore_bin,
        psql_bin=settings.psql_bin,
        pg_isready_bin=settings.pg_isready_bin,
        command_timeout=settings.command_timeout,
        reject_unsafe_names=settings.reject_unsafe_names,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
