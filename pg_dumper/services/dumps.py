from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

from ..config import DumperConfig
from ..core.errors import DumpFileError, DumpNotFoundError
from .executor import CommandInvocation, Outcome, ProcessExecutor
from .naming import DumpNaming

logger = logging.getLogger(__name__)

PLAIN_SQL_SUFFIX = ".sql"


@dataclass(frozen=True)
class HealthReport:
    healthy: bool
    message: str
    version: str = ""
    readiness: str = ""


def _failure_detail(outcome: Outcome) -> str:
    return outcome.diagnostics or outcome.output or outcome.message


class DumpService:
    def __init__(self, config: DumperConfig, executor: ProcessExecutor) -> None:
        self.config = config
        self.executor = executor
        self.naming = DumpNaming.from_config(config)

    def dump_invocation(self, name: str) -> CommandInvocation:
        path = self.naming.path_for(name)
        return CommandInvocation.of(self.config.pg_dump_bin, [*self.config.dump_args, "-f", path])

    def restore_invocation(self, name: str) -> CommandInvocation:
        """Plain SQL dumps go through psql, archive formats through pg_restore."""
        path = self.naming.path_for(name)
        if path.endswith(PLAIN_SQL_SUFFIX):
            return CommandInvocation.of(self.config.psql_bin, ["-f", path])
        return CommandInvocation.of(self.config.pg_restore_bin, [*self.config.restore_args, "-f", path])

    def create_dump(self, name: str) -> Outcome:
        return self.executor.execute(self.dump_invocation(name))

    def restore_dump(self, name: str) -> Outcome:
        return self.executor.execute(self.restore_invocation(name))

    def delete_dump(self, name: str) -> str:
        path = self.naming.path_for(name)
        try:
            os.remove(path)
        except OSError as exc:
            raise DumpFileError(f"Error while deleting dump '{path}' {exc}") from exc
        logger.info("Deleted dump %s", path)
        return path

    def download_path(self, name: str) -> str:
        path = self.naming.path_for(name)
        if not os.path.isfile(path):
            raise DumpNotFoundError(f"No dump named '{name}' at '{path}'")
        return path

    def list_dumps(self) -> Iterator[str]:
        """Open the dump directory now and describe its dumps lazily.

        The directory is opened before returning so a read failure surfaces to
        the caller; entries come back in filesystem order.
        """
        try:
            entries = os.scandir(self.config.dir)
        except OSError as exc:
            raise DumpFileError(f"Error while listing dump files {exc}") from exc
        return self._describe_entries(entries)

    def _describe_entries(self, entries) -> Iterator[str]:
        with entries:
            for entry in entries:
                if not self.naming.matches(entry.name) or not entry.is_file():
                    continue
                try:
                    stat = entry.stat()
                except FileNotFoundError:
                    # deleted by a concurrent request since the scan returned it
                    continue
                modified = datetime.fromtimestamp(stat.st_mtime).astimezone()
                yield (
                    f"{self.naming.logical_name(entry.name)} "
                    f"({self.config.dir}{entry.name} @ {modified})\n"
                )

    def check_health(self) -> HealthReport:
        pg_dump = self.config.pg_dump_bin
        version = self.executor.probe(CommandInvocation.of(pg_dump, ["--version"]))
        if not version.success:
            return HealthReport(False, f"Error while getting version of {pg_dump}: {_failure_detail(version)}")

        pg_isready = self.config.pg_isready_bin
        readiness = self.executor.probe(CommandInvocation.of(pg_isready))
        if not readiness.success:
            return HealthReport(False, f"Error while executing {pg_isready}: {_failure_detail(readiness)}")

        message = f"pg_dump version: {version.output}pg_isready: {readiness.output}"
        return HealthReport(True, message, version.output, readiness.output)
