"""Runs the PostgreSQL client programs and reports how they ended.

Each call blocks the calling thread until the child exits. Nothing is shared
between invocations, so concurrent requests each get their own process.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from ..core.errors import CommandLaunchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandInvocation:
    program: str
    args: Tuple[str, ...] = ()

    @classmethod
    def of(cls, program: str, args: Sequence[str] = ()) -> CommandInvocation:
        return cls(program=program, args=tuple(args))

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def describe_args(self) -> str:
        return "[" + " ".join(self.args) + "]"


@dataclass(frozen=True)
class Outcome:
    success: bool
    message: str
    diagnostics: str = ""
    output: str = ""
    returncode: Optional[int] = field(default=None, compare=False)


def _as_text(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class ProcessExecutor:
    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def _run(self, invocation: CommandInvocation, capture_stdout: bool) -> subprocess.CompletedProcess:
        logger.debug("Running %s", invocation.argv)
        try:
            return subprocess.run(
                invocation.argv,
                stdout=subprocess.PIPE if capture_stdout else subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except OSError as exc:
            raise CommandLaunchError(f"Unable to start {invocation.program}: {exc}") from exc

    def _timed_out(self, invocation: CommandInvocation, exc: subprocess.TimeoutExpired) -> Outcome:
        diagnostics = _as_text(exc.stderr)
        message = (
            f"Error executing {invocation.program} with arguments: {invocation.describe_args()} "
            f"(killed after {self.timeout} seconds):\n{diagnostics}"
        )
        return Outcome(success=False, message=message, diagnostics=diagnostics, output=_as_text(exc.stdout))

    def execute(self, invocation: CommandInvocation) -> Outcome:
        """Run ``invocation`` and report its exit status with the captured stderr."""
        try:
            completed = self._run(invocation, capture_stdout=False)
        except subprocess.TimeoutExpired as exc:
            return self._timed_out(invocation, exc)

        diagnostics = completed.stderr or ""
        if diagnostics:
            logger.debug("%s stderr:\n%s", invocation.program, diagnostics)
        if completed.returncode != 0:
            message = (
                f"Error executing {invocation.program} with arguments: "
                f"{invocation.describe_args()} (exit status {completed.returncode}):\n{diagnostics}"
            )
            return Outcome(False, message, diagnostics, returncode=completed.returncode)
        message = (
            f"Successfully executed {invocation.program} with arguments: "
            f"{invocation.describe_args()}:\n{diagnostics}"
        )
        return Outcome(True, message, diagnostics, returncode=completed.returncode)

    def probe(self, invocation: CommandInvocation) -> Outcome:
        """Run a short check command and keep what it printed on stdout."""
        try:
            completed = self._run(invocation, capture_stdout=True)
        except subprocess.TimeoutExpired as exc:
            return self._timed_out(invocation, exc)

        output = completed.stdout or ""
        diagnostics = completed.stderr or ""
        if completed.returncode != 0:
            message = (
                f"Error while executing {invocation.program} "
                f"(exit status {completed.returncode}): {diagnostics or output}"
            )
            return Outcome(False, message, diagnostics, output, completed.returncode)
        return Outcome(True, output, diagnostics, output, completed.returncode)
