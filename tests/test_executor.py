import sys

import pytest

from pg_dumper.core.errors import CommandLaunchError
from pg_dumper.services.executor import CommandInvocation, ProcessExecutor


def _python(code: str, *args: str) -> CommandInvocation:
    return CommandInvocation.of(sys.executable, ["-c", code, *args])


def test_successful_command_reports_stderr():
    invocation = _python("import sys; sys.stderr.write('notice: all good\\n')", "--flag")

    outcome = ProcessExecutor().execute(invocation)

    assert outcome.success is True
    assert outcome.returncode == 0
    assert outcome.diagnostics == "notice: all good\n"
    assert outcome.message.startswith(f"Successfully executed {sys.executable} with arguments: [-c ")
    assert "--flag]" in outcome.message
    assert "notice: all good" in outcome.message


def test_failing_command_reports_program_arguments_and_stderr():
    invocation = _python("import sys; sys.stderr.write('connection refused\\n'); sys.exit(3)", "-f", "/tmp/x.dump.sql")

    outcome = ProcessExecutor().execute(invocation)

    assert outcome.success is False
    assert outcome.returncode == 3
    assert outcome.message.startswith(f"Error executing {sys.executable} with arguments:")
    assert "-f /tmp/x.dump.sql" in outcome.message
    assert "exit status 3" in outcome.message
    assert "connection refused" in outcome.message


def test_stdout_is_not_captured_by_execute():
    outcome = ProcessExecutor().execute(_python("print('table ' + 'contents')"))

    assert outcome.success is True
    assert outcome.output == ""
    assert outcome.diagnostics == ""
    assert "table contents" not in outcome.message


def test_missing_program_raises_launch_error(tmp_path):
    invocation = CommandInvocation.of(str(tmp_path / "no-such-pg_dump"), ["--version"])

    with pytest.raises(CommandLaunchError, match="Unable to start"):
        ProcessExecutor().execute(invocation)


def test_timeout_kills_the_command():
    invocation = _python("import sys, time; sys.stderr.write('started\\n'); sys.stderr.flush(); time.sleep(30)")

    outcome = ProcessExecutor(timeout=0.5).execute(invocation)

    assert outcome.success is False
    assert "killed after 0.5 seconds" in outcome.message


def test_probe_captures_stdout():
    outcome = ProcessExecutor().probe(_python("print('pg_dump (PostgreSQL) 16.2')"))

    assert outcome.success is True
    assert outcome.output == "pg_dump (PostgreSQL) 16.2\n"
    assert outcome.message == outcome.output


def test_probe_failure_includes_diagnostics():
    outcome = ProcessExecutor().probe(_python("import sys; sys.stderr.write('no response\\n'); sys.exit(2)"))

    assert outcome.success is False
    assert "exit status 2" in outcome.message
    assert "no response" in outcome.message


def test_invocation_argv_puts_program_first():
    invocation = CommandInvocation.of("pg_dump", ["--clean", "-f", "/d/a.dump.sql"])

    assert invocation.argv == ["pg_dump", "--clean", "-f", "/d/a.dump.sql"]
    assert invocation.describe_args() == "[--clean -f /d/a.dump.sql]"
