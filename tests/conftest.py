import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pg_dumper.api.dependencies import get_executor  # noqa: E402
from pg_dumper.config import DumperConfig, get_settings  # noqa: E402
from pg_dumper.main import create_app  # noqa: E402
from pg_dumper.services.executor import CommandInvocation, Outcome  # noqa: E402

ENV_KEYS = (
    "HOST",
    "PORT",
    "DIR",
    "PG_DUMP_DATA_ARGS",
    "PG_RESTORE_ARGS",
    "PG_DUMP_BIN",
    "PG_RESTORE_BIN",
    "PSQL_BIN",
    "PG_ISREADY_BIN",
    "COMMAND_TIMEOUT",
    "REJECT_UNSAFE_NAMES",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "ACCESS_LOG",
)

# Writes the file named after "-f" and reports on stderr, like pg_dump does.
FAKE_PG_DUMP = (
    "import sys\n"
    "path = sys.argv[sys.argv.index('-f') + 1]\n"
    "open(path, 'w').write('-- dump\\n')\n"
    "sys.stderr.write('pg_dump: dumping contents\\n')\n"
)


class RecordingExecutor:
    """Stands in for ProcessExecutor and remembers every invocation."""

    def __init__(self, outcomes: Optional[Dict[str, Outcome]] = None) -> None:
        self.invocations: List[CommandInvocation] = []
        self.outcomes = outcomes or {}

    def execute(self, invocation: CommandInvocation) -> Outcome:
        self.invocations.append(invocation)
        default = Outcome(True, f"ran {invocation.program}", output=f"{invocation.program} output\n")
        return self.outcomes.get(invocation.program, default)

    probe = execute


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep the developer's PG*/DIR settings out of the tests."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def dump_dir(tmp_path) -> Path:
    directory = tmp_path / "dumps"
    directory.mkdir()
    return directory


@pytest.fixture
def make_config(dump_dir: Path) -> Callable[..., DumperConfig]:
    def _make(**overrides) -> DumperConfig:
        values = {
            "host": "",
            "port": 8090,
            "dir": str(dump_dir) + os.sep,
            "dumpfile_ext": "dump.sql",
            "dump_args": ("--clean", "--format=plain"),
            "restore_args": (),
        }
        values.update(overrides)
        return DumperConfig(**values)

    return _make


@pytest.fixture
def make_client() -> Generator[Callable[..., TestClient], None, None]:
    clients: List[TestClient] = []

    def _make(config: DumperConfig, executor: Optional[RecordingExecutor] = None) -> TestClient:
        app = create_app(config)
        if executor is not None:
            app.dependency_overrides[get_executor] = lambda: executor
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()
