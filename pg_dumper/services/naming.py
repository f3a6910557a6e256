from __future__ import annotations

from dataclasses import dataclass

from ..config import DumperConfig
from ..core.errors import InvalidRequestError

UNSAFE_NAME_TOKENS = ("/", "\\", "..")


@dataclass(frozen=True)
class DumpNaming:
    """Maps logical dump names onto files in the dump directory.

    ``path_for`` is plain string concatenation and never touches the
    filesystem, so the mapping is deterministic for a fixed directory and
    extension.
    """

    directory: str
    extension: str

    @classmethod
    def from_config(cls, config: DumperConfig) -> DumpNaming:
        return cls(directory=config.dir, extension=config.dumpfile_ext)

    @property
    def suffix(self) -> str:
        return f".{self.extension}"

    def path_for(self, name: str) -> str:
        return f"{self.directory}{name}{self.suffix}"

    def matches(self, file_name: str) -> bool:
        return file_name.endswith(self.suffix)

    def logical_name(self, file_name: str) -> str:
        return file_name[: file_name.rindex(self.suffix)]


def validate_dump_name(name: str, reject_unsafe: bool = True) -> str:
    if reject_unsafe and any(token in name for token in UNSAFE_NAME_TOKENS):
        raise InvalidRequestError(
            f"Invalid dump name '{name}': it must not contain '/', '\\' or '..'"
        )
    return name
