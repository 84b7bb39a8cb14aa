from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from script_exporter.models.exporter_config import ExporterConfig


class ScriptRegistry(Mapping[str, tuple[str, ...]]):
    """Read-only mapping from script name to its command line.

    The configured ``script`` string is split on whitespace: the first
    token is the executable, the rest are static arguments.  Lookups are
    exact and case-sensitive.
    """

    def __init__(self, scripts: Mapping[str, str]) -> None:
        commands: dict[str, tuple[str, ...]] = {}
        for name, command_line in scripts.items():
            argv = tuple(command_line.split())
            if not name or not argv:
                raise ValueError(f"script {name!r} needs a name and a command line")
            commands[name] = argv
        self._commands = MappingProxyType(commands)

    @classmethod
    def from_config(cls, config: ExporterConfig) -> ScriptRegistry:
        return cls({entry.name: entry.script for entry in config.scripts})

    def resolve(self, name: str) -> tuple[str, ...] | None:
        """Return the command line for *name*, or None if it isn't registered."""
        if not name:
            return None
        return self._commands.get(name)

    def __getitem__(self, name: str) -> tuple[str, ...]:
        return self._commands[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)
