"""Run-fatal errors."""

from __future__ import annotations

from pathlib import Path


class WorkstationError(Exception):
    """Base class for errors that abort the whole run."""


class ConfigError(WorkstationError):
    """The declaration document is unreadable or invalid."""

    def __init__(self, source: Path | str | None, problems: list[str]):
        self.source = source
        self.problems = list(problems)
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid configuration{where}: " + "; ".join(self.problems))


class StructuralDirectoryError(WorkstationError):
    """The root folder or an account folder could not be created."""

    def __init__(self, path: Path, error: Exception | None = None):
        self.path = path
        self.error = error
        reason = f": {error}" if error else ""
        super().__init__(f"Could not create directory {path}{reason}")


class MissingDependencyError(WorkstationError):
    """A required external program is not installed."""

    def __init__(self, programs: list[str]):
        self.programs = list(programs)
        super().__init__("Missing required programs: " + ", ".join(self.programs))
