"""Protocols and abstract interfaces for dependency injection."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pygit_workstation.models import OperationResult


class WorkingCopy(Protocol):
    """Protocol for the git operations the two tools rely on"""

    def fetch(self, remote: str = 'origin') -> OperationResult: ...
    def upstream(self) -> str | None: ...
    def rev_list_count(self, revision_range: str) -> int: ...
    def diff_name_status(self, cached: bool = False) -> list[str]: ...
    def stash_list(self) -> list[str]: ...
    def untracked_files(self) -> list[str]: ...
    def modified_files(self) -> list[str]: ...
    def ref_exists(self, ref: str) -> bool: ...
    def commit_timestamp(self, ref: str) -> int | None: ...
    def pull(self, fast_forward_only: bool = True) -> OperationResult: ...
    def config_get(self, key: str) -> str | None: ...
    def config_set(self, key: str, value: str) -> OperationResult: ...
    def remote_url(self, name: str = 'origin', push: bool = False) -> str | None: ...
    def remote_set_url(self, name: str, url: str, push: bool = False) -> OperationResult: ...

    @property
    def path(self) -> Path: ...

    @property
    def current_branch(self) -> str | None: ...


class OutputHandler(Protocol):
    """Protocol for handling output"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def line(self, message: str, level: str = 'info', indent: int = 0) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...
    def status(self, message: str, label: str, level: str = 'info', dashes: bool = False) -> None: ...


class CredentialStoreProbe(Protocol):
    """Checks whether the platform credential store already holds an entry"""

    name: str

    def has_credential(self, credential_url: str, username: str) -> bool: ...


class CredentialHelper(Protocol):
    """Git credential-helper protocol (fill / approve)"""

    def fill(self, credential_url: str, username: str) -> dict[str, str]: ...
    def approve(self, credential: dict[str, str]) -> OperationResult: ...
